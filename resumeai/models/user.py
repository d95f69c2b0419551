"""User profile record."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    # Keep whatever else the backend sends (analytics, completion, ...)
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(alias="_id")
    email: str
    user_name: Optional[str] = Field(default=None, alias="userName")
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    phone: Optional[str] = None
    location: Optional[str] = None
    profile_picture: Optional[str] = Field(default=None, alias="profilePicture")
    is_admin: bool = Field(default=False, alias="isAdmin")
    verified: bool = False
