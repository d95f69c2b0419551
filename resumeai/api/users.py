"""User profile endpoints."""

from typing import Any, Dict

from . import endpoints
from .client import APIClient, unwrap


class UserAPI:

    def __init__(self, client: APIClient):
        self.client = client

    async def get_profile(self) -> Dict[str, Any]:
        return unwrap(await self.client.get(endpoints.USER_PROFILE)) or {}

    async def update_profile(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        return unwrap(await self.client.put(endpoints.USER_PROFILE, json_data=changes)) or {}

    async def get_analytics(self) -> Dict[str, Any]:
        return unwrap(await self.client.get(endpoints.USER_ANALYTICS)) or {}
