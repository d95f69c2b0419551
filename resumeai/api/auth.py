"""
Authentication endpoints.

Credentials are checked by the backend; this module only relays them and
keeps the returned bearer token on the APIClient.
"""

from typing import Any, Dict, Optional

from loguru import logger

from . import endpoints
from .client import APIClient, APIError, unwrap


def _extract_token(data: Any) -> Optional[str]:
    # login answers with {"token": ...}; older deployments send the bare string
    if isinstance(data, str):
        return data or None
    if isinstance(data, dict):
        token = data.get("token")
        return token or None
    return None


class AuthAPI:

    def __init__(self, client: APIClient):
        self.client = client

    async def login(self, email: str, password: str) -> str:
        """
        Log in and store the bearer token on the client.

        Returns:
            str: The bearer token

        Raises:
            APIError: If the credentials are rejected or no token is returned
        """
        envelope = await self.client.post(
            endpoints.LOGIN,
            json_data={"email": email, "password": password},
            authenticated=False,
        )
        token = _extract_token(unwrap(envelope))
        if not token:
            raise APIError("Login response did not contain a token", payload=envelope)

        self.client.set_token(token)
        logger.info(f"Logged in as {email}")
        return token

    async def register(self, email: str, password: str, user_name: Optional[str] = None) -> Dict[str, Any]:
        """Register an account; the returned token (if any) is kept for OTP verification."""
        payload = {"email": email, "password": password}
        if user_name:
            payload["userName"] = user_name

        envelope = await self.client.post(endpoints.REGISTER, json_data=payload, authenticated=False)
        data = unwrap(envelope)
        token = _extract_token(data)
        if token:
            self.client.set_token(token)
        return data if isinstance(data, dict) else {}

    async def verify_otp(self, otp: str) -> Dict[str, Any]:
        return await self.client.post(endpoints.VERIFY_OTP, json_data={"otp": otp})

    async def resend_otp(self) -> Dict[str, Any]:
        return await self.client.get(endpoints.RESEND_OTP)

    async def forgot_password_otp(self, email: str) -> Dict[str, Any]:
        return await self.client.post(
            endpoints.FORGOT_PASSWORD_OTP, json_data={"email": email}, authenticated=False
        )

    async def verify_forgot_password_otp(self, email: str, otp: str) -> Dict[str, Any]:
        return await self.client.post(
            endpoints.VERIFY_FORGOT_PASSWORD_OTP,
            json_data={"email": email, "otp": otp},
            authenticated=False,
        )

    async def request_password(self, email: str) -> Dict[str, Any]:
        return await self.client.post(
            endpoints.REQUEST_PASSWORD, json_data={"email": email}, authenticated=False
        )

    async def change_password(self, old_password: str, new_password: str) -> Dict[str, Any]:
        return await self.client.post(
            endpoints.CHANGE_PASSWORD,
            json_data={"oldPassword": old_password, "newPassword": new_password},
        )

    def logout(self) -> None:
        """Forget the token locally; the backend keeps no session to end."""
        self.client.clear_token()
        logger.info("Logged out")
