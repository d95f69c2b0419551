"""
HTTP client for the ResumeAI backend API.

This module provides the authenticated async client every API service goes
through, including bearer-token handling, error mapping and retry logic for
idempotent reads.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urljoin

import httpx
from loguru import logger

from ..config import get_settings

TokenListener = Callable[[Optional[str]], None]

_MAX_BODY_IN_MESSAGE = 500


class APIError(Exception):
    """Custom exception for API errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Optional[Any] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.payload = payload
        super().__init__(self.message)


class APIClient:
    """
    Async HTTP client for the ResumeAI backend.

    The bearer token lives on the client instance rather than in ambient
    storage, so several sessions can coexist and tests can hand in a client
    with a known token. Listeners registered with ``add_token_listener`` are
    told whenever the token changes.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        read_retries: Optional[int] = None,
        backoff_base: float = 1.0,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Base URL for the backend API
            timeout: Request timeout in seconds
            token: Bearer token of an already authenticated session
            transport: Optional httpx transport, used by tests
            read_retries: Retry attempts for GET requests on transport errors
            backoff_base: First backoff delay in seconds, doubled per retry
        """
        settings = get_settings()
        self.base_url = base_url or settings.api_base_url
        self.timeout = timeout or settings.api_timeout
        self.read_retries = settings.api_read_retries if read_retries is None else read_retries
        self.backoff_base = backoff_base

        # Ensure base URL ends with /
        if not self.base_url.endswith('/'):
            self.base_url += '/'

        self._token: Optional[str] = token or None
        self._token_listeners: List[TokenListener] = []

        self.client = httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=httpx.Timeout(self.timeout),
            transport=transport,
        )

        logger.info(f"Initialized APIClient with base_url: {self.base_url}")

    async def __aenter__(self) -> "APIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def set_token(self, token: Optional[str]) -> None:
        """Replace the bearer token and notify listeners."""
        token = token or None
        if token == self._token:
            return
        self._token = token
        for listener in list(self._token_listeners):
            listener(token)

    def clear_token(self) -> None:
        self.set_token(None)

    def add_token_listener(self, listener: TokenListener) -> None:
        self._token_listeners.append(listener)

    def remove_token_listener(self, listener: TokenListener) -> None:
        if listener in self._token_listeners:
            self._token_listeners.remove(listener)

    async def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
        authenticated: bool = True,
        retries: int = 0,
    ) -> Dict[str, Any]:
        """
        Make an HTTP request and decode the JSON envelope.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path relative to the base URL
            params: Query parameters; ``None`` values are dropped
            json_data: JSON request body
            authenticated: Attach the bearer token when one is set
            retries: Retry attempts on transport errors

        Returns:
            Dict[str, Any]: Decoded response envelope

        Raises:
            APIError: If the request fails, the server rejects it or the
                response is not JSON
        """
        url = urljoin(self.base_url, endpoint.lstrip('/'))
        headers = {}
        if authenticated and self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        if params:
            params = {key: value for key, value in params.items() if value is not None}

        for attempt in range(retries + 1):
            try:
                logger.debug(f"Making {method} request to {url} (attempt {attempt + 1})")
                response = await self.client.request(
                    method,
                    url,
                    params=params or None,
                    json=json_data,
                    headers=headers,
                )
            except httpx.HTTPError as e:
                reason = str(e) or e.__class__.__name__
                if attempt < retries:
                    wait_time = self.backoff_base * (2 ** attempt)
                    logger.warning(f"Request failed, retrying in {wait_time}s: {reason}")
                    await asyncio.sleep(wait_time)
                    continue
                logger.error(f"{method} {url} failed: {reason}")
                raise APIError(f"Request failed: {reason}") from e

            return self._handle_response(method, url, response)

        raise APIError(f"Request failed after {retries} retries")

    def _handle_response(self, method: str, url: str, response: httpx.Response) -> Dict[str, Any]:
        ok = response.is_success

        if not response.content:
            if ok:
                return {}
            raise APIError(f"HTTP {response.status_code}", response.status_code)

        try:
            data = response.json()
        except ValueError:
            body = response.text[:_MAX_BODY_IN_MESSAGE]
            if ok:
                raise APIError(f"Failed to parse response: {body}", response.status_code)
            raise APIError(f"HTTP {response.status_code}: {body}", response.status_code)

        if not ok:
            message = None
            if isinstance(data, dict):
                message = data.get("message")
            message = message or "API request failed"
            logger.warning(f"{method} {url} rejected with {response.status_code}: {message}")
            raise APIError(message, response.status_code, payload=data)

        logger.debug(f"Request successful: {method} {url}")
        if isinstance(data, dict):
            return data
        return {"data": data}

    async def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Dict[str, Any]:
        return await self.request(
            "GET", endpoint, params=params, authenticated=authenticated, retries=self.read_retries
        )

    # Mutating verbs are never retried
    async def post(self, endpoint: str, json_data: Optional[Any] = None, authenticated: bool = True) -> Dict[str, Any]:
        return await self.request("POST", endpoint, json_data=json_data, authenticated=authenticated)

    async def put(self, endpoint: str, json_data: Optional[Any] = None) -> Dict[str, Any]:
        return await self.request("PUT", endpoint, json_data=json_data)

    async def patch(self, endpoint: str, json_data: Optional[Any] = None) -> Dict[str, Any]:
        return await self.request("PATCH", endpoint, json_data=json_data)

    async def delete(self, endpoint: str) -> Dict[str, Any]:
        return await self.request("DELETE", endpoint)


def unwrap(envelope: Dict[str, Any]) -> Any:
    """Return the ``data`` member of a backend response envelope."""
    return envelope.get("data")
