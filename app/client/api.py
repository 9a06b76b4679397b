import logging
from typing import Any

import httpx

from app.config import settings
from app.schemas.filters import FilterParameters

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class CatalogClient:
    """Async client for the room search, auth and favorites endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url or settings.api_base_url
        self._client = httpx.AsyncClient(base_url=self.base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def search_rooms(self, params: FilterParameters, token: str | None = None) -> dict[str, Any]:
        """GET /rooms for `params`; page and limit are always sent."""
        return await self._request(
            "GET",
            "/rooms",
            params=params.to_query_items(include_paging=True),
            token=token,
        )

    async def login(self, email: str, password: str) -> dict[str, Any]:
        return await self._request("POST", "/api/auth/login", json={"email": email, "password": password})

    async def register(self, name: str, email: str, password: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/api/auth/register", json={"name": name, "email": email, "password": password}
        )

    async def me(self, token: str) -> dict[str, Any]:
        return await self._request("GET", "/api/auth/me", token=token)

    async def add_favorite(self, room_id: int, token: str) -> dict[str, Any]:
        return await self._request("POST", "/api/favorites/add", json={"roomId": room_id}, token=token)

    async def remove_favorite(self, room_id: int, token: str) -> dict[str, Any]:
        return await self._request("POST", "/api/favorites/remove", json={"roomId": room_id}, token=token)

    async def _request(self, method: str, url: str, token: str | None = None, **kwargs: Any) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        resp = await self._client.request(method, url, headers=headers, **kwargs)
        if resp.is_success:
            return resp.json()

        message = f"HTTP error! status: {resp.status_code}"
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            message = body["error"]
        logger.warning("%s %s failed with %d: %s", method, url, resp.status_code, message)
        raise ApiError(resp.status_code, message)
