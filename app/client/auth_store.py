import json
import logging
from pathlib import Path
from typing import Any

import httpx

from app.client.api import ApiError, CatalogClient
from app.config import settings

logger = logging.getLogger(__name__)


class LocalStorage:
    """Key/value persistence in a JSON file, standing in for browser local storage."""

    def __init__(self, path: Path | None = None):
        self.path = Path(path or settings.auth_storage_path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable storage file %s", self.path)
            return {}

    def get(self, key: str) -> Any | None:
        return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

    def remove(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")


class AuthStore:
    """Signed-in user, bearer token and favorite room ids.

    `user`, `token`, `favorites` and `is_authenticated` are persisted under
    `storage_key` and restored when the store is created.
    """

    def __init__(self, client: CatalogClient, storage: LocalStorage, storage_key: str | None = None):
        self.client = client
        self.storage = storage
        self.storage_key = storage_key or settings.auth_storage_key

        self.user: dict[str, Any] | None = None
        self.token: str | None = None
        self.favorites: list[int] = []
        self.is_authenticated = False
        self.is_loading = False
        self.error: str | None = None
        self._restore()

    async def login(self, email: str, password: str) -> None:
        await self._authenticate(self.client.login(email, password), "Erro ao fazer login")

    async def register(self, name: str, email: str, password: str) -> None:
        await self._authenticate(self.client.register(name, email, password), "Erro ao registrar")

    def logout(self) -> None:
        self._set_session(None, None, [])

    async def check_auth(self) -> None:
        """Revalidate a restored token; any failure signs the user out."""
        if not self.token:
            return
        self.is_loading = True
        try:
            data = await self.client.me(self.token)
        except (ApiError, httpx.HTTPError) as exc:
            logger.info("Stored session rejected: %s", exc)
            self.is_loading = False
            self._set_session(None, None, [])
            return
        self.is_loading = False
        self._set_session(data["user"], self.token, data.get("favorites") or [])

    async def toggle_favorite(self, room_id: int) -> None:
        if not self.user or not self.token:
            return
        try:
            if self.is_favorite(room_id):
                data = await self.client.remove_favorite(room_id, self.token)
            else:
                data = await self.client.add_favorite(room_id, self.token)
        except (ApiError, httpx.HTTPError):
            # state stays as it was
            logger.exception("Failed to update favorite %s", room_id)
            return
        self.favorites = list(data["favorites"])
        self._persist()

    def is_favorite(self, room_id: int) -> bool:
        return room_id in self.favorites

    async def _authenticate(self, request, fallback_error: str) -> None:
        self.is_loading = True
        self.error = None
        try:
            data = await request
        except ApiError as exc:
            self.is_loading = False
            self.error = exc.message or fallback_error
            return
        except httpx.HTTPError as exc:
            logger.warning("Auth request failed: %s", exc)
            self.is_loading = False
            self.error = fallback_error
            return
        self.is_loading = False
        self._set_session(data["user"], data["token"], data.get("favorites") or [])

    def _set_session(self, user: dict[str, Any] | None, token: str | None, favorites: list[int]) -> None:
        self.user = user
        self.token = token
        self.favorites = list(favorites)
        self.is_authenticated = user is not None and token is not None
        self._persist()

    def _persist(self) -> None:
        self.storage.set(
            self.storage_key,
            {
                "user": self.user,
                "token": self.token,
                "favorites": self.favorites,
                "isAuthenticated": self.is_authenticated,
            },
        )

    def _restore(self) -> None:
        saved = self.storage.get(self.storage_key)
        if not isinstance(saved, dict):
            return
        self.user = saved.get("user")
        self.token = saved.get("token")
        self.favorites = list(saved.get("favorites") or [])
        self.is_authenticated = bool(saved.get("isAuthenticated")) and self.token is not None
