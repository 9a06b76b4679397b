from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.models.user import User
from app.services.auth_service import AuthService
from app.services.response_cache import ResponseCache


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache


def bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization") or ""
    if not header.lower().startswith("bearer "):
        return None
    return header.split(None, 1)[1].strip() or None


async def get_current_user(
    token: str | None = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
) -> User:
    return await AuthService(session).resolve_token(token)
