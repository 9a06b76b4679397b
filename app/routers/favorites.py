from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.dependencies import get_current_user, get_response_cache
from app.models.user import User
from app.schemas.auth import FavoritePayload, FavoritesResponse
from app.services.auth_service import AuthService
from app.services.response_cache import ResponseCache
from app.viewmodels.search_vm import user_cache_prefix

router = APIRouter(prefix="/api/favorites")


@router.post("/add", response_model=FavoritesResponse)
async def add_favorite(
    payload: FavoritePayload,
    user: User = Depends(get_current_user),
    cache: ResponseCache = Depends(get_response_cache),
    session: AsyncSession = Depends(get_session),
):
    favorites = await AuthService(session).add_favorite(user, payload.room_id)
    cache.invalidate_prefix(user_cache_prefix(user.id))
    return FavoritesResponse(favorites=favorites)


@router.post("/remove", response_model=FavoritesResponse)
async def remove_favorite(
    payload: FavoritePayload,
    user: User = Depends(get_current_user),
    cache: ResponseCache = Depends(get_response_cache),
    session: AsyncSession = Depends(get_session),
):
    favorites = await AuthService(session).remove_favorite(user, payload.room_id)
    cache.invalidate_prefix(user_cache_prefix(user.id))
    return FavoritesResponse(favorites=favorites)
