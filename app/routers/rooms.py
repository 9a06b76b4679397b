from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_session
from app.dependencies import bearer_token, get_response_cache
from app.errors import NotFoundError
from app.repositories.room_repo import RoomRepository
from app.schemas.filters import FEATURE_LABELS, FilterParameters
from app.schemas.room import FeatureOut, RoomOut
from app.services.auth_service import AuthService
from app.services.response_cache import ResponseCache
from app.viewmodels.search_vm import RoomSearchViewModel

router = APIRouter()


@router.get("/rooms")
async def search_rooms(
    request: Request,
    token: str | None = Depends(bearer_token),
    cache: ResponseCache = Depends(get_response_cache),
    session: AsyncSession = Depends(get_session),
):
    filters = FilterParameters.from_query(
        request.query_params,
        default_limit=settings.default_page_size,
        max_limit=settings.max_page_size,
    )

    favorite_user_id = None
    if filters.favorite_only:
        user = await AuthService(session).resolve_token(token)
        favorite_user_id = user.id

    payload = await RoomSearchViewModel.cached_payload(
        session, cache, filters, favorite_user_id=favorite_user_id
    )
    return JSONResponse(payload)


@router.get("/rooms/{room_id}", response_model=RoomOut, response_model_by_alias=True)
async def room_detail(room_id: int, session: AsyncSession = Depends(get_session)):
    room = await RoomRepository(session).get_with_features(room_id)
    if not room:
        raise NotFoundError("Quarto não encontrado")
    return RoomOut.model_validate(room)


@router.get("/features", response_model=list[FeatureOut])
async def list_features():
    return [FeatureOut(key=key, name=name) for key, name in FEATURE_LABELS.items()]
