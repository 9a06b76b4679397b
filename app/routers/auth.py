from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.dependencies import bearer_token, get_current_user
from app.models.user import User
from app.schemas.auth import AuthResponse, LoginPayload, MeResponse, RegisterPayload, UserOut
from app.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth")


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginPayload, session: AsyncSession = Depends(get_session)):
    user, token, favorites = await AuthService(session).login(payload.email, payload.password)
    return AuthResponse(user=UserOut.model_validate(user), token=token, favorites=favorites)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterPayload, session: AsyncSession = Depends(get_session)):
    user, token = await AuthService(session).register(payload.name, payload.email, payload.password)
    return AuthResponse(user=UserOut.model_validate(user), token=token, favorites=[])


@router.get("/me", response_model=MeResponse)
async def me(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    favorites = await AuthService(session).favorites(user)
    return MeResponse(user=UserOut.model_validate(user), favorites=favorites)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    user: User = Depends(get_current_user),
    token: str | None = Depends(bearer_token),
    session: AsyncSession = Depends(get_session),
):
    await AuthService(session).logout(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
