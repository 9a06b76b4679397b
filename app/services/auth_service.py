import logging
import secrets
from datetime import UTC, datetime, timedelta

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.errors import AuthenticationError, ConflictError, ForbiddenError, InvalidRequestError, NotFoundError
from app.models.user import User
from app.repositories.room_repo import RoomRepository
from app.repositories.user_repo import TokenRepository, UserRepository

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def _utcnow() -> datetime:
    # stored naive, always UTC
    return datetime.now(UTC).replace(tzinfo=None)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


class AuthService:
    """Registration, login, bearer tokens and favorites for one DB session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.tokens = TokenRepository(session)

    async def register(self, name: str | None, email: str | None, password: str | None) -> tuple[User, str]:
        name, email = (name or "").strip(), (email or "").strip().lower()
        if not name or not email or not password:
            raise InvalidRequestError("Nome, email e senha são obrigatórios")

        if await self.users.get_by_email(email):
            raise ConflictError("Email já cadastrado")
        try:
            user = await self.users.create(name=name, email=email, password_hash=hash_password(password))
        except IntegrityError as exc:
            await self.session.rollback()
            raise ConflictError("Email já cadastrado") from exc

        token = await self.issue_token(user)
        await self.session.commit()
        logger.info("Registered user %s", user.id)
        return user, token

    async def login(self, email: str | None, password: str | None) -> tuple[User, str, list[int]]:
        email = (email or "").strip().lower()
        if not email or not password:
            raise InvalidRequestError("Email e senha são obrigatórios")

        user = await self.users.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationError("Credenciais inválidas")

        await self.tokens.purge_expired(user.id, _utcnow())
        token = await self.issue_token(user)
        favorites = await self.users.get_favorite_ids(user.id)
        await self.session.commit()
        return user, token, favorites

    async def issue_token(self, user: User) -> str:
        token = secrets.token_urlsafe(settings.token_bytes)
        expires_at = _utcnow() + timedelta(minutes=settings.token_ttl_minutes)
        await self.tokens.create(token=token, user_id=user.id, expires_at=expires_at)
        return token

    async def resolve_token(self, token: str | None) -> User:
        """The user behind a bearer token.

        Missing token is 401, unknown or expired token is 403, a token whose
        user no longer exists is 404.
        """
        if not token:
            raise AuthenticationError("Token não fornecido")
        record = await self.tokens.get(token)
        if record is None or record.expires_at <= _utcnow():
            raise ForbiddenError("Token inválido ou expirado")
        user = await self.users.get(record.user_id)
        if user is None:
            raise NotFoundError("Usuário não encontrado")
        return user

    async def logout(self, token: str) -> None:
        await self.tokens.revoke(token)
        await self.session.commit()

    async def favorites(self, user: User) -> list[int]:
        return await self.users.get_favorite_ids(user.id)

    async def add_favorite(self, user: User, room_id: int | None) -> list[int]:
        if room_id is None:
            raise InvalidRequestError("roomId é obrigatório")
        if not await RoomRepository(self.session).exists(room_id):
            raise NotFoundError("Quarto não encontrado")
        await self.users.add_favorite(user.id, room_id)
        await self.session.commit()
        return await self.users.get_favorite_ids(user.id)

    async def remove_favorite(self, user: User, room_id: int | None) -> list[int]:
        if room_id is None:
            raise InvalidRequestError("roomId é obrigatório")
        await self.users.remove_favorite(user.id, room_id)
        await self.session.commit()
        return await self.users.get_favorite_ids(user.id)
