import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.database import create_engine, get_session
from app.main import app
from app.models import Base
from app.schemas.room import RoomSeed
from app.services.response_cache import ResponseCache
from app.services.seed import seed_rooms


@pytest.fixture()
async def engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture()
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture()
def seed(session_factory):
    async def _seed(rooms: list[dict]) -> None:
        async with session_factory() as session:
            await seed_rooms(session, [RoomSeed.model_validate(room) for room in rooms])

    return _seed


@pytest.fixture()
def cache():
    return ResponseCache(ttl_seconds=300, max_entries=512)


@pytest.fixture()
def transport(session_factory, cache):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.state.response_cache = cache
    yield ASGITransport(app=app)
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(transport):
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def register_user(client):
    async def _register(name="Ana", email="user@example.com", password="password") -> dict:
        resp = await client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _register
