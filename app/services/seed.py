import json
import logging
from pathlib import Path

from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.feature import Feature
from app.models.room import Room
from app.repositories.room_repo import RoomRepository
from app.schemas.filters import FEATURE_LABELS
from app.schemas.room import RoomSeed

logger = logging.getLogger(__name__)

_seed_adapter = TypeAdapter(list[RoomSeed])


async def ensure_features(session: AsyncSession) -> dict[str, Feature]:
    """Insert the fixed feature enumeration if missing. Returns features by name."""
    result = await session.execute(select(Feature))
    existing = {feature.name: feature for feature in result.scalars().all()}
    for label in FEATURE_LABELS.values():
        if label not in existing:
            feature = Feature(name=label)
            session.add(feature)
            existing[label] = feature
    await session.flush()
    return existing


def load_seed_file(path: Path) -> list[RoomSeed]:
    return _seed_adapter.validate_python(json.loads(path.read_text(encoding="utf-8")))


async def seed_rooms(session: AsyncSession, rooms: list[RoomSeed]) -> int:
    """Import rooms into an empty catalog. Unknown feature names are skipped."""
    features = await ensure_features(session)
    if await RoomRepository(session).count() > 0:
        await session.commit()
        return 0

    for seed in rooms:
        room = Room(
            id=seed.id,
            name=seed.name,
            description=seed.description,
            price=seed.price,
            capacity=seed.capacity,
            image_url=seed.image_url,
        )
        for name in seed.features:
            feature = features.get(name)
            if feature is None:
                logger.warning("Room %s references unknown feature %r", seed.id, name)
                continue
            room.features.append(feature)
        session.add(room)

    await session.commit()
    logger.info("Imported %d rooms", len(rooms))
    return len(rooms)


async def seed_catalog(session: AsyncSession, path: Path) -> int:
    if not path.exists():
        logger.warning("Seed file %s not found, catalog left empty", path)
        await ensure_features(session)
        await session.commit()
        return 0
    return await seed_rooms(session, load_seed_file(path))
