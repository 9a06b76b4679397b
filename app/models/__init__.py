from app.models.base import Base
from app.models.feature import Feature, room_features
from app.models.room import Room
from app.models.user import AuthToken, Favorite, User

__all__ = ["AuthToken", "Base", "Favorite", "Feature", "Room", "User", "room_features"]
