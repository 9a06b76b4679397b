from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LoginPayload(BaseModel):
    email: str | None = None
    password: str | None = None


class RegisterPayload(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class AuthResponse(BaseModel):
    user: UserOut
    token: str
    favorites: list[int]


class MeResponse(BaseModel):
    user: UserOut
    favorites: list[int]


class FavoritePayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    room_id: int | None = None


class FavoritesResponse(BaseModel):
    favorites: list[int]
