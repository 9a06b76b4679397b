from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RoomSeed(BaseModel):
    model_config = _camel

    id: int
    name: str
    description: str | None = None
    price: float = Field(ge=0)
    capacity: int = Field(gt=0)
    image_url: str | None = None
    features: list[str] = []


class RoomOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    name: str
    description: str | None = None
    price: float
    capacity: int
    image_url: str | None = None
    features: list[str] = []

    @field_validator("features", mode="before")
    @classmethod
    def _feature_names(cls, value):
        return [getattr(f, "name", f) for f in value or []]


class PaginationOut(BaseModel):
    model_config = _camel

    current_page: int
    total_pages: int
    total_rooms: int
    limit: int


class RoomSearchResponse(BaseModel):
    rooms: list[RoomOut]
    pagination: PaginationOut


class FeatureOut(BaseModel):
    key: str
    name: str
