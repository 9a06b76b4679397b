from sqlalchemy import CheckConstraint, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.feature import Feature, room_features


class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_rooms_price_non_negative"),
        CheckConstraint("capacity > 0", name="ck_rooms_capacity_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text)
    price: Mapped[float] = mapped_column(Float)
    capacity: Mapped[int] = mapped_column()
    image_url: Mapped[str | None] = mapped_column(String(500))

    # always the complete list, ordered as the features were enumerated
    features: Mapped[list[Feature]] = relationship(
        secondary=room_features, back_populates="rooms", order_by=Feature.id
    )
    favorites: Mapped[list["Favorite"]] = relationship(  # noqa: F821
        back_populates="room", cascade="all, delete-orphan", passive_deletes=True
    )
