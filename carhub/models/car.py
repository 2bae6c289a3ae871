import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from carhub.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_car_id() -> str:
    return uuid.uuid4().hex


class Car(Base):
    __tablename__ = "cars"

    id = Column(String(32), primary_key=True, default=_new_car_id)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)

    created_at = Column(DateTime, default=_utcnow, nullable=False, index=True)
    updated_at = Column(
        DateTime,
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    owner = relationship("User", back_populates="cars")

    # uploads are only ever appended
    images = relationship(
        "CarImage",
        back_populates="car",
        cascade="all, delete-orphan",
        order_by="CarImage.sort_order",
    )

    # replaced wholesale on update
    tags = relationship(
        "CarTag",
        back_populates="car",
        cascade="all, delete-orphan",
        order_by="CarTag.position",
    )

    @property
    def image_paths(self) -> list[str]:
        return [img.file_path for img in self.images]

    @property
    def tag_labels(self) -> list[str]:
        return [tag.label for tag in self.tags]
