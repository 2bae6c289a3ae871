from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship

from carhub.core.database import Base


class CarImage(Base):
    __tablename__ = "car_images"

    id = Column(Integer, primary_key=True, index=True)
    car_id = Column(String(32), ForeignKey("cars.id", ondelete="CASCADE"), index=True, nullable=False)

    file_path = Column(String(500), nullable=False)  # relative to media root, e.g. "cars/3f9c...e1.jpg"
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    car = relationship("Car", back_populates="images")
