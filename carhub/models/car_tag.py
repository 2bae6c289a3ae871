from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from carhub.core.database import Base


class CarTag(Base):
    __tablename__ = "car_tags"

    id = Column(Integer, primary_key=True, index=True)
    car_id = Column(String(32), ForeignKey("cars.id", ondelete="CASCADE"), index=True, nullable=False)

    # kept verbatim from the comma split, whitespace included
    label = Column(String(255), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    car = relationship("Car", back_populates="tags")
