from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from carhub.core.database import Base


class User(Base):
    """The identity behind a bearer token; cars reference it as their owner."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)  # argon2 encoded hash

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    # stamped by /auth/login
    last_login_at = Column(DateTime, nullable=True)

    cars = relationship("Car", back_populates="owner", cascade="all, delete-orphan")
