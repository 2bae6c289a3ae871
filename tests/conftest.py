import os
import shutil
import tempfile
from pathlib import Path

# Settings are read at import time, so point them at a scratch dir first.
_TMP = Path(tempfile.mkdtemp(prefix="carhub-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["MEDIA_ROOT"] = str(_TMP / "media")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from carhub.main import app
from carhub.core.database import Base, SessionLocal, engine
from carhub.core.security import create_access_token, hash_password
from carhub.models.car import Car
from carhub.models.car_image import CarImage
from carhub.models.car_tag import CarTag
from carhub.models.user import User

PASSWORD = "s3cret-pass"


@pytest.fixture(scope="session", autouse=True)
def scratch_dir():
    yield _TMP
    engine.dispose()
    shutil.rmtree(_TMP, ignore_errors=True)


@pytest.fixture(autouse=True)
def clean_data():
    """Empty every table and the media dir between tests."""
    with engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())
    shutil.rmtree(_TMP / "media" / "cars", ignore_errors=True)
    yield


@pytest.fixture
def media_root() -> Path:
    return _TMP / "media"


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def user_factory(db_session: Session):
    def _create(email: str, password: str = PASSWORD) -> User:
        user = User(email=email, hashed_password=hash_password(password))
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _create


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _headers


@pytest.fixture
def car_factory(db_session: Session):
    """Insert a car row directly, skipping the HTTP layer."""
    def _create(owner: User, title: str = "Car", description: str = "A car", tags=(), images=()) -> Car:
        car = Car(
            owner_id=owner.id,
            title=title,
            description=description,
            tags=[CarTag(label=t, position=i) for i, t in enumerate(tags)],
            images=[CarImage(file_path=p, sort_order=i) for i, p in enumerate(images)],
        )
        db_session.add(car)
        db_session.commit()
        db_session.refresh(car)
        return car
    return _create
