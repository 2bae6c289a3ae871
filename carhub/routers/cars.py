import logging
import math
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from carhub.core.config import get_settings
from carhub.core.database import get_db
from carhub.core.security import get_current_user
from carhub.models.user import User
from carhub.models.car import Car
from carhub.models.car_image import CarImage
from carhub.models.car_tag import CarTag
from carhub.schemas.car import CarPage, CarRead, Message
from carhub.services.storage import ImageStorage, get_image_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cars", tags=["cars"])

settings = get_settings()


def _to_read(car: Car) -> CarRead:
    """Flatten the image/tag child rows into plain string lists."""
    return CarRead(
        id=car.id,
        owner_id=car.owner_id,
        title=car.title,
        description=car.description,
        images=car.image_paths,
        tags=car.tag_labels,
        created_at=car.created_at,
        updated_at=car.updated_at,
    )


def _split_tags(raw: Optional[str]) -> List[CarTag]:
    # literal comma split: no trimming, no dedup
    if raw is None:
        return []
    return [CarTag(label=label, position=i) for i, label in enumerate(raw.split(","))]


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{field} is required",
        )
    return value


def _check_upload_count(uploads: List[UploadFile]) -> None:
    if len(uploads) > settings.max_images_per_request:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {settings.max_images_per_request} images per request",
        )


def _store_error(db: Session, e: SQLAlchemyError) -> HTTPException:
    db.rollback()
    logger.exception("Car store operation failed")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _get_owned_car_or_404(car_id: str, current_user: User, db: Session) -> Car:
    # A car owned by someone else is reported exactly like a missing one.
    car = (
        db.query(Car)
        .options(selectinload(Car.images))
        .options(selectinload(Car.tags))
        .filter(
            Car.id == car_id,
            Car.owner_id == current_user.id,
        )
        .first()
    )
    if not car:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Car not found",
        )
    return car


@router.get("", response_model=CarPage)
def list_cars(
    search: Optional[str] = None,
    my_cars_only: bool = Query(False, alias="myCarsOnly"),
    page: int = 1,
    limit: int = Query(settings.default_page_size),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if page < 1:
        page = 1
    if limit <= 0:
        limit = settings.default_page_size
    limit = min(limit, settings.max_page_size)
    offset = (page - 1) * limit

    query = db.query(Car)
    if my_cars_only:
        query = query.filter(Car.owner_id == current_user.id)
    if search:
        query = query.filter(
            or_(
                Car.title.icontains(search, autoescape=True),
                Car.description.icontains(search, autoescape=True),
                Car.tags.any(CarTag.label.icontains(search, autoescape=True)),
            )
        )

    try:
        total = query.count()
        # past the last page: nothing to fetch, and the offset may not fit in a SQL integer
        cars = []
        if offset < total:
            cars = (
                query.options(selectinload(Car.images))
                .options(selectinload(Car.tags))
                .order_by(Car.created_at.desc(), Car.id)
                .offset(offset)
                .limit(limit)
                .all()
            )
    except SQLAlchemyError as e:
        raise _store_error(db, e)

    return CarPage(cars=[_to_read(c) for c in cars], total_pages=math.ceil(total / limit))


@router.post("", response_model=CarRead, status_code=status.HTTP_201_CREATED)
async def create_car(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: ImageStorage = Depends(get_image_storage),
):
    uploads = images or []
    title = _require_text(title, "title")
    description = _require_text(description, "description")
    _check_upload_count(uploads)

    # files land on disk before the row is committed
    paths = await storage.save(uploads)

    car = Car(
        owner_id=current_user.id,
        title=title,
        description=description,
        tags=_split_tags(tags),
        images=[CarImage(file_path=p, sort_order=i) for i, p in enumerate(paths)],
    )
    try:
        db.add(car)
        db.commit()
    except SQLAlchemyError as e:
        storage.discard(paths)
        raise _store_error(db, e)

    db.refresh(car)
    logger.info("Created car %s for user %s with %d images", car.id, current_user.id, len(paths))
    return _to_read(car)


@router.get("/{car_id}", response_model=CarRead)
def get_car(
    car_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    car = _get_owned_car_or_404(car_id, current_user, db)
    return _to_read(car)


@router.put("/{car_id}", response_model=CarRead)
async def update_car(
    car_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: ImageStorage = Depends(get_image_storage),
):
    car = _get_owned_car_or_404(car_id, current_user, db)
    uploads = images or []

    # omitted fields are left alone, provided ones must be non-empty
    if title is not None:
        car.title = _require_text(title, "title")
    if description is not None:
        car.description = _require_text(description, "description")
    _check_upload_count(uploads)

    if tags is not None:
        car.tags = _split_tags(tags)

    paths = await storage.save(uploads)

    # append after the existing images, never replace them
    start = len(car.images)
    for offset, path in enumerate(paths):
        car.images.append(CarImage(file_path=path, sort_order=start + offset))
    car.updated_at = datetime.now(timezone.utc)

    try:
        db.add(car)
        db.commit()
    except SQLAlchemyError as e:
        storage.discard(paths)
        raise _store_error(db, e)

    db.refresh(car)
    logger.info("Updated car %s (+%d images)", car.id, len(paths))
    return _to_read(car)


@router.delete("/{car_id}", response_model=Message)
def delete_car(
    car_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    car = _get_owned_car_or_404(car_id, current_user, db)
    try:
        db.delete(car)
        db.commit()
    except SQLAlchemyError as e:
        raise _store_error(db, e)

    logger.info("Deleted car %s for user %s", car_id, current_user.id)
    return Message(message="Car deleted successfully")
