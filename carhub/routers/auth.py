import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from carhub.core.database import get_db
from carhub.core.security import (
    create_access_token,
    get_current_user,
    hash_password,
    verify_password,
)
from carhub.models.user import User
from carhub.schemas.user import Credentials, Token, UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _find_by_email(db: Session, email: str):
    # emails are stored lower-cased so sign-in is case-insensitive
    return db.query(User).filter(User.email == email.lower()).first()


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register(credentials: Credentials, db: Session = Depends(get_db)):
    if _find_by_email(db, credentials.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = User(email=credentials.email.lower(), hashed_password=hash_password(credentials.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


@router.post("/login", response_model=Token)
def login(credentials: Credentials, db: Session = Depends(get_db)):
    user = _find_by_email(db, credentials.email)
    if not user or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    logger.info("User %s logged in", user.id)
    return Token(access_token=create_access_token(user.id))


@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(get_current_user)):
    return current_user
