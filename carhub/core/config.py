from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


# repository root
BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    # app
    app_name: str = "CarHub"
    app_env: str = "dev"
    log_level: str = "INFO"

    # security / JWT / DB
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    database_url: str

    # uploaded car images
    media_root: Path = BASE_DIR / "media"
    media_url: str = "/media"
    max_images_per_request: int = 10
    allowed_image_extensions: list[str] = [".jpg", ".jpeg", ".png", ".webp", ".gif"]

    # listing pagination
    default_page_size: int = 10
    max_page_size: int = 100

    cors_origins: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
