import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from carhub.core.config import get_settings
from carhub.core.database import Base, engine
from carhub.core.logging import setup_logging
from carhub.models import car, car_image, car_tag, user  # noqa: F401  (register tables)
from carhub.routers import health, auth, cars

# --- Load settings ---
settings = get_settings()
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)

# --- Create DB tables ---
Base.metadata.create_all(bind=engine)

# --- Create FastAPI app ---
app = FastAPI(title=settings.app_name)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routers ---
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(cars.router)

# --- Uploaded car images ---
settings.media_root.mkdir(parents=True, exist_ok=True)
app.mount(
    settings.media_url,                          # "/media"
    StaticFiles(directory=settings.media_root),  # <repo>/media
    name="media",
)

logger.info("%s started (env=%s)", settings.app_name, settings.app_env)


# --- Root endpoint ---
@app.get("/")
def root():
    return {"message": "CarHub backend is running"}
