import logging
import os

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from dressgenius.config import settings
from dressgenius.core.exceptions import (
    DressGeniusException,
    dressgenius_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from dressgenius.database import init_db
from dressgenius.routers import auth, outfit_chats, outfit_scans, preferences, profile, wardrobe
from dressgenius.schemas import HealthResponse

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
init_db()

app = FastAPI(
    title="DressGenius API",
    description="Outfit analysis, stylist chat and wardrobe API",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Retry-After"],
)

# Rate limiting (auth endpoints)
app.state.limiter = auth.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_exception_handler(DressGeniusException, dressgenius_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Locally stored uploads are served from /storage
if not (settings.USE_CLOUDINARY and settings.cloudinary_configured):
    os.makedirs(settings.MEDIA_ROOT, exist_ok=True)
    app.mount("/storage", StaticFiles(directory=settings.MEDIA_ROOT), name="storage")

# Include routers
app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(preferences.router)
app.include_router(outfit_scans.router)
app.include_router(outfit_chats.router)
app.include_router(wardrobe.router)


@app.get("/health", response_model=HealthResponse)
@app.head("/health")
def health_check():
    """Liveness probe"""
    return {"status": "ok"}


logger.info(f"DressGenius API ready (environment={settings.ENVIRONMENT})")
