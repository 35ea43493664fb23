"""Health check API endpoints."""
from fastapi import APIRouter

from config import get_settings

router = APIRouter(tags=["health"])

SERVICE_NAME = "Framing Routine Tutor"
SERVICE_VERSION = "1.0.0"


@router.get("/")
def read_root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION
    }


@router.get("/health")
def health():
    """Service health with the optional passes that are switched on."""
    settings = get_settings()
    return {
        "status": "ok",
        "environment": settings.environment,
        "llm_provider": settings.llm_provider,
        "tone_pass_enabled": settings.tone_pass_enabled,
        "translation_enabled": settings.translation_enabled,
    }
