"""
Framing Routine Tutor - FastAPI Application

Entry point for the guided-writing API. The routine itself lives in the
framing package; this module wires logging, CORS and the routers.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings, validate_required_settings
from api.routes import health
from framing.api import turns

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("framing.main")

# Initialize FastAPI app
app = FastAPI(
    title="Framing Routine Tutor",
    description="Question-only guided writing through Key Topic, Is About, Main Ideas, Details and So What",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS", "GET"],
    allow_headers=["Content-Type"],
)

# Include routers
app.include_router(health.router)
app.include_router(turns.router)


@app.on_event("startup")
async def startup_event():
    """Validate configuration and build the orchestrator once."""
    logger.info("Starting Framing Routine Tutor...")
    validate_required_settings()
    turns.get_orchestrator()
    logger.info("Application started successfully")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development"
    )
