"""Pytest configuration and shared fixtures."""
import pytest
from fastapi.testclient import TestClient

from config import reset_settings
from framing.agents.language import LanguageDetector
from framing.api.turns import get_orchestrator, reset_orchestrator
from framing.orchestration.orchestrator import FramingOrchestrator
from main import app


@pytest.fixture(autouse=True)
def _fresh_singletons():
    """Settings and the cached orchestrator never leak between tests."""
    reset_settings()
    reset_orchestrator()
    yield
    reset_settings()
    reset_orchestrator()


@pytest.fixture
def orchestrator():
    """Deterministic orchestrator: safety + language detection, no LLM passes."""
    return FramingOrchestrator(detector=LanguageDetector(min_chars=12))


@pytest.fixture
def client(orchestrator):
    """Create a test client for the FastAPI app."""
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def complete_frame_state():
    """State document (wire format) for a finished Frame with no pending."""
    return {
        "frame": {
            "keyTopic": "The Cuban Missile Crisis",
            "isAbout": "how the US and USSR almost went to nuclear war in 1962",
            "mainIdeas": ["Soviet missiles were placed in Cuba", "Kennedy chose a naval blockade"],
            "details": [
                ["U-2 planes photographed the launch sites", "The missiles could reach most US cities"],
                ["Ships were stopped at sea", "Khrushchev agreed to remove the missiles"],
            ],
            "soWhat": "The crisis shows how close the world came to nuclear war.",
        },
        "pending": None,
        "confirmed": ["isAbout", "mainIdeas", "details:0", "details:1", "soWhat"],
        "offered": ["mainIdeas", "details:0", "details:1", "soWhat"],
    }
