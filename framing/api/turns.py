"""Framing Routine turn and export endpoints."""
from typing import Optional
import logging
import traceback

from fastapi import APIRouter, Depends, HTTPException

from config import get_settings
from framing.models.schemas import ExportBundle, ExportRequest, TurnRequest, TurnResponse
from framing.models.session_state import normalize_state
from framing.orchestration.orchestrator import FramingOrchestrator
from shared.utils.exceptions import EmptyMessageException, FrameIncompleteException, FramingServiceException

logger = logging.getLogger("framing.api")

router = APIRouter(prefix="/api", tags=["tutor"])

_orchestrator: Optional[FramingOrchestrator] = None


def get_orchestrator() -> FramingOrchestrator:
    """Get or create the process-wide orchestrator (stateless, safe to share)."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = FramingOrchestrator.from_settings(get_settings())
    return _orchestrator


def reset_orchestrator():
    """Drop the cached orchestrator (useful for testing)."""
    global _orchestrator
    _orchestrator = None


@router.post("/tutor", response_model=TurnResponse)
async def take_turn(request: TurnRequest, orchestrator: FramingOrchestrator = Depends(get_orchestrator)):
    """Apply one learner message and return the next question with the updated state."""
    try:
        if not request.message.strip():
            raise EmptyMessageException()
        return await orchestrator.process_turn(request.state, request.message, request.intake)
    except FramingServiceException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error processing turn: {str(e)}\n{traceback.format_exc()}")
        raise HTTPException(status_code=500, detail={"message": "Server error", "type": type(e).__name__})


@router.post("/export", response_model=ExportBundle)
def export_frame(request: ExportRequest, orchestrator: FramingOrchestrator = Depends(get_orchestrator)):
    """Render a finished Frame as text and PDF."""
    try:
        state = normalize_state(request.state)
        missing = state.frame.missing_slots()
        if missing:
            raise FrameIncompleteException(missing)
        return orchestrator.export(state, request.export_intent)
    except FramingServiceException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error rendering export: {str(e)}\n{traceback.format_exc()}")
        raise HTTPException(status_code=500, detail={"message": "Server error", "type": type(e).__name__})
