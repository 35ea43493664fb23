"""
Turn Update Function

The single mutation point of the routine: prior state + learner message in,
next state out. The input state is never modified.

Precedence:
    1. An active Pending handles the turn exclusively.
    2. A message in a newly detected language opens the language-switch check.
    3. Otherwise the open slot is filled (combined topic/statement extraction
       first, then the slot itself, with stuck detection).
"""

from typing import Optional

from framing.models.pending import ConfirmLanguageSwitch
from framing.models.session_state import DetectedLanguage, FramingState
from framing.routine.pending_handlers import handle_pending
from framing.routine.slots import fill_slot
from framing.routine.text import normalize


def _offers_language_switch(state: FramingState, detected: Optional[DetectedLanguage]) -> bool:
    if detected is None or state.language.locked:
        return False
    return detected.code != state.language.code


def update(
    state: FramingState,
    raw_message: str,
    detected_language: Optional[DetectedLanguage] = None,
) -> FramingState:
    """
    Apply one learner message.

    Args:
        state: State document from the previous turn
        raw_message: Learner text as received
        detected_language: Language the detector saw in the message, if any

    Returns:
        A new FramingState; unchanged apart from the copy when the message
        does not satisfy the open slot.
    """
    next_state = state.model_copy(deep=True)
    message = normalize(raw_message)
    if not message:
        return next_state

    if next_state.pending is not None:
        handle_pending(next_state, message)
    elif _offers_language_switch(next_state, detected_language):
        next_state.pending = ConfirmLanguageSwitch(
            code=detected_language.code,
            name=detected_language.name,
            dir=detected_language.dir,
            deferred_message=message,
        )
    else:
        fill_slot(next_state, message)

    next_state.frame.ensure_detail_buckets()
    return next_state
