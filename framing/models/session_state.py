"""
Session State Models

The complete state document a client round-trips every turn: the Frame,
the active Pending sub-dialogue, and the bookkeeping the routine needs to
resume correctly. Nothing is kept in process memory between turns.
"""

import logging
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from framing.models.frame import Frame, MAX_DETAILS, MAX_MAIN_IDEAS
from framing.models.messages import IntakeMetadata, TranscriptEntry
from framing.models.pending import (
    ClarifyDetailToRevise,
    CollectDetailRevision,
    CollectMainIdeaRevision,
    CollectThirdDetail,
    ConfirmDetails,
    OfferThirdDetail,
    PendingBase,
    Pending,
    parse_pending,
)

logger = logging.getLogger("framing.session_state")

DEFAULT_TRANSCRIPT_MAX_ENTRIES = 200
TOPIC_LOCK_GROUP = "isAbout"


class LanguageSettings(BaseModel):
    """Reply language for the session."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    code: str = Field(default="en", description="ISO 639-1 code")
    name: str = Field(default="English", description="Display name used in prompts")
    dir: Literal["ltr", "rtl"] = Field(default="ltr", description="Text direction")
    locked: bool = Field(default=False, description="Set once the learner has decided")


class DetectedLanguage(BaseModel):
    """What the language detector saw in a learner message."""

    code: str
    name: str
    dir: Literal["ltr", "rtl"] = "ltr"


class FramingState(BaseModel):
    """Frame + Pending + bookkeeping for one learner's session."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    frame: Frame = Field(default_factory=Frame)
    pending: Optional[Pending] = Field(default=None, description="Active sub-dialogue, if any")

    # Optional-item offers are made once per group ("mainIdeas", "details:0", "soWhat")
    offered: list[str] = Field(default_factory=list)
    # Groups the learner has affirmed; "isAbout" here is the topic lock
    confirmed: list[str] = Field(default_factory=list)

    language: LanguageSettings = Field(default_factory=LanguageSettings)

    export_offered: bool = False
    export_intent: Optional[Literal["text", "print"]] = None

    transcript: list[TranscriptEntry] = Field(default_factory=list)
    turn_count: int = Field(default=0, ge=0)
    intake: Optional[IntakeMetadata] = None

    @property
    def is_topic_locked(self) -> bool:
        return TOPIC_LOCK_GROUP in self.confirmed

    def was_offered(self, group: str) -> bool:
        return group in self.offered

    def mark_offered(self, group: str) -> None:
        if group not in self.offered:
            self.offered.append(group)

    def mark_confirmed(self, group: str) -> None:
        if group not in self.confirmed:
            self.confirmed.append(group)

    def add_transcript(self, entry: TranscriptEntry, max_entries: int = DEFAULT_TRANSCRIPT_MAX_ENTRIES) -> None:
        self.transcript.append(entry)
        if len(self.transcript) > max_entries:
            self.transcript = self.transcript[-max_entries:]

    def increment_turn(self) -> None:
        self.turn_count += 1


# ---------------------------------------------------------------------------
# Defensive normalization of client-supplied state
# ---------------------------------------------------------------------------

def _get(raw: dict, name: str) -> Any:
    """Look a field up by snake_case name or its camelCase alias."""
    if name in raw:
        return raw[name]
    return raw.get(to_camel(name))


def _clean_text(value: Any, field: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        logger.warning(f"Dropping non-string state field '{field}'")
        return ""
    return " ".join(value.split())


def _clean_text_list(value: Any, field: str, limit: int) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"Dropping non-list state field '{field}'")
        return []
    items = [" ".join(item.split()) for item in value if isinstance(item, str)]
    return [item for item in items if item][:limit]


def _normalize_frame(raw: Any) -> Frame:
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning("Dropping malformed frame document")
        return Frame()

    main_ideas = _clean_text_list(_get(raw, "main_ideas"), "mainIdeas", MAX_MAIN_IDEAS)

    details_raw = _get(raw, "details")
    details: list[list[str]] = []
    if isinstance(details_raw, list):
        for index, bucket in enumerate(details_raw[: len(main_ideas)]):
            details.append(_clean_text_list(bucket, f"details[{index}]", MAX_DETAILS))
    elif details_raw is not None:
        logger.warning("Dropping non-list state field 'details'")

    return Frame(
        key_topic=_clean_text(_get(raw, "key_topic"), "keyTopic"),
        is_about=_clean_text(_get(raw, "is_about"), "isAbout"),
        main_ideas=main_ideas,
        details=details,
        so_what=_clean_text(_get(raw, "so_what"), "soWhat"),
    )


def _pending_fits_frame(pending: PendingBase, frame: Frame) -> bool:
    """Index payloads must point at Main Ideas / details that exist."""
    if isinstance(pending, (OfferThirdDetail, CollectThirdDetail, ConfirmDetails, ClarifyDetailToRevise)):
        return pending.idea_index < len(frame.main_ideas)
    if isinstance(pending, CollectDetailRevision):
        return (
            pending.idea_index < len(frame.main_ideas)
            and pending.detail_index < len(frame.details[pending.idea_index])
        )
    if isinstance(pending, CollectMainIdeaRevision):
        return pending.idea_index < len(frame.main_ideas)
    return True


def _normalize_pending(raw: Any, frame: Frame) -> Optional[PendingBase]:
    try:
        pending = parse_pending(raw)
    except ValidationError as e:
        logger.warning(f"Dropping malformed pending state: {e.error_count()} error(s)")
        return None
    if pending is not None and not _pending_fits_frame(pending, frame):
        logger.warning(f"Dropping pending '{pending.kind}' that does not match the frame")
        return None
    return pending


def _normalize_model(model: type[BaseModel], raw: Any, field: str) -> Optional[BaseModel]:
    if raw is None:
        return None
    try:
        return model.model_validate(raw)
    except ValidationError:
        logger.warning(f"Dropping malformed state field '{field}'")
        return None


def _normalize_transcript(raw: Any, max_entries: int) -> list[TranscriptEntry]:
    if not isinstance(raw, list):
        return []
    entries = []
    for item in raw:
        entry = _normalize_model(TranscriptEntry, item, "transcript[]")
        if entry is not None:
            entries.append(entry)
    return entries[-max_entries:]


def normalize_state(raw: Any, max_transcript_entries: int = DEFAULT_TRANSCRIPT_MAX_ENTRIES) -> FramingState:
    """
    Rebuild a valid FramingState from whatever the client sent.

    Each field is recovered independently; anything missing or wrong-typed
    falls back to its default. Never raises.
    """
    if isinstance(raw, FramingState):
        return raw.model_copy(deep=True)
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning(f"State document is {type(raw).__name__}, starting a fresh session")
        return FramingState()

    frame = _normalize_frame(_get(raw, "frame"))
    state = FramingState(frame=frame)
    state.pending = _normalize_pending(_get(raw, "pending"), frame)

    for field in ("offered", "confirmed"):
        setattr(state, field, _clean_text_list(_get(raw, field), field, limit=32))

    language = _normalize_model(LanguageSettings, _get(raw, "language"), "language")
    if language is not None:
        state.language = language

    export_offered = _get(raw, "export_offered")
    state.export_offered = export_offered if isinstance(export_offered, bool) else False
    export_intent = _get(raw, "export_intent")
    state.export_intent = export_intent if export_intent in ("text", "print") else None

    state.transcript = _normalize_transcript(_get(raw, "transcript"), max_transcript_entries)

    turn_count = _get(raw, "turn_count")
    if isinstance(turn_count, int) and not isinstance(turn_count, bool) and turn_count >= 0:
        state.turn_count = turn_count

    state.intake = _normalize_model(IntakeMetadata, _get(raw, "intake"), "intake")
    return state
