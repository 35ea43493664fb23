"""
API Schemas

Request/response bodies for the turn and export endpoints. Field names go
over the wire in camelCase.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from framing.models.messages import IntakeMetadata
from framing.models.session_state import FramingState


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TurnRequest(CamelModel):
    """One learner message plus the state document from the previous reply."""

    message: str = Field(default="", description="Learner text for this turn")
    state: Optional[dict[str, Any]] = Field(
        default=None,
        description="State document returned by the previous turn; omitted on the first turn",
    )
    intake: Optional[IntakeMetadata] = Field(default=None, description="Optional subject/task hints")


class ExportBundle(CamelModel):
    """Printable renderings of a finished Frame."""

    frame_text: str
    transcript_text: str
    rendered_document: str = Field(description="Base64-encoded PDF")
    document_mime_type: str = "application/pdf"
    export_intent: Optional[Literal["text", "print"]] = None


class TurnResponse(CamelModel):
    """The single question for this turn and the state to send back next time."""

    reply: str
    state: FramingState
    flagged: bool = False
    flag_category: str = ""
    severity: str = ""
    safety_mode: bool = False
    exports: Optional[ExportBundle] = None


class ExportRequest(CamelModel):
    state: dict[str, Any]
    export_intent: Optional[Literal["text", "print"]] = None
