"""
Message Models

Transcript entries and the optional intake hints a client may send.
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field


class TranscriptEntry(BaseModel):
    """One line of the session transcript. Used for export only."""

    speaker: Literal["student", "tutor"] = Field(description="Who said it")
    text: str = Field(description="What was said")


class IntakeMetadata(BaseModel):
    """Subject/task hints from the client. Never used for routing."""

    subject: Optional[str] = Field(default=None, description="Class or subject, e.g. 'US History'")
    task: Optional[str] = Field(default=None, description="Assignment or task description")
    grade: Optional[int] = Field(default=None, ge=1, le=12, description="Learner grade level")


def create_student_entry(text: str) -> TranscriptEntry:
    return TranscriptEntry(speaker="student", text=text)


def create_tutor_entry(text: str) -> TranscriptEntry:
    return TranscriptEntry(speaker="tutor", text=text)
