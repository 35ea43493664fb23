"""Framing models."""
from framing.models.frame import Frame
from framing.models.pending import Pending, PendingBase, parse_pending
from framing.models.messages import TranscriptEntry, IntakeMetadata
from framing.models.session_state import FramingState, LanguageSettings, DetectedLanguage, normalize_state
