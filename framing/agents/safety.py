"""
Safety Classifier - Content Screening

Fast keyword gate that checks learner messages before the routine runs.
A flagged message never touches the Frame; the learner gets a fixed,
supportive redirect question instead.
"""

import logging
import re
from typing import Literal

from pydantic import BaseModel, Field

logger = logging.getLogger("framing.agents")

SafetyCategory = Literal["", "SELF_HARM", "VIOLENCE", "SEVERE_NEGATIVE_SELF_TALK", "BULLYING"]
Severity = Literal["", "A", "B"]

# Checked in order; the first matching category wins.
SAFETY_SIGNALS: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("SELF_HARM", "A", ("kill myself", "hurt myself", "end my life", "suicide", "suicidal")),
    ("VIOLENCE", "A", ("bring a weapon", "shoot", "stab", "hurt someone", "kill him", "kill her")),
    (
        "SEVERE_NEGATIVE_SELF_TALK",
        "B",
        ("i'm worthless", "i am worthless", "i hate myself", "nothing matters", "i want to disappear"),
    ),
    ("BULLYING", "B", ("you're stupid", "i hate you", "go die")),
)

SAFETY_RESPONSES: dict[str, str] = {
    "SELF_HARM": (
        "I'm really glad you told me, and you deserve support right now; "
        "can you reach out to a trusted adult, a school counselor, or call or text 988 right now?"
    ),
    "VIOLENCE": (
        "Keeping everyone safe matters most, so can you talk with a teacher "
        "or another trusted adult about this right away?"
    ),
    "SEVERE_NEGATIVE_SELF_TALK": (
        "That sounds really hard, and you matter; would you be willing to share "
        "how you're feeling with a trusted adult or counselor today?"
    ),
    "BULLYING": (
        "Let's keep our words kind so we can both do our best work; "
        "are you ready to pick up where we left off?"
    ),
}

DEFAULT_SAFETY_RESPONSE = "Let's pause for a moment; would you like to try approaching this in a different way?"


class SafetyResult(BaseModel):
    """Outcome of screening one learner message."""

    flagged: bool = Field(default=False, description="Whether the message needs a safety redirect")
    category: SafetyCategory = Field(default="", description="Matched category, empty when not flagged")
    severity: Severity = Field(default="", description="A = urgent, B = supportive redirect")

    @property
    def redirect_question(self) -> str:
        return SAFETY_RESPONSES.get(self.category, DEFAULT_SAFETY_RESPONSE)


def _compile_phrases(phrases: tuple[str, ...]) -> re.Pattern:
    """Whole-word match with simple inflections: "stab" hits "stabbing", not "establish"."""
    alternation = "|".join(re.escape(phrase) for phrase in phrases)
    return re.compile(rf"(?<![a-z])(?:{alternation})(?:s|ed|bed|ing|bing|al)?(?![a-z])")


class SafetyClassifier:
    """
    Keyword classifier for self-harm, violence, severe negative self-talk
    and bullying.

    Matching is case-insensitive whole-word search on the raw message, with
    curly apostrophes folded so "I’m worthless" matches.
    """

    def __init__(self, signals: tuple[tuple[str, str, tuple[str, ...]], ...] = SAFETY_SIGNALS):
        self.signals = signals
        self._patterns = [
            (category, severity, _compile_phrases(phrases)) for category, severity, phrases in signals
        ]

    @property
    def agent_name(self) -> str:
        return "safety"

    def classify(self, text: str) -> SafetyResult:
        lowered = (text or "").lower().replace("’", "'")
        for category, severity, pattern in self._patterns:
            if pattern.search(lowered):
                logger.warning(f"Safety flag raised: category={category} severity={severity}")
                return SafetyResult(flagged=True, category=category, severity=severity)
        return SafetyResult()
