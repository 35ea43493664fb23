"""
Language Detection and Translation

The detector is a local heuristic (Unicode script counts, then stopword
overlap for Latin-script languages); it never calls out. The translator
is an LLM agent that renders the routine's English question in the
learner's locked language.
"""

import logging
import re
import unicodedata
from typing import Optional, Type

from pydantic import BaseModel, Field

from framing.agents.base_agent import AgentContext, BaseAgent
from framing.exceptions import TranslationError
from framing.models.session_state import DetectedLanguage
from framing.prompts.language_utils import get_reply_language_instruction
from framing.prompts.templates import TRANSLATION_TEMPLATE
from framing.routine.router import count_questions

logger = logging.getLogger("framing.agents")

# (first codepoint, last codepoint, code, name, dir)
SCRIPT_RANGES: tuple[tuple[int, int, str, str, str], ...] = (
    (0x0600, 0x06FF, "ar", "Arabic", "rtl"),
    (0x0750, 0x077F, "ar", "Arabic", "rtl"),
    (0x0590, 0x05FF, "he", "Hebrew", "rtl"),
    (0x0900, 0x097F, "hi", "Hindi", "ltr"),
    (0x0400, 0x04FF, "ru", "Russian", "ltr"),
    (0x0370, 0x03FF, "el", "Greek", "ltr"),
    (0x0E00, 0x0E7F, "th", "Thai", "ltr"),
    (0x3040, 0x30FF, "ja", "Japanese", "ltr"),
    (0xAC00, 0xD7AF, "ko", "Korean", "ltr"),
    (0x4E00, 0x9FFF, "zh", "Chinese", "ltr"),
)

LATIN_STOPWORDS: dict[str, frozenset[str]] = {
    "en": frozenset({
        "the", "and", "is", "are", "was", "of", "to", "in", "it", "that", "about",
        "my", "i", "this", "with", "for", "they", "because", "what", "how",
    }),
    "es": frozenset({
        "el", "la", "los", "las", "de", "del", "que", "y", "es", "en", "un", "una",
        "por", "para", "con", "sobre", "mi", "se", "porque", "como", "pero", "esta",
    }),
    "fr": frozenset({
        "le", "la", "les", "des", "de", "du", "et", "est", "un", "une", "dans",
        "pour", "avec", "sur", "mon", "ma", "que", "qui", "parce", "je", "il", "elle",
    }),
    "pt": frozenset({
        "o", "os", "as", "do", "da", "dos", "das", "que", "e", "em", "um", "uma",
        "para", "com", "sobre", "meu", "minha", "porque", "nao", "isso", "foi",
    }),
    "de": frozenset({
        "der", "die", "das", "und", "ist", "ein", "eine", "nicht", "mit", "fur",
        "uber", "ich", "mein", "meine", "weil", "auf", "den", "dem", "es", "sie",
    }),
}

LANGUAGE_NAMES = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "pt": "Portuguese",
    "de": "German",
}

MIN_STOPWORD_HITS = 2


def _fold(text: str) -> str:
    """Lower-case and strip accents so "über" and "uber" compare equal."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


class LanguageDetector:
    """Guesses the language of a learner message, or returns None when unsure."""

    def __init__(self, min_chars: int = 12):
        self.min_chars = min_chars

    def _detect_script(self, text: str) -> Optional[DetectedLanguage]:
        counts: dict[tuple[str, str, str], int] = {}
        letters = 0
        for ch in text:
            if not ch.isalpha():
                continue
            letters += 1
            point = ord(ch)
            for first, last, code, name, direction in SCRIPT_RANGES:
                if first <= point <= last:
                    key = (code, name, direction)
                    counts[key] = counts.get(key, 0) + 1
                    break

        if not counts or letters == 0:
            return None
        (code, name, direction), hits = max(counts.items(), key=lambda item: item[1])
        if hits * 2 < letters:
            return None
        # Kana mixed with Han is Japanese, not Chinese
        if code == "zh" and any(key[0] == "ja" for key in counts):
            code, name = "ja", "Japanese"
        return DetectedLanguage(code=code, name=name, dir=direction)

    def _detect_latin(self, text: str) -> Optional[DetectedLanguage]:
        words = re.findall(r"[a-z]+", _fold(text))
        if not words:
            return None
        scores = {
            code: sum(1 for word in words if word in stopwords)
            for code, stopwords in LATIN_STOPWORDS.items()
        }
        best = max(scores, key=scores.get)
        if scores[best] < MIN_STOPWORD_HITS:
            return None
        runner_up = max(score for code, score in scores.items() if code != best)
        if scores[best] == runner_up:
            return None
        return DetectedLanguage(code=best, name=LANGUAGE_NAMES[best], dir="ltr")

    def detect(self, text: str) -> Optional[DetectedLanguage]:
        """
        Detect the language of ``text``.

        Returns None for short messages and when no language clearly wins;
        callers treat None as "no change".
        """
        clean = " ".join((text or "").split())
        if len(clean) < self.min_chars:
            return None
        detected = self._detect_script(clean) or self._detect_latin(clean)
        if detected is not None:
            logger.debug(f"Detected language {detected.code} for message of {len(clean)} chars")
        return detected


class TranslationOutput(BaseModel):
    """Output model for the Translation Agent."""

    translated_question: str = Field(description="The question in the target language")


class TranslationAgent(BaseAgent):
    """Renders one routine question in the learner's chosen language."""

    @property
    def agent_name(self) -> str:
        return "translation"

    def get_output_model(self) -> Type[BaseModel]:
        return TranslationOutput

    def build_prompt(self, context: AgentContext) -> str:
        return TRANSLATION_TEMPLATE.render(
            question=context.question,
            language_name=context.target_language,
            language_instruction=get_reply_language_instruction(context.target_language, context.target_dir),
        )

    async def translate(self, question: str, context: AgentContext) -> str:
        """Translate ``question``; raises TranslationError on an unusable result."""
        output = await self.execute(context.model_copy(update={"question": question}))
        translated = " ".join(output.translated_question.split())
        if not translated:
            raise TranslationError(context.target_language, "empty translation")
        if count_questions(translated) != 1:
            raise TranslationError(context.target_language, "translation must be exactly one question")
        return translated
