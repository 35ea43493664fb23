"""
Framing Orchestrator

One turn: safety gate -> language check -> state update -> question
routing -> optional tone/translation passes -> single-question enforcement.

The routine decides what to ask. The LLM passes only change how it is
worded, and any failure there falls back to the routine's own question.
"""

import json
import time
import logging
from typing import Any, Optional

from config import Settings
from shared.services.llm_service import LLMService
from framing.agents.base_agent import AgentContext
from framing.agents.language import LanguageDetector, TranslationAgent
from framing.agents.safety import SafetyClassifier, SafetyResult
from framing.agents.tone import ToneAgent
from framing.exceptions import FramingError
from framing.models.messages import IntakeMetadata, create_student_entry, create_tutor_entry
from framing.models.schemas import ExportBundle, TurnResponse
from framing.models.session_state import DEFAULT_TRANSCRIPT_MAX_ENTRIES, DetectedLanguage, FramingState, normalize_state
from framing.routine.router import MAX_REPLY_CHARS, enforce_single_question, next_question
from framing.routine.stages import resolve_stage
from framing.routine.text import normalize
from framing.routine.updater import update
from framing.services.export_service import ExportService

logger = logging.getLogger("framing.orchestrator")


class FramingOrchestrator:
    """
    Runs the Framing Routine for one request.

    Holds no session data: every call takes the state document the client
    sent and returns the next one.
    """

    def __init__(
        self,
        safety: Optional[SafetyClassifier] = None,
        detector: Optional[LanguageDetector] = None,
        tone_agent: Optional[ToneAgent] = None,
        translator: Optional[TranslationAgent] = None,
        export_service: Optional[ExportService] = None,
        max_reply_chars: int = MAX_REPLY_CHARS,
        transcript_max_entries: int = DEFAULT_TRANSCRIPT_MAX_ENTRIES,
        default_language: str = "en",
    ):
        self.safety = safety or SafetyClassifier()
        self.detector = detector
        self.tone_agent = tone_agent
        self.translator = translator
        self.export_service = export_service or ExportService()
        self.max_reply_chars = max_reply_chars
        self.transcript_max_entries = transcript_max_entries
        self.default_language = default_language

        logger.info(json.dumps({
            "step": "ORCHESTRATOR_INIT",
            "language_detection": detector is not None,
            "tone_pass": tone_agent is not None,
            "translation": translator is not None,
        }))

    @classmethod
    def from_settings(cls, settings: Settings, llm_service: Optional[LLMService] = None) -> "FramingOrchestrator":
        """Wire collaborators from configuration. LLM passes are skipped when no service is available."""
        if llm_service is None and settings.llm_enabled:
            llm_service = _build_llm_service(settings)

        tone_agent = None
        translator = None
        if llm_service is not None:
            if settings.tone_pass_enabled:
                tone_agent = ToneAgent(
                    llm_service,
                    timeout_seconds=settings.llm_timeout_seconds,
                    max_chars=settings.max_reply_chars,
                )
            if settings.translation_enabled:
                translator = TranslationAgent(llm_service, timeout_seconds=settings.llm_timeout_seconds)

        return cls(
            detector=LanguageDetector(min_chars=settings.language_switch_min_chars),
            tone_agent=tone_agent,
            translator=translator,
            max_reply_chars=settings.max_reply_chars,
            transcript_max_entries=settings.transcript_max_entries,
            default_language=settings.default_language,
        )

    # ------------------------------------------------------------------
    # Turn processing
    # ------------------------------------------------------------------

    async def process_turn(
        self,
        raw_state: Any,
        message: str,
        intake: Optional[IntakeMetadata] = None,
    ) -> TurnResponse:
        """
        Process a single conversation turn.

        Args:
            raw_state: State document from the previous reply (None on the first turn)
            message: Learner text; callers reject empty text before this point
            intake: Optional subject/task hints, stored on the state

        Returns:
            TurnResponse with the single question and the next state document
        """
        start_time = time.time()
        state = normalize_state(raw_state, self.transcript_max_entries)
        if intake is not None:
            state.intake = intake
        text = normalize(message)
        turn_id = f"turn_{state.turn_count + 1}"

        logger.info(json.dumps({
            "step": "TURN",
            "status": "started",
            "turn_id": turn_id,
            "stage": resolve_stage(state.frame).label,
            "pending": state.pending.kind if state.pending else None,
        }))

        safety = self._screen(text)
        if safety.flagged:
            return self._safety_response(state, text, safety, turn_id)

        detected = self._detect_language(state, text)
        next_state = update(state, text, detected)

        question = next_question(next_state.frame, next_state.pending, self.max_reply_chars)
        reply = await self._polish(question, next_state, turn_id)
        reply = enforce_single_question(reply, self.max_reply_chars, fallback=question)

        self._record(next_state, text, reply)
        exports = self._exports(state, next_state)

        logger.info(json.dumps({
            "step": "TURN",
            "status": "complete",
            "turn_id": turn_id,
            "stage": resolve_stage(next_state.frame).label,
            "pending": next_state.pending.kind if next_state.pending else None,
            "frame_complete": next_state.frame.is_complete,
            "duration_ms": int((time.time() - start_time) * 1000),
        }))

        return TurnResponse(reply=reply, state=next_state, exports=exports)

    def export(self, raw_state: Any, export_intent: Optional[str] = None) -> ExportBundle:
        """Render the Frame held in a client state document."""
        state = normalize_state(raw_state, self.transcript_max_entries)
        return self.export_service.build(state, export_intent)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _screen(self, text: str) -> SafetyResult:
        try:
            return self.safety.classify(text)
        except Exception as e:
            logger.error(json.dumps({"step": "SAFETY", "status": "failed", "error": str(e)}))
            return SafetyResult()

    def _safety_response(self, state: FramingState, text: str, safety: SafetyResult, turn_id: str) -> TurnResponse:
        """Flagged turns leave the Frame and Pending exactly as they were."""
        reply = enforce_single_question(safety.redirect_question, self.max_reply_chars)
        self._record(state, text, reply)
        logger.warning(json.dumps({
            "step": "TURN",
            "status": "safety_redirect",
            "turn_id": turn_id,
            "category": safety.category,
            "severity": safety.severity,
        }))
        return TurnResponse(
            reply=reply,
            state=state,
            flagged=True,
            flag_category=safety.category,
            severity=safety.severity,
            safety_mode=True,
        )

    def _detect_language(self, state: FramingState, text: str) -> Optional[DetectedLanguage]:
        """Only ordinary turns in an unlocked session are checked."""
        if self.detector is None or state.language.locked or state.pending is not None:
            return None
        try:
            return self.detector.detect(text)
        except Exception as e:
            logger.error(json.dumps({"step": "LANGUAGE_DETECT", "status": "failed", "error": str(e)}))
            return None

    def _agent_context(self, question: str, state: FramingState, turn_id: str) -> AgentContext:
        return AgentContext(
            turn_id=turn_id,
            question=question,
            key_topic=state.frame.key_topic,
            stage=state.pending.kind if state.pending else resolve_stage(state.frame).label,
            learner_grade=state.intake.grade if state.intake else None,
            target_language=state.language.name,
            target_dir=state.language.dir,
        )

    def _needs_translation(self, state: FramingState) -> bool:
        return state.language.locked and state.language.code != self.default_language

    async def _polish(self, question: str, state: FramingState, turn_id: str) -> str:
        text = question

        if self.tone_agent is not None:
            try:
                text = await self.tone_agent.rephrase(self._agent_context(text, state, turn_id))
            except FramingError as e:
                logger.warning(json.dumps({"step": "TONE", "status": "fallback", "turn_id": turn_id, "error": str(e)}))
                text = question

        if self.translator is not None and self._needs_translation(state):
            try:
                text = await self.translator.translate(text, self._agent_context(text, state, turn_id))
            except FramingError as e:
                logger.warning(json.dumps({
                    "step": "TRANSLATE",
                    "status": "fallback",
                    "turn_id": turn_id,
                    "language": state.language.code,
                    "error": str(e),
                }))

        return text

    def _record(self, state: FramingState, text: str, reply: str) -> None:
        state.add_transcript(create_student_entry(text), self.transcript_max_entries)
        state.add_transcript(create_tutor_entry(reply), self.transcript_max_entries)
        state.increment_turn()

    def _exports(self, before: FramingState, after: FramingState) -> Optional[ExportBundle]:
        """Renderings are attached on the turn the learner picks an export type."""
        if after.export_intent is None or after.export_intent == before.export_intent:
            return None
        if not after.frame.is_complete:
            return None
        try:
            return self.export_service.build(after)
        except Exception as e:
            logger.error(json.dumps({"step": "EXPORT", "status": "failed", "error": str(e)}))
            return None


def _build_llm_service(settings: Settings) -> Optional[LLMService]:
    api_key = settings.anthropic_api_key if settings.llm_provider == "anthropic" else settings.openai_api_key
    if not api_key:
        logger.warning(f"No API key for provider '{settings.llm_provider}'; LLM passes disabled")
        return None
    return LLMService(
        settings.openai_api_key or None,
        provider=settings.llm_provider,
        model_id=settings.llm_model,
        anthropic_api_key=settings.anthropic_api_key or None,
        timeout=int(settings.llm_timeout_seconds) + 1,
    )
