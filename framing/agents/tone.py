"""
Tone Agent - Optional Rephrasing Pass

Softens the routine's question without changing what it asks. Output that
breaks the one-question rule or reads like an explanation is rejected and
the orchestrator keeps the deterministic question.
"""

from typing import Type

from pydantic import BaseModel, Field

from framing.agents.base_agent import AgentContext, BaseAgent
from framing.exceptions import ToneError
from framing.prompts.language_utils import get_grade_label
from framing.prompts.templates import TONE_TEMPLATE
from framing.routine.router import MAX_REPLY_CHARS, count_questions, looks_like_explanation


class ToneOutput(BaseModel):
    """Output model for Tone Agent."""

    question: str = Field(description="The rephrased question")


class ToneAgent(BaseAgent):
    """Warmer phrasing for a question the routine already chose."""

    def __init__(self, *args, max_chars: int = MAX_REPLY_CHARS, **kwargs):
        super().__init__(*args, **kwargs)
        self.max_chars = max_chars

    @property
    def agent_name(self) -> str:
        return "tone"

    def get_output_model(self) -> Type[BaseModel]:
        return ToneOutput

    def build_prompt(self, context: AgentContext) -> str:
        return TONE_TEMPLATE.render(
            question=context.question,
            key_topic=context.key_topic,
            grade_label=get_grade_label(context.learner_grade),
            max_chars=self.max_chars,
        )

    def check(self, candidate: str) -> str:
        """Return the cleaned candidate, or raise ToneError if it breaks the reply rules."""
        text = " ".join((candidate or "").split())
        if not text:
            raise ToneError("empty rephrasing")
        if count_questions(text) != 1:
            raise ToneError(f"expected one question, got {count_questions(text)}")
        if looks_like_explanation(text):
            raise ToneError("rephrasing reads like an explanation")
        if len(text) > self.max_chars:
            raise ToneError(f"rephrasing longer than {self.max_chars} chars")
        return text

    async def rephrase(self, context: AgentContext) -> str:
        output = await self.execute(context)
        return self.check(output.question)
