"""
Base Agent for the Framing Routine

Abstract base class for the LLM-backed collaborators (tone, translation).
Uses the shared LLMService for LLM calls. Agents only ever rephrase a
question the routine already chose; they never decide what to ask.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Type, Optional
import json
import time
import asyncio
import logging

from pydantic import BaseModel

from shared.services.llm_service import LLMService
from framing.exceptions import AgentError, AgentExecutionError, AgentTimeoutError
from framing.utils.schema_utils import get_strict_schema, parse_llm_json, validate_agent_output


logger = logging.getLogger("framing.agents")


class AgentContext(BaseModel):
    """Standard context passed to all agents."""

    turn_id: str
    question: str
    key_topic: str = ""
    stage: str = ""
    learner_grade: Optional[int] = None
    target_language: str = "English"
    target_dir: str = "ltr"
    additional_context: Dict[str, Any] = {}


class BaseAgent(ABC):
    """
    Abstract base class for the rephrasing agents.

    Provides logging, timeout handling, and output validation around one
    structured LLM call.
    """

    def __init__(
        self,
        llm_service: LLMService,
        timeout_seconds: float = 10,
        reasoning_effort: str = "none",
    ):
        self.llm = llm_service
        self.timeout_seconds = timeout_seconds
        self._reasoning_effort = reasoning_effort

    @property
    @abstractmethod
    def agent_name(self) -> str:
        ...

    @abstractmethod
    def get_output_model(self) -> Type[BaseModel]:
        ...

    @abstractmethod
    def build_prompt(self, context: AgentContext) -> str:
        ...

    async def execute(self, context: AgentContext) -> BaseModel:
        """Execute the agent and return validated output."""
        start_time = time.time()

        logger.info(json.dumps({
            "agent": self.agent_name,
            "event": "started",
            "turn_id": context.turn_id,
            "stage": context.stage,
        }))

        try:
            prompt = self.build_prompt(context)

            output_model = self.get_output_model()
            schema = get_strict_schema(output_model)

            loop = asyncio.get_running_loop()
            result = await asyncio.wait_for(
                loop.run_in_executor(
                    None,
                    lambda: self.llm.call(
                        prompt=prompt,
                        reasoning_effort=self._reasoning_effort,
                        json_schema=schema,
                        schema_name=output_model.__name__,
                    ),
                ),
                timeout=self.timeout_seconds,
            )

            validated = validate_agent_output(
                output=parse_llm_json(result),
                model=output_model,
                agent_name=self.agent_name,
            )

            duration_ms = int((time.time() - start_time) * 1000)
            logger.info(json.dumps({
                "agent": self.agent_name,
                "event": "completed",
                "turn_id": context.turn_id,
                "duration_ms": duration_ms,
            }))

            return validated

        except asyncio.TimeoutError:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.warning(json.dumps({
                "agent": self.agent_name,
                "event": "timeout",
                "turn_id": context.turn_id,
                "duration_ms": duration_ms,
            }))
            raise AgentTimeoutError(self.agent_name, self.timeout_seconds)

        except AgentError:
            raise

        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.error(json.dumps({
                "agent": self.agent_name,
                "event": "failed",
                "turn_id": context.turn_id,
                "error": str(e),
                "duration_ms": duration_ms,
            }))
            raise AgentExecutionError(self.agent_name, str(e)) from e
