"""
LLM Service - Centralized interface for the LLM calls behind the tone and
translation passes.

Routes calls to OpenAI or Anthropic based on the configured provider.
The only entry point is `call()`; it always returns
{output_text: str, reasoning: str|None, parsed: dict|None}.
"""

import json
import time
from typing import Dict, Any, Optional
from openai import OpenAI, OpenAIError, RateLimitError, APITimeoutError
import logging

logger = logging.getLogger(__name__)

# Models that use the OpenAI Responses API (vs Chat Completions)
_RESPONSES_API_MODELS = {"gpt-5.2", "gpt-5.1", "gpt-5-mini"}

SUPPORTED_PROVIDERS = ("openai", "anthropic")


class LLMService:
    """
    Service for making LLM API calls with retry logic and error handling.

    Calls are short (one question in, one question out), so the default
    timeout is far below what a tutoring turn would need.
    """

    def __init__(
        self,
        api_key: Optional[str],
        *,
        provider: str,
        model_id: str,
        anthropic_api_key: Optional[str] = None,
        max_retries: int = 2,
        initial_retry_delay: float = 0.5,
        timeout: int = 15,
    ):
        if provider not in SUPPORTED_PROVIDERS:
            raise LLMServiceError(f"Unsupported LLM provider: {provider}")

        self.max_retries = max_retries
        self.initial_retry_delay = initial_retry_delay
        self.timeout = timeout
        self.provider = provider
        self.model_id = model_id

        self.client = OpenAI(api_key=api_key) if api_key else None

        self.anthropic_adapter = None
        if anthropic_api_key:
            from shared.services.anthropic_adapter import AnthropicAdapter
            self.anthropic_adapter = AnthropicAdapter(
                api_key=anthropic_api_key, timeout=timeout, model=model_id
            )

    # ─── Primary entry point ───────────────────────────────────────────

    def call(
        self,
        prompt: str,
        reasoning_effort: str = "none",
        json_mode: bool = True,
        json_schema: Optional[Dict[str, Any]] = None,
        schema_name: str = "response",
    ) -> Dict[str, Any]:
        """
        Generic LLM call - routes to the correct API based on self.provider + self.model_id.

        Always returns: {output_text: str, reasoning: str|None, parsed: dict|None}
        """
        if self.provider == "anthropic":
            return self._call_anthropic(prompt, reasoning_effort, json_mode, json_schema, schema_name)

        if self.client is None:
            raise LLMServiceError("OpenAI client not configured (missing API key)")

        if self.model_id in _RESPONSES_API_MODELS:
            return self._call_responses_api(
                prompt, self.model_id, reasoning_effort, json_mode, json_schema, schema_name
            )
        text = self._call_chat_completions(
            prompt, self.model_id, json_mode=json_mode, json_schema=json_schema, schema_name=schema_name
        )
        return {"output_text": text, "reasoning": None, "parsed": _try_parse(text) if (json_mode or json_schema) else None}

    # ─── OpenAI Responses API ─────────────────────────────────────────

    def _call_responses_api(
        self,
        prompt: str,
        model: str,
        reasoning_effort: str = "none",
        json_mode: bool = True,
        json_schema: Optional[Dict[str, Any]] = None,
        schema_name: str = "response",
    ) -> Dict[str, Any]:
        """Call the OpenAI Responses API."""
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "starting",
            "model": model,
            "params": {
                "reasoning_effort": reasoning_effort,
                "json_mode": json_mode,
                "has_schema": json_schema is not None,
                "schema_name": schema_name if json_schema else None,
            }
        }))

        def _api_call():
            kwargs = {
                "model": model,
                "input": prompt,
                "timeout": self.timeout,
            }

            if reasoning_effort != "none":
                kwargs["reasoning"] = {"effort": reasoning_effort}

            if json_schema:
                kwargs["text"] = {
                    "format": {
                        "type": "json_schema",
                        "name": schema_name,
                        "schema": json_schema,
                        "strict": True,
                    }
                }
            elif json_mode:
                kwargs["text"] = {"format": {"type": "json_object"}}

            result = self.client.responses.create(**kwargs)
            output_text = result.output_text
            return {
                "output_text": output_text,
                "reasoning": None,
                "parsed": _try_parse(output_text) if (json_mode or json_schema) else None,
            }

        return self._execute_with_retry(_api_call, model)

    # ─── OpenAI Chat Completions API (gpt-4o, gpt-4o-mini) ───────────

    def _call_chat_completions(
        self,
        prompt: str,
        model: str,
        max_tokens: int = 512,
        temperature: float = 0.4,
        json_mode: bool = True,
        json_schema: Optional[Dict[str, Any]] = None,
        schema_name: str = "response",
    ) -> str:
        """Call OpenAI Chat Completions API. Returns raw text."""
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "starting",
            "model": model,
            "params": {"json_mode": json_mode, "has_schema": json_schema is not None}
        }))

        def _api_call():
            kwargs = {
                "model": model,
                "messages": [{"role": "user", "content": prompt}],
                "max_completion_tokens": max_tokens,
                "temperature": temperature,
                "timeout": self.timeout,
            }
            if json_schema:
                kwargs["response_format"] = {
                    "type": "json_schema",
                    "json_schema": {"name": schema_name, "schema": json_schema, "strict": True},
                }
            elif json_mode:
                kwargs["response_format"] = {"type": "json_object"}
            response = self.client.chat.completions.create(**kwargs)
            return response.choices[0].message.content

        return self._execute_with_retry(_api_call, model)

    # ─── Anthropic ────────────────────────────────────────────────────

    def _call_anthropic(
        self,
        prompt: str,
        reasoning_effort: str = "none",
        json_mode: bool = True,
        json_schema: Optional[Dict[str, Any]] = None,
        schema_name: str = "response",
    ) -> Dict[str, Any]:
        """Call Anthropic Claude via the adapter."""
        if not self.anthropic_adapter:
            raise LLMServiceError("Anthropic adapter not configured (missing API key)")
        return self.anthropic_adapter.call_sync(
            prompt=prompt,
            reasoning_effort=reasoning_effort,
            json_mode=json_mode,
            json_schema=json_schema,
            schema_name=schema_name,
        )

    # ─── Helpers ──────────────────────────────────────────────────────

    def _execute_with_retry(self, api_call_fn, model_name: str) -> Any:
        """Execute API call with exponential backoff retry logic."""
        last_error = None
        delay = self.initial_retry_delay
        start_time = time.time()

        for attempt in range(self.max_retries):
            try:
                result = api_call_fn()
                duration_ms = int((time.time() - start_time) * 1000)

                logger.info(json.dumps({
                    "step": "LLM_CALL",
                    "status": "complete",
                    "model": model_name,
                    "output": {"response_length": len(str(result)) if result else 0},
                    "duration_ms": duration_ms,
                    "attempts": attempt + 1
                }))

                if attempt > 0:
                    logger.info(f"{model_name} call succeeded on attempt {attempt + 1}")
                return result

            except (RateLimitError, APITimeoutError) as e:
                last_error = e
                logger.warning(
                    f"{model_name} {type(e).__name__} (attempt {attempt + 1}/{self.max_retries}). "
                    f"Retrying in {delay}s..."
                )
                time.sleep(delay)
                delay *= 2

            except OpenAIError as e:
                logger.error(f"{model_name} API error: {str(e)}")
                raise LLMServiceError(f"{model_name} API error: {str(e)}") from e

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "failed",
            "model": model_name,
            "error": str(last_error),
            "duration_ms": duration_ms,
            "attempts": self.max_retries
        }))
        raise LLMServiceError(
            f"{model_name} failed after {self.max_retries} attempts. Last error: {str(last_error)}"
        ) from last_error


def _try_parse(text: Optional[str]) -> Optional[Dict[str, Any]]:
    try:
        parsed = json.loads(text or "")
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


class LLMServiceError(Exception):
    """Raised when an LLM call cannot be completed."""
    pass
