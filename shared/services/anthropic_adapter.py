"""
Anthropic (Claude) Adapter

Maps the LLMService call interface onto the Anthropic Messages API.

Handles:
- Reasoning effort -> thinking budget mapping
- JSON schema -> forced tool_use structured output
- Response parsing into the standard {output_text, reasoning, parsed} dict
"""

import json
import logging
from typing import Dict, Any, Optional

import anthropic

logger = logging.getLogger(__name__)

DEFAULT_CLAUDE_MODEL = "claude-haiku-4-5-20251001"

# Rephrasing one question never needs long thinking
THINKING_BUDGET_MAP = {
    "none": 0,
    "low": 1_024,
    "medium": 2_048,
    "high": 4_096,
}

MAX_OUTPUT_TOKENS = 1024


class AnthropicAdapter:
    """Adapter that translates OpenAI-style calls to Anthropic's Messages API."""

    def __init__(self, api_key: str, timeout: int = 15, model: str = DEFAULT_CLAUDE_MODEL):
        self.model = model
        self.client = anthropic.Anthropic(api_key=api_key, timeout=timeout)

    def _build_kwargs(
        self,
        prompt: str,
        reasoning_effort: str = "none",
        json_mode: bool = True,
        json_schema: Optional[Dict[str, Any]] = None,
        schema_name: str = "response",
    ) -> Dict[str, Any]:
        """Build kwargs for anthropic messages.create()."""
        budget = THINKING_BUDGET_MAP.get(reasoning_effort, 0)
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": MAX_OUTPUT_TOKENS + budget,
            "messages": [{"role": "user", "content": prompt}],
        }

        if budget > 0:
            kwargs["thinking"] = {"type": "enabled", "budget_tokens": budget}

        if json_schema:
            kwargs["tools"] = [{
                "name": schema_name,
                "description": f"Return the {schema_name} output.",
                "input_schema": json_schema,
            }]
            # Forced tool choice is not allowed together with thinking
            kwargs["tool_choice"] = {"type": "auto"} if budget > 0 else {"type": "tool", "name": schema_name}
        elif json_mode:
            kwargs["system"] = "You MUST respond with valid JSON only. No markdown, no explanation outside the JSON."

        return kwargs

    def _parse_response(self, response: Any, json_mode: bool = True, json_schema: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Parse Anthropic response into standard {output_text, reasoning, parsed} dict."""
        output_text = ""
        reasoning_str = None
        parsed = None

        for block in response.content:
            if block.type == "thinking":
                reasoning_str = block.thinking
            elif block.type == "text":
                output_text = block.text
            elif block.type == "tool_use":
                parsed = block.input
                output_text = json.dumps(parsed)

        if (json_mode or json_schema) and parsed is None and output_text:
            try:
                parsed = json.loads(output_text)
            except json.JSONDecodeError:
                logger.warning(f"Claude returned non-JSON text for {self.model}")
                parsed = None

        return {
            "output_text": output_text,
            "reasoning": reasoning_str,
            "parsed": parsed if (json_mode or json_schema) else None,
        }

    def call_sync(
        self,
        prompt: str,
        reasoning_effort: str = "none",
        json_mode: bool = True,
        json_schema: Optional[Dict[str, Any]] = None,
        schema_name: str = "response",
    ) -> Dict[str, Any]:
        """Sync call to Claude, returning the standard output dict."""
        kwargs = self._build_kwargs(prompt, reasoning_effort, json_mode, json_schema, schema_name)
        response = self.client.messages.create(**kwargs)
        return self._parse_response(response, json_mode, json_schema)
