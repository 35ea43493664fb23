"""Unit tests for JSON schema utilities."""
import pytest
from pydantic import BaseModel

from framing.exceptions import AgentOutputError
from framing.utils.schema_utils import (
    extract_json_from_text,
    get_strict_schema,
    make_schema_strict,
    parse_llm_json,
    validate_agent_output,
)


# --- Test Pydantic Models ---


class SimpleModel(BaseModel):
    """Simple model for testing."""

    question: str
    score: float = 0.0


class NestedChild(BaseModel):
    label: str


class NestedParent(BaseModel):
    title: str
    child: NestedChild


# --- get_strict_schema / make_schema_strict ---


class TestStrictSchema:
    def test_all_properties_required(self):
        schema = get_strict_schema(SimpleModel)
        assert schema["additionalProperties"] is False
        assert schema["required"] == ["question", "score"]

    def test_nested_defs_are_strict(self):
        schema = get_strict_schema(NestedParent)
        child = schema["$defs"]["NestedChild"]
        assert child["additionalProperties"] is False
        assert child["required"] == ["label"]

    def test_ref_siblings_dropped(self):
        schema = make_schema_strict({
            "type": "object",
            "properties": {"child": {"$ref": "#/$defs/Child", "description": "dropped"}},
        })
        assert schema["properties"]["child"] == {"$ref": "#/$defs/Child"}


# --- validate_agent_output ---


class TestValidateAgentOutput:
    def test_valid(self):
        result = validate_agent_output({"question": "Why?"}, SimpleModel, agent_name="tone")
        assert result.question == "Why?"

    def test_invalid_raises(self):
        with pytest.raises(AgentOutputError) as exc_info:
            validate_agent_output({"score": 1}, SimpleModel, agent_name="tone")
        assert exc_info.value.agent_name == "tone"
        assert exc_info.value.expected_schema == "SimpleModel"


# --- extract_json_from_text / parse_llm_json ---


class TestExtractJson:
    def test_code_fence(self):
        text = 'Sure:\n```json\n{"question": "Why?"}\n```'
        assert extract_json_from_text(text) == '{"question": "Why?"}'

    def test_embedded_object(self):
        assert extract_json_from_text('Result: {"a": 1} done') == '{"a": 1}'

    def test_no_json_raises(self):
        with pytest.raises(ValueError):
            extract_json_from_text("no braces here")


class TestParseLlmJson:
    def test_prefers_parsed(self):
        assert parse_llm_json({"output_text": '{"a": 2}', "parsed": {"a": 1}}) == {"a": 1}

    def test_parses_output_text(self):
        assert parse_llm_json({"output_text": '{"a": 2}', "parsed": None}) == {"a": 2}

    def test_extracts_from_prose(self):
        assert parse_llm_json({"output_text": 'Here you go {"a": 3}'}) == {"a": 3}

    @pytest.mark.parametrize("result", [
        {"output_text": "no json"},
        {"output_text": "[1, 2]"},
        {"output_text": None},
        {},
    ])
    def test_returns_empty_dict(self, result):
        assert parse_llm_json(result) == {}
