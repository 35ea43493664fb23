"""Unit tests for framing/agents/tone.py — ToneAgent."""

import pytest
from unittest.mock import AsyncMock, Mock

from framing.agents.base_agent import AgentContext
from framing.agents.tone import ToneAgent, ToneOutput
from framing.exceptions import ToneError


def make_context(**overrides):
    defaults = dict(
        turn_id="turn_2",
        question="What is one Main Idea about The Water Cycle?",
        key_topic="The Water Cycle",
    )
    defaults.update(overrides)
    return AgentContext(**defaults)


class TestToneAgentPrompt:
    def test_properties(self):
        agent = ToneAgent(Mock())
        assert agent.agent_name == "tone"
        assert agent.get_output_model() is ToneOutput
        assert agent.max_chars == 420

    def test_prompt_contents(self):
        agent = ToneAgent(Mock(), max_chars=200)
        prompt = agent.build_prompt(make_context(learner_grade=4))
        assert "What is one Main Idea about The Water Cycle?" in prompt
        assert "elementary school" in prompt
        assert "At most 200 characters" in prompt

    def test_prompt_without_grade(self):
        prompt = ToneAgent(Mock()).build_prompt(make_context())
        assert "middle or high school" in prompt


class TestToneCheck:
    def test_accepts_single_question(self):
        agent = ToneAgent(Mock())
        assert agent.check("  What's one big idea about  The Water Cycle? ") == (
            "What's one big idea about The Water Cycle?"
        )

    @pytest.mark.parametrize("candidate", [
        "",
        "What is it? Why?",
        "No question here",
        "Here's a thought: what is one big idea?",
        "Great job. You did well. What is one big idea?",
    ])
    def test_rejects(self, candidate):
        with pytest.raises(ToneError):
            ToneAgent(Mock()).check(candidate)

    def test_rejects_too_long(self):
        agent = ToneAgent(Mock(), max_chars=30)
        with pytest.raises(ToneError):
            agent.check("What is one Main Idea about The Water Cycle?")


class TestRephrase:
    @pytest.mark.asyncio
    async def test_returns_checked_question(self):
        agent = ToneAgent(Mock())
        agent.execute = AsyncMock(return_value=ToneOutput(question="What's one big idea about The Water Cycle?"))
        assert await agent.rephrase(make_context()) == "What's one big idea about The Water Cycle?"

    @pytest.mark.asyncio
    async def test_bad_rephrasing_raises(self):
        agent = ToneAgent(Mock())
        agent.execute = AsyncMock(return_value=ToneOutput(question="Two? Questions?"))
        with pytest.raises(ToneError):
            await agent.rephrase(make_context())
