"""Unit tests for framing/agents/language.py — LanguageDetector and TranslationAgent."""

import pytest
from unittest.mock import AsyncMock, Mock

from framing.agents.base_agent import AgentContext
from framing.agents.language import LanguageDetector, TranslationAgent, TranslationOutput
from framing.exceptions import TranslationError


# ---------------------------------------------------------------------------
# Detector
# ---------------------------------------------------------------------------

class TestLanguageDetector:
    @pytest.fixture
    def detector(self):
        return LanguageDetector(min_chars=12)

    @pytest.mark.parametrize("text,code", [
        ("El tema es sobre la revolución cubana y sus efectos", "es"),
        ("Mon sujet est la révolution française et ses causes", "fr"),
        ("Холодная война между США и СССР", "ru"),
        ("中国的历史很长，也很有意思。", "zh"),
        ("日本のれきしについてかきます", "ja"),
        ("The water cycle is about how water moves", "en"),
        ("Der Kalte Krieg und die Mauer in Berlin", "de"),
    ])
    def test_detects(self, detector, text, code):
        assert detector.detect(text).code == code

    def test_arabic_is_rtl(self, detector):
        detected = detector.detect("الحرب الباردة بين أمريكا وروسيا")
        assert detected.code == "ar"
        assert detected.name == "Arabic"
        assert detected.dir == "rtl"

    def test_short_message_ignored(self, detector):
        assert detector.detect("hola") is None
        assert detector.detect("sí, claro") is None

    def test_no_clear_winner(self, detector):
        assert detector.detect("Photosynthesis chlorophyll sunlight") is None

    def test_empty(self, detector):
        assert detector.detect("") is None
        assert detector.detect(None) is None


# ---------------------------------------------------------------------------
# Translation agent
# ---------------------------------------------------------------------------

def make_context(**overrides):
    defaults = dict(
        turn_id="turn_3",
        question="What is your Key Topic (2–5 words)?",
        target_language="Spanish",
    )
    defaults.update(overrides)
    return AgentContext(**defaults)


class TestTranslationAgent:
    def test_properties(self):
        agent = TranslationAgent(Mock())
        assert agent.agent_name == "translation"
        assert agent.get_output_model() is TranslationOutput

    def test_prompt_names_language(self):
        agent = TranslationAgent(Mock())
        prompt = agent.build_prompt(make_context(target_language="Arabic", target_dir="rtl"))
        assert "What is your Key Topic (2–5 words)?" in prompt
        assert "Arabic" in prompt
        assert "right-to-left" in prompt

    @pytest.mark.asyncio
    async def test_translate(self):
        agent = TranslationAgent(Mock())
        agent.execute = AsyncMock(return_value=TranslationOutput(translated_question="¿Cuál es tu tema clave?"))

        result = await agent.translate("What is your Key Topic?", make_context())

        assert result == "¿Cuál es tu tema clave?"
        sent = agent.execute.call_args.args[0]
        assert sent.question == "What is your Key Topic?"

    @pytest.mark.asyncio
    async def test_translate_end_to_end_with_llm_mock(self):
        llm = Mock()
        llm.call.return_value = {"output_text": '{"translated_question": "¿Cuál es tu tema clave?"}'}
        agent = TranslationAgent(llm)

        assert await agent.translate("What is your Key Topic?", make_context()) == "¿Cuál es tu tema clave?"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("translated", ["", "¿Qué? ¿Por qué?", "Sin pregunta"])
    async def test_rejects_unusable_translation(self, translated):
        agent = TranslationAgent(Mock())
        agent.execute = AsyncMock(return_value=TranslationOutput(translated_question=translated))

        with pytest.raises(TranslationError):
            await agent.translate("What is your Key Topic?", make_context())
