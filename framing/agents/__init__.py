"""Framing collaborators: safety gate, language detection, and the LLM rephrasing agents."""
from framing.agents.base_agent import BaseAgent, AgentContext
from framing.agents.safety import SafetyClassifier, SafetyResult
from framing.agents.language import LanguageDetector, TranslationAgent
from framing.agents.tone import ToneAgent
