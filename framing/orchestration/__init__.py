"""Framing turn orchestration."""
from framing.orchestration.orchestrator import FramingOrchestrator
