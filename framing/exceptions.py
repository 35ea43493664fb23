"""
Custom Exception Hierarchy for the Framing Routine

Exception Hierarchy:
    FramingError (base)
    ├── AgentError
    │   ├── AgentExecutionError
    │   ├── AgentTimeoutError
    │   └── AgentOutputError
    ├── CollaboratorError
    │   ├── TranslationError
    │   └── ToneError
    ├── StateError
    │   └── StateValidationError
    └── PromptError
        └── PromptTemplateError

Agent and collaborator errors never reach the learner: the orchestrator
catches them and falls back to the deterministic question.
"""

from typing import Optional


class FramingError(Exception):
    """Base exception for all framing routine errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Agent Errors

class AgentError(FramingError):
    """Base exception for agent-related errors."""

    def __init__(self, agent_name: str, message: str, details: Optional[dict] = None):
        formatted_message = f"[{agent_name}] {message}"
        super().__init__(formatted_message, details)
        self.agent_name = agent_name


class AgentExecutionError(AgentError):
    """Raised when agent execution fails."""
    pass


class AgentTimeoutError(AgentError):
    """Raised when agent execution times out."""

    def __init__(self, agent_name: str, timeout_seconds: float):
        message = f"Execution timed out after {timeout_seconds}s"
        super().__init__(agent_name, message)
        self.timeout_seconds = timeout_seconds


class AgentOutputError(AgentError):
    """Raised when agent output is invalid or malformed."""

    def __init__(self, agent_name: str, expected_schema: Optional[str] = None):
        message = "Invalid or malformed output"
        if expected_schema:
            message += f" (expected schema: {expected_schema})"
        super().__init__(agent_name, message)
        self.expected_schema = expected_schema


# Collaborator Errors

class CollaboratorError(FramingError):
    """Base exception for the rephrasing passes a turn can fall back from."""

    def __init__(self, collaborator: str, message: str):
        super().__init__(f"{collaborator}: {message}")
        self.collaborator = collaborator


class TranslationError(CollaboratorError):
    """Raised when a question cannot be translated."""

    def __init__(self, target_language: str, message: str):
        super().__init__("translation", f"{message} (target: {target_language})")
        self.target_language = target_language


class ToneError(CollaboratorError):
    """Raised when the tone pass returns an unusable rephrasing."""

    def __init__(self, message: str):
        super().__init__("tone", message)


# State Errors

class StateError(FramingError):
    """Base exception for state management errors."""
    pass


class StateValidationError(StateError):
    """Raised when state data fails validation."""

    def __init__(self, field: str, reason: str):
        message = f"State validation failed for '{field}': {reason}"
        super().__init__(message)
        self.field = field
        self.reason = reason


# Prompt Errors

class PromptError(FramingError):
    """Base exception for prompt-related errors."""
    pass


class PromptTemplateError(PromptError):
    """Raised when prompt template rendering fails."""

    def __init__(self, template_name: str, missing_vars: list[str]):
        message = f"Prompt template '{template_name}' missing variables: {', '.join(missing_vars)}"
        super().__init__(message)
        self.template_name = template_name
        self.missing_vars = missing_vars
