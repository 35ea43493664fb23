"""Framing Routine: a question-only guided-writing dialogue."""
