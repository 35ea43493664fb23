"""Deterministic dialogue core: stages, slot filling, pending handlers, question routing."""
from framing.routine.updater import update
from framing.routine.router import next_question, enforce_single_question
from framing.routine.stages import Stage, resolve_stage
