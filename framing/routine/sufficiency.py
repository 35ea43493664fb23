"""
Structural sufficiency predicates.

These judge whether text is usable to fill a slot, never whether it is true
or good. A topic/statement pair must be strong enough to seed 2-3 distinct
Main Ideas before the routine moves on.
"""

import re

from framing.routine.text import (
    is_affirmation,
    is_negation,
    is_stuck,
    normalize,
)

TOPIC_MIN_CHARS = 3
TOPIC_MAX_CHARS = 80
TOPIC_MAX_WORDS = 10

STATEMENT_MIN_CHARS = 6
STATEMENT_MAX_CHARS = 220
STATEMENT_MIN_WORDS_WITHOUT_CUE = 6

ITEM_MIN_CHARS = 2
ITEM_MAX_CHARS = 220

GENERIC_TOPIC_TERMS = frozenset({
    "topic", "my topic", "the topic", "this topic", "stuff", "things",
    "something", "anything", "everything", "nothing", "history", "science",
    "math", "english", "reading", "writing", "homework", "assignment",
    "my assignment", "essay", "my essay", "project", "report", "book",
    "story", "chapter", "unit", "lesson", "class", "school", "test", "quiz",
    "idk", "i don't know", "i dont know", "none", "n/a", "whatever",
})

VAGUE_STATEMENT_STARTS = (
    "stuff", "things", "something", "anything", "everything", "idk",
    "i don't know", "i dont know", "not sure", "whatever", "nothing",
    "it", "this", "that", "the topic", "my topic", "what it is",
    "a lot", "lots of", "many things", "etc",
)

CAUSAL_CUES = (
    "because", "leads to", "led to", "lead to", "results in", "resulted in",
    "result in", "causes", "caused", "cause", "effect", "effects", "impact",
    "impacts", "affects", "affected", "compares", "compared", "comparing",
    "contrasts", "versus", "vs", "how", "why", "when", "between", "changed",
    "changes", "helps", "helped", "shows", "showed", "explains", "so that",
    "in order to", "which", "after", "before", "during", "while",
)

_WORD_RE = re.compile(r"[A-Za-zÀ-￿']+")


def _key(text: str) -> str:
    return normalize(text).lower().strip(" .!?,;:")


def _words(text: str) -> list[str]:
    return _WORD_RE.findall(text or "")


def is_usable_topic_label(label: str) -> bool:
    """3-80 chars, not a generic term, at most 10 words."""
    clean = normalize(label)
    if not TOPIC_MIN_CHARS <= len(clean) <= TOPIC_MAX_CHARS:
        return False
    if _key(clean) in GENERIC_TOPIC_TERMS:
        return False
    words = _words(clean)
    return 0 < len(words) <= TOPIC_MAX_WORDS


def has_meaningful_statement(statement: str) -> bool:
    """6-220 chars and not opening with a vague placeholder."""
    clean = normalize(statement)
    if not STATEMENT_MIN_CHARS <= len(clean) <= STATEMENT_MAX_CHARS:
        return False
    key = _key(clean)
    for start in VAGUE_STATEMENT_STARTS:
        if key == start or key.startswith(start + " "):
            return False
    return bool(_words(clean))


def can_seed_main_ideas(statement: str) -> bool:
    """A causal/relational cue, or enough words to stand in for elaboration."""
    key = f" {_key(statement)} "
    if any(f" {cue} " in key for cue in CAUSAL_CUES):
        return True
    return len(_words(statement)) >= STATEMENT_MIN_WORDS_WITHOUT_CUE


def is_instructionally_sufficient(topic: str, statement: str) -> bool:
    return (
        is_usable_topic_label(topic)
        and has_meaningful_statement(statement)
        and can_seed_main_ideas(statement)
    )


def is_usable_item(text: str) -> bool:
    """Main ideas, details and appended sentences: short, real content."""
    clean = normalize(text)
    if not ITEM_MIN_CHARS <= len(clean) <= ITEM_MAX_CHARS:
        return False
    if not _words(clean):
        return False
    return not (is_affirmation(clean) or is_negation(clean) or is_stuck(clean))
