"""
Text normalization, phrase predicates and the topic/statement extractor.

Everything here is pure: no state, no I/O. Phrase sets are module-level
frozensets so each predicate can be tested on its own.
"""

import re
from typing import NamedTuple, Optional

QUESTION_MARKS = "?？؟"

AFFIRMATIONS = frozenset({
    "yes", "y", "yeah", "yea", "yep", "yup", "sure", "ok", "okay", "correct",
    "right", "that's right", "thats right", "it's correct", "its correct",
    "looks good", "good", "sounds good", "perfect", "exactly", "confirm",
    "confirmed", "yes please", "of course", "definitely", "i do", "that's it",
    "thats it", "all good", "si", "sí", "oui", "ja",
})

NEGATIONS = frozenset({
    "no", "n", "nope", "nah", "no thanks", "no thank you", "not really",
    "none", "nothing", "nothing else", "no more", "that's all", "thats all",
    "i'm done", "im done", "done", "skip", "no i don't", "no i dont",
    "i don't", "i dont", "never mind", "nevermind", "not now", "non", "nein",
})

STUCK_PHRASES = frozenset({
    "idk", "i dk", "dunno", "i dunno", "i don't know", "i dont know",
    "i do not know", "not sure", "i'm not sure", "im not sure", "no idea",
    "i have no idea", "confused", "i'm confused", "im confused", "help",
    "help me", "i need help", "stuck", "i'm stuck", "im stuck", "?", "??",
    "what", "huh", "i don't get it", "i dont get it", "i don't understand",
    "i dont understand", "can you help", "can you help me", "please help",
    "help please",
})

_STUCK_MARKER_RE = re.compile(r"\b(?:idk|confused|stuck|dunno|no idea|not sure|don'?t know|don'?t get it)\b")

# Words that may sit around a stuck marker without making the reply content:
# "I'm so confused about this part", "idk what to write".
STUCK_FILLER_WORDS = frozenset({
    "i", "i'm", "im", "am", "me", "my", "so", "really", "very", "totally",
    "kinda", "kind", "of", "a", "bit", "little", "just", "still", "now",
    "again", "please", "sorry", "lol", "um", "uh", "hmm", "ugh", "honestly",
    "what", "how", "to", "do", "say", "write", "put", "answer", "with", "on",
    "about", "this", "that", "it", "the", "here", "part", "step", "one",
    "question", "help", "and", "but", "at", "all", "yet",
})

REVISION_WORDS = (
    "revise", "change", "fix", "edit", "update", "replace", "redo", "rewrite",
    "different", "wrong", "not right", "incorrect", "instead",
)

ORDINALS = {
    "first": 1, "1st": 1,
    "second": 2, "2nd": 2,
    "third": 3, "3rd": 3,
    "fourth": 4, "4th": 4,
}

CARDINALS = {"one": 1, "two": 2, "three": 3, "four": 4}

# Cardinal words count only as the whole reply or after a label ("number two").
_LABELLED_CARDINAL_RE = re.compile(r"(?:\b(?:number|option|item|idea|detail)\s+|#\s*)(one|two|three|four)\b")
_ORDINAL_WORDS = "|".join(ORDINALS)
_NUMBER_WORDS = "|".join(CARDINALS)

GENERIC_LEFT_LABELS = frozenset({
    "my assignment", "this assignment", "the assignment", "this topic",
    "the topic", "my topic", "this essay", "my essay", "this", "that", "it",
    "he", "she", "they", "we", "you", "i", "this one", "this story",
    "the story", "this book", "the book", "this chapter", "the chapter",
    "this unit", "the unit", "my project", "this project",
})

_TOPIC_STATEMENT_RE = re.compile(r"^\s*(?P<label>.+?)\s+(?:is|are|was|were)\s+about\s+(?P<rest>.+?)\s*$", re.IGNORECASE)
_TOPIC_PREFIX_RE = re.compile(
    r"^(?:my\s+|the\s+)?(?:key\s+)?topic\s*(?:is|:|=|-)\s*"
    r"|^(?:i\s+am|i'?m)\s+(?:writing|learning|reading|working)\s+(?:about|on)\s+"
    r"|^it'?s\s+(?:about\s+)?|^it\s+is\s+(?:about\s+)?|^about\s+",
    re.IGNORECASE,
)
_STATEMENT_PREFIX_RE = re.compile(r"^(?:it\s+is\s+about|it'?s\s+about|is\s+about|about)\s+", re.IGNORECASE)
_AFFIRMATION_PREFIX_RE = re.compile(r"^(?:yes|yeah|yep|yup|sure|ok|okay)\b[\s,.!:;-]*", re.IGNORECASE)
_EDGE_PUNCT = " \t\"'“”‘’`.,;:!"


class TopicStatement(NamedTuple):
    topic: str
    statement: str


def normalize(raw: Optional[str]) -> str:
    """Collapse internal whitespace and trim."""
    if not raw:
        return ""
    return re.sub(r"\s+", " ", str(raw)).strip()


def _phrase_key(text: str) -> str:
    """Lower-cased text with trailing punctuation dropped, for set lookups."""
    key = normalize(text).lower()
    key = key.replace("’", "'")
    return key.strip(" .!,;:")


def is_affirmation(text: str) -> bool:
    key = _phrase_key(text)
    if key in AFFIRMATIONS:
        return True
    # "yes, that's right" / "yes it is"
    first = key.split(" ", 1)[0].strip(",")
    return first in {"yes", "yeah", "yep", "yup", "correct"} and len(key.split()) <= 4


def is_negation(text: str) -> bool:
    key = _phrase_key(text)
    if key in NEGATIONS:
        return True
    first = key.split(" ", 1)[0].strip(",")
    return first in {"no", "nope", "nah"} and len(key.split()) <= 3


def is_stuck(text: str) -> bool:
    """Short, low word-count replies that signal the learner is stuck."""
    key = _phrase_key(text)
    if not key:
        return False
    if key in STUCK_PHRASES:
        return True
    if len(key.split()) > 6 or len(key) > 40:
        return False
    if _STUCK_MARKER_RE.search(key) is None:
        return False
    rest = _STUCK_MARKER_RE.sub(" ", key)
    return all(word in STUCK_FILLER_WORDS for word in re.findall(r"[a-z']+", rest))


def has_revision_intent(text: str) -> bool:
    key = _phrase_key(text)
    return any(word in key for word in REVISION_WORDS)


def parse_item_index(text: str, count: int) -> Optional[int]:
    """Return a zero-based index for "2", "the second one", "number two" within 1..count."""
    key = _phrase_key(text)
    match = re.search(r"\b(\d+)\b", key)
    if match:
        number = int(match.group(1))
        return number - 1 if 1 <= number <= count else None
    number = None
    for word in re.findall(r"[a-z0-9]+", key):
        number = ORDINALS.get(word)
        if number is not None:
            break
    if number is None:
        cardinal = _LABELLED_CARDINAL_RE.search(key)
        if cardinal:
            number = CARDINALS[cardinal.group(1)]
        elif key in CARDINALS:
            number = CARDINALS[key]
    if number is not None and number <= count:
        return number - 1
    return None


def parse_labelled_index(text: str, noun: str, count: int) -> Optional[int]:
    """
    Zero-based index attached to a noun: "the second detail", "main idea 2",
    "idea number two". Unlabelled numbers elsewhere in the text are ignored.
    """
    key = _phrase_key(text)
    before = re.search(rf"\b(\d+|{_ORDINAL_WORDS})\s+(?:main\s+|supporting\s+)?{noun}s?\b", key)
    after = re.search(rf"\b{noun}s?\s*(?:number\s+|#\s*)?(\d+|{_NUMBER_WORDS})\b", key)
    match = before or after
    if not match:
        return None
    word = match.group(1)
    number = int(word) if word.isdigit() else ORDINALS.get(word) or CARDINALS.get(word)
    if number is None or not 1 <= number <= count:
        return None
    return number - 1


def starts_with_affirmation(text: str) -> bool:
    """True for "yes" and "yes, <more>", not "yesterday"."""
    return _AFFIRMATION_PREFIX_RE.match(normalize(text)) is not None


def strip_affirmation(text: str) -> str:
    """Remainder of "yes, the naval blockade" after the leading yes."""
    return normalize(_AFFIRMATION_PREFIX_RE.sub("", normalize(text), count=1))


def clean_topic_label(text: str) -> str:
    label = normalize(text)
    label = _TOPIC_PREFIX_RE.sub("", label, count=1)
    return label.strip(_EDGE_PUNCT)


def clean_statement(text: str) -> str:
    statement = normalize(text)
    statement = _STATEMENT_PREFIX_RE.sub("", statement, count=1)
    return statement.strip(" \t\"'“”").rstrip(" ,;:")


def is_generic_label(label: str) -> bool:
    key = _phrase_key(label)
    return key in GENERIC_LEFT_LABELS or key.startswith("my ")


def extract_topic_and_statement(text: str) -> Optional[TopicStatement]:
    """
    Pull (topic, statement) out of "<label> is about <rest>".

    Rejects generic labels ("my assignment", "this topic", pronouns,
    anything starting with "my ") and labels outside 1-10 words.
    """
    match = _TOPIC_STATEMENT_RE.match(normalize(text))
    if not match:
        return None

    label = clean_topic_label(match.group("label"))
    rest = clean_statement(match.group("rest"))
    if not label or not rest:
        return None
    if is_generic_label(label):
        return None
    if not 1 <= len(label.split()) <= 10:
        return None
    return TopicStatement(topic=label, statement=rest)


def as_sentence(text: str) -> str:
    """Capitalize and terminate with a period."""
    sentence = normalize(text).rstrip(" ,;:")
    if not sentence:
        return ""
    sentence = sentence[0].upper() + sentence[1:]
    if sentence[-1] not in ".!":
        sentence += "."
    return sentence


def snippet(text: str, limit: int = 90) -> str:
    """Learner text made safe to embed inside a question."""
    clean = normalize("".join(" " if ch in QUESTION_MARKS else ch for ch in text or ""))
    clean = clean.rstrip(" .")
    if len(clean) > limit:
        clean = clean[: limit - 1].rstrip() + "…"
    return clean
