"""
Question Router

Turns (Frame, Pending) into exactly one question. An active Pending owns the
output; otherwise the Stage Resolver picks the slot and a phrasing variant is
chosen from a stable hash of the Key Topic, so asking again gives the same
wording. Every Main Ideas / Details question restates the Key Topic itself,
never a Main Idea in its place.
"""

import re
import zlib
from typing import Callable, Optional

from framing.exceptions import StateValidationError
from framing.models.frame import Frame
from framing.models.pending import (
    ChooseExportType,
    ClarifyDetailToRevise,
    ClarifyMainIdeaToRevise,
    CollectDetailRevision,
    CollectMainIdeaRevision,
    CollectMoreSoWhat,
    CollectThirdDetail,
    CollectThirdMainIdea,
    ConfirmDetails,
    ConfirmIsAbout,
    ConfirmLanguageSwitch,
    ConfirmMainIdeas,
    ConfirmSoWhat,
    OfferExport,
    OfferMoreSoWhat,
    OfferThirdDetail,
    OfferThirdMainIdea,
    PendingBase,
    ReviseIsAbout,
    ReviseSoWhat,
    StuckConfirm,
    StuckMenu,
    StuckMini,
    StuckNudge,
    StuckReask,
    StuckSkip,
)
from framing.routine.stages import Stage, parse_stage_label, resolve_stage
from framing.routine.text import QUESTION_MARKS, normalize, snippet

MAX_REPLY_CHARS = 420
KEY_TOPIC_QUESTION = "What is your Key Topic (2–5 words)?"

ORDINAL_WORDS = ("first", "second", "third")

_SPEAKER_LABEL_RE = re.compile(r"^(?:kaw companion|tutor|assistant|teacher)\s*:\s*", re.IGNORECASE)

_EXPLANATION_STARTS = (
    "in summary",
    "to summarize",
    "here's",
    "here is",
    "this means",
    "the answer is",
    "overall,",
    "for example,",
)


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------

def count_questions(text: str) -> int:
    return sum(1 for ch in text or "" if ch in QUESTION_MARKS)


def looks_like_explanation(text: str) -> bool:
    """Lecture-y output: explanatory opener, several sentences, or a list."""
    lowered = (text or "").lower().strip()
    if any(lowered.startswith(start) for start in _EXPLANATION_STARTS):
        return True
    if len(re.findall(r"[.!]", text or "")) >= 2:
        return True
    return ":" in (text or "") and "\n" in (text or "")


def enforce_single_question(
    text: Optional[str],
    max_chars: int = MAX_REPLY_CHARS,
    fallback: str = KEY_TOPIC_QUESTION,
) -> str:
    """
    Trim to one interrogative ending in exactly one question mark.

    Keeps only the first question if there are several, appends a question
    mark if there is none, and caps the length.
    """
    out = _SPEAKER_LABEL_RE.sub("", normalize(text))
    if not out.strip(" ?？؟.!"):
        return fallback

    first_mark = next((i for i, ch in enumerate(out) if ch in QUESTION_MARKS), None)
    if first_mark is not None:
        out = out[: first_mark + 1]
    else:
        out = out.rstrip(" .!;:,") + "?"

    if len(out) > max_chars:
        out = out[: max_chars - 1].rstrip(" .!;:,?？؟") + "?"
    return out


# ---------------------------------------------------------------------------
# Phrasing helpers
# ---------------------------------------------------------------------------

def _topic(frame: Frame) -> str:
    return snippet(frame.key_topic, 80) or "your topic"


def _idea(frame: Frame, index: int, limit: int = 60) -> str:
    if 0 <= index < len(frame.main_ideas):
        return snippet(frame.main_ideas[index], limit)
    return "this Main Idea"


def _ordinal(index: int) -> str:
    return ORDINAL_WORDS[index] if 0 <= index < len(ORDINAL_WORDS) else f"#{index + 1}"


def _pick(variants: tuple[str, ...], frame: Frame, salt: str) -> str:
    """Stable choice among phrasings for this topic."""
    seed = zlib.crc32(f"{salt}|{frame.key_topic.lower()}".encode("utf-8"))
    return variants[seed % len(variants)]


def _numbered(items: list[str], limit: int = 80) -> str:
    return "; ".join(f"{n}) {snippet(item, limit)}" for n, item in enumerate(items, start=1))


def _lower_first(question: str) -> str:
    if len(question) > 1 and question[0].isupper() and question[1].islower():
        return question[0].lower() + question[1:]
    return question


# ---------------------------------------------------------------------------
# Stage questions
# ---------------------------------------------------------------------------

def stage_question(frame: Frame, stage: Stage) -> str:
    topic = _topic(frame)

    if stage.kind == "keyTopic":
        return KEY_TOPIC_QUESTION

    if stage.kind == "isAbout":
        return _pick((
            f"What is {topic} about, in one short phrase?",
            f"In one short phrase, what is {topic} mostly about?",
            f"How would you finish this sentence: \"{topic} is about...\"?",
        ), frame, "isAbout")

    if stage.kind == "mainIdeas":
        if not frame.main_ideas:
            return _pick((
                f"What is one Main Idea about {topic}?",
                f"What is one important idea someone should understand about {topic}?",
                f"What is a big idea that helps explain {topic}?",
            ), frame, "mainIdeas:0")
        if len(frame.main_ideas) == 1:
            return _pick((
                f"What is a second Main Idea about {topic}?",
                f"Besides your first idea, what is a second Main Idea about {topic}?",
                f"What second Main Idea would help explain {topic}?",
            ), frame, "mainIdeas:1")
        return f"What is your third Main Idea about {topic}?"

    if stage.kind == "details":
        index = stage.index or 0
        idea = _idea(frame, index)
        ordinal = _ordinal(index)
        have = len(frame.details[index]) if index < len(frame.details) else 0
        if have == 0:
            return _pick((
                f"What is one detail about {topic} that supports your {ordinal} Main Idea, \"{idea}\"?",
                f"What fact or example from {topic} supports your {ordinal} Main Idea, \"{idea}\"?",
                f"Which detail about {topic} backs up your {ordinal} Main Idea, \"{idea}\"?",
            ), frame, f"details:{index}:0")
        return _pick((
            f"What is another detail about {topic} that supports your {ordinal} Main Idea, \"{idea}\"?",
            f"What second fact or example from {topic} supports \"{idea}\"?",
            f"Which other detail about {topic} backs up your {ordinal} Main Idea, \"{idea}\"?",
        ), frame, f"details:{index}:1")

    if stage.kind == "soWhat":
        return _pick((
            f"So what: why does {topic} matter?",
            f"What is the So What for {topic}: why does it matter?",
            f"Why is {topic} important to understand, in one sentence?",
        ), frame, "soWhat")

    return f"Which part of your Frame about {topic} would you like to look at again?"


# ---------------------------------------------------------------------------
# Pending questions
# ---------------------------------------------------------------------------

def _confirm_is_about(frame: Frame, pending: ConfirmIsAbout) -> str:
    statement = snippet(frame.is_about, 220)
    return f"{_topic(frame)} is about {statement}. Correct, or revise?"


def _revise_is_about(frame: Frame, pending: ReviseIsAbout) -> str:
    return f"What is {_topic(frame)} about instead?"


def _offer_third_main_idea(frame: Frame, pending: OfferThirdMainIdea) -> str:
    return f"Do you have a third Main Idea about {_topic(frame)} (yes or no)?"


def _collect_third_main_idea(frame: Frame, pending: CollectThirdMainIdea) -> str:
    return f"What is your third Main Idea about {_topic(frame)}?"


def _confirm_main_ideas(frame: Frame, pending: ConfirmMainIdeas) -> str:
    return f"Your Main Ideas about {_topic(frame)} are {_numbered(frame.main_ideas)}. Correct, or revise one?"


def _clarify_main_idea(frame: Frame, pending: ClarifyMainIdeaToRevise) -> str:
    return f"Which Main Idea (1–{len(frame.main_ideas)}) would you like to revise?"


def _collect_main_idea_revision(frame: Frame, pending: CollectMainIdeaRevision) -> str:
    return f"What should Main Idea {pending.idea_index + 1} about {_topic(frame)} be instead?"


def _offer_third_detail(frame: Frame, pending: OfferThirdDetail) -> str:
    return (
        f"Do you have a third detail about {_topic(frame)} for your "
        f"{_ordinal(pending.idea_index)} Main Idea, \"{_idea(frame, pending.idea_index)}\" (yes or no)?"
    )


def _collect_third_detail(frame: Frame, pending: CollectThirdDetail) -> str:
    return (
        f"What is a third detail about {_topic(frame)} that supports your "
        f"{_ordinal(pending.idea_index)} Main Idea, \"{_idea(frame, pending.idea_index)}\"?"
    )


def _confirm_details(frame: Frame, pending: ConfirmDetails) -> str:
    details = frame.details[pending.idea_index] if pending.idea_index < len(frame.details) else []
    return (
        f"Your details for Main Idea {pending.idea_index + 1}, \"{_idea(frame, pending.idea_index)}\", "
        f"are {_numbered(details)}. Correct, or revise one?"
    )


def _clarify_detail(frame: Frame, pending: ClarifyDetailToRevise) -> str:
    count = len(frame.details[pending.idea_index]) if pending.idea_index < len(frame.details) else 0
    return f"Which detail (1–{count}) for Main Idea {pending.idea_index + 1} would you like to revise?"


def _collect_detail_revision(frame: Frame, pending: CollectDetailRevision) -> str:
    return (
        f"What should detail {pending.detail_index + 1} for Main Idea "
        f"{pending.idea_index + 1} about {_topic(frame)} be instead?"
    )


def _offer_more_so_what(frame: Frame, pending: OfferMoreSoWhat) -> str:
    return f"Would you like to add one more sentence to your So What about {_topic(frame)} (yes or no)?"


def _collect_more_so_what(frame: Frame, pending: CollectMoreSoWhat) -> str:
    return f"What one sentence would you add to your So What about {_topic(frame)}?"


def _confirm_so_what(frame: Frame, pending: ConfirmSoWhat) -> str:
    return f"Your So What for {_topic(frame)} is \"{snippet(frame.so_what, 240)}\". Correct, or revise?"


def _revise_so_what(frame: Frame, pending: ReviseSoWhat) -> str:
    return f"What should your So What for {_topic(frame)} say instead?"


def _stuck_confirm(frame: Frame, pending: StuckConfirm) -> str:
    return "Would you like some help with this step (yes or no)?"


def _stuck_menu(frame: Frame, pending: StuckMenu) -> str:
    return (
        "Which kind of help would you like: 1) hear the question again, "
        "2) a hint, 3) an example, or 4) a moment to think?"
    )


def _stuck_reask(frame: Frame, pending: StuckReask) -> str:
    return pending.resume_question


def _stuck_nudge(frame: Frame, pending: StuckNudge) -> str:
    stage = parse_stage_label(pending.resume_stage)
    topic = _topic(frame)
    if stage is None or stage.kind == "refine":
        return pending.resume_question
    if stage.kind == "keyTopic":
        return "What person, event, place, or idea is your assignment mostly about?"
    if stage.kind == "isAbout":
        return f"What happens, changes, or gets explained in {topic}?"
    if stage.kind == "mainIdeas":
        return f"What is one part, cause, or stage of {topic} you could name in a few words?"
    if stage.kind == "details":
        return (
            f"What fact, example, or quote from your reading about {topic} shows "
            f"\"{_idea(frame, stage.index or 0)}\"?"
        )
    return f"What does {topic} help you understand about people or the world today?"


def _stuck_mini(frame: Frame, pending: StuckMini) -> str:
    stage = parse_stage_label(pending.resume_stage)
    topic = _topic(frame)
    if stage is None or stage.kind == "refine":
        return pending.resume_question
    if stage.kind == "keyTopic":
        return "For example, a Key Topic could be \"The Water Cycle\"; what is the main subject of your assignment in 2–5 words?"
    if stage.kind == "isAbout":
        return (
            "For example, \"The Water Cycle is about how water moves between land, sea, and sky\"; "
            f"how would you finish \"{topic} is about...\"?"
        )
    if stage.kind == "mainIdeas":
        return (
            "For example, two Main Ideas about \"The Water Cycle\" could be evaporation and condensation; "
            f"what is one big part of {topic}?"
        )
    if stage.kind == "details":
        return (
            "For example, a detail for \"evaporation\" could be that the sun heats ocean water; "
            f"what is one fact from {topic} that supports \"{_idea(frame, stage.index or 0)}\"?"
        )
    return (
        "For example, the water cycle matters because it gives everyone fresh water; "
        f"why does {topic} matter?"
    )


def _stuck_skip(frame: Frame, pending: StuckSkip) -> str:
    return f"Whenever you're ready, {_lower_first(pending.resume_question)}"


def _confirm_language_switch(frame: Frame, pending: ConfirmLanguageSwitch) -> str:
    return f"You're writing in {pending.name}. Continue in {pending.name} (yes or no)?"


def _offer_export(frame: Frame, pending: OfferExport) -> str:
    return "Would you like to save or print a copy of your Frame (yes or no)?"


def _choose_export_type(frame: Frame, pending: ChooseExportType) -> str:
    return "Which would you like: 1) a text copy to save, or 2) a printable page?"


PENDING_QUESTIONS: dict[str, Callable[[Frame, PendingBase], str]] = {
    "confirmIsAbout": _confirm_is_about,
    "reviseIsAbout": _revise_is_about,
    "offerThirdMainIdea": _offer_third_main_idea,
    "collectThirdMainIdea": _collect_third_main_idea,
    "confirmMainIdeas": _confirm_main_ideas,
    "clarifyMainIdeaToRevise": _clarify_main_idea,
    "collectMainIdeaRevision": _collect_main_idea_revision,
    "offerThirdDetail": _offer_third_detail,
    "collectThirdDetail": _collect_third_detail,
    "confirmDetails": _confirm_details,
    "clarifyDetailToRevise": _clarify_detail,
    "collectDetailRevision": _collect_detail_revision,
    "offerMoreSoWhat": _offer_more_so_what,
    "collectMoreSoWhat": _collect_more_so_what,
    "confirmSoWhat": _confirm_so_what,
    "reviseSoWhat": _revise_so_what,
    "stuckConfirm": _stuck_confirm,
    "stuckMenu": _stuck_menu,
    "stuckReask": _stuck_reask,
    "stuckNudge": _stuck_nudge,
    "stuckMini": _stuck_mini,
    "stuckSkip": _stuck_skip,
    "confirmLanguageSwitch": _confirm_language_switch,
    "offerExport": _offer_export,
    "chooseExportType": _choose_export_type,
}


def pending_question(frame: Frame, pending: PendingBase) -> str:
    handler = PENDING_QUESTIONS.get(pending.kind)
    if handler is None:
        raise StateValidationError("pending", f"no question for '{pending.kind}'")
    return handler(frame, pending)


def next_question(frame: Frame, pending: Optional[PendingBase], max_chars: int = MAX_REPLY_CHARS) -> str:
    """The single question for this turn."""
    if pending is not None:
        raw = pending_question(frame, pending)
    else:
        raw = stage_question(frame, resolve_stage(frame))
    return enforce_single_question(raw, max_chars=max_chars)
