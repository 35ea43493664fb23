"""
Slot filling for ordinary turns (no Pending active).

Each filler mutates the state it is given and returns True when anything
changed. Input that does not satisfy the open slot is a no-op.
"""

import logging
from typing import Callable

from framing.models.frame import MAX_DETAILS, MAX_MAIN_IDEAS, REQUIRED_DETAILS, REQUIRED_MAIN_IDEAS
from framing.models.pending import (
    ClarifyDetailToRevise,
    ClarifyMainIdeaToRevise,
    CollectDetailRevision,
    CollectMainIdeaRevision,
    ConfirmDetails,
    ConfirmIsAbout,
    ConfirmMainIdeas,
    ConfirmSoWhat,
    OfferMoreSoWhat,
    OfferThirdDetail,
    OfferThirdMainIdea,
    PendingBase,
    ReviseIsAbout,
    ReviseSoWhat,
    StuckConfirm,
)
from framing.models.session_state import FramingState
from framing.routine.router import next_question
from framing.routine.stages import Stage, resolve_stage
from framing.routine.sufficiency import (
    has_meaningful_statement,
    is_instructionally_sufficient,
    is_usable_item,
    is_usable_topic_label,
)
from framing.routine.text import (
    TopicStatement,
    as_sentence,
    clean_statement,
    clean_topic_label,
    extract_topic_and_statement,
    has_revision_intent,
    is_affirmation,
    is_negation,
    is_stuck,
    normalize,
    parse_item_index,
    parse_labelled_index,
)

logger = logging.getLogger("framing.routine")

MAIN_IDEAS_GROUP = "mainIdeas"
SO_WHAT_GROUP = "soWhat"


def details_group(index: int) -> str:
    return f"details:{index}"


def _is_duplicate(text: str, existing: list[str]) -> bool:
    key = text.lower().strip(" .")
    return any(key == item.lower().strip(" .") for item in existing)


# ---------------------------------------------------------------------------
# Group transitions shared with the pending handlers
# ---------------------------------------------------------------------------

def after_main_ideas_group(state: FramingState) -> None:
    """Second Main Idea captured: offer a third once, otherwise confirm."""
    if len(state.frame.main_ideas) < MAX_MAIN_IDEAS and not state.was_offered(MAIN_IDEAS_GROUP):
        state.mark_offered(MAIN_IDEAS_GROUP)
        state.pending = OfferThirdMainIdea()
    else:
        state.pending = ConfirmMainIdeas()


def after_details_group(state: FramingState, index: int) -> None:
    group = details_group(index)
    if len(state.frame.details_for(index)) < MAX_DETAILS and not state.was_offered(group):
        state.mark_offered(group)
        state.pending = OfferThirdDetail(idea_index=index)
    else:
        state.pending = ConfirmDetails(idea_index=index)


def after_so_what(state: FramingState) -> None:
    if not state.was_offered(SO_WHAT_GROUP):
        state.mark_offered(SO_WHAT_GROUP)
        state.pending = OfferMoreSoWhat()
    else:
        state.pending = ConfirmSoWhat()


def append_so_what_sentence(state: FramingState, sentence: str) -> None:
    state.frame.so_what = f"{as_sentence(state.frame.so_what)} {as_sentence(sentence)}"


def add_main_idea(state: FramingState, text: str) -> bool:
    frame = state.frame
    if len(frame.main_ideas) >= MAX_MAIN_IDEAS or _is_duplicate(text, frame.main_ideas):
        return False
    frame.add_main_idea(text)
    return True


def add_detail(state: FramingState, index: int, text: str) -> bool:
    bucket = state.frame.details_for(index)
    if len(bucket) >= MAX_DETAILS or _is_duplicate(text, bucket):
        return False
    state.frame.add_detail(index, text)
    return True


def enter_stuck(state: FramingState, stage: Stage) -> None:
    """Capture the question that is open right now; the detour returns to it."""
    resume_question = next_question(state.frame, None)
    state.pending = StuckConfirm(resume_question=resume_question, resume_stage=stage.label)
    logger.info(f"Stuck support started at stage {stage.label}")


# ---------------------------------------------------------------------------
# Topic + statement
# ---------------------------------------------------------------------------

def apply_extraction(state: FramingState, extracted: TopicStatement) -> bool:
    """
    Use a "<topic> is about <statement>" sentence.

    Both slots empty: fill both when the pair is strong enough, otherwise
    keep just the topic. Topic set but unlocked: take the statement and
    let the new label replace the old one.
    """
    frame = state.frame
    if state.is_topic_locked or frame.is_about:
        return False
    if not is_usable_topic_label(extracted.topic):
        return False

    if is_instructionally_sufficient(extracted.topic, extracted.statement):
        frame.key_topic = extracted.topic
        frame.is_about = extracted.statement
        state.pending = ConfirmIsAbout()
        return True

    if not frame.key_topic:
        frame.key_topic = extracted.topic
        return True
    return False


def _fill_key_topic(state: FramingState, stage: Stage, message: str) -> bool:
    if is_affirmation(message) or is_negation(message):
        return False
    label = clean_topic_label(message)
    if not is_usable_topic_label(label):
        return False
    state.frame.key_topic = label
    return True


def _fill_is_about(state: FramingState, stage: Stage, message: str) -> bool:
    statement = clean_statement(message)
    if not is_instructionally_sufficient(state.frame.key_topic, statement):
        return False
    state.frame.is_about = statement
    state.pending = ConfirmIsAbout()
    return True


# ---------------------------------------------------------------------------
# Multi-item buckets
# ---------------------------------------------------------------------------

def _fill_main_ideas(state: FramingState, stage: Stage, message: str) -> bool:
    if is_negation(message) or not is_usable_item(message):
        return False
    if not add_main_idea(state, message):
        return False
    if len(state.frame.main_ideas) >= REQUIRED_MAIN_IDEAS:
        after_main_ideas_group(state)
    return True


def _fill_details(state: FramingState, stage: Stage, message: str) -> bool:
    index = stage.index or 0
    if is_negation(message) or not is_usable_item(message):
        return False
    if not add_detail(state, index, message):
        return False
    if len(state.frame.details_for(index)) >= REQUIRED_DETAILS:
        after_details_group(state, index)
    return True


def _fill_so_what(state: FramingState, stage: Stage, message: str) -> bool:
    if not has_meaningful_statement(message):
        return False
    state.frame.so_what = message
    after_so_what(state)
    return True


def _detail_revision(state: FramingState, message: str) -> PendingBase:
    """
    "change the second detail for main idea 1" names both positions.

    Without a Main Idea the first bucket is confirmed so the learner can
    pick from there; without a detail number the bucket asks which one.
    """
    frame = state.frame
    idea_index = parse_labelled_index(message, "idea", len(frame.main_ideas))
    if idea_index is None:
        return ConfirmDetails(idea_index=0)
    detail_index = parse_labelled_index(message, "detail", len(frame.details_for(idea_index)))
    if detail_index is None:
        return ClarifyDetailToRevise(idea_index=idea_index)
    return CollectDetailRevision(idea_index=idea_index, detail_index=detail_index)


def _fill_refine(state: FramingState, stage: Stage, message: str) -> bool:
    """A finished Frame only changes through an explicit revision request."""
    if not has_revision_intent(message):
        return False
    lowered = message.lower()
    if "so what" in lowered:
        state.pending = ReviseSoWhat()
        return True
    if "detail" in lowered:
        state.pending = _detail_revision(state, message)
        return True
    if "idea" in lowered:
        index = parse_labelled_index(message, "idea", len(state.frame.main_ideas))
        if index is None:
            index = parse_item_index(message, len(state.frame.main_ideas))
        state.pending = (
            CollectMainIdeaRevision(idea_index=index) if index is not None else ClarifyMainIdeaToRevise()
        )
        return True
    if "about" in lowered or "statement" in lowered:
        state.pending = ReviseIsAbout()
        return True
    return False


SLOT_FILLERS: dict[str, Callable[[FramingState, Stage, str], bool]] = {
    "keyTopic": _fill_key_topic,
    "isAbout": _fill_is_about,
    "mainIdeas": _fill_main_ideas,
    "details": _fill_details,
    "soWhat": _fill_so_what,
    "refine": _fill_refine,
}


def fill_slot(state: FramingState, raw_message: str, allow_stuck: bool = True) -> bool:
    """Apply one learner message to the open slot."""
    message = normalize(raw_message)
    if not message:
        return False

    stage = resolve_stage(state.frame)

    if stage.kind in ("keyTopic", "isAbout"):
        extracted = extract_topic_and_statement(message)
        if extracted is not None and apply_extraction(state, extracted):
            return True

    if allow_stuck and is_stuck(message):
        enter_stuck(state, stage)
        return True

    return SLOT_FILLERS[stage.kind](state, stage, message)
