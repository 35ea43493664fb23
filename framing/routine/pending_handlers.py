"""
Pending Sub-Machine

One handler per Pending state. While a Pending is active its handler owns
the turn; ordinary slot-filling only runs again once it clears. Stuck-support
states copy their resume payload forward untouched so the learner always
returns to the question that was open when the detour began.
"""

import logging
from typing import Callable, Optional

from framing.exceptions import StateValidationError
from framing.models.frame import MAX_DETAILS, MAX_MAIN_IDEAS
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
    StuckBase,
    StuckConfirm,
    StuckMenu,
    StuckMini,
    StuckNudge,
    StuckReask,
    StuckSkip,
)
from framing.models.session_state import FramingState, LanguageSettings, TOPIC_LOCK_GROUP
from framing.routine.slots import (
    MAIN_IDEAS_GROUP,
    SO_WHAT_GROUP,
    add_detail,
    add_main_idea,
    append_so_what_sentence,
    details_group,
    fill_slot,
)
from framing.routine.sufficiency import (
    has_meaningful_statement,
    is_instructionally_sufficient,
    is_usable_item,
)
from framing.routine.text import (
    clean_statement,
    extract_topic_and_statement,
    has_revision_intent,
    is_affirmation,
    is_negation,
    is_stuck,
    normalize,
    parse_item_index,
    starts_with_affirmation,
    strip_affirmation,
)

logger = logging.getLogger("framing.routine")

BARE_REVISION_MAX_WORDS = 4

STUCK_MENU_KEYWORDS = {
    "again": StuckReask, "repeat": StuckReask, "question": StuckReask,
    "hint": StuckNudge, "nudge": StuckNudge, "clue": StuckNudge,
    "example": StuckMini, "model": StuckMini, "show": StuckMini,
    "time": StuckSkip, "think": StuckSkip, "moment": StuckSkip, "wait": StuckSkip,
}
STUCK_MENU_ORDER = (StuckReask, StuckNudge, StuckMini, StuckSkip)
STUCK_ESCALATION = {
    "stuckReask": StuckNudge,
    "stuckNudge": StuckMini,
    "stuckMini": StuckSkip,
    "stuckSkip": StuckSkip,
}

EXPORT_KEYWORDS = {
    "text": "text", "copy": "text", "save": "text", "txt": "text",
    "print": "print", "printable": "print", "pdf": "print", "page": "print",
}


def _is_bare_revision(message: str) -> bool:
    """"no" / "revise" / "change it" with no replacement text."""
    if is_negation(message):
        return True
    return has_revision_intent(message) and len(message.split()) <= BARE_REVISION_MAX_WORDS


def _confirms_group(message: str) -> bool:
    """"yes" or "yes, all 3 are right", but not "yes, change the second one"."""
    if has_revision_intent(message):
        return False
    return is_affirmation(message) or starts_with_affirmation(message)


def _asks_to_revise(message: str) -> bool:
    """"no, 2" or "change 2"; a bare number is not enough."""
    return is_negation(message) or has_revision_intent(message)


def _carry(cls: type[StuckBase], pending: StuckBase) -> StuckBase:
    return cls(resume_question=pending.resume_question, resume_stage=pending.resume_stage)


def _keyword_choice(message: str, keywords: dict) -> Optional[object]:
    for word in normalize(message).lower().replace(")", " ").split():
        choice = keywords.get(word.strip(".,!"))
        if choice is not None:
            return choice
    return None


# ---------------------------------------------------------------------------
# Is-About
# ---------------------------------------------------------------------------

def _lock_topic(state: FramingState) -> None:
    state.pending = None
    state.mark_confirmed(TOPIC_LOCK_GROUP)


def _statement_from(state: FramingState, message: str) -> Optional[str]:
    """A replacement Is-About statement, honouring the topic lock."""
    extracted = extract_topic_and_statement(message)
    if extracted is not None:
        if not state.is_topic_locked and is_instructionally_sufficient(extracted.topic, extracted.statement):
            state.frame.key_topic = extracted.topic
            return extracted.statement
        candidate = extracted.statement
    else:
        candidate = clean_statement(message)
    if is_instructionally_sufficient(state.frame.key_topic, candidate):
        return candidate
    return None


def handle_confirm_is_about(state: FramingState, pending: ConfirmIsAbout, message: str) -> None:
    if is_affirmation(message):
        _lock_topic(state)
        return
    if _is_bare_revision(message):
        state.pending = ReviseIsAbout()
        return
    statement = _statement_from(state, message)
    if statement is not None:
        state.frame.is_about = statement
        _lock_topic(state)


def handle_revise_is_about(state: FramingState, pending: ReviseIsAbout, message: str) -> None:
    if is_negation(message):
        state.pending = ConfirmIsAbout()
        return
    statement = _statement_from(state, message)
    if statement is not None:
        state.frame.is_about = statement
        state.pending = ConfirmIsAbout()


# ---------------------------------------------------------------------------
# Main Ideas
# ---------------------------------------------------------------------------

def handle_offer_third_main_idea(state: FramingState, pending: OfferThirdMainIdea, message: str) -> None:
    if not (is_affirmation(message) or starts_with_affirmation(message)):
        state.pending = ConfirmMainIdeas()
        return
    remainder = strip_affirmation(message)
    if is_usable_item(remainder) and add_main_idea(state, remainder):
        state.pending = ConfirmMainIdeas()
    else:
        state.pending = CollectThirdMainIdea()


def handle_collect_third_main_idea(state: FramingState, pending: CollectThirdMainIdea, message: str) -> None:
    if is_negation(message) or len(state.frame.main_ideas) >= MAX_MAIN_IDEAS:
        state.pending = ConfirmMainIdeas()
        return
    if is_usable_item(message) and add_main_idea(state, message):
        state.pending = ConfirmMainIdeas()


def handle_confirm_main_ideas(state: FramingState, pending: ConfirmMainIdeas, message: str) -> None:
    if _confirms_group(message):
        state.pending = None
        state.mark_confirmed(MAIN_IDEAS_GROUP)
        return
    if not _asks_to_revise(message):
        return
    index = parse_item_index(message, len(state.frame.main_ideas))
    state.pending = CollectMainIdeaRevision(idea_index=index) if index is not None else ClarifyMainIdeaToRevise()


def handle_clarify_main_idea(state: FramingState, pending: ClarifyMainIdeaToRevise, message: str) -> None:
    index = parse_item_index(message, len(state.frame.main_ideas))
    if index is not None:
        state.pending = CollectMainIdeaRevision(idea_index=index)
    elif is_negation(message):
        state.pending = ConfirmMainIdeas()


def handle_collect_main_idea_revision(state: FramingState, pending: CollectMainIdeaRevision, message: str) -> None:
    if is_negation(message):
        state.pending = ConfirmMainIdeas()
        return
    if is_usable_item(message):
        state.frame.set_main_idea(pending.idea_index, message)
        state.pending = ConfirmMainIdeas()


# ---------------------------------------------------------------------------
# Details
# ---------------------------------------------------------------------------

def handle_offer_third_detail(state: FramingState, pending: OfferThirdDetail, message: str) -> None:
    index = pending.idea_index
    if not (is_affirmation(message) or starts_with_affirmation(message)):
        state.pending = ConfirmDetails(idea_index=index)
        return
    remainder = strip_affirmation(message)
    if is_usable_item(remainder) and add_detail(state, index, remainder):
        state.pending = ConfirmDetails(idea_index=index)
    else:
        state.pending = CollectThirdDetail(idea_index=index)


def handle_collect_third_detail(state: FramingState, pending: CollectThirdDetail, message: str) -> None:
    index = pending.idea_index
    if is_negation(message) or len(state.frame.details_for(index)) >= MAX_DETAILS:
        state.pending = ConfirmDetails(idea_index=index)
        return
    if is_usable_item(message) and add_detail(state, index, message):
        state.pending = ConfirmDetails(idea_index=index)


def handle_confirm_details(state: FramingState, pending: ConfirmDetails, message: str) -> None:
    index = pending.idea_index
    if _confirms_group(message):
        state.pending = None
        state.mark_confirmed(details_group(index))
        return
    if not _asks_to_revise(message):
        return
    detail_index = parse_item_index(message, len(state.frame.details_for(index)))
    if detail_index is not None:
        state.pending = CollectDetailRevision(idea_index=index, detail_index=detail_index)
    else:
        state.pending = ClarifyDetailToRevise(idea_index=index)


def handle_clarify_detail(state: FramingState, pending: ClarifyDetailToRevise, message: str) -> None:
    index = pending.idea_index
    detail_index = parse_item_index(message, len(state.frame.details_for(index)))
    if detail_index is not None:
        state.pending = CollectDetailRevision(idea_index=index, detail_index=detail_index)
    elif is_negation(message):
        state.pending = ConfirmDetails(idea_index=index)


def handle_collect_detail_revision(state: FramingState, pending: CollectDetailRevision, message: str) -> None:
    if is_negation(message):
        state.pending = ConfirmDetails(idea_index=pending.idea_index)
        return
    if is_usable_item(message):
        state.frame.set_detail(pending.idea_index, pending.detail_index, message)
        state.pending = ConfirmDetails(idea_index=pending.idea_index)


# ---------------------------------------------------------------------------
# So What
# ---------------------------------------------------------------------------

def handle_offer_more_so_what(state: FramingState, pending: OfferMoreSoWhat, message: str) -> None:
    if not (is_affirmation(message) or starts_with_affirmation(message)):
        state.pending = ConfirmSoWhat()
        return
    remainder = strip_affirmation(message)
    if is_usable_item(remainder):
        append_so_what_sentence(state, remainder)
        state.pending = ConfirmSoWhat()
    else:
        state.pending = CollectMoreSoWhat()


def handle_collect_more_so_what(state: FramingState, pending: CollectMoreSoWhat, message: str) -> None:
    if is_negation(message):
        state.pending = ConfirmSoWhat()
        return
    if is_usable_item(message):
        append_so_what_sentence(state, message)
        state.pending = ConfirmSoWhat()


def handle_confirm_so_what(state: FramingState, pending: ConfirmSoWhat, message: str) -> None:
    if is_affirmation(message):
        state.pending = None
        state.mark_confirmed(SO_WHAT_GROUP)
        if state.frame.is_complete and not state.export_offered:
            state.export_offered = True
            state.pending = OfferExport()
        return
    if _is_bare_revision(message):
        state.pending = ReviseSoWhat()
        return
    if has_meaningful_statement(message):
        state.frame.so_what = message


def handle_revise_so_what(state: FramingState, pending: ReviseSoWhat, message: str) -> None:
    if is_negation(message):
        state.pending = ConfirmSoWhat()
        return
    if has_meaningful_statement(message):
        state.frame.so_what = message
        state.pending = ConfirmSoWhat()


# ---------------------------------------------------------------------------
# Stuck support
# ---------------------------------------------------------------------------

def _resume(state: FramingState, pending: StuckBase, message: str) -> None:
    """Leave the detour: try the message on the open slot, else re-ask."""
    state.pending = None
    if is_affirmation(message) or is_negation(message):
        state.pending = _carry(StuckReask, pending)
        return
    if not fill_slot(state, message, allow_stuck=False):
        state.pending = _carry(StuckReask, pending)


def handle_stuck_confirm(state: FramingState, pending: StuckConfirm, message: str) -> None:
    if is_affirmation(message) or is_stuck(message):
        state.pending = _carry(StuckMenu, pending)
        return
    _resume(state, pending, message)


def handle_stuck_menu(state: FramingState, pending: StuckMenu, message: str) -> None:
    index = parse_item_index(message, len(STUCK_MENU_ORDER))
    choice = STUCK_MENU_ORDER[index] if index is not None else _keyword_choice(message, STUCK_MENU_KEYWORDS)
    if choice is not None:
        state.pending = _carry(choice, pending)
    elif is_negation(message):
        state.pending = _carry(StuckReask, pending)


def handle_stuck_help(state: FramingState, pending: StuckBase, message: str) -> None:
    """Shared by reask / nudge / mini / skip: escalate or resume."""
    if is_stuck(message):
        state.pending = _carry(STUCK_ESCALATION[pending.kind], pending)
        return
    _resume(state, pending, message)


# ---------------------------------------------------------------------------
# Language switch
# ---------------------------------------------------------------------------

def handle_confirm_language_switch(state: FramingState, pending: ConfirmLanguageSwitch, message: str) -> None:
    if is_affirmation(message):
        state.language = LanguageSettings(code=pending.code, name=pending.name, dir=pending.dir, locked=True)
        logger.info(f"Language locked to {pending.code}")
    else:
        state.language = state.language.model_copy(update={"locked": True})
        logger.info(f"Language switch declined, keeping {state.language.code}")

    state.pending = None
    if pending.deferred_message:
        fill_slot(state, pending.deferred_message)


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def handle_offer_export(state: FramingState, pending: OfferExport, message: str) -> None:
    state.pending = ChooseExportType() if is_affirmation(message) else None


def handle_choose_export_type(state: FramingState, pending: ChooseExportType, message: str) -> None:
    index = parse_item_index(message, 2)
    intent = ("text", "print")[index] if index is not None else _keyword_choice(message, EXPORT_KEYWORDS)
    if intent is not None:
        state.export_intent = intent
        state.pending = None
    elif is_negation(message):
        state.pending = None


PENDING_HANDLERS: dict[str, Callable[[FramingState, PendingBase, str], None]] = {
    "confirmIsAbout": handle_confirm_is_about,
    "reviseIsAbout": handle_revise_is_about,
    "offerThirdMainIdea": handle_offer_third_main_idea,
    "collectThirdMainIdea": handle_collect_third_main_idea,
    "confirmMainIdeas": handle_confirm_main_ideas,
    "clarifyMainIdeaToRevise": handle_clarify_main_idea,
    "collectMainIdeaRevision": handle_collect_main_idea_revision,
    "offerThirdDetail": handle_offer_third_detail,
    "collectThirdDetail": handle_collect_third_detail,
    "confirmDetails": handle_confirm_details,
    "clarifyDetailToRevise": handle_clarify_detail,
    "collectDetailRevision": handle_collect_detail_revision,
    "offerMoreSoWhat": handle_offer_more_so_what,
    "collectMoreSoWhat": handle_collect_more_so_what,
    "confirmSoWhat": handle_confirm_so_what,
    "reviseSoWhat": handle_revise_so_what,
    "stuckConfirm": handle_stuck_confirm,
    "stuckMenu": handle_stuck_menu,
    "stuckReask": handle_stuck_help,
    "stuckNudge": handle_stuck_help,
    "stuckMini": handle_stuck_help,
    "stuckSkip": handle_stuck_help,
    "confirmLanguageSwitch": handle_confirm_language_switch,
    "offerExport": handle_offer_export,
    "chooseExportType": handle_choose_export_type,
}


def handle_pending(state: FramingState, message: str) -> None:
    pending = state.pending
    handler = PENDING_HANDLERS.get(pending.kind)
    if handler is None:
        raise StateValidationError("pending", f"no handler for '{pending.kind}'")
    handler(state, pending, message)
