"""Unit tests for framing/routine/slots.py — ordinary slot filling."""

from framing.models.frame import Frame
from framing.models.pending import (
    ClarifyDetailToRevise,
    ClarifyMainIdeaToRevise,
    CollectDetailRevision,
    CollectMainIdeaRevision,
    ConfirmDetails,
    ConfirmIsAbout,
    ConfirmMainIdeas,
    OfferMoreSoWhat,
    OfferThirdDetail,
    OfferThirdMainIdea,
    ReviseIsAbout,
    ReviseSoWhat,
    StuckConfirm,
)
from framing.models.session_state import FramingState
from framing.routine.router import next_question
from framing.routine.slots import apply_extraction, fill_slot
from framing.routine.text import TopicStatement

TOPIC = "The Cuban Missile Crisis"
IS_ABOUT = "how the US and USSR almost went to nuclear war in 1962"


def locked_state(**frame_fields) -> FramingState:
    """Topic and Is-About confirmed; remaining slots from kwargs."""
    frame = Frame(key_topic=TOPIC, is_about=IS_ABOUT, **frame_fields)
    return FramingState(frame=frame, confirmed=["isAbout"])


def complete_state() -> FramingState:
    return locked_state(
        main_ideas=["Soviet missiles were placed in Cuba", "Kennedy chose a naval blockade"],
        details=[
            ["U-2 planes photographed the launch sites", "The missiles could reach most US cities"],
            ["Ships were stopped at sea", "Khrushchev agreed to remove the missiles"],
        ],
        so_what="The crisis shows how close the world came to nuclear war.",
    )


# ---------------------------------------------------------------------------
# Key Topic / Is-About
# ---------------------------------------------------------------------------

class TestKeyTopic:
    def test_plain_label(self):
        state = FramingState()
        assert fill_slot(state, "The Water Cycle") is True
        assert state.frame.key_topic == "The Water Cycle"
        assert state.pending is None

    def test_prefix_is_removed(self):
        state = FramingState()
        fill_slot(state, "My topic is volcanoes")
        assert state.frame.key_topic == "volcanoes"

    def test_yes_no_not_stored(self):
        for message in ("yes", "no", "ok"):
            state = FramingState()
            assert fill_slot(state, message) is False
            assert state.frame.key_topic == ""

    def test_generic_label_rejected(self):
        state = FramingState()
        assert fill_slot(state, "history") is False
        assert state.frame.key_topic == ""


class TestCombinedExtraction:
    def test_fills_both_slots_and_confirms(self):
        state = FramingState()
        fill_slot(state, f"{TOPIC} is about {IS_ABOUT}")
        assert state.frame.key_topic == TOPIC
        assert state.frame.is_about == IS_ABOUT
        assert isinstance(state.pending, ConfirmIsAbout)

    def test_weak_statement_keeps_topic_only(self):
        state = FramingState()
        fill_slot(state, "Volcanoes is about lava")
        assert state.frame.key_topic == "Volcanoes"
        assert state.frame.is_about == ""
        assert state.pending is None

    def test_replaces_unlocked_topic(self):
        state = FramingState(frame=Frame(key_topic="Cuba"))
        fill_slot(state, f"{TOPIC} is about {IS_ABOUT}")
        assert state.frame.key_topic == TOPIC
        assert state.frame.is_about == IS_ABOUT

    def test_locked_topic_is_never_replaced(self):
        state = locked_state()
        assert apply_extraction(state, TopicStatement("The Space Race", "how the two superpowers competed in space")) is False
        assert state.frame.key_topic == TOPIC


class TestIsAbout:
    def test_sufficient_statement(self):
        state = FramingState(frame=Frame(key_topic=TOPIC))
        fill_slot(state, "It is about how the world almost had a nuclear war")
        assert state.frame.is_about == "how the world almost had a nuclear war"
        assert isinstance(state.pending, ConfirmIsAbout)

    def test_vague_statement_rejected(self):
        state = FramingState(frame=Frame(key_topic=TOPIC))
        assert fill_slot(state, "stuff") is False
        assert state.frame.is_about == ""


# ---------------------------------------------------------------------------
# Main Ideas / Details / So What
# ---------------------------------------------------------------------------

class TestMainIdeas:
    def test_first_idea_has_no_pending(self):
        state = locked_state()
        fill_slot(state, "Castro took power in Cuba")
        assert state.frame.main_ideas == ["Castro took power in Cuba"]
        assert state.frame.details == [[]]
        assert state.pending is None

    def test_second_idea_offers_third_once(self):
        state = locked_state(main_ideas=["Soviet missiles were placed in Cuba"])
        fill_slot(state, "Kennedy chose a naval blockade")
        assert isinstance(state.pending, OfferThirdMainIdea)
        assert state.offered == ["mainIdeas"]

    def test_second_idea_after_offer_goes_to_confirm(self):
        state = locked_state(main_ideas=["Soviet missiles were placed in Cuba"])
        state.offered = ["mainIdeas"]
        fill_slot(state, "Kennedy chose a naval blockade")
        assert isinstance(state.pending, ConfirmMainIdeas)

    def test_negation_is_not_stored(self):
        state = locked_state(main_ideas=["Soviet missiles were placed in Cuba"])
        assert fill_slot(state, "no") is False
        assert len(state.frame.main_ideas) == 1
        assert state.pending is None

    def test_duplicate_is_not_stored(self):
        state = locked_state(main_ideas=["Soviet missiles were placed in Cuba"])
        assert fill_slot(state, "soviet missiles were placed in Cuba.") is False
        assert len(state.frame.main_ideas) == 1


class TestDetails:
    def test_detail_goes_to_open_bucket(self):
        state = locked_state(main_ideas=["Soviet missiles were placed in Cuba", "Kennedy chose a naval blockade"])
        fill_slot(state, "U-2 planes photographed the launch sites")
        assert state.frame.details == [["U-2 planes photographed the launch sites"], []]

    def test_second_detail_offers_third(self):
        state = locked_state(
            main_ideas=["Soviet missiles were placed in Cuba", "Kennedy chose a naval blockade"],
            details=[["U-2 planes photographed the launch sites"], []],
        )
        fill_slot(state, "The missiles could reach most US cities")
        assert state.pending == OfferThirdDetail(idea_index=0)
        assert "details:0" in state.offered


class TestSoWhat:
    def test_statement_offers_more(self):
        state = complete_state()
        state.frame.so_what = ""
        fill_slot(state, "The crisis shows how close the world came to nuclear war.")
        assert state.frame.so_what == "The crisis shows how close the world came to nuclear war."
        assert isinstance(state.pending, OfferMoreSoWhat)

    def test_vague_statement_rejected(self):
        state = complete_state()
        state.frame.so_what = ""
        assert fill_slot(state, "it matters") is False
        assert state.pending is None


# ---------------------------------------------------------------------------
# Stuck detection and refine
# ---------------------------------------------------------------------------

class TestStuck:
    def test_stuck_captures_open_question(self):
        state = locked_state()
        expected = next_question(state.frame, None)
        fill_slot(state, "idk")
        assert isinstance(state.pending, StuckConfirm)
        assert state.pending.resume_question == expected
        assert state.pending.resume_stage == "mainIdeas"

    def test_stuck_can_be_disabled(self):
        state = locked_state()
        assert fill_slot(state, "idk", allow_stuck=False) is False
        assert state.pending is None

    def test_stuck_at_details_records_index(self):
        state = locked_state(
            main_ideas=["Soviet missiles were placed in Cuba", "Kennedy chose a naval blockade"],
            details=[["a", "b"], []],
        )
        fill_slot(state, "I'm confused")
        assert state.pending.resume_stage == "details:1"

    def test_content_with_stuck_word_is_stored(self):
        for message in ("Soldiers were confused", "Not sure of Soviet intentions"):
            state = locked_state()
            assert fill_slot(state, message) is True
            assert state.frame.main_ideas == [message]
            assert state.pending is None


class TestRefine:
    def test_plain_message_changes_nothing(self):
        state = complete_state()
        before = state.model_copy(deep=True)
        assert fill_slot(state, "Thanks for the help") is False
        assert state == before

    def test_numbered_main_idea_revision(self):
        state = complete_state()
        fill_slot(state, "I want to change main idea 2")
        assert state.pending == CollectMainIdeaRevision(idea_index=1)

    def test_unnumbered_main_idea_revision(self):
        state = complete_state()
        fill_slot(state, "can I change a main idea")
        assert isinstance(state.pending, ClarifyMainIdeaToRevise)

    def test_so_what_revision(self):
        state = complete_state()
        fill_slot(state, "revise the so what")
        assert isinstance(state.pending, ReviseSoWhat)

    def test_is_about_revision(self):
        state = complete_state()
        fill_slot(state, "change what it is about")
        assert isinstance(state.pending, ReviseIsAbout)

    def test_detail_revision_names_idea_and_detail(self):
        state = complete_state()
        fill_slot(state, "change the second detail for main idea 1")
        assert state.pending == CollectDetailRevision(idea_index=0, detail_index=1)

    def test_detail_revision_with_idea_ordinal(self):
        state = complete_state()
        fill_slot(state, "fix the first detail of the second main idea")
        assert state.pending == CollectDetailRevision(idea_index=1, detail_index=0)

    def test_detail_revision_without_detail_number(self):
        state = complete_state()
        fill_slot(state, "I want to change a detail in idea 2")
        assert state.pending == ClarifyDetailToRevise(idea_index=1)

    def test_detail_revision_without_idea_starts_with_first_bucket(self):
        state = complete_state()
        fill_slot(state, "can I change a detail")
        assert state.pending == ConfirmDetails(idea_index=0)
