"""Unit tests for framing/routine/router.py — question routing and the single-question rule."""

from types import SimpleNamespace

import pytest

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
    ReviseIsAbout,
    ReviseSoWhat,
    StuckConfirm,
    StuckMenu,
    StuckMini,
    StuckNudge,
    StuckReask,
    StuckSkip,
)
from framing.routine.router import (
    KEY_TOPIC_QUESTION,
    MAX_REPLY_CHARS,
    PENDING_QUESTIONS,
    count_questions,
    enforce_single_question,
    looks_like_explanation,
    next_question,
    pending_question,
)

TOPIC = "The Cuban Missile Crisis"
RESUME = "What is one Main Idea about The Cuban Missile Crisis?"


def make_frame(**overrides) -> Frame:
    defaults = dict(
        key_topic=TOPIC,
        is_about="how the US and USSR almost went to nuclear war in 1962",
        main_ideas=["Soviet missiles were placed in Cuba", "Kennedy chose a naval blockade"],
        details=[
            ["U-2 planes photographed the launch sites", "The missiles could reach most US cities"],
            ["Ships were stopped at sea", "Khrushchev agreed to remove the missiles"],
        ],
        so_what="The crisis shows how close the world came to nuclear war.",
    )
    defaults.update(overrides)
    return Frame(**defaults)


ALL_PENDING = [
    ConfirmIsAbout(),
    ReviseIsAbout(),
    OfferThirdMainIdea(),
    CollectThirdMainIdea(),
    ConfirmMainIdeas(),
    ClarifyMainIdeaToRevise(),
    CollectMainIdeaRevision(idea_index=1),
    OfferThirdDetail(idea_index=0),
    CollectThirdDetail(idea_index=1),
    ConfirmDetails(idea_index=0),
    ClarifyDetailToRevise(idea_index=1),
    CollectDetailRevision(idea_index=1, detail_index=0),
    OfferMoreSoWhat(),
    CollectMoreSoWhat(),
    ConfirmSoWhat(),
    ReviseSoWhat(),
    StuckConfirm(resume_question=RESUME, resume_stage="mainIdeas"),
    StuckMenu(resume_question=RESUME, resume_stage="mainIdeas"),
    StuckReask(resume_question=RESUME, resume_stage="mainIdeas"),
    StuckNudge(resume_question=RESUME, resume_stage="details:1"),
    StuckMini(resume_question=RESUME, resume_stage="isAbout"),
    StuckSkip(resume_question=RESUME, resume_stage="mainIdeas"),
    ConfirmLanguageSwitch(code="ar", name="Arabic", dir="rtl"),
    OfferExport(),
    ChooseExportType(),
]


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------

class TestEnforceSingleQuestion:
    def test_keeps_first_question(self):
        assert enforce_single_question("What is it? And why?") == "What is it?"

    def test_appends_question_mark(self):
        assert enforce_single_question("Tell me your topic.") == "Tell me your topic?"

    def test_empty_uses_fallback(self):
        assert enforce_single_question("") == KEY_TOPIC_QUESTION
        assert enforce_single_question(None, fallback="Why?") == "Why?"

    def test_strips_speaker_label(self):
        assert enforce_single_question("Tutor: What is your topic?") == "What is your topic?"

    def test_caps_length(self):
        out = enforce_single_question("a" * 500 + "?")
        assert len(out) == MAX_REPLY_CHARS
        assert out.endswith("?")
        assert count_questions(out) == 1

    def test_arabic_question_mark(self):
        assert enforce_single_question("ما هو موضوعك؟") == "ما هو موضوعك؟"


class TestLooksLikeExplanation:
    @pytest.mark.parametrize("text", [
        "Here's a hint about your topic?",
        "In summary, the crisis ended?",
        "The crisis ended. Kennedy won. Why?",
        "Steps:\n1) think",
    ])
    def test_explanations(self, text):
        assert looks_like_explanation(text) is True

    def test_plain_question(self):
        assert looks_like_explanation("What is your Key Topic (2–5 words)?") is False


# ---------------------------------------------------------------------------
# Stage questions
# ---------------------------------------------------------------------------

class TestStageQuestions:
    def test_key_topic_question(self):
        assert next_question(Frame(), None) == KEY_TOPIC_QUESTION

    def test_is_about_names_topic(self):
        question = next_question(Frame(key_topic=TOPIC), None)
        assert TOPIC in question

    def test_second_main_idea_restates_topic_not_idea(self):
        frame = make_frame(main_ideas=["Castro took power in Cuba"], details=[], so_what="")
        question = next_question(frame, None)
        assert "second Main Idea" in question
        assert TOPIC in question
        assert "Castro" not in question

    def test_detail_question_restates_topic(self):
        frame = make_frame(details=[["U-2 planes photographed the launch sites"], []], so_what="")
        question = next_question(frame, None)
        assert TOPIC in question
        assert "Soviet missiles were placed in Cuba" in question

    def test_so_what_question(self):
        question = next_question(make_frame(so_what=""), None)
        assert TOPIC in question
        assert "why" in question.lower()

    def test_same_frame_same_wording(self):
        frame = make_frame(main_ideas=[], details=[], so_what="")
        assert next_question(frame, None) == next_question(frame.model_copy(deep=True), None)


# ---------------------------------------------------------------------------
# Pending questions
# ---------------------------------------------------------------------------

class TestPendingQuestions:
    def test_every_kind_has_a_question(self):
        kinds = {pending.kind for pending in ALL_PENDING}
        assert kinds == set(PENDING_QUESTIONS)

    @pytest.mark.parametrize("pending", ALL_PENDING, ids=lambda p: p.kind)
    def test_exactly_one_question(self, pending):
        question = next_question(make_frame(), pending)
        assert count_questions(question) == 1
        assert question[-1] in "?？؟"
        assert len(question) <= MAX_REPLY_CHARS

    def test_confirm_is_about_restates_statement(self):
        question = next_question(make_frame(), ConfirmIsAbout())
        assert question == (
            f"{TOPIC} is about how the US and USSR almost went to nuclear war in 1962. Correct, or revise?"
        )

    def test_reask_repeats_resume_question_verbatim(self):
        assert next_question(make_frame(), StuckReask(resume_question=RESUME, resume_stage="mainIdeas")) == RESUME

    def test_skip_wraps_resume_question(self):
        question = next_question(make_frame(), StuckSkip(resume_question=RESUME, resume_stage="mainIdeas"))
        assert question == "Whenever you're ready, what is one Main Idea about The Cuban Missile Crisis?"

    def test_language_switch_names_language(self):
        question = next_question(make_frame(), ConfirmLanguageSwitch(code="es", name="Spanish"))
        assert question == "You're writing in Spanish. Continue in Spanish (yes or no)?"

    def test_unknown_kind_raises(self):
        with pytest.raises(StateValidationError):
            pending_question(make_frame(), SimpleNamespace(kind="bogus"))
