"""Unit tests for framing/routine/stages.py — the Stage Resolver."""

from framing.models.frame import Frame
from framing.routine.stages import Stage, parse_stage_label, resolve_stage


def make_frame(**overrides) -> Frame:
    return Frame(**overrides)


class TestResolveStage:
    def test_empty_frame_asks_for_key_topic(self):
        assert resolve_stage(make_frame()) == Stage("keyTopic")

    def test_is_about_after_topic(self):
        assert resolve_stage(make_frame(key_topic="Volcanoes")) == Stage("isAbout")

    def test_main_ideas_until_two(self):
        frame = make_frame(key_topic="Volcanoes", is_about="how volcanoes erupt", main_ideas=["Magma rises"])
        assert resolve_stage(frame) == Stage("mainIdeas")

    def test_first_short_detail_bucket(self):
        frame = make_frame(
            key_topic="Volcanoes",
            is_about="how volcanoes erupt",
            main_ideas=["Magma rises", "Pressure builds"],
            details=[["Mantle heat melts rock", "Magma is lighter than rock"], ["Gas is trapped"]],
        )
        assert resolve_stage(frame) == Stage("details", 1)

    def test_so_what_after_all_details(self):
        frame = make_frame(
            key_topic="Volcanoes",
            is_about="how volcanoes erupt",
            main_ideas=["Magma rises", "Pressure builds"],
            details=[["a1", "a2"], ["b1", "b2"]],
        )
        assert resolve_stage(frame) == Stage("soWhat")

    def test_refine_when_complete(self):
        frame = make_frame(
            key_topic="Volcanoes",
            is_about="how volcanoes erupt",
            main_ideas=["Magma rises", "Pressure builds"],
            details=[["a1", "a2"], ["b1", "b2"]],
            so_what="Eruptions shape the land people live on.",
        )
        assert resolve_stage(frame) == Stage("refine")

    def test_does_not_modify_frame(self):
        frame = make_frame(key_topic="Volcanoes", is_about="how volcanoes erupt", main_ideas=["a", "b"])
        before = frame.model_dump()
        resolve_stage(frame)
        assert frame.model_dump() == before


class TestStageLabels:
    def test_label(self):
        assert Stage("details", 1).label == "details:1"
        assert Stage("soWhat").label == "soWhat"

    def test_parse_round_trip(self):
        for stage in (Stage("keyTopic"), Stage("details", 2), Stage("refine")):
            assert parse_stage_label(stage.label) == stage

    def test_parse_rejects_garbage(self):
        assert parse_stage_label("details:x") is None
        assert parse_stage_label("bogus") is None
        assert parse_stage_label("") is None

    def test_position_orders_stages(self):
        assert Stage("keyTopic").position < Stage("details", 0).position < Stage("details", 1).position
        assert Stage("details", 2).position < Stage("soWhat").position
