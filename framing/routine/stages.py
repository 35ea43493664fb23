"""
Stage Resolver

Maps a Frame to the one slot that is currently open. The order is linear
and one-way: keyTopic -> isAbout -> mainIdeas -> details:i -> soWhat -> refine.
"""

from typing import Literal, NamedTuple, Optional

from framing.models.frame import Frame, REQUIRED_DETAILS, REQUIRED_MAIN_IDEAS

StageKind = Literal["keyTopic", "isAbout", "mainIdeas", "details", "soWhat", "refine"]

STAGE_ORDER: tuple[StageKind, ...] = ("keyTopic", "isAbout", "mainIdeas", "details", "soWhat", "refine")


class Stage(NamedTuple):
    kind: StageKind
    index: Optional[int] = None

    @property
    def label(self) -> str:
        return f"{self.kind}:{self.index}" if self.kind == "details" else self.kind

    @property
    def position(self) -> tuple[int, int]:
        """Sort key: later stages compare greater."""
        return STAGE_ORDER.index(self.kind), self.index or 0


def resolve_stage(frame: Frame) -> Stage:
    if not frame.key_topic:
        return Stage("keyTopic")
    if not frame.is_about:
        return Stage("isAbout")
    if len(frame.main_ideas) < REQUIRED_MAIN_IDEAS:
        return Stage("mainIdeas")
    for index in range(len(frame.main_ideas)):
        bucket = frame.details[index] if index < len(frame.details) else []
        if len(bucket) < REQUIRED_DETAILS:
            return Stage("details", index)
    if not frame.so_what:
        return Stage("soWhat")
    return Stage("refine")


def parse_stage_label(label: str) -> Optional[Stage]:
    """Inverse of Stage.label; None for anything unrecognised."""
    kind, _, index = (label or "").partition(":")
    if kind not in STAGE_ORDER:
        return None
    if kind == "details":
        if not index.isdigit():
            return None
        return Stage("details", int(index))
    return Stage(kind)
