"""
Pending Sub-Dialogue Models

A closed, discriminated union of the sub-dialogues that can sit on top of
the Frame: confirmations, revisions, optional extra items, stuck support,
the language switch, and the export offer. Exactly one is active at a time;
``None`` means ordinary slot-filling.

Resume payloads (``resume_question``, ``resume_stage``) are captured when a
detour starts and copied forward unchanged until it ends.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class PendingBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Is-About

class ConfirmIsAbout(PendingBase):
    kind: Literal["confirmIsAbout"] = "confirmIsAbout"


class ReviseIsAbout(PendingBase):
    kind: Literal["reviseIsAbout"] = "reviseIsAbout"


# Main Ideas

class OfferThirdMainIdea(PendingBase):
    kind: Literal["offerThirdMainIdea"] = "offerThirdMainIdea"


class CollectThirdMainIdea(PendingBase):
    kind: Literal["collectThirdMainIdea"] = "collectThirdMainIdea"


class ConfirmMainIdeas(PendingBase):
    kind: Literal["confirmMainIdeas"] = "confirmMainIdeas"


class ClarifyMainIdeaToRevise(PendingBase):
    kind: Literal["clarifyMainIdeaToRevise"] = "clarifyMainIdeaToRevise"


class CollectMainIdeaRevision(PendingBase):
    kind: Literal["collectMainIdeaRevision"] = "collectMainIdeaRevision"
    idea_index: int = Field(ge=0, description="Zero-based Main Idea being revised")


# Details (scoped to one Main Idea)

class OfferThirdDetail(PendingBase):
    kind: Literal["offerThirdDetail"] = "offerThirdDetail"
    idea_index: int = Field(ge=0)


class CollectThirdDetail(PendingBase):
    kind: Literal["collectThirdDetail"] = "collectThirdDetail"
    idea_index: int = Field(ge=0)


class ConfirmDetails(PendingBase):
    kind: Literal["confirmDetails"] = "confirmDetails"
    idea_index: int = Field(ge=0)


class ClarifyDetailToRevise(PendingBase):
    kind: Literal["clarifyDetailToRevise"] = "clarifyDetailToRevise"
    idea_index: int = Field(ge=0)


class CollectDetailRevision(PendingBase):
    kind: Literal["collectDetailRevision"] = "collectDetailRevision"
    idea_index: int = Field(ge=0)
    detail_index: int = Field(ge=0)


# So What

class OfferMoreSoWhat(PendingBase):
    kind: Literal["offerMoreSoWhat"] = "offerMoreSoWhat"


class CollectMoreSoWhat(PendingBase):
    kind: Literal["collectMoreSoWhat"] = "collectMoreSoWhat"


class ConfirmSoWhat(PendingBase):
    kind: Literal["confirmSoWhat"] = "confirmSoWhat"


class ReviseSoWhat(PendingBase):
    kind: Literal["reviseSoWhat"] = "reviseSoWhat"


# Stuck support

class StuckBase(PendingBase):
    resume_question: str = Field(description="Question that was open when the learner got stuck")
    resume_stage: str = Field(description="Stage label captured at entry, e.g. 'details:1'")


class StuckConfirm(StuckBase):
    kind: Literal["stuckConfirm"] = "stuckConfirm"


class StuckMenu(StuckBase):
    kind: Literal["stuckMenu"] = "stuckMenu"


class StuckReask(StuckBase):
    kind: Literal["stuckReask"] = "stuckReask"


class StuckNudge(StuckBase):
    kind: Literal["stuckNudge"] = "stuckNudge"


class StuckMini(StuckBase):
    kind: Literal["stuckMini"] = "stuckMini"


class StuckSkip(StuckBase):
    kind: Literal["stuckSkip"] = "stuckSkip"


# Language

class ConfirmLanguageSwitch(PendingBase):
    kind: Literal["confirmLanguageSwitch"] = "confirmLanguageSwitch"
    code: str
    name: str
    dir: Literal["ltr", "rtl"] = "ltr"
    deferred_message: str = Field(default="", description="Learner message replayed after the decision")


# Export

class OfferExport(PendingBase):
    kind: Literal["offerExport"] = "offerExport"


class ChooseExportType(PendingBase):
    kind: Literal["chooseExportType"] = "chooseExportType"


Pending = Annotated[
    Union[
        ConfirmIsAbout,
        ReviseIsAbout,
        OfferThirdMainIdea,
        CollectThirdMainIdea,
        ConfirmMainIdeas,
        ClarifyMainIdeaToRevise,
        CollectMainIdeaRevision,
        OfferThirdDetail,
        CollectThirdDetail,
        ConfirmDetails,
        ClarifyDetailToRevise,
        CollectDetailRevision,
        OfferMoreSoWhat,
        CollectMoreSoWhat,
        ConfirmSoWhat,
        ReviseSoWhat,
        StuckConfirm,
        StuckMenu,
        StuckReask,
        StuckNudge,
        StuckMini,
        StuckSkip,
        ConfirmLanguageSwitch,
        OfferExport,
        ChooseExportType,
    ],
    Field(discriminator="kind"),
]

PENDING_ADAPTER: TypeAdapter[Pending] = TypeAdapter(Pending)


def parse_pending(raw: object) -> Optional[PendingBase]:
    """Validate a pending document; raises pydantic.ValidationError."""
    if raw is None:
        return None
    return PENDING_ADAPTER.validate_python(raw)
