"""
Frame Model

The learner's in-progress artifact: Key Topic, Is-About statement, Main
Ideas, Supporting Details per Main Idea, and the closing So What.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

REQUIRED_MAIN_IDEAS = 2
MAX_MAIN_IDEAS = 3
REQUIRED_DETAILS = 2
MAX_DETAILS = 3


class Frame(BaseModel):
    """Serializable record of progress through the Framing Routine."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key_topic: str = Field(default="", description="2-5 word label for the topic")
    is_about: str = Field(default="", description="What the topic is about, in one phrase")
    main_ideas: list[str] = Field(default_factory=list, description="2 required, 3 optional")
    details: list[list[str]] = Field(
        default_factory=list,
        description="Supporting details, index-aligned with main_ideas",
    )
    so_what: str = Field(default="", description="Why the topic matters")

    @model_validator(mode="after")
    def _align_detail_buckets(self) -> "Frame":
        self.ensure_detail_buckets()
        return self

    @property
    def is_complete(self) -> bool:
        return not self.missing_slots()

    def missing_slots(self) -> list[str]:
        """Wire names of the slots still short of their minimum."""
        missing = []
        if not self.key_topic:
            missing.append("keyTopic")
        if not self.is_about:
            missing.append("isAbout")
        if len(self.main_ideas) < REQUIRED_MAIN_IDEAS:
            missing.append("mainIdeas")
        missing.extend(
            f"details[{i}]" for i in range(len(self.main_ideas))
            if len(self.details[i]) < REQUIRED_DETAILS
        )
        if not self.so_what:
            missing.append("soWhat")
        return missing

    def ensure_detail_buckets(self) -> None:
        """Keep len(details) == len(main_ideas), padding or trimming."""
        if len(self.details) < len(self.main_ideas):
            self.details.extend([] for _ in range(len(self.main_ideas) - len(self.details)))
        elif len(self.details) > len(self.main_ideas):
            del self.details[len(self.main_ideas):]

    def add_main_idea(self, text: str) -> None:
        self.main_ideas.append(text)
        self.ensure_detail_buckets()

    def set_main_idea(self, index: int, text: str) -> None:
        self.main_ideas[index] = text
        self.ensure_detail_buckets()

    def details_for(self, index: int) -> list[str]:
        self.ensure_detail_buckets()
        return self.details[index]

    def add_detail(self, index: int, text: str) -> None:
        self.details_for(index).append(text)

    def set_detail(self, index: int, detail_index: int, text: str) -> None:
        self.details_for(index)[detail_index] = text
