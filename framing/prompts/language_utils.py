"""Language instruction helpers for the rephrasing prompts."""

from typing import Optional

GRADE_BANDS = (
    (5, "elementary school"),
    (8, "middle school"),
    (12, "high school"),
)


def get_reply_language_instruction(language_name: str, direction: str = "ltr") -> str:
    """Return prompt instruction for the language of the translated question."""
    if direction == "rtl":
        return (
            f"Write the question in {language_name} using its native right-to-left script. "
            "Use the language's own question mark if it has one."
        )
    if language_name.lower() == "english":
        return "Write the question in plain English."
    return (
        f"Write the question in natural, simple {language_name}. "
        "Use the language's usual punctuation for questions."
    )


def get_grade_label(grade: Optional[int]) -> str:
    """Audience label for the tone prompt."""
    if grade is None:
        return "middle or high school"
    for upper, label in GRADE_BANDS:
        if grade <= upper:
            return label
    return "high school"
