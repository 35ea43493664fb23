"""
Prompt Template System

Reusable prompt templates with variable interpolation and validation,
plus the two rephrasing prompts the routine uses.
"""

from typing import Any, Optional
from string import Formatter

from framing.exceptions import PromptTemplateError


class PromptTemplate:
    """Reusable template for generating prompts with {variable} placeholders."""

    def __init__(
        self,
        template: str,
        name: Optional[str] = None,
        defaults: Optional[dict[str, Any]] = None,
    ):
        self.template = template.strip()
        self.name = name or "unnamed"
        self.defaults = defaults or {}
        self.required_vars = self._extract_variables()

    def _extract_variables(self) -> set[str]:
        formatter = Formatter()
        variables = set()
        for _, field_name, _, _ in formatter.parse(self.template):
            if field_name is not None:
                base_name = field_name.split(".")[0].split("[")[0]
                if base_name:
                    variables.add(base_name)
        return variables

    def render(self, **kwargs: Any) -> str:
        values = {**self.defaults, **kwargs}
        missing = self.required_vars - set(values.keys())
        if missing:
            raise PromptTemplateError(template_name=self.name, missing_vars=sorted(missing))
        try:
            return self.template.format(**values)
        except KeyError as e:
            raise PromptTemplateError(template_name=self.name, missing_vars=[str(e)]) from e

    def partial(self, **kwargs: Any) -> "PromptTemplate":
        new_defaults = {**self.defaults, **kwargs}
        return PromptTemplate(template=self.template, name=f"{self.name}_partial", defaults=new_defaults)

    def __repr__(self) -> str:
        return f"PromptTemplate(name='{self.name}', vars={self.required_vars})"


# Tone Template

TONE_TEMPLATE = PromptTemplate(
    """You are a warm writing coach helping a {grade_label} student build a Frame
(Key Topic, Is About, Main Ideas, Details, So What) for their writing.

Rephrase the question below so it sounds friendly and encouraging.

Question: "{question}"
Key Topic: "{key_topic}"

Rules:
- Keep the exact meaning. Do not add, remove, or answer anything.
- Output exactly ONE question ending in a single question mark.
- No explanations, no lists, no examples, no praise sentences before the question.
- At most {max_chars} characters.
- Keep any "(yes or no)" or numbered choices exactly as given.

Respond with JSON:
{{
    "question": "<the rephrased question>"
}}""",
    name="tone",
    defaults={"key_topic": "", "grade_label": "middle or high school"},
)


# Translation Template

TRANSLATION_TEMPLATE = PromptTemplate(
    """Translate this question for a student into {language_name}.

Question: "{question}"

{language_instruction}

Rules:
- Translate only. Do not add explanations, greetings, or a second question.
- Keep the learner's own words (their topic and ideas) recognizable.
- Keep numbered choices like "1)" and "2)" as they are.
- The result must be exactly ONE question with a single question mark.

Respond with JSON:
{{
    "translated_question": "<the question in {language_name}>"
}}""",
    name="translation",
)
