"""
Questionnaire question models.
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, model_validator


AnswerValue = Union[bool, int, float, str, List[str]]
AnswerMap = Dict[str, AnswerValue]


class QuestionType(str, Enum):
    """Input control kinds a question can be rendered with."""
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    MULTISELECT = "multiselect"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    RANGE = "range"


OPTION_TYPES = frozenset({
    QuestionType.SELECT,
    QuestionType.MULTISELECT,
    QuestionType.RADIO,
    QuestionType.CHECKBOX,
})


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    INCLUDES = "includes"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"


class ConditionalRule(BaseModel):
    """Display rule evaluated against the answers collected so far."""
    model_config = ConfigDict(frozen=True)

    field: str = Field(..., description="Question id the rule looks at")
    operator: ConditionOperator
    value: Union[bool, int, float, str]

    def evaluate(self, answers: Mapping[str, Any]) -> bool:
        """Return True when the guarded question should be shown.

        An unanswered field never satisfies the rule.
        """
        answer = answers.get(self.field)
        if answer is None:
            return False

        if self.operator == ConditionOperator.EQUALS:
            return answer == self.value
        if self.operator == ConditionOperator.INCLUDES:
            if isinstance(answer, list):
                return self.value in answer
            if isinstance(answer, str) and isinstance(self.value, str):
                return self.value in answer
            return False

        # Numeric comparisons; booleans are not numbers here
        if isinstance(answer, bool) or isinstance(self.value, bool):
            return False
        try:
            left = float(answer)
            right = float(self.value)
        except (TypeError, ValueError):
            return False
        if self.operator == ConditionOperator.GREATER_THAN:
            return left > right
        return left < right


class Question(BaseModel):
    """A single questionnaire question. Immutable once defined."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    square: int = Field(..., ge=0, description="Section (square) the question belongs to")
    text: str = Field(..., min_length=1)
    type: QuestionType
    options: Optional[List[str]] = None
    required: bool = False
    help_text: Optional[str] = None
    placeholder: Optional[str] = None
    validation: Dict[str, Union[bool, int, float, str]] = Field(default_factory=dict)
    conditional: Optional[ConditionalRule] = None

    @model_validator(mode="after")
    def validate_options(self):
        """Options are present exactly when the input kind needs them."""
        if self.type in OPTION_TYPES:
            if not self.options:
                raise ValueError(f"Question '{self.id}' of type {self.type.value} requires options")
        elif self.options is not None:
            raise ValueError(f"Question '{self.id}' of type {self.type.value} must not define options")
        return self

    def is_visible(self, answers: Mapping[str, Any]) -> bool:
        """Whether the presentation layer should display this question."""
        if self.conditional is None:
            return True
        return self.conditional.evaluate(answers)
