"""Models package."""

from .question import (
    AnswerMap,
    AnswerValue,
    ConditionalRule,
    ConditionOperator,
    Question,
    QuestionType,
)
from .plan import (
    BusinessContext,
    ClaudeAnalysis,
    GeneratedContent,
    Plan,
    PlanInteraction,
    PlanMetadata,
    PlanStatus,
)

__all__ = [
    "AnswerMap", "AnswerValue", "ConditionalRule", "ConditionOperator", "Question", "QuestionType",
    "BusinessContext", "ClaudeAnalysis", "GeneratedContent", "Plan", "PlanInteraction",
    "PlanMetadata", "PlanStatus",
]
