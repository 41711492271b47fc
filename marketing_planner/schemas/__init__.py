"""Schemas package."""

from .plan import PlanCreateRequest, PlanCreatedResponse
from .questionnaire import (
    AnswerRequest,
    FlowSnapshotResponse,
    QuestionListResponse,
    SessionStartRequest,
)

__all__ = [
    # Plan schemas
    "PlanCreateRequest",
    "PlanCreatedResponse",
    # Questionnaire schemas
    "AnswerRequest",
    "FlowSnapshotResponse",
    "QuestionListResponse",
    "SessionStartRequest",
]
