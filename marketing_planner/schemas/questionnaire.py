"""
Pydantic schemas for Questionnaire API requests and responses.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from marketing_planner.models.question import AnswerMap, AnswerValue, Question


class SessionStartRequest(BaseModel):
    """Request schema for starting or resuming a questionnaire session."""
    session_id: Optional[str] = Field(None, min_length=1, max_length=128, pattern=r"^[A-Za-z0-9_-]+$")
    user_id: Optional[str] = Field(None, max_length=128)


class AnswerRequest(BaseModel):
    """Request schema for recording one answer."""
    value: AnswerValue


class FlowSnapshotResponse(BaseModel):
    """Response schema describing where a session stands."""
    session_id: str = Field(...)
    state: str = Field(...)
    current_index: int = Field(...)
    total_questions: int = Field(...)
    current_square: Optional[int] = None
    current_question: Optional[Question] = None
    question_visible: bool = Field(...)
    completed_squares: List[int] = Field(default_factory=list)
    answers: AnswerMap = Field(default_factory=dict)
    is_first: bool = Field(...)
    is_last: bool = Field(...)
    plan_id: Optional[str] = None
    last_error: Optional[str] = None


class QuestionListResponse(BaseModel):
    """Response schema for the full question sequence."""
    total: int = Field(...)
    squares: Dict[int, str] = Field(...)
    questions: List[Question] = Field(...)
