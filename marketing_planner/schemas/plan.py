"""
Pydantic schemas for Plan API requests and responses.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class PlanCreateRequest(BaseModel):
    """Request schema for creating a new plan."""
    business_context: Dict[str, Any] = Field(default_factory=dict)
    questionnaire_responses: Dict[str, Any] = Field(...)
    user_id: Optional[str] = Field(None, max_length=128)


class PlanCreatedResponse(BaseModel):
    """Response schema for a newly created plan."""
    id: str = Field(...)
    status: str = Field(...)
