"""
Marketing plan data models.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PlanStatus(str, Enum):
    """Closed set of plan lifecycle states."""
    IN_PROGRESS = "in_progress"
    ANALYZING = "analyzing"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


class BusinessModel(str, Enum):
    B2B = "B2B"
    B2C = "B2C"
    B2B2C = "B2B2C"
    MARKETPLACE = "Marketplace"


class MarketingMaturity(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class BusinessContext(BaseModel):
    """Summary of the business, extracted from the business-context answers.

    Every field is optional because it is derived from whatever the user
    actually answered.
    """
    industry: Optional[str] = None
    business_model: Optional[BusinessModel] = None
    company_size: Optional[str] = None
    years_in_operation: Optional[str] = None
    geographic_scope: Optional[str] = None
    primary_challenges: Optional[List[str]] = None
    marketing_maturity: Optional[MarketingMaturity] = None
    marketing_budget: Optional[str] = None
    time_availability: Optional[str] = None
    business_goals: Optional[List[str]] = None


class SwotAssessment(BaseModel):
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    opportunities: List[str] = Field(default_factory=list)
    threats: List[str] = Field(default_factory=list)


class MarketOpportunity(BaseModel):
    size: str = ""
    growth: str = ""
    trends: List[str] = Field(default_factory=list)
    barriers: List[str] = Field(default_factory=list)


class CompetitivePositioning(BaseModel):
    competitors: List[str] = Field(default_factory=list)
    advantages: List[str] = Field(default_factory=list)
    differentiators: List[str] = Field(default_factory=list)


class CustomerAvatar(BaseModel):
    demographics: Dict[str, str] = Field(default_factory=dict)
    psychographics: Dict[str, str] = Field(default_factory=dict)
    pain_points: List[str] = Field(default_factory=list)


class CustomerAvatarRefinement(BaseModel):
    primary_avatar: CustomerAvatar = Field(default_factory=CustomerAvatar)
    secondary_avatars: List[CustomerAvatar] = Field(default_factory=list)


class GrowthPotential(BaseModel):
    short_term: str = ""
    long_term: str = ""
    scalability: str = ""
    investment_needed: str = ""


class ClaudeAnalysis(BaseModel):
    """AI business analysis that precedes content generation."""
    business_model_assessment: SwotAssessment = Field(default_factory=SwotAssessment)
    market_opportunity: MarketOpportunity = Field(default_factory=MarketOpportunity)
    competitive_positioning: CompetitivePositioning = Field(default_factory=CompetitivePositioning)
    customer_avatar_refinement: CustomerAvatarRefinement = Field(default_factory=CustomerAvatarRefinement)
    strategic_recommendations: List[str] = Field(default_factory=list)
    risk_factors: List[str] = Field(default_factory=list)
    growth_potential: GrowthPotential = Field(default_factory=GrowthPotential)


class BeforePhase(BaseModel):
    target_market: str
    message: str
    media: List[str] = Field(default_factory=list)


class DuringPhase(BaseModel):
    lead_capture: str
    lead_nurture: str
    sales_conversion: str


class AfterPhase(BaseModel):
    deliver_experience: str
    lifetime_value: str
    referrals: str


class OnePagePlan(BaseModel):
    before: BeforePhase
    during: DuringPhase
    after: AfterPhase


class ActionPlans(BaseModel):
    phase1: str
    phase2: str
    phase3: str


class ImplementationGuide(BaseModel):
    executive_summary: str
    action_plans: ActionPlans
    timeline: str = ""
    resources: str = ""
    kpis: str = ""
    templates: str = ""


class StrategicInsights(BaseModel):
    strengths: List[str] = Field(default_factory=list)
    opportunities: List[str] = Field(default_factory=list)
    positioning: str = ""
    competitive_advantage: str = ""
    growth_potential: str = ""
    risks: List[str] = Field(default_factory=list)
    investments: List[str] = Field(default_factory=list)
    roi: str = ""


class GeneratedContent(BaseModel):
    """The plan-and-insights structure the document renderer consumes."""
    one_page_plan: OnePagePlan
    implementation_guide: ImplementationGuide
    strategic_insights: StrategicInsights


class PlanMetadata(BaseModel):
    total_processing_time: Optional[float] = None
    generated_at: Optional[datetime] = None
    version: Optional[str] = None
    error: Optional[str] = None
    failed_at: Optional[datetime] = None


class Plan(BaseModel):
    """Canonical in-memory shape of a persisted plan record.

    Built fresh by the normalizer on every read; JSON-capable fields are
    always structured here regardless of how the store returned them.
    """
    id: str
    user_id: Optional[str] = None
    business_context: Dict[str, Any]
    questionnaire_responses: Dict[str, Any]
    claude_analysis: Optional[Dict[str, Any]] = None
    generated_content: Optional[Dict[str, Any]] = None
    plan_metadata: Optional[Dict[str, Any]] = None
    status: PlanStatus
    completion_percentage: int = Field(default=0, ge=0, le=100)
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None


class PlanInteraction(BaseModel):
    """Audit record of one AI call or download made for a plan."""
    plan_id: str
    interaction_type: str
    prompt_data: Dict[str, Any] = Field(default_factory=dict)
    response_data: Dict[str, Any] = Field(default_factory=dict)
    tokens_used: Optional[int] = None
    processing_time_ms: Optional[int] = None
    created_at: datetime = Field(default_factory=utcnow)
