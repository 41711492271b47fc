"""Services package."""

from .draft_store import DraftStore
from .normalizer import NormalizationError, normalize_plan
from .plan_service import PlanNotFoundError, PlanService, PlanSubmitter

__all__ = [
    "DraftStore",
    "NormalizationError",
    "normalize_plan",
    "PlanNotFoundError",
    "PlanService",
    "PlanSubmitter",
]
