"""
Dependency injection setup for the application.
"""

from functools import lru_cache
from typing import Optional

from marketing_planner.db.database import get_database
from marketing_planner.questionnaire.questions import get_all_questions
from marketing_planner.repositories.base import DraftMedium
from marketing_planner.repositories.local_draft import LocalDraftMedium
from marketing_planner.repositories.plan import PlanRepository
from marketing_planner.repositories.redis_draft import RedisDraftMedium
from marketing_planner.services.draft_store import DraftStore
from marketing_planner.services.generation_service import PlanGenerationService
from marketing_planner.services.plan_service import PlanService, PlanSubmitter
from marketing_planner.services.questionnaire_service import QuestionnaireService


@lru_cache()
def get_draft_medium() -> DraftMedium:
    """Get draft medium instance.

    Chooses Redis when REDIS_URL is configured; otherwise falls back to
    LocalDraftMedium for development.
    """
    from marketing_planner.core.config import settings
    if settings.REDIS_URL and not settings.USE_LOCAL_DRAFTS:
        return RedisDraftMedium()
    return LocalDraftMedium()


@lru_cache()
def get_draft_store() -> DraftStore:
    """Get the shared draft store."""
    return DraftStore(get_draft_medium())


def get_plan_repository() -> PlanRepository:
    """Get plan repository instance."""
    return PlanRepository(get_database())


def get_plan_service() -> PlanService:
    """Get plan service instance."""
    plan_repository = get_plan_repository()
    return PlanService(plan_repository, PlanGenerationService(plan_repository))


def _submitter_factory(user_id: Optional[str]) -> PlanSubmitter:
    return PlanSubmitter(get_plan_service(), user_id=user_id)


@lru_cache()
def get_questionnaire_service() -> QuestionnaireService:
    """Get the process-wide questionnaire session registry."""
    return QuestionnaireService(get_all_questions(), get_draft_store(), _submitter_factory)


# Cleanup function for application shutdown
async def cleanup_dependencies():
    """Clean up dependencies on application shutdown."""
    await get_questionnaire_service().shutdown()
    await get_draft_medium().close()
