"""
Plan service layer for business logic.
"""

import logging
from typing import Any, Mapping, Optional

from marketing_planner.models.plan import Plan, PlanInteraction, PlanStatus
from marketing_planner.models.question import AnswerMap
from marketing_planner.questionnaire.summary import extract_business_context
from marketing_planner.repositories.plan import PlanRepository
from marketing_planner.services.generation_service import PlanGenerationService
from marketing_planner.services.normalizer import normalize_plan

logger = logging.getLogger(__name__)


class PlanNotFoundError(Exception):
    """Raised when a plan id does not match any stored plan."""
    pass


class PlanService:
    """Service layer for plan operations."""

    def __init__(self, plan_repository: PlanRepository, generation_service: PlanGenerationService):
        self.plan_repository = plan_repository
        self.generation_service = generation_service

    async def create_plan(
        self,
        business_context: Mapping[str, Any],
        questionnaire_responses: Mapping[str, Any],
        user_id: Optional[str] = None,
    ) -> Plan:
        """Store a new plan awaiting generation."""
        plan_doc = await self.plan_repository.create_plan({
            "user_id": user_id,
            "business_context": dict(business_context),
            "questionnaire_responses": dict(questionnaire_responses),
        })
        plan = normalize_plan(plan_doc)
        logger.info(f"Created plan {plan.id}")
        return plan

    async def get_plan(self, plan_id: str) -> Plan:
        """Load a plan in canonical shape.

        Raises PlanNotFoundError, or NormalizationError when the stored record
        is malformed.
        """
        plan_doc = await self.plan_repository.get_plan(plan_id)
        if not plan_doc:
            raise PlanNotFoundError(f"Plan {plan_id} not found")
        return normalize_plan(plan_doc)

    async def generate_plan(self, plan_id: str) -> Plan:
        """Generate analysis and content for an existing plan."""
        plan = await self.get_plan(plan_id)
        if plan.status == PlanStatus.COMPLETED:
            logger.info(f"Plan {plan_id} already completed; skipping generation")
            return plan
        updated = await self.generation_service.generate(plan)
        return normalize_plan(updated)

    async def record_download(self, plan: Plan, file_size: int) -> None:
        """Audit a PDF download. Failures are logged and ignored."""
        try:
            await self.plan_repository.record_interaction(PlanInteraction(
                plan_id=plan.id,
                interaction_type="pdf_download",
                prompt_data={"filename": f"marketing-plan-{plan.id}.pdf", "file_size": file_size},
                response_data={"success": True},
            ))
        except Exception as e:
            logger.warning(f"Could not record download of plan {plan.id}: {e}")


class PlanSubmitter:
    """Hands a completed questionnaire over to plan creation and generation."""

    def __init__(self, plan_service: PlanService, user_id: Optional[str] = None):
        self.plan_service = plan_service
        self.user_id = user_id

    async def __call__(self, answers: AnswerMap) -> str:
        business_context = extract_business_context(answers)
        plan = await self.plan_service.create_plan(
            business_context=business_context.model_dump(mode="json", exclude_none=True),
            questionnaire_responses=answers,
            user_id=self.user_id,
        )
        await self.plan_service.generate_plan(plan.id)
        return plan.id
