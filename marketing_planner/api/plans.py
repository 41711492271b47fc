"""
Marketing plan API endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from marketing_planner.models.plan import Plan
from marketing_planner.schemas.plan import PlanCreateRequest, PlanCreatedResponse
from marketing_planner.services.generation_service import PlanGenerationError
from marketing_planner.services.normalizer import NormalizationError
from marketing_planner.services.pdf_service import PlanRenderError, get_pdf_filename, render_plan_pdf
from marketing_planner.services.plan_service import PlanNotFoundError, PlanService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/plans", tags=["plans"])


def get_plan_service() -> PlanService:
    """Dependency to get plan service instance."""
    from marketing_planner.dependencies import get_plan_service as _get_plan_service
    return _get_plan_service()


def _malformed(plan_id: str, e: NormalizationError) -> HTTPException:
    logger.error(f"Plan {plan_id} is malformed: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Plan record is malformed: {e.field} ({e.reason})"
    )


@router.post("", response_model=PlanCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_plan(
    request: PlanCreateRequest,
    plan_service: PlanService = Depends(get_plan_service)
):
    """
    Create a plan from questionnaire answers.

    Args:
        business_context: Business profile summary
        questionnaire_responses: Answers keyed by question id
        user_id: Optional owner of the plan
    """
    try:
        plan = await plan_service.create_plan(
            business_context=request.business_context,
            questionnaire_responses=request.questionnaire_responses,
            user_id=request.user_id,
        )
        return PlanCreatedResponse(id=plan.id, status=plan.status.value)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create plan: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create plan"
        )


@router.post("/{plan_id}/generate", response_model=Plan)
async def generate_plan(
    plan_id: str,
    plan_service: PlanService = Depends(get_plan_service)
):
    """Run analysis and content generation for a plan."""
    try:
        return await plan_service.generate_plan(plan_id)
    except PlanNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except NormalizationError as e:
        raise _malformed(plan_id, e)
    except PlanGenerationError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to generate marketing plan: {e}"
        )


@router.get("/{plan_id}", response_model=Plan)
async def get_plan(
    plan_id: str,
    plan_service: PlanService = Depends(get_plan_service)
):
    """Get a plan in canonical shape."""
    try:
        return await plan_service.get_plan(plan_id)
    except PlanNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except NormalizationError as e:
        raise _malformed(plan_id, e)


@router.get("/{plan_id}/download")
async def download_plan(
    plan_id: str,
    plan_service: PlanService = Depends(get_plan_service)
):
    """Download a generated plan as a PDF."""
    try:
        plan = await plan_service.get_plan(plan_id)
        pdf = render_plan_pdf(plan)
    except PlanNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except NormalizationError as e:
        raise _malformed(plan_id, e)
    except PlanRenderError as e:
        logger.error(f"Could not render plan {plan_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    await plan_service.record_download(plan, len(pdf))
    logger.info(f"PDF generated for plan {plan_id} ({len(pdf)} bytes)")
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{get_pdf_filename(plan)}"'}
    )
