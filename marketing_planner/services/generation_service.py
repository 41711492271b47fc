"""
Marketing plan generation.

Runs the two AI passes for a plan (business analysis, then plan content) and
moves the plan through its status lifecycle:
in_progress -> analyzing -> generating -> completed, or failed on any error.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from marketing_planner.core.config import settings
from marketing_planner.models.plan import (
    ClaudeAnalysis,
    GeneratedContent,
    Plan,
    PlanInteraction,
    PlanStatus,
)
from marketing_planner.repositories.plan import PlanRepository

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _get_ai():
    # Lazy import to avoid provider init during module import time
    from marketing_planner.services.ai_service import get_ai_service
    return get_ai_service()


class PlanGenerationError(Exception):
    """Raised when a plan could not be generated."""
    pass


ANALYSIS_SYSTEM_PROMPT = (
    "You are a senior marketing strategist. You analyse small and medium businesses "
    "using the one-page marketing plan framework (before: target market, message, media; "
    "during: lead capture, lead nurturing, sales conversion; after: customer experience, "
    "lifetime value, referrals).\n"
    "Output ONLY a JSON object with these keys:\n"
    "business_model_assessment {strengths, weaknesses, opportunities, threats: string[]},\n"
    "market_opportunity {size, growth: string, trends, barriers: string[]},\n"
    "competitive_positioning {competitors, advantages, differentiators: string[]},\n"
    "customer_avatar_refinement {primary_avatar {demographics, psychographics: object of strings, "
    "pain_points: string[]}, secondary_avatars: same shape[]},\n"
    "strategic_recommendations: string[], risk_factors: string[],\n"
    "growth_potential {short_term, long_term, scalability, investment_needed: string}.\n"
    "Never include explanations or extra keys."
)

CONTENT_SYSTEM_PROMPT = (
    "You are a senior marketing strategist writing a practical marketing plan for a business owner.\n"
    "Output ONLY a JSON object with these keys:\n"
    "one_page_plan {before {target_market, message: string, media: string[]}, "
    "during {lead_capture, lead_nurture, sales_conversion: string}, "
    "after {deliver_experience, lifetime_value, referrals: string}},\n"
    "implementation_guide {executive_summary: string, action_plans {phase1, phase2, phase3: string}, "
    "timeline, resources, kpis, templates: string},\n"
    "strategic_insights {strengths, opportunities: string[], positioning, competitive_advantage, "
    "growth_potential: string, risks, investments: string[], roi: string}.\n"
    "phase1 covers the first 30 days, phase2 days 31-90, phase3 days 91-180.\n"
    "Never include explanations or extra keys."
)


def _strip_code_fences(text: str) -> str:
    t = (text or "").strip()
    if t.startswith("```"):
        t = t.strip("`\n ")
        if t.lower().startswith("json"):
            t = t[len("json"):].lstrip()
    return t


def parse_ai_json(content: str, model: Type[ModelT]) -> ModelT:
    """Parse an AI reply as JSON and validate it against a model."""
    text = _strip_code_fences(content)
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        # Some models wrap the object in prose; fall back to the outermost braces
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise PlanGenerationError(f"AI reply for {model.__name__} is not JSON")
        try:
            data = json.loads(text[start:end + 1])
        except json.JSONDecodeError as e:
            raise PlanGenerationError(f"AI reply for {model.__name__} is not JSON: {e}")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise PlanGenerationError(f"AI reply does not match {model.__name__}: {e}")


class PlanGenerationService:
    """Generates analysis and content for a stored plan."""

    def __init__(self, plan_repository: PlanRepository, ai_factory: Optional[Callable[[], Any]] = None):
        self.plan_repository = plan_repository
        self._ai_factory = ai_factory or _get_ai

    async def _ask(self, plan_id: str, interaction_type: str, system: str, payload: Dict[str, Any]):
        ai = self._ai_factory()
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": json.dumps(payload, ensure_ascii=False, default=str)},
        ]
        started = time.time()
        response = await ai.generate_response(messages)
        elapsed_ms = int((time.time() - started) * 1000)

        try:
            await self.plan_repository.record_interaction(PlanInteraction(
                plan_id=plan_id,
                interaction_type=interaction_type,
                prompt_data={k: v for k, v in payload.items() if k != "responses"},
                response_data={"provider": response.provider, "model": response.model},
                tokens_used=response.tokens_used,
                processing_time_ms=elapsed_ms,
            ))
        except Exception as e:
            logger.warning(f"Could not record {interaction_type} interaction for plan {plan_id}: {e}")
        return response

    async def generate(self, plan: Plan) -> Dict[str, Any]:
        """Run analysis and content generation for a plan.

        Returns the final stored document. Raises PlanGenerationError after
        marking the plan failed.
        """
        plan_id = plan.id
        started = time.time()
        try:
            await self.plan_repository.update_plan(plan_id, {
                "status": PlanStatus.ANALYZING.value,
                "completion_percentage": 25,
            })
            logger.info(f"Analyzing plan {plan_id}")
            analysis_response = await self._ask(plan_id, "analysis", ANALYSIS_SYSTEM_PROMPT, {
                "business_context": plan.business_context,
                "responses": plan.questionnaire_responses,
            })
            analysis = parse_ai_json(analysis_response.content, ClaudeAnalysis)

            await self.plan_repository.update_plan(plan_id, {
                "status": PlanStatus.GENERATING.value,
                "completion_percentage": 60,
                "claude_analysis": analysis.model_dump(mode="json"),
            })
            logger.info(f"Generating content for plan {plan_id}")
            content_response = await self._ask(plan_id, "content_generation", CONTENT_SYSTEM_PROMPT, {
                "business_context": plan.business_context,
                "responses": plan.questionnaire_responses,
                "analysis": analysis.model_dump(mode="json"),
            })
            content = parse_ai_json(content_response.content, GeneratedContent)

            now = datetime.now(timezone.utc)
            updated = await self.plan_repository.update_plan(plan_id, {
                "status": PlanStatus.COMPLETED.value,
                "completion_percentage": 100,
                "generated_content": content.model_dump(mode="json"),
                "completed_at": now,
                "plan_metadata": {
                    "total_processing_time": round(time.time() - started, 3),
                    "generated_at": now.isoformat(),
                    "version": settings.PLAN_VERSION,
                },
            })
            logger.info(f"Plan {plan_id} completed in {time.time() - started:.1f}s")
            return updated

        except Exception as e:
            logger.error(f"Plan generation failed for {plan_id}: {e}")
            try:
                await self.plan_repository.update_plan(plan_id, {
                    "status": PlanStatus.FAILED.value,
                    "plan_metadata": {
                        "error": str(e),
                        "failed_at": datetime.now(timezone.utc).isoformat(),
                    },
                })
            except Exception as update_error:
                logger.error(f"Could not mark plan {plan_id} as failed: {update_error}")
            if isinstance(e, PlanGenerationError):
                raise
            raise PlanGenerationError(str(e)) from e
