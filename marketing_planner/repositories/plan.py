"""
Plan repository implementation using MongoDB.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from marketing_planner.models.plan import PlanInteraction, PlanStatus


def _object_id(plan_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(plan_id)
    except (InvalidId, TypeError):
        return None


class PlanRepository:
    """Repository for Plan documents.

    Returns raw documents; callers run them through the normalizer.
    """

    def __init__(self, database: AsyncIOMotorDatabase):
        self.database = database
        self.collection = database.plans
        self.interactions_collection = database.plan_interactions

    async def create_indexes(self):
        """Create database indexes for optimal query performance."""
        await self.collection.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
        await self.collection.create_index([("status", ASCENDING)])
        await self.interactions_collection.create_index([("plan_id", ASCENDING), ("created_at", DESCENDING)])

    async def create_plan(self, plan_data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new plan in the in_progress state and return the stored document."""
        now = datetime.now(timezone.utc)
        plan_doc = {
            "_id": ObjectId(),
            "user_id": plan_data.get("user_id"),
            "business_context": plan_data["business_context"],
            "questionnaire_responses": plan_data["questionnaire_responses"],
            "claude_analysis": None,
            "generated_content": None,
            "plan_metadata": None,
            "status": PlanStatus.IN_PROGRESS.value,
            "completion_percentage": 0,
            "created_at": now,
            "updated_at": now,
            "completed_at": None,
        }

        await self.collection.insert_one(plan_doc)
        return plan_doc

    async def get_plan(self, plan_id: str) -> Optional[Dict[str, Any]]:
        """Get the raw plan document by ID."""
        oid = _object_id(plan_id)
        if oid is None:
            return None
        return await self.collection.find_one({"_id": oid})

    async def update_plan(self, plan_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Set fields on a plan and return the updated document."""
        oid = _object_id(plan_id)
        if oid is None:
            return None
        update_data["updated_at"] = datetime.now(timezone.utc)

        return await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER
        )

    async def record_interaction(self, interaction: PlanInteraction) -> None:
        """Store an audit record of an AI call or download."""
        await self.interactions_collection.insert_one(interaction.model_dump())
