"""
MongoDB connection for plan storage.

The client is created once at startup and shared by every repository.
It is tz-aware so stored timestamps come back as UTC datetimes.
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from marketing_planner.core.config import settings

logger = logging.getLogger(__name__)


class Database:
    """Holds the process-wide Motor client and the plan database."""

    client: Optional[AsyncIOMotorClient] = None
    database: Optional[AsyncIOMotorDatabase] = None


db = Database()


async def connect_to_mongo():
    """Open the client and make sure the server answers."""
    logger.info(f"Connecting to MongoDB database '{settings.DATABASE_NAME}'...")
    client = AsyncIOMotorClient(
        settings.MONGODB_URL,
        tz_aware=True,
        serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
    )
    try:
        await client.admin.command("ping")
    except Exception as e:
        client.close()
        logger.error(f"Failed to connect to MongoDB: {e}")
        raise

    db.client = client
    db.database = client[settings.DATABASE_NAME]
    logger.info("Successfully connected to MongoDB")


async def close_mongo_connection():
    """Close the client if one is open."""
    if db.client is None:
        return
    db.client.close()
    db.client = None
    db.database = None
    logger.info("MongoDB connection closed")


def get_database() -> AsyncIOMotorDatabase:
    """Plan database; only valid between startup and shutdown."""
    if db.database is None:
        raise RuntimeError("Database not initialized. Call connect_to_mongo() first.")
    return db.database
