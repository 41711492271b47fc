"""
Marketing Plan Generator API Application.
"""

import logging
import time
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketing_planner.core.config import settings
from marketing_planner.db.database import connect_to_mongo, close_mongo_connection
from marketing_planner.api import questionnaire_router, plans_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting up...")
    await connect_to_mongo()

    from marketing_planner.dependencies import get_plan_repository, get_draft_medium, cleanup_dependencies
    await get_plan_repository().create_indexes()
    logger.info(f"Plan indexes ready; drafts kept in {type(get_draft_medium()).__name__}")

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await cleanup_dependencies()
    await close_mongo_connection()
    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Questionnaire-driven marketing plan generation with draft autosave and PDF export",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware (dev-friendly)
cors_kwargs = dict(
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=settings.ALLOWED_METHODS,
    allow_headers=settings.ALLOWED_HEADERS,
)
# In DEBUG, allow any origin via regex to ease local dev across ports
if settings.DEBUG:
    cors_kwargs["allow_origin_regex"] = ".*"

app.add_middleware(CORSMiddleware, **cors_kwargs)


@app.middleware("http")
async def timing_middleware(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration_ms = int((time.time() - start) * 1000)
    response.headers["X-Process-Time-ms"] = str(duration_ms)
    return response


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log anything the routers did not map and answer with a bare 500."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.APP_VERSION}


API_PREFIX = "/api/v1"

for router in (questionnaire_router, plans_router):
    app.include_router(router, prefix=API_PREFIX)


def main():
    """Run the application."""
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
