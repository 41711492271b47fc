"""API package."""

from .questionnaire import router as questionnaire_router
from .plans import router as plans_router

__all__ = [
    "questionnaire_router",
    "plans_router",
]
