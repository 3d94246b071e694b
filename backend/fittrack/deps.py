"""
FastAPI dependencies shared by the routers.
"""
from datetime import date

from fastapi import HTTPException, Request, status

from .config import settings
from .llm.coach import CoachUnavailable, InsightCoach
from .store.repository import TrackerRepository


def get_repository(request: Request) -> TrackerRepository:
    """The repository built at startup (see main.lifespan)."""
    return request.app.state.repository


def get_today() -> date:
    return date.today()


def get_coach(request: Request) -> InsightCoach:
    coach = getattr(request.app.state, "coach", None)
    if coach is not None:
        return coach
    try:
        return InsightCoach(api_key=settings.openai_api_key)
    except CoachUnavailable as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
