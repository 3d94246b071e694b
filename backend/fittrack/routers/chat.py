"""
Chat endpoints grounded in the tracker's data.

POST /api/chat
- Question plus recent conversation; context is picked from the question
  (weights, workouts of the mentioned type, upcoming birthdays)
- Goal/prediction questions also get the current trend numbers

GET /api/chat/daily-insight
- Short coaching note from the weight/workout trends (needs 3+ weight entries)

Environment: settings.openai_api_key must be set (OPENAI_API_KEY).
"""
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..deps import get_coach, get_repository, get_today
from ..llm.coach import (
    INSIGHT_UNAVAILABLE,
    NOT_ENOUGH_DATA_HINT,
    CoachError,
    InsightCoach,
    trim_history,
)
from ..store.repository import TrackerRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["Chat"])


# -------------------- Schemas --------------------
class ChatMessage(BaseModel):
    role: str = Field(..., pattern=r"^(user|assistant)$")
    content: str


class ChatRequest(BaseModel):
    question: str = Field(..., min_length=1)
    history: List[ChatMessage] = Field(default_factory=list)
    target_weight: Optional[float] = Field(None, gt=0)


class ChatResponse(BaseModel):
    reply: str
    history: List[ChatMessage]


class InsightResponse(BaseModel):
    insight: str
    generated: bool


# -------------------- Endpoints --------------------
@router.post("", response_model=ChatResponse)
def chat(
    payload: ChatRequest,
    repo: TrackerRepository = Depends(get_repository),
    coach: InsightCoach = Depends(get_coach),
    today: date = Depends(get_today),
):
    question = payload.question.strip()
    if not question:
        raise HTTPException(status_code=400, detail="Question must not be empty")
    history = [m.model_dump() for m in payload.history]
    try:
        reply = coach.ask(question, repo.snapshot(), today, history=history, goal_weight=payload.target_weight)
    except CoachError as e:
        raise HTTPException(status_code=502, detail=str(e))

    history.extend([
        {"role": "user", "content": question},
        {"role": "assistant", "content": reply},
    ])
    return ChatResponse(reply=reply, history=[ChatMessage(**m) for m in trim_history(history)])


@router.get("/daily-insight", response_model=InsightResponse)
def daily_insight(
    repo: TrackerRepository = Depends(get_repository),
    coach: InsightCoach = Depends(get_coach),
    today: date = Depends(get_today),
):
    try:
        insight = coach.daily_insight(repo.snapshot(), today)
    except CoachError as e:
        logger.info("Daily insight unavailable: %s", e)
        return InsightResponse(insight=INSIGHT_UNAVAILABLE, generated=False)
    if insight is None:
        return InsightResponse(insight=NOT_ENOUGH_DATA_HINT, generated=False)
    return InsightResponse(insight=insight, generated=True)
