"""
Chat and daily-insight coach backed by the OpenAI chat completions API.
"""
import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from openai import APIConnectionError, APIStatusError, OpenAI, OpenAIError

from .. import schemas
from ..config import settings
from .tools import calculate_predictions, is_predictive, prepare_fitness_data

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
HISTORY_LIMIT = 10  # messages kept between turns
PROMPT_HISTORY = 6  # messages replayed to the model
MIN_INSIGHT_WEIGHTS = 3

NOT_ENOUGH_DATA_HINT = "Add more fitness data to get personalized insights..."
INSIGHT_UNAVAILABLE = "Daily insights temporarily unavailable. Try asking a question in the Insights tab!"


class CoachUnavailable(RuntimeError):
    """No API key configured."""


class CoachError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def user_message(e: Exception) -> str:
    """What the user sees when a model call fails."""
    msg = "Sorry, I encountered an error analyzing your data. "
    status = getattr(e, "status_code", None)
    if status == 401:
        return msg + "Please check your API key in Settings."
    if status == 429:
        return msg + "Rate limit exceeded. Please try again in a moment."
    if isinstance(e, APIConnectionError):
        return msg + "Network error. Please check your connection."
    return msg + "Please try again later."


def build_system_prompt(predictive: bool) -> str:
    prompt = (
        "You are a fitness analyst and coach. Analyze data and provide specific insights.\n\n"
        "Guidelines:\n"
        "- Be specific with numbers and dates\n"
        "- Keep responses under 150 words\n"
        "- Use bullet points for multiple insights\n"
        "- Be encouraging but realistic\n"
        "- Remember conversation context\n"
        "- If asked follow-up questions, refer to previous discussion"
    )
    if predictive:
        prompt += (
            "\n\nPREDICTIVE MODE:\n"
            "- Calculate trends and project future outcomes\n"
            "- Set realistic timelines based on current patterns\n"
            "- Provide specific, actionable goal recommendations\n"
            "- Include weekly/monthly targets when relevant"
        )
    return prompt


def trim_history(history: List[Dict[str, str]], limit: int = HISTORY_LIMIT) -> List[Dict[str, str]]:
    return list(history[-limit:]) if limit > 0 else []


class InsightCoach:
    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, client: Any = None):
        self.model = model or settings.model_id or DEFAULT_MODEL
        if client is None:
            if not api_key:
                raise CoachUnavailable("OPENAI_API_KEY not configured on server.")
            client = OpenAI(api_key=api_key)
        self.client = client

    def _complete(self, messages: List[Dict[str, str]], max_tokens: int, temperature: float) -> str:
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except OpenAIError as e:
            status = e.status_code if isinstance(e, APIStatusError) else None
            logger.error("OpenAI request failed (%s): %s", status, e)
            raise CoachError(user_message(e), status) from e
        content = resp.choices[0].message.content if resp.choices else None
        if not content:
            raise CoachError("Invalid response format from OpenAI")
        return content.strip()

    def ask(
        self,
        question: str,
        snapshot: schemas.Snapshot,
        today: date,
        history: Optional[List[Dict[str, str]]] = None,
        goal_weight: Optional[float] = None,
    ) -> str:
        predictive = is_predictive(question)
        messages: List[Dict[str, str]] = [{"role": "system", "content": build_system_prompt(predictive)}]
        messages.extend(trim_history(history or [], PROMPT_HISTORY))

        data = prepare_fitness_data(snapshot, question, today)
        prompt = (
            f"Data: {json.dumps(data)}\n\n"
            f"Q: {question}\n\n"
            "Provide concise insights with specific numbers."
        )
        if predictive:
            predictions = self._predictions(snapshot, today, goal_weight)
            prompt += (
                f"\n\nCURRENT TRENDS:\n{json.dumps(predictions)}\n\n"
                "Use these trends to provide specific predictions and goal recommendations."
            )
        messages.append({"role": "user", "content": prompt})
        return self._complete(messages, max_tokens=200 if predictive else 150, temperature=0.7)

    def daily_insight(self, snapshot: schemas.Snapshot, today: date, goal_weight: Optional[float] = None) -> Optional[str]:
        """None when there is too little weight history to say anything."""
        if len(snapshot.weights) < MIN_INSIGHT_WEIGHTS:
            return None
        predictions = self._predictions(snapshot, today, goal_weight)
        question = "Give me a brief daily insight and one specific focus for today based on my fitness trends."
        messages = [
            {
                "role": "system",
                "content": "You are a fitness coach. Provide a brief weekly insight and next week focus. Keep under 80 words.",
            },
            {
                "role": "user",
                "content": f"Trends: {json.dumps(predictions)}\n\nQ: {question}\n\nProvide encouraging weekly insight.",
            },
        ]
        return self._complete(messages, max_tokens=120, temperature=0.8)

    def _predictions(self, snapshot: schemas.Snapshot, today: date, goal_weight: Optional[float]) -> Dict[str, Any]:
        return calculate_predictions(
            snapshot,
            today,
            recent_size=settings.recent_window,
            broad_size=settings.broad_window,
            method=settings.weekly_rate_method,
            goal_weight=goal_weight if goal_weight is not None else settings.goal_weight,
            horizon_weeks=settings.goal_horizon_weeks,
        )
