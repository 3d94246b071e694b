"""
Goal forecast from blended recent/broad weekly rates.
"""
from datetime import date, timedelta
from typing import Literal, Optional, Sequence

from pydantic import BaseModel

from .series import DatePoint
from .trend import (
    DEFAULT_BROAD_WINDOW,
    DEFAULT_RECENT_WINDOW,
    WeeklyRateMethod,
    summarize_trend,
)

RECENT_WEIGHT = 0.7
BROAD_WEIGHT = 0.3
PLATEAU_RATE = 0.1  # units per week
MIN_OBSERVATIONS = 3
DEFAULT_HORIZON_WEEKS = 26.0

Verdict = Literal["on-track", "plateau", "reversing", "insufficient-data"]


class GoalForecast(BaseModel):
    verdict: Verdict
    weeks_remaining: Optional[float] = None
    blended_rate: float
    delta: float
    required_pace: float
    pace_comparison: Optional[float] = None
    estimated_date: Optional[date] = None


def blend_rates(recent_weekly_rate: float, broad_weekly_rate: float) -> float:
    return RECENT_WEIGHT * recent_weekly_rate + BROAD_WEIGHT * broad_weekly_rate


def project_goal(
    current: float,
    target: float,
    recent_weekly_rate: float,
    broad_weekly_rate: float,
    observation_count: Optional[int] = None,
    horizon_weeks: float = DEFAULT_HORIZON_WEEKS,
) -> GoalForecast:
    """
    Project weeks until `current` reaches `target`.

    `observation_count` is the size of the history behind the rates; None means
    the caller has already checked there is enough of it. The required pace is
    the signed weekly rate that reaches the target within `horizon_weeks`, so a
    pace comparison above 1 means ahead of schedule and below 0 means moving away.
    """
    delta = float(current) - float(target)
    blended = blend_rates(recent_weekly_rate, broad_weekly_rate)
    required_pace = -delta / horizon_weeks
    pace_comparison = (blended / required_pace) if required_pace != 0 else None

    def _result(verdict: Verdict, weeks: Optional[float] = None) -> GoalForecast:
        return GoalForecast(
            verdict=verdict,
            weeks_remaining=weeks,
            blended_rate=blended,
            delta=delta,
            required_pace=required_pace,
            pace_comparison=pace_comparison,
        )

    if observation_count is not None and observation_count < MIN_OBSERVATIONS:
        return _result("insufficient-data")
    if abs(blended) <= PLATEAU_RATE:
        return _result("plateau")
    # Progress means the rate points from current toward target
    if blended * delta > 0:
        return _result("reversing")
    return _result("on-track", abs(delta / blended))


def forecast_goal(
    points: Sequence[DatePoint],
    target: float,
    today: date,
    recent_size: int = DEFAULT_RECENT_WINDOW,
    broad_size: int = DEFAULT_BROAD_WINDOW,
    method: WeeklyRateMethod = "endpoints",
    horizon_weeks: float = DEFAULT_HORIZON_WEEKS,
) -> GoalForecast:
    """Run trend estimation and projection over an ascending weight series."""
    if not points:
        return GoalForecast(
            verdict="insufficient-data",
            blended_rate=0.0,
            delta=0.0,
            required_pace=0.0,
        )
    trend = summarize_trend(points, recent_size, broad_size, method)
    result = project_goal(
        current=points[-1][1],
        target=target,
        recent_weekly_rate=trend.recent_weekly_rate,
        broad_weekly_rate=trend.broad_weekly_rate,
        observation_count=len(points),
        horizon_weeks=horizon_weeks,
    )
    if result.weeks_remaining is not None:
        result.estimated_date = today + timedelta(days=int(round(result.weeks_remaining * 7)))
    return result
