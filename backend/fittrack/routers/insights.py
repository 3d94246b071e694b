"""
Insights and analytics endpoints.

- GET /api/insights/weekly: Monday-start weekly buckets for a metric
- GET /api/insights/trend: recent/broad slopes and weekly rates
- GET /api/insights/forecast: goal projection with required pace
- GET /api/insights/progress: activity comparisons, consistency, intensity
- GET /api/insights/chart: chart series for a window plus its change
"""
from datetime import date
from statistics import mean
from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..analytics import activity, summary
from ..analytics.forecast import GoalForecast, forecast_goal
from ..analytics.series import weight_points, workout_points
from ..analytics.trend import TrendSummary, elapsed_day_series, linear_fit, summarize_trend
from ..analytics.weekly import WeeklyBucket, aggregate_by_week
from ..config import settings
from ..deps import get_repository, get_today
from ..schemas import TrendText
from ..store.repository import TrackerRepository


router = APIRouter(prefix="/api/insights", tags=["Insights"])

WeeklyMetric = Literal["weight", "workouts", "walking_minutes", "running_miles"]
ChartPeriod = Literal["30", "90", "all"]
PERIOD_NAMES = {"30": "last 30 days", "90": "last 90 days", "all": "all time"}


# ---------------- Utilities ----------------
def _moving_average(values: List[float], window: int) -> List[Optional[float]]:
    if window <= 1:
        return [float(v) for v in values]
    out: List[Optional[float]] = []
    acc: List[float] = []
    for v in values:
        acc.append(float(v))
        if len(acc) > window:
            acc.pop(0)
        out.append(mean(acc) if len(acc) == window else None)
    return out


def _metric_points(repo: TrackerRepository, metric: str):
    if metric == "weight":
        return weight_points(repo.weights)
    if metric == "workouts":
        return workout_points(repo.workouts)
    if metric == "walking_minutes":
        return workout_points(repo.workouts, "walk", "duration")
    return workout_points(repo.workouts, "run", "distance")


# ---------------- Schemas ----------------
class ForecastResponse(BaseModel):
    current_weight: Optional[float] = None
    target_weight: float
    horizon_weeks: float
    forecast: GoalForecast
    trend: TrendSummary
    summary: str


class ActivityComparison(BaseModel):
    this_week: float
    last_week: float
    change: float
    summary: TrendText


class ProgressResponse(BaseModel):
    walking_minutes: ActivityComparison
    running_miles: ActivityComparison
    weekly_workouts: List[int]
    average_workouts_per_week: float
    consistency_score: float
    intensity_by_type: Dict[str, float]
    weight_change_per_week: Optional[float] = None
    walking_change_per_week: Optional[float] = None
    weight_velocity_per_day: Optional[float] = None


class ChartPoint(BaseModel):
    date: date
    weight: float
    moving_average: Optional[float] = None
    trend: Optional[float] = None


class ChartResponse(BaseModel):
    period: ChartPeriod
    points: List[ChartPoint]
    change: Optional[float] = None
    change_summary: TrendText
    slope_per_week: Optional[float] = None
    r2: Optional[float] = None


# ---------------- Endpoints ----------------
@router.get("/weekly", response_model=List[WeeklyBucket])
def weekly(
    metric: WeeklyMetric = "weight",
    weeks: int = Query(4, ge=1, le=104),
    repo: TrackerRepository = Depends(get_repository),
    today: date = Depends(get_today),
):
    """Calendar-week buckets, oldest first; empty weeks have no average."""
    return aggregate_by_week(_metric_points(repo, metric), today, weeks)


@router.get("/trend", response_model=TrendSummary)
def trend(repo: TrackerRepository = Depends(get_repository)):
    return summarize_trend(
        weight_points(repo.weights),
        settings.recent_window,
        settings.broad_window,
        settings.weekly_rate_method,
    )


def _forecast_summary(result: GoalForecast) -> str:
    if result.verdict == "insufficient-data":
        return "Not enough data to forecast yet"
    if result.verdict == "plateau":
        return "Weight is holding steady"
    if result.verdict == "reversing":
        return "Moving away from the target"
    weeks = summary.format_number(result.weeks_remaining)
    if result.estimated_date:
        return f"About {weeks} weeks to go (around {result.estimated_date.isoformat()})"
    return f"About {weeks} weeks to go"


@router.get("/forecast", response_model=ForecastResponse)
def forecast(
    target: Optional[float] = Query(None, gt=0, description="Target weight in lbs (defaults to GOAL_WEIGHT)"),
    horizon_weeks: Optional[float] = Query(None, gt=0),
    repo: TrackerRepository = Depends(get_repository),
    today: date = Depends(get_today),
):
    target = target if target is not None else settings.goal_weight
    if target is None:
        raise HTTPException(status_code=400, detail="No target weight provided and GOAL_WEIGHT is not configured")
    horizon = horizon_weeks or settings.goal_horizon_weeks
    points = weight_points(repo.weights)
    trend_summary = summarize_trend(points, settings.recent_window, settings.broad_window, settings.weekly_rate_method)
    result = forecast_goal(
        points,
        target,
        today,
        settings.recent_window,
        settings.broad_window,
        settings.weekly_rate_method,
        horizon,
    )
    return ForecastResponse(
        current_weight=points[-1][1] if points else None,
        target_weight=target,
        horizon_weeks=horizon,
        forecast=result,
        trend=trend_summary,
        summary=_forecast_summary(result),
    )


def _comparison(metric: str, comp: activity.WeekComparison, unit: str, label: str) -> ActivityComparison:
    return ActivityComparison(
        this_week=comp.this_week,
        last_week=comp.last_week,
        change=comp.change,
        summary=summary.activity_change(metric, comp.this_week, comp.last_week, unit, label),
    )


@router.get("/progress", response_model=ProgressResponse)
def progress(
    repo: TrackerRepository = Depends(get_repository),
    today: date = Depends(get_today),
):
    snapshot = repo.snapshot()
    points = weight_points(snapshot.weights)
    consistency = activity.consistency(snapshot.workouts, today)
    intensity = {
        wtype: mean(scores)
        for wtype, scores in activity.intensity_by_type(snapshot.workouts, today).items()
    }
    return ProgressResponse(
        walking_minutes=_comparison("walking_minutes", activity.walking_minutes(snapshot.workouts, today), "minutes", "walking"),
        running_miles=_comparison("running_miles", activity.running_miles(snapshot.workouts, today), "miles", "running"),
        weekly_workouts=consistency.weekly_workouts,
        average_workouts_per_week=consistency.average_per_week,
        consistency_score=consistency.consistency_score,
        intensity_by_type=intensity,
        weight_change_per_week=activity.weight_week_over_week(points, today),
        walking_change_per_week=activity.walking_week_over_week(snapshot.workouts, today),
        weight_velocity_per_day=activity.weight_velocity(points),
    )


@router.get("/chart", response_model=ChartResponse)
def chart(
    days: ChartPeriod = "30",
    ma_window: int = Query(7, ge=1, le=60),
    repo: TrackerRepository = Depends(get_repository),
    today: date = Depends(get_today),
):
    """Ascending weight points for the window with a moving average and a fitted trend line."""
    window = activity.period_points(weight_points(repo.weights), today, None if days == "all" else int(days))
    change = activity.period_change(window)
    values = [v for _, v in window]
    ma = _moving_average(values, ma_window)

    slope_per_week = None
    r2 = None
    fitted: List[Optional[float]] = [None] * len(window)
    if len(window) >= 2:
        xy = elapsed_day_series(window)
        xs = [x for x, _ in xy]
        slope, intercept, r2 = linear_fit(xs, values)
        slope_per_week = slope * 7
        fitted = [slope * x + intercept for x in xs]

    return ChartResponse(
        period=days,
        points=[
            ChartPoint(date=d, weight=v, moving_average=m, trend=t)
            for (d, v), m, t in zip(window, ma, fitted)
        ],
        change=change,
        change_summary=summary.period_change(change, PERIOD_NAMES[days]),
        slope_per_week=slope_per_week,
        r2=r2,
    )
