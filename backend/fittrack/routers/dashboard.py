"""
Dashboard cards: workouts, weight and birthdays, each with display strings
ready to render ("--" where there is nothing to show).
"""
from datetime import date, timedelta

from fastapi import APIRouter, Depends

from .. import schemas
from ..analytics import activity, summary
from ..analytics.series import weight_points, workout_points
from ..analytics.weekly import last_week, this_week
from ..deps import get_repository, get_today
from ..store.repository import TrackerRepository

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])

PLACEHOLDER = "--"


def _lbs(value) -> str:
    return f"{summary.format_number(float(value))} lbs" if value is not None else PLACEHOLDER


def workout_card(workouts, today: date) -> schemas.WorkoutCard:
    points = workout_points(workouts)
    current = this_week(points, today).count
    previous = last_week(points, today).count
    return schemas.WorkoutCard(
        this_week=current,
        last_week=previous,
        average_per_week=summary.round_half_away(activity.average_per_week([d for d, _ in points])),
        trend=summary.workout_count_trend(current, previous),
    )


def weight_card(weights, today: date) -> schemas.WeightCard:
    if not weights:
        return schemas.WeightCard(display={
            "current_weight": PLACEHOLDER,
            "total_lost": "0",
            "trend": PLACEHOLDER,
            "this_week_average": PLACEHOLDER,
            "last_week_average": PLACEHOLDER,
            "monthly_average": PLACEHOLDER,
            "weekly_change": PLACEHOLDER,
        })

    points = weight_points(weights)
    current = float(weights[0].weight)
    lost = activity.total_lost(weights)

    trend = None
    trend_text = PLACEHOLDER
    if len(weights) >= 3:
        recent = activity.weight_vs_recent_average(weights)
        if recent is not None:
            trend = summary.weight_trend(recent.difference, recent.method)
            trend_text = f"{trend.text} ({trend.detail})"
        else:
            trend_text = "Building trend data..."

    this_avg = this_week(points, today).average
    last_avg = last_week(points, today).average
    monthly_avg = activity.average_in_range(points, today - timedelta(days=30), today)
    weekly_change = summary.weekly_weight_change(this_avg, last_avg)

    return schemas.WeightCard(
        current_weight=current,
        total_lost=lost,
        trend=trend,
        this_week_average=this_avg,
        last_week_average=last_avg,
        monthly_average=monthly_avg,
        weekly_change=weekly_change,
        display={
            "current_weight": _lbs(current),
            "total_lost": summary.format_number(lost),
            "trend": trend_text,
            "this_week_average": _lbs(this_avg),
            "last_week_average": _lbs(last_avg),
            "monthly_average": _lbs(monthly_avg),
            "weekly_change": weekly_change.text if weekly_change else PLACEHOLDER,
        },
    )


def birthday_card(birthdays, today: date) -> schemas.BirthdayCard:
    return schemas.BirthdayCard(
        this_week=activity.birthdays_this_week(birthdays, today),
        this_month=activity.birthdays_this_month(birthdays, today),
        upcoming=activity.upcoming_birthdays(birthdays, today, days=30),
    )


@router.get("", response_model=schemas.DashboardData)
def get_dashboard(
    repo: TrackerRepository = Depends(get_repository),
    today: date = Depends(get_today),
):
    snapshot = repo.snapshot()
    return schemas.DashboardData(
        workouts=workout_card(snapshot.workouts, today),
        weight=weight_card(snapshot.weights, today),
        birthdays=birthday_card(snapshot.birthdays, today),
        status=repo.status(),
    )
