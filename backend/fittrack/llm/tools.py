"""
Context builders for the coach.

Everything here is plain data (dicts/lists of JSON-safe values) assembled from a
repository snapshot; no model calls happen in this module.
"""
from datetime import date
from typing import Any, Dict, List, Optional

from .. import schemas
from ..analytics import activity
from ..analytics.forecast import forecast_goal
from ..analytics.series import weight_points
from ..analytics.summary import round_half_away
from ..analytics.trend import summarize_trend

PREDICTIVE_KEYWORDS = ("goal", "predict", "when will", "how long", "target", "recommend")


def is_predictive(question: str) -> bool:
    q = (question or "").lower()
    return any(k in q for k in PREDICTIVE_KEYWORDS)


def _round(value: Optional[float], places: int = 2) -> Optional[float]:
    return None if value is None else round_half_away(value, places)


def _weight_rows(weights: List[schemas.Weight], limit: int) -> List[Dict[str, Any]]:
    return [
        {"date": w.date.isoformat(), "weight": w.weight, "bodyFat": w.body_fat}
        for w in weights[:limit]
    ]


def _workout_rows(workouts: List[schemas.Workout], limit: int) -> List[Dict[str, Any]]:
    return [
        {
            "date": w.date.isoformat(),
            "type": w.type,
            "duration": w.duration,
            "distance": w.distance,
            "hrZone": w.hr_zone,
        }
        for w in workouts[:limit]
    ]


def _filter_workouts(workouts: List[schemas.Workout], q: str, walking: bool, running: bool) -> List[schemas.Workout]:
    if walking and not running:
        return [w for w in workouts if w.type == "walk"]
    if running and not walking:
        return [w for w in workouts if w.type == "run"]
    if "lift" in q:
        return [w for w in workouts if w.type == "lift"]
    if "tennis" in q:
        return [w for w in workouts if w.type == "tennis"]
    return list(workouts)


def prepare_fitness_data(snapshot: schemas.Snapshot, question: str = "", today: Optional[date] = None) -> Dict[str, Any]:
    """
    Pick the slice of data a question is about.

    Weight questions get 20 entries, workout questions 25 (filtered to the
    mentioned type); questions about neither get a smaller sample of both.
    Birthdays are only included when asked about, limited to the next 30 days.
    """
    q = (question or "").lower()
    today = today or date.today()

    needs_weight = any(k in q for k in ("weight", "lose", "gain", "lbs", "pounds"))
    needs_walking = "walk" in q
    needs_running = "run" in q
    needs_workouts = needs_walking or needs_running or any(
        k in q for k in ("workout", "exercise", "lift", "tennis")
    )
    needs_birthdays = "birthday" in q or "anniversary" in q
    needs_general = not (needs_weight or needs_workouts or needs_birthdays)

    result: Dict[str, Any] = {}
    if needs_weight or needs_general:
        result["weights"] = _weight_rows(snapshot.weights, 10 if needs_general else 20)
    if needs_workouts or needs_general:
        workouts = _filter_workouts(snapshot.workouts, q, needs_walking, needs_running)
        result["workouts"] = _workout_rows(workouts, 15 if needs_general else 25)
    if needs_birthdays:
        result["birthdays"] = [
            {"name": b.name, "date": b.date.isoformat(), "age": b.age}
            for b in activity.upcoming_birthdays(snapshot.birthdays, today, days=30)
        ]

    recent_types: List[str] = []
    for w in snapshot.workouts[:10]:
        if w.type not in recent_types:
            recent_types.append(w.type)
    result["summary"] = {
        "totalWeights": len(snapshot.weights),
        "totalWorkouts": len(snapshot.workouts),
        "currentWeight": snapshot.weights[0].weight if snapshot.weights else None,
        "recentWorkoutTypes": recent_types,
    }
    return result


def calculate_predictions(
    snapshot: schemas.Snapshot,
    today: date,
    recent_size: int,
    broad_size: int,
    method: str,
    goal_weight: Optional[float] = None,
    horizon_weeks: float = 26.0,
) -> Dict[str, Any]:
    """Trend numbers handed to the model for goal/prediction questions."""
    points = weight_points(snapshot.weights)
    trend = summarize_trend(points, recent_size, broad_size, method)
    walking = activity.walking_minutes(snapshot.workouts, today)
    running = activity.running_miles(snapshot.workouts, today)
    consistency = activity.consistency(snapshot.workouts, today)

    out: Dict[str, Any] = {
        "currentWeight": points[-1][1] if points else None,
        "observations": trend.observations,
        "recentWeeklyRate": _round(trend.recent_weekly_rate),
        "overallWeeklyRate": _round(trend.broad_weekly_rate),
        "weeklyRateMethod": trend.method,
        "walkingMinutesThisWeek": walking.this_week,
        "runningMilesThisWeek": running.this_week,
        "workoutsPerWeek": consistency.weekly_workouts,
        "consistencyScore": _round(consistency.consistency_score, 1),
    }
    if goal_weight is not None:
        forecast = forecast_goal(points, goal_weight, today, recent_size, broad_size, method, horizon_weeks)
        out["goal"] = {
            "targetWeight": goal_weight,
            "verdict": forecast.verdict,
            "weeksRemaining": _round(forecast.weeks_remaining, 1),
            "estimatedDate": forecast.estimated_date.isoformat() if forecast.estimated_date else None,
            "paceComparison": _round(forecast.pace_comparison),
        }
    return out
