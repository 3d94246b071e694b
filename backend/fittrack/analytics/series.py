"""
Conversions from stored entries to plain (date, value) series.
"""
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

DatePoint = Tuple[date, float]


def as_date(value) -> date:
    """Drop any time-of-day; entries are calendar dates."""
    if isinstance(value, datetime):
        return value.date()
    return value


def weight_points(weights: Iterable) -> List[DatePoint]:
    """Ascending (date, weight) pairs, skipping incomplete rows."""
    points = [
        (as_date(w.date), float(w.weight)) for w in weights
        if w.date is not None and w.weight is not None
    ]
    points.sort(key=lambda p: p[0])
    return points


def workout_points(
    workouts: Iterable,
    workout_type: Optional[str] = None,
    field: Optional[str] = None,
) -> List[DatePoint]:
    """
    Ascending (date, value) pairs for workouts.

    Without `field` every workout counts as 1.0; with `field` (duration or distance)
    the value is that field, missing values counting as 0.
    """
    points: List[DatePoint] = []
    for w in workouts:
        if workout_type and w.type != workout_type:
            continue
        if field is None:
            value = 1.0
        else:
            raw = getattr(w, field, None)
            value = float(raw) if raw is not None else 0.0
        points.append((as_date(w.date), value))
    points.sort(key=lambda p: p[0])
    return points
