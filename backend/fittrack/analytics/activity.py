"""
Dashboard and insight helpers built on the weekly/trend primitives.
"""
import math
from datetime import date, timedelta
from statistics import mean, pvariance
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel

from .series import DatePoint, as_date, workout_points
from .weekly import WeeklyBucket, aggregate_by_week, last_week, this_week


class RecentAverage(BaseModel):
    difference: float
    direction: str
    average: float
    entries_used: int
    method: str


class WeekComparison(BaseModel):
    this_week: float
    last_week: float
    change: float


class Consistency(BaseModel):
    weekly_workouts: List[int]
    average_per_week: float
    consistency_score: float


def weight_vs_recent_average(weights_desc: Sequence) -> Optional[RecentAverage]:
    """
    Latest weight against the entries logged in the 7 days before it.

    Needs 3+ entries. With fewer than two entries in that window, the next four
    entries stand in ("recent avg").
    """
    if len(weights_desc) < 3:
        return None
    current = weights_desc[0]
    current_weight = float(current.weight)
    cutoff = as_date(current.date) - timedelta(days=7)
    recent = [w for w in weights_desc[1:] if as_date(w.date) >= cutoff]
    method = "7-day avg"
    if len(recent) < 2:
        recent = list(weights_desc[1:5])
        method = "recent avg"
        if len(recent) < 2:
            return None
    average = mean(float(w.weight) for w in recent)
    difference = current_weight - average
    return RecentAverage(
        difference=difference,
        direction="down" if difference < 0 else "up",
        average=average,
        entries_used=len(recent),
        method=method,
    )


def total_lost(weights_desc: Sequence) -> Optional[float]:
    """Heaviest logged weight minus the current one."""
    if not weights_desc:
        return None
    return max(float(w.weight) for w in weights_desc) - float(weights_desc[0].weight)


def average_per_week(dates: Sequence[date]) -> float:
    """Entries per week over the span they cover (at least one week)."""
    if not dates:
        return 0.0
    days = (max(dates) - min(dates)).days
    weeks = math.ceil(days / 7) or 1
    return len(dates) / weeks


def average_in_range(points: Sequence[DatePoint], start: date, end: date) -> Optional[float]:
    values = [v for d, v in points if start <= d <= end]
    return mean(values) if values else None


def week_comparison(points: Sequence[DatePoint], today: date) -> WeekComparison:
    """Sums for this and last calendar week."""
    current = this_week(points, today).sum
    previous = last_week(points, today).sum
    return WeekComparison(this_week=current, last_week=previous, change=current - previous)


def walking_minutes(workouts: Sequence, today: date) -> WeekComparison:
    return week_comparison(workout_points(workouts, "walk", "duration"), today)


def running_miles(workouts: Sequence, today: date) -> WeekComparison:
    return week_comparison(workout_points(workouts, "run", "distance"), today)


def week_over_week_change(buckets: Sequence[WeeklyBucket], use: str = "average") -> Optional[float]:
    """
    Mean of the changes between consecutive weeks.

    With use="average" empty weeks are skipped; with use="sum" they count as zero.
    """
    if use == "average":
        values = [b.average for b in buckets if b.average is not None]
    else:
        values = [b.sum for b in buckets]
    if len(values) < 2:
        return None
    changes = [b - a for a, b in zip(values[:-1], values[1:])]
    return mean(changes)


def weight_week_over_week(points: Sequence[DatePoint], today: date, weeks: int = 4) -> Optional[float]:
    if len(points) < 10:
        return None
    return week_over_week_change(aggregate_by_week(points, today, weeks), use="average")


def walking_week_over_week(workouts: Sequence, today: date, weeks: int = 4) -> Optional[float]:
    walks = [w for w in workouts if w.type == "walk" and w.duration]
    if len(walks) < 5:
        return None
    buckets = aggregate_by_week(workout_points(walks, field="duration"), today, weeks)
    return week_over_week_change(buckets, use="sum")


def consistency(workouts: Sequence, today: date, weeks: int = 4) -> Consistency:
    """Weekly workout counts and a 0-100 score that drops with variance."""
    buckets = aggregate_by_week(workout_points(workouts), today, weeks)
    counts = [b.count for b in buckets]
    average = mean(counts) if counts else 0.0
    variance = pvariance(counts) if counts else 0.0
    return Consistency(
        weekly_workouts=counts,
        average_per_week=average,
        consistency_score=max(0.0, 100 - variance * 10),
    )


def intensity_by_type(workouts: Sequence, today: date, days: int = 30) -> Dict[str, List[float]]:
    """Rough per-workout intensity scores for the last `days` days."""
    cutoff = today - timedelta(days=days)
    out: Dict[str, List[float]] = {}
    for w in workouts:
        if as_date(w.date) < cutoff:
            continue
        score = 0.0
        if w.type == "run" and w.distance:
            score = float(w.distance) * 10
        elif w.type == "walk" and w.duration:
            score = float(w.duration) / 10
        elif w.type == "lift":
            score = len(w.muscle_groups) * 5
        out.setdefault(w.type, []).append(score)
    return out


def weight_velocity(points: Sequence[DatePoint], window: int = 7) -> Optional[float]:
    """Change per day across the last `window` entries."""
    if len(points) < 3:
        return None
    recent = list(points[-window:])
    span = (recent[-1][0] - recent[0][0]).days
    if span <= 0:
        return None
    return (recent[-1][1] - recent[0][1]) / span


def period_points(points: Sequence[DatePoint], today: date, days: Optional[int]) -> List[DatePoint]:
    """Points inside the chart window; days=None keeps everything."""
    if days is None:
        return list(points)
    cutoff = today - timedelta(days=days)
    return [(d, v) for d, v in points if d >= cutoff]


def period_change(points: Sequence[DatePoint]) -> Optional[float]:
    if len(points) < 2:
        return None
    return points[-1][1] - points[0][1]


# ---------- Birthdays ----------

def _this_year(birthday_date: date, year: int) -> date:
    try:
        return birthday_date.replace(year=year)
    except ValueError:  # Feb 29 in a non-leap year
        return date(year, 3, 1)


def next_occurrence(birthday_date: date, today: date) -> date:
    upcoming = _this_year(birthday_date, today.year)
    if upcoming < today:
        upcoming = _this_year(birthday_date, today.year + 1)
    return upcoming


def upcoming_birthdays(birthdays: Sequence, today: date, days: int = 30) -> List:
    """Birthdays falling within the next `days` days, soonest first."""
    horizon = today + timedelta(days=days)
    hits = [b for b in birthdays if next_occurrence(as_date(b.date), today) <= horizon]
    return sorted(hits, key=lambda b: next_occurrence(as_date(b.date), today))


def birthdays_this_week(birthdays: Sequence, today: date) -> int:
    return len(upcoming_birthdays(birthdays, today, days=7))


def birthdays_this_month(birthdays: Sequence, today: date) -> int:
    return sum(1 for b in birthdays if as_date(b.date).month == today.month)
