"""
Calendar-week aggregation.

Weeks run Monday through Sunday. A Sunday reference date belongs to the week that
started six days earlier, so "this week" never jumps ahead on Sundays.
"""
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel

from .series import DatePoint, as_date


class WeeklyBucket(BaseModel):
    week_start: date
    week_end: date
    count: int = 0
    sum: float = 0.0
    average: Optional[float] = None  # None means no data, never 0


def week_bounds(reference_date: date) -> Tuple[date, date]:
    """Monday and Sunday of the week containing `reference_date`."""
    reference_date = as_date(reference_date)
    start = reference_date - timedelta(days=reference_date.weekday())
    return start, start + timedelta(days=6)


def _fill(points: Iterable[DatePoint], start: date, end: date) -> WeeklyBucket:
    count = 0
    total = 0.0
    for d, v in points:
        d = as_date(d)
        if start <= d <= end:
            count += 1
            total += float(v)
    return WeeklyBucket(
        week_start=start,
        week_end=end,
        count=count,
        sum=total,
        average=(total / count) if count else None,
    )


def aggregate_by_week(
    points: Iterable[DatePoint],
    reference_date: date,
    weeks: int = 1,
    week_start: str = "Monday",
) -> List[WeeklyBucket]:
    """
    Bucket (date, value) points into `weeks` consecutive calendar weeks.

    The last bucket is the week containing `reference_date`; buckets are returned
    oldest first. Each bucket derives its own bounds from `reference_date - 7*i`
    rather than stepping a shared boundary.
    """
    if week_start != "Monday":
        raise ValueError("Only Monday-start weeks are supported")
    if weeks < 1:
        return []
    points = list(points)
    buckets: List[WeeklyBucket] = []
    for i in range(weeks - 1, -1, -1):
        start, end = week_bounds(as_date(reference_date) - timedelta(days=7 * i))
        buckets.append(_fill(points, start, end))
    return buckets


def this_week(points: Iterable[DatePoint], today: date) -> WeeklyBucket:
    return aggregate_by_week(points, today)[0]


def last_week(points: Iterable[DatePoint], today: date) -> WeeklyBucket:
    return aggregate_by_week(points, as_date(today) - timedelta(days=7))[0]
