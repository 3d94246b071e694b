"""
Least-squares trend estimation.

Every slope in the app goes through `estimate_trend`; the recent and broad trends
only differ in which slice of the date-ascending series they are given.
"""
from datetime import date
from typing import List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel

from .series import DatePoint

XYPoint = Tuple[float, float]
WeeklyRateMethod = Literal["endpoints", "regression"]

DEFAULT_RECENT_WINDOW = 7
DEFAULT_BROAD_WINDOW = 30


def estimate_trend(series: Sequence[XYPoint]) -> float:
    """
    OLS slope: (nΣxy − ΣxΣy) / (nΣx² − (Σx)²).

    Fewer than two points, or x values that are all equal (duplicate dates on an
    elapsed-day axis), give a flat slope of 0.0.
    """
    n = len(series)
    if n < 2:
        return 0.0
    sum_x = sum(float(x) for x, _ in series)
    sum_y = sum(float(y) for _, y in series)
    sum_xy = sum(float(x) * float(y) for x, y in series)
    sum_x2 = sum(float(x) * float(x) for x, _ in series)
    den = n * sum_x2 - sum_x * sum_x
    if abs(den) < 1e-12:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / den


def linear_fit(xs: List[float], ys: List[float]):
    """Slope, intercept and R² for a chart trend line."""
    n = len(xs)
    if n < 2:
        return 0.0, (ys[0] if ys else 0.0), 0.0
    slope = estimate_trend(list(zip(xs, ys)))
    mean_x = sum(xs) / n
    mean_y = sum(ys) / n
    intercept = mean_y - slope * mean_x
    ss_tot = sum((y - mean_y) ** 2 for y in ys)
    ss_res = sum((y - (slope * x + intercept)) ** 2 for x, y in zip(xs, ys))
    r2 = 1 - (ss_res / ss_tot) if ss_tot > 0 else 0.0
    return slope, intercept, r2


def index_series(points: Sequence[DatePoint]) -> List[XYPoint]:
    """x = position in the ascending series."""
    return [(float(i), float(v)) for i, (_, v) in enumerate(points)]


def elapsed_day_series(points: Sequence[DatePoint]) -> List[XYPoint]:
    """x = days since the first point."""
    if not points:
        return []
    base = points[0][0]
    return [(float((d - base).days), float(v)) for d, v in points]


def recent_window(points: Sequence[DatePoint], size: int = DEFAULT_RECENT_WINDOW) -> List[DatePoint]:
    return list(points[-size:]) if size > 0 else []


def broad_window(points: Sequence[DatePoint], size: int = DEFAULT_BROAD_WINDOW) -> List[DatePoint]:
    return list(points[-size:]) if size > 0 else []


def weekly_rate(points: Sequence[DatePoint], method: WeeklyRateMethod = "endpoints") -> float:
    """
    Change per week over a date-ascending window.

    endpoints:  (last - first) / elapsed days * 7
    regression: OLS slope on the elapsed-day axis * 7

    The two agree for evenly spaced data and drift apart for irregular sampling.
    A window spanning zero days has no rate (0.0).
    """
    if len(points) < 2:
        return 0.0
    if method == "endpoints":
        span_days = (points[-1][0] - points[0][0]).days
        if span_days <= 0:
            return 0.0
        return (float(points[-1][1]) - float(points[0][1])) / span_days * 7.0
    if method == "regression":
        return estimate_trend(elapsed_day_series(points)) * 7.0
    raise ValueError(f"Unknown weekly rate method: {method}")


class TrendSummary(BaseModel):
    observations: int
    method: str
    recent_window: int
    broad_window: int
    recent_slope: float  # per sample
    broad_slope: float  # per sample
    recent_weekly_rate: float
    broad_weekly_rate: float
    window_start: Optional[date] = None
    window_end: Optional[date] = None


def summarize_trend(
    points: Sequence[DatePoint],
    recent_size: int = DEFAULT_RECENT_WINDOW,
    broad_size: int = DEFAULT_BROAD_WINDOW,
    method: WeeklyRateMethod = "endpoints",
) -> TrendSummary:
    """Recent and broad trends for an ascending series."""
    recent = recent_window(points, recent_size)
    broad = broad_window(points, broad_size)
    return TrendSummary(
        observations=len(points),
        method=method,
        recent_window=len(recent),
        broad_window=len(broad),
        recent_slope=estimate_trend(index_series(recent)),
        broad_slope=estimate_trend(index_series(broad)),
        recent_weekly_rate=weekly_rate(recent, method),
        broad_weekly_rate=weekly_rate(broad, method),
        window_start=broad[0][0] if broad else None,
        window_end=broad[-1][0] if broad else None,
    )
