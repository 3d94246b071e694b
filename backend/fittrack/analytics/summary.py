"""
Sentiment-tagged comparison strings for dashboard cards.

Whether "down" is good depends on the metric, so polarity comes from
METRIC_POLARITY instead of being decided at each call site.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from ..schemas import TrendText

Number = Union[int, float]

METRIC_POLARITY = {
    "weight": {"decreasing": "positive", "increasing": "negative"},
    "workouts": {"decreasing": "negative", "increasing": "positive"},
    "walking_minutes": {"decreasing": "negative", "increasing": "positive"},
    "running_miles": {"decreasing": "negative", "increasing": "positive"},
}

WEIGHT_STABLE_THRESHOLD = 0.5  # lbs


def round_half_away(value: float, places: int = 1) -> float:
    """Round with halves going away from zero (2.25 -> 2.3, -2.25 -> -2.3)."""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return float(rounded) + 0.0  # normalizes -0.0


def format_number(value: Number, places: int = 1) -> str:
    if isinstance(value, int):
        return str(value)
    return f"{round_half_away(value, places):.{places}f}"


def format_signed(value: Number, places: int = 1) -> str:
    text = format_number(value, places)
    if not text.startswith("-") and float(text) != 0:
        return "+" + text
    return text


def sentiment_for(metric: str, delta: float) -> str:
    if delta == 0:
        return "neutral"
    direction = "decreasing" if delta < 0 else "increasing"
    return METRIC_POLARITY[metric][direction]


def weight_trend(difference: float, method: Optional[str] = None) -> TrendText:
    """Current weight against a recent reference (e.g. a 7-day average)."""
    if abs(difference) < WEIGHT_STABLE_THRESHOLD:
        return TrendText(text="stable", sentiment="neutral", detail=_detail(difference, method))
    text = "trending down" if difference < 0 else "trending up"
    return TrendText(text=text, sentiment=sentiment_for("weight", difference), detail=_detail(difference, method))


def _detail(difference: float, method: Optional[str]) -> Optional[str]:
    if method is None:
        return None
    return f"{format_signed(float(difference))} vs {method}"


def workout_count_trend(this_week: int, last_week: int) -> TrendText:
    trend = int(this_week) - int(last_week)
    if trend == 0:
        return TrendText(text="same as last week", sentiment="neutral")
    return TrendText(
        text=f"{format_signed(trend)} vs last week",
        sentiment=sentiment_for("workouts", trend),
    )


def weekly_weight_change(this_week_avg: Optional[float], last_week_avg: Optional[float]) -> Optional[TrendText]:
    """This week's average weight against last week's; None without both."""
    if this_week_avg is None or last_week_avg is None:
        return None
    change = round_half_away(this_week_avg - last_week_avg)
    if change == 0:
        return TrendText(text="no change", sentiment="neutral")
    return TrendText(text=f"{format_signed(change)} lbs", sentiment=sentiment_for("weight", change))


def activity_change(metric: str, this_week: float, last_week: float, unit: str, label: str) -> TrendText:
    """Week-over-week wording for walking minutes or running miles."""
    change = round_half_away(float(this_week) - float(last_week))
    if change > 0:
        text = f"Up {format_number(change)} {unit} from last week"
    elif change < 0:
        text = f"Down {format_number(abs(change))} {unit} from last week"
    elif this_week > 0:
        text = f"Same {label} as last week"
    else:
        text = f"No {label} logged this week"
    return TrendText(text=text, sentiment=sentiment_for(metric, change))


def period_change(change: Optional[float], period_name: str) -> TrendText:
    """Chart-window weight change, e.g. 'down 3.4 lbs (last 30 days)'."""
    if change is None:
        return TrendText(text="Not enough data for comparison", sentiment="neutral")
    rounded = round_half_away(change)
    if rounded < 0:
        text = f"down {format_number(abs(rounded))} lbs ({period_name})"
    elif rounded > 0:
        text = f"up {format_number(rounded)} lbs ({period_name})"
    else:
        text = f"no change ({period_name})"
    return TrendText(text=text, sentiment=sentiment_for("weight", rounded))
