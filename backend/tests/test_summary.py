import pytest

from fittrack.analytics import summary


@pytest.mark.parametrize("value,expected", [
    (2.25, 2.3),
    (-2.25, -2.3),
    (0.05, 0.1),
    (1.04, 1.0),
])
def test_round_half_away_from_zero(value, expected):
    assert summary.round_half_away(value) == expected


def test_negative_zero_is_normalized():
    assert summary.format_number(-0.04) == "0.0"
    assert summary.format_signed(-0.04) == "0.0"


def test_weight_trend_thresholds():
    assert summary.weight_trend(0.49).text == "stable"
    assert summary.weight_trend(-0.49).sentiment == "neutral"

    down = summary.weight_trend(-0.5)
    assert (down.text, down.sentiment) == ("trending down", "positive")

    up = summary.weight_trend(1.2, "7-day avg")
    assert (up.text, up.sentiment) == ("trending up", "negative")
    assert up.detail == "+1.2 vs 7-day avg"


def test_workout_count_trend():
    more = summary.workout_count_trend(3, 1)
    assert (more.text, more.sentiment) == ("+2 vs last week", "positive")

    fewer = summary.workout_count_trend(1, 3)
    assert (fewer.text, fewer.sentiment) == ("-2 vs last week", "negative")

    same = summary.workout_count_trend(2, 2)
    assert (same.text, same.sentiment) == ("same as last week", "neutral")


def test_polarity_is_per_metric():
    assert summary.sentiment_for("weight", -1) == "positive"
    assert summary.sentiment_for("workouts", -1) == "negative"
    assert summary.sentiment_for("running_miles", 2) == "positive"
    assert summary.sentiment_for("weight", 0) == "neutral"


def test_formatting_is_repeatable():
    assert summary.weight_trend(-2.35, "recent avg") == summary.weight_trend(-2.35, "recent avg")
    assert summary.workout_count_trend(4, 1) == summary.workout_count_trend(4, 1)


def test_weekly_weight_change():
    change = summary.weekly_weight_change(185.0, 186.25)
    assert (change.text, change.sentiment) == ("-1.3 lbs", "positive")
    assert summary.weekly_weight_change(185.0, 185.0).text == "no change"
    assert summary.weekly_weight_change(None, 185.0) is None


def test_activity_change_wording():
    assert summary.activity_change("walking_minutes", 90, 60, "minutes", "walking").text == \
        "Up 30.0 minutes from last week"
    down = summary.activity_change("running_miles", 2.0, 5.5, "miles", "running")
    assert (down.text, down.sentiment) == ("Down 3.5 miles from last week", "negative")
    assert summary.activity_change("walking_minutes", 0, 0, "minutes", "walking").text == \
        "No walking logged this week"
    assert summary.activity_change("walking_minutes", 30, 30, "minutes", "walking").text == \
        "Same walking as last week"


def test_period_change():
    assert summary.period_change(None, "last 30 days").text == "Not enough data for comparison"
    down = summary.period_change(-3.44, "last 30 days")
    assert (down.text, down.sentiment) == ("down 3.4 lbs (last 30 days)", "positive")
    assert summary.period_change(0.02, "all time").text == "no change (all time)"
