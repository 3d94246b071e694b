"""
Placeholder data shown on first run, when no store has anything to offer.
Dates are laid out relative to `anchor` so the dashboard has something current to show.
"""
from datetime import date, timedelta

from .. import schemas

# Largest collection below; ids run first_id .. first_id + DEMO_ID_SPAN - 1
DEMO_ID_SPAN = 4


def demo_snapshot(anchor: date, first_id: int = 1) -> schemas.Snapshot:
    def ago(days: int) -> date:
        return anchor - timedelta(days=days)

    weights = [
        schemas.Weight(id=first_id, date=ago(2), weight=185.2, body_fat=18.5),
        schemas.Weight(id=first_id + 1, date=ago(6), weight=186.1, body_fat=18.8),
        schemas.Weight(id=first_id + 2, date=ago(9), weight=187.3, body_fat=19.1),
        schemas.Weight(id=first_id + 3, date=ago(13), weight=188.0, body_fat=19.3),
    ]
    workouts = [
        schemas.Workout(id=first_id, date=ago(0), type="run", distance=3.2, notes="Morning run"),
        schemas.Workout(id=first_id + 1, date=ago(1), type="lift", muscle_groups=["chest", "shoulders"], notes="Upper body day"),
        schemas.Workout(id=first_id + 2, date=ago(2), type="walk", duration=45, hr_zone=2, notes="Evening walk"),
    ]
    birthdays = [
        schemas.Birthday(id=first_id, name="Sarah", date=date(1990, 8, 15), age=35, notes="Sister"),
        schemas.Birthday(id=first_id + 1, name="Mike", date=date(1985, 3, 22), age=40, notes="Best friend"),
    ]
    return schemas.Snapshot(weights=weights, workouts=workouts, birthdays=birthdays)
