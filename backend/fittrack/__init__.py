"""Personal fitness tracker backend: workouts, weight and birthdays with trend analytics."""

__version__ = "1.0.0"
