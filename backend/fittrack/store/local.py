"""
On-device store backed by SQLAlchemy.

Holds a copy of everything the tracker knows so the app keeps working when the
hosted API is unreachable.
"""
import logging
from typing import Optional, Type

from sqlalchemy import desc
from sqlalchemy.orm import Session, sessionmaker

from .. import models, schemas

logger = logging.getLogger(__name__)


class LocalStore:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    # ---------- Reads ----------
    def load(self) -> schemas.Snapshot:
        with self.session_factory() as db:
            weights = db.query(models.WeightEntry).order_by(
                desc(models.WeightEntry.date), desc(models.WeightEntry.id)
            ).all()
            workouts = db.query(models.Workout).order_by(
                desc(models.Workout.date), desc(models.Workout.id)
            ).all()
            birthdays = db.query(models.Birthday).order_by(models.Birthday.date).all()
            return schemas.Snapshot(
                weights=[schemas.Weight.model_validate(w) for w in weights],
                workouts=[_workout_out(w) for w in workouts],
                birthdays=[schemas.Birthday.model_validate(b) for b in birthdays],
            )

    # ---------- Writes ----------
    def add_weight(self, entry: schemas.WeightCreate, entry_id: Optional[int] = None) -> schemas.Weight:
        with self.session_factory() as db:
            row = models.WeightEntry(id=entry_id, **entry.model_dump())
            _commit(db, row)
            return schemas.Weight.model_validate(row)

    def add_workout(self, entry: schemas.WorkoutCreate, entry_id: Optional[int] = None) -> schemas.Workout:
        with self.session_factory() as db:
            row = models.Workout(id=entry_id, **entry.model_dump())
            _commit(db, row)
            return _workout_out(row)

    def add_birthday(self, entry: schemas.BirthdayCreate, entry_id: Optional[int] = None) -> schemas.Birthday:
        with self.session_factory() as db:
            row = models.Birthday(id=entry_id, **entry.model_dump())
            _commit(db, row)
            return schemas.Birthday.model_validate(row)

    def delete(self, model: Type, entry_id: int) -> bool:
        with self.session_factory() as db:
            row = db.get(model, entry_id)
            if row is None:
                return False
            db.delete(row)
            db.commit()
            return True

    def clear(self) -> None:
        with self.session_factory() as db:
            for model in (models.WeightEntry, models.Workout, models.Birthday):
                db.query(model).delete()
            db.commit()

    def replace_all(self, snapshot: schemas.Snapshot) -> None:
        """Mirror a snapshot wholesale, keeping its ids."""
        with self.session_factory() as db:
            for model in (models.WeightEntry, models.Workout, models.Birthday):
                db.query(model).delete()
            db.add_all(models.WeightEntry(**w.model_dump()) for w in snapshot.weights)
            db.add_all(models.Workout(**w.model_dump()) for w in snapshot.workouts)
            db.add_all(models.Birthday(**b.model_dump()) for b in snapshot.birthdays)
            db.commit()
        logger.debug("Local cache replaced with %d entries",
                     len(snapshot.weights) + len(snapshot.workouts) + len(snapshot.birthdays))


def _commit(db: Session, row) -> None:
    db.add(row)
    db.commit()
    db.refresh(row)


def _workout_out(row: models.Workout) -> schemas.Workout:
    return schemas.Workout(
        id=row.id,
        date=row.date,
        type=row.type,
        duration=row.duration,
        distance=row.distance,
        hr_zone=row.hr_zone,
        muscle_groups=row.muscle_groups or [],
        notes=row.notes,
        created_at=row.created_at,
    )
