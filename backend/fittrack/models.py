"""
SQLAlchemy models for the local tracker tables.
Table and column names mirror the hosted data API so rows move between them unchanged.
"""
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, JSON
from sqlalchemy.sql import func
from .database import Base


class WeightEntry(Base):
    """Weight reading matching the 'weight_logs' table."""
    __tablename__ = "weight_logs"
    __table_args__ = {"sqlite_autoincrement": True}  # ids are never reused

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    weight = Column(Float, nullable=False)  # in lbs
    body_fat = Column(Float)  # optional, percent
    notes = Column(String)  # optional
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<WeightEntry(id={self.id}, date={self.date}, weight={self.weight})>"


class Workout(Base):
    """Workout event matching the 'workouts' table."""
    __tablename__ = "workouts"
    __table_args__ = {"sqlite_autoincrement": True}  # ids are never reused

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    type = Column(String(20), nullable=False)  # walk, run, lift, tennis, other
    duration = Column(Float)  # minutes, required for walks
    distance = Column(Float)  # miles, required for runs
    hr_zone = Column(Integer)  # optional
    muscle_groups = Column(JSON, default=list)  # lifts only
    notes = Column(String)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Workout(id={self.id}, date={self.date}, type={self.type})>"


class Birthday(Base):
    """Birthday matching the 'birthdays' table."""
    __tablename__ = "birthdays"
    __table_args__ = {"sqlite_autoincrement": True}  # ids are never reused

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    date = Column(Date, nullable=False)
    age = Column(Integer)  # optional
    notes = Column(String)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Birthday(id={self.id}, name={self.name})>"
