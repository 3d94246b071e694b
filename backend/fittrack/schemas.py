"""
Pydantic schemas for request/response validation.
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import List, Literal, Optional
from datetime import date, datetime


WorkoutType = Literal["walk", "run", "lift", "tennis", "other"]
WORKOUT_TYPES = ("walk", "run", "lift", "tennis", "other")


# ============ Weight Schemas ============

class WeightBase(BaseModel):
    """Base weight schema."""
    date: date
    weight: float = Field(..., gt=0, le=1500)  # lbs
    body_fat: Optional[float] = Field(None, ge=0, le=100)
    notes: Optional[str] = None


class WeightCreate(WeightBase):
    """Schema for creating a weight entry."""
    pass


class Weight(WeightBase):
    """Schema for weight response."""
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ============ Workout Schemas ============

class WorkoutBase(BaseModel):
    """Base workout schema."""
    date: date
    type: WorkoutType
    duration: Optional[float] = Field(None, gt=0, le=1440)  # minutes
    distance: Optional[float] = Field(None, gt=0, le=500)  # miles
    hr_zone: Optional[int] = Field(None, ge=1, le=10)
    muscle_groups: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class WorkoutCreate(WorkoutBase):
    """
    Schema for creating a workout.

    Walks need a duration, runs need a distance, and only lifts carry muscle groups.
    """

    @field_validator("muscle_groups")
    @classmethod
    def _normalize_groups(cls, groups: List[str]) -> List[str]:
        cleaned = {g.strip().lower() for g in groups if g and g.strip()}
        return sorted(cleaned)

    @model_validator(mode="after")
    def _check_type_fields(self):
        if self.type == "walk" and self.duration is None:
            raise ValueError("Duration is required for walks")
        if self.type == "run" and self.distance is None:
            raise ValueError("Distance is required for runs")
        if self.type != "lift" and self.muscle_groups:
            raise ValueError("Muscle groups can only be set on lift workouts")
        return self


class Workout(WorkoutBase):
    """Schema for workout response."""
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ============ Birthday Schemas ============

class BirthdayBase(BaseModel):
    """Base birthday schema. The year may be a placeholder."""
    name: str = Field(..., min_length=1, max_length=100)
    date: date
    age: Optional[int] = Field(None, ge=0, le=150)
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, name: str) -> str:
        name = name.strip()
        if not name:
            raise ValueError("Name must not be blank")
        return name


class BirthdayCreate(BirthdayBase):
    """Schema for creating a birthday."""
    pass


class Birthday(BirthdayBase):
    """Schema for birthday response."""
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ============ Snapshot Schemas ============

class Snapshot(BaseModel):
    """Everything the tracker holds, as loaded from one data source."""
    weights: List[Weight] = Field(default_factory=list)
    workouts: List[Workout] = Field(default_factory=list)
    birthdays: List[Birthday] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.weights or self.workouts or self.birthdays)


class SnapshotImport(BaseModel):
    """Import payload; entries are validated like newly created ones."""
    weights: List[WeightCreate] = Field(default_factory=list)
    workouts: List[WorkoutCreate] = Field(default_factory=list)
    birthdays: List[BirthdayCreate] = Field(default_factory=list)


class ImportResult(BaseModel):
    imported: int
    skipped: int = 0
    errors: List[str] = Field(default_factory=list)


class DataStatus(BaseModel):
    source: Optional[str] = None
    weights: int
    workouts: int
    birthdays: int


# ============ Dashboard Schemas ============

Sentiment = Literal["positive", "negative", "neutral"]


class TrendText(BaseModel):
    """User-facing comparison string with its sentiment."""
    text: str
    sentiment: Sentiment
    detail: Optional[str] = None


class WorkoutCard(BaseModel):
    this_week: int
    last_week: int
    average_per_week: float
    trend: TrendText


class WeightCard(BaseModel):
    current_weight: Optional[float] = None
    total_lost: Optional[float] = None
    trend: Optional[TrendText] = None
    this_week_average: Optional[float] = None
    last_week_average: Optional[float] = None
    monthly_average: Optional[float] = None
    weekly_change: Optional[TrendText] = None
    display: dict = Field(default_factory=dict)


class BirthdayCard(BaseModel):
    this_week: int
    this_month: int
    upcoming: List[Birthday] = Field(default_factory=list)


class DashboardData(BaseModel):
    """Complete dashboard data."""
    workouts: WorkoutCard
    weight: WeightCard
    birthdays: BirthdayCard
    status: DataStatus
