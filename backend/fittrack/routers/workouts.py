"""
Workout routes: CRUD operations for logged workouts.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from typing import List, Optional
from datetime import date

from .. import schemas
from ..deps import get_repository
from ..store.repository import TrackerRepository

router = APIRouter(prefix="/api/workouts", tags=["Workouts"])


@router.post("", response_model=schemas.Workout, status_code=status.HTTP_201_CREATED)
def create_workout(
    workout: schemas.WorkoutCreate,
    repo: TrackerRepository = Depends(get_repository),
):
    """
    Log a workout.

    - **type**: walk, run, lift, tennis or other
    - **duration**: Minutes (required for walks)
    - **distance**: Miles (required for runs)
    - **muscle_groups**: Only for lifts
    """
    return repo.add_workout(workout)


@router.get("", response_model=List[schemas.Workout])
def list_workouts(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    type: Optional[schemas.WorkoutType] = None,
    start_date: date = None,
    end_date: date = None,
    repo: TrackerRepository = Depends(get_repository),
):
    workouts = repo.workouts
    if type:
        workouts = [w for w in workouts if w.type == type]
    if start_date:
        workouts = [w for w in workouts if w.date >= start_date]
    if end_date:
        workouts = [w for w in workouts if w.date <= end_date]
    return workouts[skip:skip + limit]


@router.get("/{workout_id}", response_model=schemas.Workout)
def get_workout(workout_id: int, repo: TrackerRepository = Depends(get_repository)):
    workout = repo.get_workout(workout_id)
    if not workout:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")
    return workout


@router.put("/{workout_id}", response_model=schemas.Workout)
def update_workout(
    workout_id: int,
    workout: schemas.WorkoutCreate,
    repo: TrackerRepository = Depends(get_repository),
):
    updated = repo.replace_workout(workout_id, workout)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")
    return updated


@router.delete("/{workout_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_workout(workout_id: int, repo: TrackerRepository = Depends(get_repository)):
    if not repo.delete_workout(workout_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
