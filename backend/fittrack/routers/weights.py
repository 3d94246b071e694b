"""
Weight entry routes: CRUD operations for weight measurements.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from typing import List
from datetime import date

from .. import schemas
from ..deps import get_repository
from ..store.repository import TrackerRepository

router = APIRouter(prefix="/api/weights", tags=["Weights"])


@router.post("", response_model=schemas.Weight, status_code=status.HTTP_201_CREATED)
def create_weight(
    weight: schemas.WeightCreate,
    repo: TrackerRepository = Depends(get_repository),
):
    """
    Log a weight entry.

    - **date**: Date of the measurement
    - **weight**: Weight in lbs (must be positive)
    - **body_fat**: Body fat percentage (optional)
    """
    return repo.add_weight(weight)


@router.get("", response_model=List[schemas.Weight])
def list_weights(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    start_date: date = None,
    end_date: date = None,
    repo: TrackerRepository = Depends(get_repository),
):
    """
    Get weight entries, newest first.

    - **skip**: Number of records to skip (for pagination)
    - **limit**: Maximum number of records to return
    - **start_date**: Filter weights from this date onwards (optional)
    - **end_date**: Filter weights up to this date (optional)
    """
    weights = repo.weights
    if start_date:
        weights = [w for w in weights if w.date >= start_date]
    if end_date:
        weights = [w for w in weights if w.date <= end_date]
    return weights[skip:skip + limit]


@router.get("/latest", response_model=schemas.Weight)
def get_latest_weight(repo: TrackerRepository = Depends(get_repository)):
    """
    Get the most recent weight entry.
    """
    if not repo.weights:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No weight entries found"
        )
    return repo.weights[0]


@router.get("/{weight_id}", response_model=schemas.Weight)
def get_weight(weight_id: int, repo: TrackerRepository = Depends(get_repository)):
    weight = repo.get_weight(weight_id)
    if not weight:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Weight entry not found"
        )
    return weight


@router.put("/{weight_id}", response_model=schemas.Weight)
def update_weight(
    weight_id: int,
    weight: schemas.WeightCreate,
    repo: TrackerRepository = Depends(get_repository),
):
    """
    Replace a weight entry. The entry is re-added, so it gets a new id.
    """
    updated = repo.replace_weight(weight_id, weight)
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Weight entry not found"
        )
    return updated


@router.delete("/{weight_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_weight(weight_id: int, repo: TrackerRepository = Depends(get_repository)):
    if not repo.delete_weight(weight_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Weight entry not found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
