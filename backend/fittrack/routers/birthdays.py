"""
Birthday routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from typing import List
from datetime import date

from .. import schemas
from ..analytics import activity
from ..deps import get_repository, get_today
from ..store.repository import TrackerRepository

router = APIRouter(prefix="/api/birthdays", tags=["Birthdays"])


@router.post("", response_model=schemas.Birthday, status_code=status.HTTP_201_CREATED)
def create_birthday(
    birthday: schemas.BirthdayCreate,
    repo: TrackerRepository = Depends(get_repository),
):
    return repo.add_birthday(birthday)


@router.get("", response_model=List[schemas.Birthday])
def list_birthdays(repo: TrackerRepository = Depends(get_repository)):
    return repo.birthdays


@router.get("/upcoming", response_model=List[schemas.Birthday])
def upcoming(
    days: int = Query(30, ge=1, le=366),
    repo: TrackerRepository = Depends(get_repository),
    today: date = Depends(get_today),
):
    """Birthdays in the next `days` days, soonest first."""
    return activity.upcoming_birthdays(repo.birthdays, today, days=days)


@router.get("/{birthday_id}", response_model=schemas.Birthday)
def get_birthday(birthday_id: int, repo: TrackerRepository = Depends(get_repository)):
    birthday = repo.get_birthday(birthday_id)
    if not birthday:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Birthday not found")
    return birthday


@router.put("/{birthday_id}", response_model=schemas.Birthday)
def update_birthday(
    birthday_id: int,
    birthday: schemas.BirthdayCreate,
    repo: TrackerRepository = Depends(get_repository),
):
    updated = repo.replace_birthday(birthday_id, birthday)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Birthday not found")
    return updated


@router.delete("/{birthday_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_birthday(birthday_id: int, repo: TrackerRepository = Depends(get_repository)):
    if not repo.delete_birthday(birthday_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Birthday not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
