"""
Client for the hosted REST data API (PostgREST-style tables).
Uses plain HTTP via requests; any transport or HTTP failure surfaces as StoreUnavailable.
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import requests

from .. import schemas

logger = logging.getLogger(__name__)

WEIGHTS_TABLE = "weight_logs"
WORKOUTS_TABLE = "workouts"
BIRTHDAYS_TABLE = "birthdays"


class StoreUnavailable(Exception):
    """The remote store could not be reached or rejected the request."""


def safe_float(val: Any) -> Optional[float]:
    try:
        if val is None or val == "":
            return None
        return float(val)
    except (TypeError, ValueError):
        return None


def safe_int(val: Any) -> Optional[int]:
    f = safe_float(val)
    return int(f) if f is not None else None


def parse_row_date(value: Any) -> Optional[date]:
    """Rows carry 'YYYY-MM-DD' (sometimes with a time part)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _groups(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [g.strip() for g in value.split(",") if g.strip()]
    return [str(g) for g in value]


def weight_from_row(row: Dict[str, Any]) -> Optional[schemas.Weight]:
    weight = safe_float(row.get("weight"))
    d = parse_row_date(row.get("date"))
    if weight is None or weight <= 0 or d is None:
        return None
    return schemas.Weight(
        id=int(row["id"]),
        date=d,
        weight=weight,
        body_fat=safe_float(row.get("body_fat")),
        notes=row.get("notes") or None,
        created_at=row.get("created_at"),
    )


def workout_from_row(row: Dict[str, Any]) -> Optional[schemas.Workout]:
    d = parse_row_date(row.get("date"))
    wtype = (row.get("type") or "").strip().lower()
    if d is None or wtype not in schemas.WORKOUT_TYPES:
        return None
    return schemas.Workout(
        id=int(row["id"]),
        date=d,
        type=wtype,
        duration=safe_float(row.get("duration")),
        distance=safe_float(row.get("distance")),
        hr_zone=safe_int(row.get("hr zone", row.get("hr_zone"))),
        muscle_groups=_groups(row.get("muscle_groups")),
        notes=row.get("notes") or None,
        created_at=row.get("created_at"),
    )


def birthday_from_row(row: Dict[str, Any]) -> Optional[schemas.Birthday]:
    d = parse_row_date(row.get("date"))
    name = (row.get("name") or "").strip()
    if d is None or not name:
        return None
    return schemas.Birthday(
        id=int(row["id"]),
        name=name,
        date=d,
        age=safe_int(row.get("age")),
        notes=row.get("notes") or None,
        created_at=row.get("created_at"),
    )


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop empty values so the API applies its own defaults."""
    return {k: v for k, v in data.items() if v not in (None, "", [])}


class RemoteStore:
    """Read/write access to the hosted tables."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    def _request(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None):
        url = f"{self.base_url}/rest/v1/{endpoint}"
        try:
            response = self.session.request(
                method, url, headers=self.headers, json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise StoreUnavailable(f"{method} {endpoint} failed: {e}") from e
        if not response.ok:
            logger.error("Remote store error details: %s", response.text)
            raise StoreUnavailable(f"HTTP {response.status_code}: {response.reason} - {response.text}")
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreUnavailable(f"Invalid JSON from {endpoint}: {e}") from e

    def ping(self) -> None:
        self._request("GET", f"{WORKOUTS_TABLE}?limit=1")

    # ---------- Reads ----------
    def list_weights(self) -> List[schemas.Weight]:
        rows = self._request("GET", f"{WEIGHTS_TABLE}?order=date.desc") or []
        return [w for w in (weight_from_row(r) for r in rows) if w is not None]

    def list_workouts(self) -> List[schemas.Workout]:
        rows = self._request("GET", f"{WORKOUTS_TABLE}?order=date.desc") or []
        return [w for w in (workout_from_row(r) for r in rows) if w is not None]

    def list_birthdays(self) -> List[schemas.Birthday]:
        rows = self._request("GET", f"{BIRTHDAYS_TABLE}?order=date.asc") or []
        return [b for b in (birthday_from_row(r) for r in rows) if b is not None]

    def load(self) -> schemas.Snapshot:
        self.ping()
        snapshot = schemas.Snapshot(
            weights=self.list_weights(),
            workouts=self.list_workouts(),
            birthdays=self.list_birthdays(),
        )
        logger.info(
            "Loaded %d weights, %d workouts, %d birthdays from remote store",
            len(snapshot.weights), len(snapshot.workouts), len(snapshot.birthdays),
        )
        return snapshot

    # ---------- Writes ----------
    def _insert(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        logger.debug("Sending %s row: %s", table, data)
        result = self._request("POST", table, _compact(data))
        if not result:
            raise StoreUnavailable(f"Insert into {table} returned no row")
        return result[0] if isinstance(result, list) else result

    def add_weight(self, entry: schemas.WeightCreate) -> schemas.Weight:
        row = self._insert(WEIGHTS_TABLE, {
            "date": entry.date.isoformat(),
            "weight": entry.weight,
            "body_fat": entry.body_fat,
            "notes": entry.notes,
        })
        return schemas.Weight(id=int(row["id"]), created_at=row.get("created_at"), **entry.model_dump())

    def add_workout(self, entry: schemas.WorkoutCreate) -> schemas.Workout:
        row = self._insert(WORKOUTS_TABLE, {
            "date": entry.date.isoformat(),
            "type": entry.type,
            "duration": entry.duration,
            "distance": entry.distance,
            "hr zone": entry.hr_zone,
            "muscle_groups": ", ".join(entry.muscle_groups),
            "notes": entry.notes.strip() if entry.notes else None,
        })
        return schemas.Workout(id=int(row["id"]), created_at=row.get("created_at"), **entry.model_dump())

    def add_birthday(self, entry: schemas.BirthdayCreate) -> schemas.Birthday:
        row = self._insert(BIRTHDAYS_TABLE, {
            "name": entry.name,
            "date": entry.date.isoformat(),
            "age": entry.age,
            "notes": entry.notes,
        })
        return schemas.Birthday(id=int(row["id"]), created_at=row.get("created_at"), **entry.model_dump())

    def delete(self, table: str, entry_id: int) -> None:
        self._request("DELETE", f"{table}?id=eq.{entry_id}")

    def clear(self) -> None:
        """Delete every row in the hosted tables (PostgREST needs a filter on DELETE)."""
        for table in (WEIGHTS_TABLE, WORKOUTS_TABLE, BIRTHDAYS_TABLE):
            self._request("DELETE", f"{table}?id=not.is.null")
