"""
CSV / JSON import and export for the tracker collections.

Column names follow the hosted tables (weight_logs, workouts, birthdays) so a
file exported here can be imported back, or loaded into the hosted API directly.
"""
import csv
import io
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from dateutil import parser as date_parser
from pydantic import ValidationError

from .. import schemas

logger = logging.getLogger(__name__)

COLUMNS: Dict[str, List[str]] = {
    "weights": ["id", "date", "weight", "body_fat", "notes"],
    "workouts": ["id", "date", "type", "duration", "distance", "hr_zone", "notes", "muscle_groups"],
    "birthdays": ["id", "name", "date", "age", "notes"],
}

# Accept the hosted table name as well
ALIASES = {"weight_logs": "weights"}

CREATE_SCHEMAS = {
    "weights": schemas.WeightCreate,
    "workouts": schemas.WorkoutCreate,
    "birthdays": schemas.BirthdayCreate,
}


class UnknownCollection(ValueError):
    pass


def collection_name(name: str) -> str:
    name = ALIASES.get(name, name)
    if name not in COLUMNS:
        raise UnknownCollection(f"Unknown data type: {name}")
    return name


def parse_date_str(s: Any) -> Optional[date]:
    """ISO dates first, then anything dateutil understands (e.g. 3/14/2024)."""
    if s is None or str(s).strip() == "":
        return None
    try:
        return date.fromisoformat(str(s).strip())
    except ValueError:
        pass
    try:
        return date_parser.parse(str(s)).date()
    except (ValueError, OverflowError):
        return None


# ---------- Export ----------

def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def export_csv(collection: str, entries: List[Any]) -> str:
    collection = collection_name(collection)
    columns = COLUMNS[collection]
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=columns, lineterminator="\n")
    writer.writeheader()
    for entry in entries:
        row = entry.model_dump()
        writer.writerow({c: _cell(row.get(c)) for c in columns})
    return buf.getvalue()


def export_json(snapshot: schemas.Snapshot) -> Dict[str, Any]:
    return snapshot.model_dump(mode="json")


# ---------- Import ----------

def _normalize_header(header: str) -> str:
    return "_".join(header.strip().strip('"').lower().split())


def _row_payload(collection: str, row: Dict[str, str]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    for key, value in row.items():
        if key is None or key == "id":
            continue
        value = (value or "").strip()
        if value == "":
            continue
        payload[key] = value
    if "date" in payload:
        parsed = parse_date_str(payload["date"])
        if parsed is None:
            raise ValueError(f"Unrecognized date '{payload['date']}'")
        payload["date"] = parsed
    if collection == "workouts":
        if "type" in payload:
            payload["type"] = payload["type"].lower()
        if "muscle_groups" in payload:
            payload["muscle_groups"] = [g for g in payload["muscle_groups"].split(",") if g.strip()]
    return payload


def _error_text(e: Exception) -> str:
    if isinstance(e, ValidationError):
        return "; ".join(err["msg"] for err in e.errors())
    return str(e)


def parse_csv(collection: str, text: str) -> Tuple[List[Any], List[str]]:
    """
    Parse CSV text into create models.

    Returns (entries, errors); rows that fail validation are reported by line
    number and left out rather than coerced.
    """
    collection = collection_name(collection)
    model = CREATE_SCHEMAS[collection]
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    if reader.fieldnames is None:
        return [], []
    reader.fieldnames = [_normalize_header(h) for h in reader.fieldnames]

    entries: List[Any] = []
    errors: List[str] = []
    for line_no, row in enumerate(reader, start=2):
        if not any((v or "").strip() for k, v in row.items() if k is not None):
            continue
        try:
            entries.append(model.model_validate(_row_payload(collection, row)))
        except (ValidationError, ValueError) as e:
            errors.append(f"Row {line_no}: {_error_text(e)}")
    if errors:
        logger.info("CSV import for %s skipped %d rows", collection, len(errors))
    return entries, errors


def snapshot_from_csv(collection: str, text: str) -> Tuple[schemas.SnapshotImport, List[str]]:
    collection = collection_name(collection)
    entries, errors = parse_csv(collection, text)
    return schemas.SnapshotImport(**{collection: entries}), errors


def parse_json(payload: Dict[str, Any]) -> Tuple[schemas.SnapshotImport, List[str]]:
    """Validate a JSON export entry by entry, same reporting as CSV."""
    out: Dict[str, List[Any]] = {}
    errors: List[str] = []
    for collection in COLUMNS:
        model = CREATE_SCHEMAS[collection]
        items = payload.get(collection) or []
        if not isinstance(items, list):
            errors.append(f"{collection}: expected a list")
            continue
        valid = []
        for i, item in enumerate(items):
            if not isinstance(item, dict):
                errors.append(f"{collection}[{i}]: expected an object")
                continue
            item = {k: v for k, v in item.items() if k not in ("id", "created_at")}
            if isinstance(item.get("date"), str):
                parsed = parse_date_str(item["date"])
                if parsed is not None:
                    item["date"] = parsed
            try:
                valid.append(model.model_validate(item))
            except ValidationError as e:
                errors.append(f"{collection}[{i}]: {_error_text(e)}")
        out[collection] = valid
    return schemas.SnapshotImport(**out), errors
