"""
Data management: export, import, reload from the stores, and reset.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import PlainTextResponse

from .. import schemas
from ..store import transfer
from ..deps import get_repository
from ..store.repository import TrackerRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/data", tags=["Data"])


@router.get("/status", response_model=schemas.DataStatus)
def data_status(repo: TrackerRepository = Depends(get_repository)):
    return repo.status()


@router.get("/export.json")
def export_all(repo: TrackerRepository = Depends(get_repository)) -> Dict[str, Any]:
    return transfer.export_json(repo.snapshot())


@router.get("/export/{collection}.csv", response_class=PlainTextResponse)
def export_collection(collection: str, repo: TrackerRepository = Depends(get_repository)):
    try:
        name = transfer.collection_name(collection)
    except transfer.UnknownCollection as e:
        raise HTTPException(status_code=404, detail=str(e))
    entries = getattr(repo.snapshot(), name)
    return PlainTextResponse(
        transfer.export_csv(name, entries),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{collection}.csv"'},
    )


def _apply(repo: TrackerRepository, payload: schemas.SnapshotImport, errors, overwrite: bool) -> schemas.ImportResult:
    result = repo.import_snapshot(payload, overwrite=overwrite)
    result.skipped = len(errors)
    result.errors = errors
    logger.info("Imported %d entries (%d skipped)", result.imported, result.skipped)
    return result


@router.post("/import", response_model=schemas.ImportResult)
def import_json(
    payload: Dict[str, Any] = Body(...),
    overwrite: bool = Query(False, description="Replace all local data instead of appending"),
    repo: TrackerRepository = Depends(get_repository),
):
    """
    Import a JSON export ({"weights": [...], "workouts": [...], "birthdays": [...]}).
    Invalid entries are reported in `errors` and skipped.
    """
    if not any(k in payload for k in transfer.COLUMNS):
        raise HTTPException(status_code=400, detail="Invalid backup file format")
    snapshot, errors = transfer.parse_json(payload)
    return _apply(repo, snapshot, errors, overwrite)


@router.post("/import/{collection}.csv", response_model=schemas.ImportResult)
def import_csv(
    collection: str,
    file: UploadFile = File(...),
    repo: TrackerRepository = Depends(get_repository),
):
    try:
        name = transfer.collection_name(collection)
    except transfer.UnknownCollection as e:
        raise HTTPException(status_code=404, detail=str(e))
    raw = file.file.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV file must be UTF-8 encoded")
    snapshot, errors = transfer.snapshot_from_csv(name, text)
    return _apply(repo, snapshot, errors, overwrite=False)


@router.post("/reload", response_model=schemas.DataStatus)
def reload_data(repo: TrackerRepository = Depends(get_repository)):
    """Re-run the load chain (hosted API, then local cache, then demo data)."""
    repo.load()
    return repo.status()


@router.post("/reset", response_model=schemas.DataStatus)
def reset_data(repo: TrackerRepository = Depends(get_repository)):
    repo.reset()
    return repo.status()
