"""
Single owner of the tracker's in-memory collections.

Loading walks an ordered list of data sources (hosted API, local cache, demo
seed); the first one that yields a snapshot replaces the collections wholesale.
Writes go through to the hosted API when it is reachable and always land in the
local cache.

Ids come from the hosted API when it takes the write. Entries kept only on this
device (hosted API down, demo data) get millisecond-clock ids, far above anything
the hosted API hands out, so the two never collide in the local cache. Without a
hosted API the local cache numbers entries itself.
"""
import logging
import threading
import time
from datetime import date
from typing import Callable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from .. import models, schemas
from .local import LocalStore
from .remote import BIRTHDAYS_TABLE, WEIGHTS_TABLE, WORKOUTS_TABLE, RemoteStore, StoreUnavailable
from .seed import DEMO_ID_SPAN, demo_snapshot

logger = logging.getLogger(__name__)


# ---------- Data sources ----------

class DataSource:
    """Returns a snapshot, or None when it failed or had nothing to offer."""
    name = "source"

    def fetch(self) -> Optional[schemas.Snapshot]:
        raise NotImplementedError


class RemoteSource(DataSource):
    name = "remote"

    def __init__(self, remote: RemoteStore):
        self.remote = remote

    def fetch(self) -> Optional[schemas.Snapshot]:
        try:
            return self.remote.load()
        except StoreUnavailable as e:
            logger.warning("Remote store unavailable, falling back: %s", e)
            return None


class LocalCacheSource(DataSource):
    name = "local"

    def __init__(self, local: LocalStore):
        self.local = local

    def fetch(self) -> Optional[schemas.Snapshot]:
        try:
            snapshot = self.local.load()
        except SQLAlchemyError as e:
            logger.warning("Local cache unreadable: %s", e)
            return None
        if snapshot.is_empty():
            return None
        return snapshot


class SeedSource(DataSource):
    name = "demo"

    def __init__(self, today: Callable[[], date], first_id: Callable[[], int] = lambda: 1):
        self.today = today
        self.first_id = first_id

    def fetch(self) -> Optional[schemas.Snapshot]:
        return demo_snapshot(self.today(), first_id=self.first_id())


# ---------- Repository ----------

def _sorted_desc(entries: List) -> List:
    return sorted(entries, key=lambda e: (e.date, e.id), reverse=True)


def _sorted_asc(entries: List) -> List:
    return sorted(entries, key=lambda e: (e.date, e.id))


class TrackerRepository:
    def __init__(
        self,
        local: LocalStore,
        remote: Optional[RemoteStore] = None,
        seed_demo_data: bool = True,
        today: Callable[[], date] = date.today,
    ):
        self.local = local
        self.remote = remote
        self.seed_demo_data = seed_demo_data
        self.today = today
        self.source: Optional[str] = None
        self.weights: List[schemas.Weight] = []
        self.workouts: List[schemas.Workout] = []
        self.birthdays: List[schemas.Birthday] = []
        self._lock = threading.RLock()
        self._last_device_id = 0

    def sources(self) -> List[DataSource]:
        chain: List[DataSource] = []
        if self.remote is not None:
            chain.append(RemoteSource(self.remote))
        chain.append(LocalCacheSource(self.local))
        if self.seed_demo_data:
            chain.append(SeedSource(self.today, self._demo_first_id))
        return chain

    def load(self, sources: Optional[Sequence[DataSource]] = None) -> str:
        """
        Replace the collections from the first source that answers.

        Loads are serialized; a later load simply overwrites an earlier one.
        Returns the name of the winning source ("empty" when none answered).
        """
        with self._lock:
            for source in (sources if sources is not None else self.sources()):
                snapshot = source.fetch()
                if snapshot is None:
                    continue
                self._replace(snapshot)
                self.source = source.name
                if source.name in ("remote", "demo"):
                    self._cache(snapshot)
                logger.info(
                    "Data loaded from %s: %d weights, %d workouts, %d birthdays",
                    source.name, len(self.weights), len(self.workouts), len(self.birthdays),
                )
                return source.name
            self._replace(schemas.Snapshot())
            self.source = "empty"
            logger.warning("No data source answered; starting empty")
            return self.source

    def _replace(self, snapshot: schemas.Snapshot) -> None:
        self.weights = _sorted_desc(snapshot.weights)
        self.workouts = _sorted_desc(snapshot.workouts)
        self.birthdays = _sorted_asc(snapshot.birthdays)

    def _cache(self, snapshot: schemas.Snapshot) -> None:
        try:
            self.local.replace_all(snapshot)
        except SQLAlchemyError as e:
            logger.error("Error saving to local cache: %s", e)

    def snapshot(self) -> schemas.Snapshot:
        with self._lock:
            return schemas.Snapshot(
                weights=list(self.weights),
                workouts=list(self.workouts),
                birthdays=list(self.birthdays),
            )

    def status(self) -> schemas.DataStatus:
        return schemas.DataStatus(
            source=self.source,
            weights=len(self.weights),
            workouts=len(self.workouts),
            birthdays=len(self.birthdays),
        )

    # ---------- Ids ----------
    def _device_id(self, count: int = 1) -> Optional[int]:
        """First of `count` ids for entries the hosted API has not seen; None lets the cache pick."""
        if self.remote is None:
            return None
        with self._lock:
            start = max(int(time.time() * 1000), self._last_device_id + 1)
            self._last_device_id = start + count - 1
            return start

    def _demo_first_id(self) -> int:
        return self._device_id(DEMO_ID_SPAN) or 1

    # ---------- Creates ----------
    def _save(self, entry, remote_add: Callable, local_add: Callable, write_through: bool = True):
        saved = None
        if write_through and self.remote is not None:
            try:
                saved = remote_add(entry)
            except StoreUnavailable as e:
                logger.warning("Remote save failed, keeping entry locally: %s", e)
        entry_id = saved.id if saved is not None else self._device_id()
        try:
            return local_add(entry, entry_id=entry_id)
        except SQLAlchemyError as e:
            if saved is None:
                raise
            logger.error("Entry %s saved remotely but not to the local cache: %s", saved.id, e)
            return saved

    def add_weight(self, entry: schemas.WeightCreate, write_through: bool = True) -> schemas.Weight:
        entry = schemas.WeightCreate.model_validate(entry)
        with self._lock:
            stored = self._save(
                entry, self.remote and self.remote.add_weight, self.local.add_weight, write_through
            )
            self.weights = _sorted_desc(self.weights + [stored])
        return stored

    def add_workout(self, entry: schemas.WorkoutCreate, write_through: bool = True) -> schemas.Workout:
        entry = schemas.WorkoutCreate.model_validate(entry)
        with self._lock:
            stored = self._save(
                entry, self.remote and self.remote.add_workout, self.local.add_workout, write_through
            )
            self.workouts = _sorted_desc(self.workouts + [stored])
        return stored

    def add_birthday(self, entry: schemas.BirthdayCreate, write_through: bool = True) -> schemas.Birthday:
        entry = schemas.BirthdayCreate.model_validate(entry)
        with self._lock:
            stored = self._save(
                entry, self.remote and self.remote.add_birthday, self.local.add_birthday, write_through
            )
            self.birthdays = _sorted_asc(self.birthdays + [stored])
        return stored

    # ---------- Lookups ----------
    def get_weight(self, entry_id: int) -> Optional[schemas.Weight]:
        return next((w for w in self.weights if w.id == entry_id), None)

    def get_workout(self, entry_id: int) -> Optional[schemas.Workout]:
        return next((w for w in self.workouts if w.id == entry_id), None)

    def get_birthday(self, entry_id: int) -> Optional[schemas.Birthday]:
        return next((b for b in self.birthdays if b.id == entry_id), None)

    # ---------- Deletes ----------
    def _delete(self, attr: str, table: str, model, entry_id: int) -> bool:
        with self._lock:
            entries = getattr(self, attr)
            remaining = [e for e in entries if e.id != entry_id]
            if len(remaining) == len(entries):
                return False
            if self.remote is not None:
                try:
                    self.remote.delete(table, entry_id)
                except StoreUnavailable as e:
                    logger.warning("Remote delete failed for %s %s: %s", table, entry_id, e)
            self.local.delete(model, entry_id)
            setattr(self, attr, remaining)
            return True

    def delete_weight(self, entry_id: int) -> bool:
        return self._delete("weights", WEIGHTS_TABLE, models.WeightEntry, entry_id)

    def delete_workout(self, entry_id: int) -> bool:
        return self._delete("workouts", WORKOUTS_TABLE, models.Workout, entry_id)

    def delete_birthday(self, entry_id: int) -> bool:
        return self._delete("birthdays", BIRTHDAYS_TABLE, models.Birthday, entry_id)

    # ---------- Edits (delete + re-add) ----------
    # The replacement is stored before the old entry is deleted.
    def replace_weight(self, entry_id: int, entry: schemas.WeightCreate) -> Optional[schemas.Weight]:
        entry = schemas.WeightCreate.model_validate(entry)
        with self._lock:
            if self.get_weight(entry_id) is None:
                return None
            stored = self.add_weight(entry)
            self.delete_weight(entry_id)
            return stored

    def replace_workout(self, entry_id: int, entry: schemas.WorkoutCreate) -> Optional[schemas.Workout]:
        entry = schemas.WorkoutCreate.model_validate(entry)
        with self._lock:
            if self.get_workout(entry_id) is None:
                return None
            stored = self.add_workout(entry)
            self.delete_workout(entry_id)
            return stored

    def replace_birthday(self, entry_id: int, entry: schemas.BirthdayCreate) -> Optional[schemas.Birthday]:
        entry = schemas.BirthdayCreate.model_validate(entry)
        with self._lock:
            if self.get_birthday(entry_id) is None:
                return None
            stored = self.add_birthday(entry)
            self.delete_birthday(entry_id)
            return stored

    # ---------- Bulk ----------
    def reset(self) -> None:
        """Drop every local entry. The hosted API is left untouched."""
        with self._lock:
            self.local.clear()
            self._replace(schemas.Snapshot())
            self.source = "empty"

    def _clear_remote(self) -> bool:
        """Empty the hosted tables; False when they could not be cleared."""
        if self.remote is None:
            return True
        try:
            self.remote.clear()
        except StoreUnavailable as e:
            logger.warning("Could not clear remote store; import stays on this device: %s", e)
            return False
        return True

    def import_snapshot(self, payload: schemas.SnapshotImport, overwrite: bool = False) -> schemas.ImportResult:
        """
        Add every entry in `payload`.

        With overwrite=True all existing data is dropped first, in the hosted API
        as well. If the hosted tables cannot be cleared the imported entries are
        kept on this device only, so a later reload cannot merge them with the
        old hosted rows.
        """
        with self._lock:
            write_through = True
            if overwrite:
                write_through = self._clear_remote()
                self.reset()
            for w in payload.weights:
                self.add_weight(w, write_through=write_through)
            for wo in payload.workouts:
                self.add_workout(wo, write_through=write_through)
            for b in payload.birthdays:
                self.add_birthday(b, write_through=write_through)
            self.source = self.source if self.source != "empty" else "import"
        return schemas.ImportResult(
            imported=len(payload.weights) + len(payload.workouts) + len(payload.birthdays)
        )
