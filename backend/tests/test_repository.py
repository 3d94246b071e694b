from datetime import date

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from conftest import TODAY, FakeRemote, make_weight
from fittrack import schemas
from fittrack.store.local import LocalStore
from fittrack.store.repository import DataSource, TrackerRepository


def _weight(d, w):
    return schemas.WeightCreate(date=d, weight=w)


class StaticSource(DataSource):
    def __init__(self, name, snapshot):
        self.name = name
        self.snapshot = snapshot
        self.calls = 0

    def fetch(self):
        self.calls += 1
        return self.snapshot


def test_empty_chain_starts_empty(local_store):
    repo = TrackerRepository(local_store, seed_demo_data=False)
    assert repo.load() == "empty"
    assert repo.weights == [] and repo.workouts == [] and repo.birthdays == []


def test_first_answering_source_wins():
    first = StaticSource("a", None)
    second = StaticSource("b", schemas.Snapshot(weights=[make_weight(1, TODAY, 180.0)]))
    third = StaticSource("c", schemas.Snapshot())
    repo = TrackerRepository(local=None, seed_demo_data=False)

    assert repo.load([first, second, third]) == "b"
    assert third.calls == 0
    assert [w.weight for w in repo.weights] == [180.0]


def test_seed_is_cached_locally(local_store):
    repo = TrackerRepository(local_store, seed_demo_data=True, today=lambda: TODAY)
    assert repo.load() == "demo"
    assert len(repo.weights) == 4 and len(repo.workouts) == 3 and len(repo.birthdays) == 2
    assert repo.weights[0].date > repo.weights[-1].date

    again = TrackerRepository(local_store, seed_demo_data=True, today=lambda: TODAY)
    assert again.load() == "local"
    assert [w.weight for w in again.weights] == [w.weight for w in repo.weights]


def test_remote_down_falls_back_to_local_cache(local_store):
    local_store.add_weight(_weight(TODAY, 181.0))
    repo = TrackerRepository(local_store, remote=FakeRemote(down=True), seed_demo_data=True)
    assert repo.load() == "local"
    assert [w.weight for w in repo.weights] == [181.0]


def test_remote_snapshot_replaces_collections_and_cache(local_store):
    local_store.add_weight(_weight(TODAY, 199.0))
    remote = FakeRemote(schemas.Snapshot(weights=[
        make_weight(10, date(2024, 3, 1), 186.0),
        make_weight(11, date(2024, 3, 12), 184.0),
    ]))
    repo = TrackerRepository(local_store, remote=remote)

    assert repo.load() == "remote"
    assert [w.id for w in repo.weights] == [11, 10]
    assert [w.id for w in local_store.load().weights] == [11, 10]


def test_empty_remote_is_a_valid_answer(local_store):
    local_store.add_weight(_weight(TODAY, 199.0))
    repo = TrackerRepository(local_store, remote=FakeRemote(schemas.Snapshot()))
    assert repo.load() == "remote"
    assert repo.weights == []


def test_add_writes_through_and_keeps_order(local_store):
    remote = FakeRemote(first_id=100)
    repo = TrackerRepository(local_store, remote=remote, seed_demo_data=False)
    repo.load()

    repo.add_weight(_weight(date(2024, 3, 10), 185.0))
    latest = repo.add_weight(_weight(date(2024, 3, 13), 184.0))
    repo.add_weight(_weight(date(2024, 3, 1), 187.0))

    assert latest.id == 102
    assert [w.date for w in repo.weights] == [date(2024, 3, 13), date(2024, 3, 10), date(2024, 3, 1)]
    assert len(remote.added) == 3
    assert {w.id for w in local_store.load().weights} == {101, 102, 103}


def test_add_while_remote_down_keeps_entry_locally(local_store):
    repo = TrackerRepository(local_store, remote=FakeRemote(down=True), seed_demo_data=False)
    repo.load()
    saved = repo.add_birthday(schemas.BirthdayCreate(name="Mike", date=date(1985, 3, 22)))
    assert saved.id is not None
    assert repo.get_birthday(saved.id).name == "Mike"
    assert local_store.load().birthdays[0].name == "Mike"


def test_add_validates_raw_payloads(repo):
    with pytest.raises(ValidationError):
        repo.add_workout({"date": "2024-03-14", "type": "run", "duration": 20})
    assert repo.workouts == []


def test_delete(repo, local_store):
    saved = repo.add_weight(_weight(TODAY, 184.0))
    assert repo.delete_weight(saved.id) is True
    assert repo.weights == []
    assert local_store.load().weights == []
    assert repo.delete_weight(saved.id) is False


def test_replace_is_delete_then_add(repo):
    original = repo.add_weight(_weight(TODAY, 184.0))
    updated = repo.replace_weight(original.id, _weight(TODAY, 183.2))

    assert updated.id != original.id
    assert repo.get_weight(original.id) is None
    assert [w.weight for w in repo.weights] == [183.2]
    assert repo.replace_weight(9999, _weight(TODAY, 180.0)) is None


def test_replace_rejects_invalid_entry_without_deleting(repo):
    original = repo.add_workout(schemas.WorkoutCreate(date=TODAY, type="walk", duration=30))
    with pytest.raises(ValidationError):
        repo.replace_workout(original.id, {"date": "2024-03-14", "type": "walk"})
    assert repo.get_workout(original.id) is not None


def test_import_overwrite_and_append(repo):
    repo.add_weight(_weight(TODAY, 184.0))
    payload = schemas.SnapshotImport(
        weights=[_weight(date(2024, 3, 1), 188.0)],
        workouts=[schemas.WorkoutCreate(date=TODAY, type="run", distance=3.1)],
    )

    assert repo.import_snapshot(payload).imported == 2
    assert len(repo.weights) == 2

    repo.import_snapshot(payload, overwrite=True)
    assert [w.weight for w in repo.weights] == [188.0]
    assert len(repo.workouts) == 1


def test_reset_clears_everything(repo, local_store):
    repo.add_weight(_weight(TODAY, 184.0))
    repo.reset()
    assert repo.status().weights == 0
    assert local_store.load().is_empty()


class FlakyLocalStore(LocalStore):
    fail_adds = False

    def add_weight(self, entry, entry_id=None):
        if self.fail_adds:
            raise SQLAlchemyError("disk I/O error")
        return super().add_weight(entry, entry_id=entry_id)


def test_offline_entry_never_collides_with_later_remote_ids(local_store):
    remote = FakeRemote(schemas.Snapshot(weights=[
        make_weight(1, date(2024, 3, 1), 186.0),
        make_weight(2, date(2024, 3, 8), 185.0),
    ]), first_id=2)
    repo = TrackerRepository(local_store, remote=remote, seed_demo_data=False)
    repo.load()

    remote.down = True
    offline = repo.add_weight(_weight(date(2024, 3, 13), 181.0))
    remote.down = False
    online = repo.add_weight(_weight(TODAY, 180.0))

    assert online.id == 3
    assert offline.id > 10 ** 12
    assert {w.id for w in local_store.load().weights} == {1, 2, 3, offline.id}
    assert [w.weight for w in repo.weights] == [180.0, 181.0, 185.0, 186.0]


def test_demo_ids_leave_room_for_remote_ids(local_store):
    remote = FakeRemote(down=True, first_id=0)
    repo = TrackerRepository(local_store, remote=remote, seed_demo_data=True, today=lambda: TODAY)
    assert repo.load() == "demo"
    assert min(w.id for w in repo.weights) > 10 ** 12

    remote.down = False
    saved = repo.add_weight(_weight(TODAY, 183.0))
    assert saved.id == 1
    assert len(local_store.load().weights) == 5


def test_entry_saved_remotely_survives_local_cache_failure(session_factory):
    local = FlakyLocalStore(session_factory)
    repo = TrackerRepository(local, remote=FakeRemote(first_id=40), seed_demo_data=False)
    repo.load()

    local.fail_adds = True
    saved = repo.add_weight(_weight(TODAY, 184.0))

    assert saved.id == 41
    assert repo.get_weight(41) is not None


def test_failed_replace_keeps_original(session_factory):
    local = FlakyLocalStore(session_factory)
    repo = TrackerRepository(local, seed_demo_data=False)
    repo.load()
    original = repo.add_weight(_weight(TODAY, 184.0))

    local.fail_adds = True
    with pytest.raises(SQLAlchemyError):
        repo.replace_weight(original.id, _weight(TODAY, 183.0))

    assert repo.get_weight(original.id).weight == 184.0
    assert [w.id for w in local.load().weights] == [original.id]


def test_overwrite_import_survives_reload(local_store):
    remote = FakeRemote(schemas.Snapshot(weights=[
        make_weight(1, date(2024, 3, 1), 190.0),
        make_weight(2, date(2024, 3, 8), 189.0),
    ]), first_id=2)
    repo = TrackerRepository(local_store, remote=remote, seed_demo_data=False)
    repo.load()

    repo.import_snapshot(schemas.SnapshotImport(weights=[_weight(TODAY, 170.0)]), overwrite=True)
    assert [w.weight for w in repo.weights] == [170.0]

    assert repo.load() == "remote"
    assert [w.weight for w in repo.weights] == [170.0]


def test_overwrite_import_stays_local_when_remote_cannot_be_cleared(local_store):
    remote = FakeRemote(schemas.Snapshot(weights=[make_weight(1, date(2024, 3, 1), 190.0)]))
    repo = TrackerRepository(local_store, remote=remote, seed_demo_data=False)
    repo.load()

    remote.down = True
    repo.import_snapshot(schemas.SnapshotImport(weights=[_weight(TODAY, 170.0)]), overwrite=True)
    assert [w.weight for w in repo.weights] == [170.0]
    assert remote.added == []

    remote.down = False
    repo.load()
    assert [w.weight for w in repo.weights] == [190.0]
