from datetime import date
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fittrack import models  # noqa: F401
from fittrack import schemas
from fittrack.database import Base
from fittrack.deps import get_today
from fittrack.llm.coach import InsightCoach
from fittrack.main import create_app
from fittrack.store.local import LocalStore
from fittrack.store.remote import BIRTHDAYS_TABLE, WEIGHTS_TABLE, WORKOUTS_TABLE, StoreUnavailable
from fittrack.store.repository import TrackerRepository

# Thursday; the current week runs Mon 2024-03-11 .. Sun 2024-03-17
TODAY = date(2024, 3, 14)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def local_store(session_factory):
    return LocalStore(session_factory)


class FakeRemote:
    """Stands in for RemoteStore; `down=True` makes every call fail."""

    COLLECTIONS = {WEIGHTS_TABLE: "weights", WORKOUTS_TABLE: "workouts", BIRTHDAYS_TABLE: "birthdays"}

    def __init__(self, snapshot=None, down=False, first_id=500):
        self.snapshot = snapshot if snapshot is not None else schemas.Snapshot()
        self.down = down
        self.next_id = first_id
        self.added = []
        self.deleted = []

    def _check(self):
        if self.down:
            raise StoreUnavailable("connection refused")

    def load(self):
        self._check()
        return self.snapshot.model_copy(deep=True)

    def _add(self, collection, out_model, entry):
        self._check()
        self.next_id += 1
        self.added.append(entry)
        saved = out_model(id=self.next_id, **entry.model_dump())
        getattr(self.snapshot, collection).append(saved)
        return saved

    def add_weight(self, entry):
        return self._add("weights", schemas.Weight, entry)

    def add_workout(self, entry):
        return self._add("workouts", schemas.Workout, entry)

    def add_birthday(self, entry):
        return self._add("birthdays", schemas.Birthday, entry)

    def delete(self, table, entry_id):
        self._check()
        self.deleted.append((table, entry_id))
        collection = self.COLLECTIONS[table]
        setattr(self.snapshot, collection, [e for e in getattr(self.snapshot, collection) if e.id != entry_id])

    def clear(self):
        self._check()
        self.snapshot = schemas.Snapshot()


@pytest.fixture
def fake_remote():
    return FakeRemote()


@pytest.fixture
def repo(local_store):
    r = TrackerRepository(local_store, seed_demo_data=False, today=lambda: TODAY)
    r.load()
    return r


class FakeCompletions:
    def __init__(self, reply="Keep it up!", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self, reply="Keep it up!", error=None):
        self.chat = SimpleNamespace(completions=FakeCompletions(reply, error))

    @property
    def calls(self):
        return self.chat.completions.calls


@pytest.fixture
def fake_openai():
    return FakeOpenAI()


@pytest.fixture
def client(repo, fake_openai):
    app = create_app(repository=repo, coach=InsightCoach(client=fake_openai))
    app.dependency_overrides[get_today] = lambda: TODAY
    with TestClient(app) as c:
        yield c


def make_weight(id, d, weight, body_fat=None):
    return schemas.Weight(id=id, date=d, weight=weight, body_fat=body_fat)


def make_workout(id, d, type, **fields):
    return schemas.Workout(id=id, date=d, type=type, **fields)


def make_birthday(id, name, d, age=None):
    return schemas.Birthday(id=id, name=name, date=d, age=age)
