"""
Persistence collaborators: hosted REST API, local SQLAlchemy cache, demo seed,
and the repository that owns the in-memory collections.
"""
from .local import LocalStore
from .remote import RemoteStore, StoreUnavailable
from .repository import TrackerRepository

__all__ = ["LocalStore", "RemoteStore", "StoreUnavailable", "TrackerRepository"]
