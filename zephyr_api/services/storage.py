"""
Local persistent key-value storage.

The history log is kept as one serialized document under a fixed
key. Two backends implement the same get/set protocol: a SQLite table
through SQLAlchemy, and a plain dict for tests.
"""

from typing import Callable, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import PersistenceError
from ..models.storage import StoredValue


class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryStorage:
    """Dict-backed storage."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class SqlKeyValueStorage:
    """
    Storage backed by the ``kv_store`` table.

    Each call opens and closes its own session, so one instance can be
    shared by the whole application.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, key: str) -> str | None:
        db = self.session_factory()
        try:
            record = db.get(StoredValue, key)
            return record.value if record is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read {key!r}: {e}") from e
        finally:
            db.close()

    def set(self, key: str, value: str) -> None:
        db = self.session_factory()
        try:
            record = db.get(StoredValue, key)
            if record is None:
                db.add(StoredValue(key=key, value=value))
            else:
                record.value = value
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to write {key!r}: {e}") from e
        finally:
            db.close()
