# projectdollar/services/state_store.py
"""
Persistence of the user's state as one namespaced JSON document.

Layout of the stored document:
    {
        "preferences": {...},
        "balances": {"USD": "0.00", "EUR": "0.00"},
        "assets": [ {holding record}, ... ]
    }

save() shallow-merges: saving {"balances": ...} leaves "assets" and
"preferences" untouched, so each service persists only its own slice.

Database errors are raised as PersistenceError. The services catch them,
log them and keep serving from memory; a failed write is a no-op.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from projectdollar.models import StateRecord
from projectdollar.services.exceptions import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_STATE_KEY = "ProjectDollar:state"


class StateStore:
    """
    Reads and merges the state document stored under one key.

    Args:
        session_factory: Callable returning a new Session (SessionLocal)
        key: Namespace key of the row

    Example:
        store = StateStore(SessionLocal)
        store.save({"preferences": {"theme": "dark"}})
        store.load()["preferences"]   # {"theme": "dark"}
    """

    def __init__(
            self,
            session_factory: Callable[[], Session],
            key: str = DEFAULT_STATE_KEY,
    ) -> None:
        self._session_factory = session_factory
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> dict[str, Any]:
        """
        Return the stored document, or {} when nothing was saved yet.

        Raises:
            PersistenceError: Database unreadable
        """
        try:
            with self._session_factory() as session:
                record = session.get(StateRecord, self._key)
                if record is None:
                    return {}
                return dict(record.payload or {})
        except SQLAlchemyError as e:
            raise PersistenceError("load", str(e)) from e

    def save(self, partial: dict[str, Any]) -> dict[str, Any]:
        """
        Merge top-level keys of `partial` into the stored document.

        Returns:
            The merged document

        Raises:
            PersistenceError: Database unwritable (nothing is changed)
        """
        try:
            with self._session_factory() as session:
                record = session.get(StateRecord, self._key)
                if record is None:
                    merged = dict(partial)
                    session.add(StateRecord(key=self._key, payload=merged))
                else:
                    merged = {**(record.payload or {}), **partial}
                    record.payload = merged
                    record.updated_at = datetime.now(timezone.utc)
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError("save", str(e)) from e

        logger.debug(f"State saved ({', '.join(sorted(partial))})")
        return merged

    def clear(self) -> None:
        """Delete the stored document."""
        try:
            with self._session_factory() as session:
                record = session.get(StateRecord, self._key)
                if record is not None:
                    session.delete(record)
                    session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError("clear", str(e)) from e


def load_slice(store: StateStore, name: str, default: Any) -> Any:
    """
    Read one top-level slice, logging and returning `default` on failure.

    Used by services at first access so a broken database degrades to an
    empty in-memory state instead of failing requests.
    """
    try:
        state = store.load()
    except PersistenceError as e:
        logger.error(f"Could not load '{name}': {e}")
        return default
    return state.get(name, default)


def save_slice(store: StateStore, name: str, value: Any) -> bool:
    """
    Persist one top-level slice.

    Returns:
        False when the write failed (already logged); in-memory state stays
        authoritative
    """
    try:
        store.save({name: value})
    except PersistenceError as e:
        logger.error(f"Could not persist '{name}': {e}")
        return False
    return True
