"""
Key-value document store for per-user state.

Contract: ``get`` / ``create`` / ``merge_update`` keyed by user id, with
``createdAt`` and ``updatedAt`` assigned here from the store clock. Any
SQLAlchemy failure surfaces as TransportError; lock contention is retried
briefly first.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .database import UserDocument, init_database
from .errors import DocumentNotFoundError, TransportError
from .retry import RetryError, exponential_backoff, is_transient_error


def diff_dict(old: Dict[str, Any], new: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    changed = {}
    keys = set(old.keys()) | set(new.keys())
    for k in keys:
        ov = old.get(k)
        nv = new.get(k)
        if ov != nv:
            changed[k] = {"old": ov, "new": nv}
    return changed


def _as_doc(record: UserDocument) -> Dict[str, Any]:
    doc = dict(record.data or {})
    doc["createdAt"] = record.created_at
    doc["updatedAt"] = record.updated_at
    return doc


class DocumentStore:
    """SQLite-backed document store, one JSON document per user id."""

    def __init__(
        self,
        db_path: Path,
        clock: Callable[[], datetime] = datetime.now,
        max_retries: int = 2,
        retry_delay: float = 0.05,
    ):
        self.db_path = Path(db_path)
        self.clock = clock
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        try:
            engine = init_database(self.db_path)
        except SQLAlchemyError as e:
            raise TransportError(f"Cannot open store at {self.db_path}: {e}") from e
        self._Session = sessionmaker(bind=engine)

    def _call(self, op: str, fn: Callable[[], Any]) -> Any:
        retrying = exponential_backoff(
            max_retries=self.max_retries,
            base_delay=self.retry_delay,
            exceptions=(OperationalError,),
            should_retry=is_transient_error,
        )(fn)
        try:
            return retrying()
        except RetryError as e:
            raise TransportError(f"{op} failed: {e}") from e
        except SQLAlchemyError as e:
            raise TransportError(f"{op} failed: {e}") from e

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the document for ``key`` with its timestamps, or None."""
        def _get():
            with self._Session() as session:
                record = session.get(UserDocument, key)
                return None if record is None else _as_doc(record)

        return self._call("get", _get)

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    def create(self, key: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new document; both timestamps are set to the store time."""
        def _create():
            now = self.clock()
            with self._Session() as session:
                record = UserDocument(user_id=key, data=dict(fields), created_at=now, updated_at=now)
                session.add(record)
                session.commit()
                return _as_doc(record)

        return self._call("create", _create)

    def merge_update(self, key: str, fields: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
        """
        Overwrite only the supplied top-level fields and refresh updatedAt.

        Returns:
            The changed fields as {field: {"old": ..., "new": ...}}

        Raises:
            DocumentNotFoundError: If no document exists for ``key``
            TransportError: If the store call fails
        """
        def _merge():
            with self._Session() as session:
                record = session.get(UserDocument, key)
                if record is None:
                    raise DocumentNotFoundError(f"No document for user {key}")
                old = dict(record.data or {})
                # Reassign so SQLAlchemy sees the JSON column change
                record.data = {**old, **fields}
                record.updated_at = self.clock()
                changed = diff_dict({k: old.get(k) for k in fields}, dict(fields))
                session.commit()
                return changed

        return self._call("merge_update", _merge)

    def list_ids(self) -> List[str]:
        def _list():
            with self._Session() as session:
                return [row[0] for row in session.query(UserDocument.user_id).order_by(UserDocument.user_id)]

        return self._call("list", _list)
