"""
Persistence guard between in-memory session state and the document store.

Responsibilities:
- Fail-soft loads: a store failure reads as "no document".
- Refuse writes whose ``categories`` list is empty. Net Price can never be
  removed, so an empty list always means state that has not loaded yet or
  has been corrupted, and writing it would erase the user's saved matrix.
- Upsert: merge supplied fields into an existing document, or create it.
- Trailing-edge debounce of auto-saves, one pending timer per guard.
"""

import threading
from typing import Any, Dict, Optional, Tuple

from .config import SAVE_DELAY_MS
from .errors import CollegeMatrixError
from .logger import StructuredLogger, get_logger
from .models import UserData, to_document_fields
from .storage import DocumentStore


class PersistenceGuard:

    def __init__(
        self,
        store: DocumentStore,
        delay_ms: int = SAVE_DELAY_MS,
        logger: Optional[StructuredLogger] = None,
    ):
        self.store = store
        self.delay_ms = delay_ms
        self.logger = logger or get_logger()

        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Tuple[str, Dict[str, Any]]] = None
        self._generation = 0

    def load(self, user_id: str) -> Optional[UserData]:
        """Fetch the user's document. Returns None when absent or unreachable."""
        try:
            doc = self.store.get(user_id)
        except CollegeMatrixError as e:
            self.logger.error("Error loading user data", user_id=user_id, error=str(e))
            self.logger.record_load(found=False)
            return None

        if doc is None:
            self.logger.info("No user document found", user_id=user_id)
            self.logger.record_load(found=False)
            return None

        data = UserData.from_doc(user_id, doc)
        self.logger.info(
            "Loaded user data",
            user_id=user_id,
            categories=len(data.categories),
            schools=len(data.schools),
        )
        self.logger.record_load(found=True)
        return data

    def save(self, user_id: str, data: Dict[str, Any]) -> bool:
        """
        Upsert the supplied fields of the user's document.

        Args:
            user_id: Document key
            data: Partial UserData mapping (email, is_premium, categories,
                weights, schools, ratings, costs)

        Returns:
            False if the write was refused because ``categories`` is empty,
            True once the document was written

        Raises:
            TransportError: If the store call fails
        """
        categories = data.get("categories")
        self.logger.debug(
            "Saving user data",
            user_id=user_id,
            categories=None if categories is None else len(categories),
            schools=None if data.get("schools") is None else len(data["schools"]),
        )
        self.logger.record_save_attempt()

        if categories is not None and len(categories) == 0:
            self.logger.error("Refusing to save: categories list is empty", user_id=user_id)
            self.logger.record_save_refused()
            return False

        fields = to_document_fields(data)
        try:
            if self.store.exists(user_id):
                changed = self.store.merge_update(user_id, fields)
                self.logger.info("User data updated", user_id=user_id, changed=sorted(changed))
            else:
                self.store.create(user_id, fields)
                self.logger.info("User data created", user_id=user_id)
        except CollegeMatrixError as e:
            self.logger.record_failure(type(e).__name__)
            raise

        self.logger.record_save_written()
        return True

    def update_premium_status(self, user_id: str, is_premium: bool) -> None:
        """Set isPremium on an existing document. Not subject to the empty guard."""
        try:
            self.store.merge_update(user_id, {"isPremium": bool(is_premium)})
        except CollegeMatrixError as e:
            self.logger.error("Error updating premium status", user_id=user_id, error=str(e))
            raise
        self.logger.info("Premium status updated", user_id=user_id, is_premium=bool(is_premium))

    # Debounced auto-save

    def debounced_save(self, user_id: str, data: Dict[str, Any], delay_ms: Optional[int] = None) -> None:
        """Schedule ``save`` ``delay_ms`` after the last call in a burst."""
        delay = self.delay_ms if delay_ms is None else delay_ms
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self.logger.record_save_coalesced()
            self._generation += 1
            self._pending = (user_id, data)
            timer = threading.Timer(delay / 1000.0, self._fire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def cancel(self) -> None:
        """Drop the pending save, if any. A save already running is not affected."""
        with self._lock:
            self._take_pending()

    def flush(self) -> Optional[bool]:
        """Run the pending save now.

        Returns the save result, or None if nothing was pending or the
        store call failed.
        """
        with self._lock:
            pending = self._take_pending()
        if pending is None:
            return None
        return self._save_quietly(*pending)

    def _take_pending(self) -> Optional[Tuple[str, Dict[str, Any]]]:
        # Caller holds self._lock
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._generation += 1
        pending, self._pending = self._pending, None
        return pending

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._pending is None:
                return
            pending, self._pending = self._pending, None
            self._timer = None
        self._save_quietly(*pending)

    def _save_quietly(self, user_id: str, data: Dict[str, Any]) -> Optional[bool]:
        # Best-effort auto-save: failures are logged and the write is dropped
        try:
            return self.save(user_id, data)
        except Exception as e:
            self.logger.error("Debounced save failed", user_id=user_id, error=str(e))
            return None
