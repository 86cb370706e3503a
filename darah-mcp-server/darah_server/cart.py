"""Per-session cart state and its in-memory store."""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from .errors import NotInCartError
from .models import CartEntry

logger = logging.getLogger(__name__)

DEFAULT_SESSION_MAX_AGE = 60 * 60 * 8


class CartState:
    """Ordered cart entries of one session, unique by item ID."""

    def __init__(self, entries: Optional[list[CartEntry]] = None) -> None:
        self._entries: list[CartEntry] = [entry.model_copy() for entry in entries or []]

    def get(self) -> list[CartEntry]:
        """Return the current entries in cart order."""
        return list(self._entries)

    def quantity_of(self, item_id: str) -> int:
        entry = self._find(item_id)
        return entry.quantity if entry else 0

    def add_one(self, item_id: str) -> None:
        """Increment the entry for item_id, appending a new one if absent."""
        entry = self._find(item_id)
        if entry:
            entry.quantity += 1
        else:
            self._entries.append(CartEntry(item_id=item_id, quantity=1))

    def set_quantity(self, item_id: str, quantity: int) -> None:
        """
        Set the quantity of an existing entry.

        A quantity of 0 removes the entry, whether or not it exists.

        Raises:
            NotInCartError: If quantity is positive and the item is not in the cart
        """
        if quantity == 0:
            self._entries = [e for e in self._entries if e.item_id != item_id]
            return

        entry = self._find(item_id)
        if entry is None:
            raise NotInCartError(f"Item {item_id} is not in the cart")
        entry.quantity = quantity

    def clear(self) -> None:
        self._entries = []

    def _find(self, item_id: str) -> Optional[CartEntry]:
        for entry in self._entries:
            if entry.item_id == item_id:
                return entry
        return None


class _Session:
    def __init__(self) -> None:
        self.entries: list[CartEntry] = []
        self.lock = threading.Lock()
        self.touched_at = time.monotonic()


class CartStore:
    """Manages per-session carts in memory.

    ``session()`` holds a per-session lock for the whole operation, so
    concurrent requests for the same session are serialized. Changes are
    written back only when the block exits without an exception.
    """

    def __init__(self, max_age: float = DEFAULT_SESSION_MAX_AGE) -> None:
        """
        Initialize the cart store.

        Args:
            max_age: Seconds a session may stay idle before its cart is dropped
        """
        self.max_age = max_age
        self._sessions: dict[str, _Session] = {}
        self._lock = threading.Lock()

    @contextmanager
    def session(self, session_id: str) -> Iterator[CartState]:
        """Open the cart of session_id, creating it on first access."""
        record = self._get_or_create(session_id)
        with record.lock:
            state = CartState(record.entries)
            yield state
            record.entries = state.get()
            record.touched_at = time.monotonic()

    def get(self, session_id: str) -> list[CartEntry]:
        with self.session(session_id) as state:
            return [entry.model_copy() for entry in state.get()]

    def set(self, session_id: str, entries: list[CartEntry]) -> None:
        """Replace the stored entries of session_id."""
        record = self._get_or_create(session_id)
        with record.lock:
            record.entries = [entry.model_copy() for entry in entries]
            record.touched_at = time.monotonic()

    def clear(self, session_id: str) -> None:
        with self.session(session_id) as state:
            state.clear()

    def session_count(self) -> int:
        return len(self._sessions)

    def _get_or_create(self, session_id: str) -> _Session:
        with self._lock:
            self._expire_idle()
            record = self._sessions.get(session_id)
            if record is None:
                record = _Session()
                self._sessions[session_id] = record
                logger.debug(f"Created cart for session {session_id}")
            return record

    def _expire_idle(self) -> None:
        cutoff = time.monotonic() - self.max_age
        expired = [
            sid for sid, record in self._sessions.items()
            if record.touched_at < cutoff and not record.lock.locked()
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info(f"Expired {len(expired)} idle cart session(s)")
