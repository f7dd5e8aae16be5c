"""Persistence of the in-progress session for downstream screens."""

import logging

from .config import SESSION_KEY
from .errors import CorruptRecord
from .interfaces import KeyValueStore
from .models import SessionResult
from .utils import load_record

logger = logging.getLogger(__name__)


class SessionStateStore:
    """Holds the last SessionResult until the next session overwrites it."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def save(self, result: SessionResult) -> None:
        self.store.set(SESSION_KEY, result.to_dict())

    def load(self) -> SessionResult | None:
        try:
            return load_record(self.store, SESSION_KEY, SessionResult)
        except CorruptRecord as e:
            logger.warning(f"Ignoring unreadable session state: {e}")
            return None

    def clear(self) -> None:
        self.store.remove(SESSION_KEY)
