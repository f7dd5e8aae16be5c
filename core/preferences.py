"""Learner preferences loaded once and passed explicitly to the composer."""

import logging

from .config import DIRECTION_KEY
from .interfaces import KeyValueStore
from .models import TranslationDirection

logger = logging.getLogger(__name__)


class PreferencesStore:
    """Default translation direction, persisted across restarts."""

    def __init__(self, store: KeyValueStore,
                 default: TranslationDirection = TranslationDirection.SOURCE_TO_TARGET):
        self.store = store
        self._direction = self._load(default)

    def _load(self, default: TranslationDirection) -> TranslationDirection:
        value = self.store.get(DIRECTION_KEY)
        if value is None:
            return default
        try:
            return TranslationDirection(value)
        except ValueError:
            logger.warning(f"Unknown stored translation direction {value!r}, using {default.value}")
            return default

    @property
    def direction(self) -> TranslationDirection:
        return self._direction

    def set_direction(self, direction: TranslationDirection | str) -> TranslationDirection:
        direction = TranslationDirection(direction)
        self.store.set(DIRECTION_KEY, direction.value)
        self._direction = direction
        return direction

    def resolve(self, override: TranslationDirection | str | None = None) -> TranslationDirection:
        """The per-request override if given, else the stored default."""
        if override is None:
            return self._direction
        return TranslationDirection(override)
