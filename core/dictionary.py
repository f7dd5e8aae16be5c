"""Personal dictionary of user-curated words."""

import logging
import random
import uuid

from .config import DICTIONARY_KEY, DICTIONARY_EXERCISE_SIZE
from .errors import NotFound
from .interfaces import KeyValueStore
from .models import DictionaryEntry, utcnow
from .utils import load_records, save_records

logger = logging.getLogger(__name__)


class PersonalDictionaryStore:
    """Dictionary entries independent of category/topic.

    No two entries share the same (source_word, target_word) pair, compared
    case-insensitively.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self, entry_id: str) -> DictionaryEntry:
        for entry in self.list():
            if entry.id == entry_id:
                return entry
        raise NotFound(f"No dictionary entry with id '{entry_id}'")

    def add(self, entry: DictionaryEntry) -> bool:
        """Insert an entry. Returns False if the pair is already present."""
        entries = self.list()
        if any(e.pair_key == entry.pair_key for e in entries):
            logger.info(f"'{entry.source_word}' -> '{entry.target_word}' already in dictionary")
            return False
        stored = entry.model_copy(update={'id': uuid.uuid4().hex, 'date_added': utcnow()})
        entries.append(stored)
        save_records(self.store, DICTIONARY_KEY, entries, DictionaryEntry)
        return True

    def update(self, entry: DictionaryEntry) -> bool:
        """Replace an existing entry, keeping its id and date_added.

        Returns False if the edit would duplicate another entry's pair.
        """
        entries = self.list()
        index = next((i for i, e in enumerate(entries) if e.id == entry.id), None)
        if index is None:
            raise NotFound(f"No dictionary entry with id '{entry.id}'")
        if any(e.pair_key == entry.pair_key for i, e in enumerate(entries) if i != index):
            return False
        entries[index] = entry.model_copy(update={'date_added': entries[index].date_added})
        save_records(self.store, DICTIONARY_KEY, entries, DictionaryEntry)
        return True

    def remove(self, entry_id: str) -> bool:
        """Delete an entry. Returns False if no entry has that id."""
        entries = self.list()
        remaining = [e for e in entries if e.id != entry_id]
        if len(remaining) == len(entries):
            return False
        save_records(self.store, DICTIONARY_KEY, remaining, DictionaryEntry)
        return True

    def sample_for_exercise(self, count: int = DICTIONARY_EXERCISE_SIZE) -> list[DictionaryEntry]:
        """All entries if there are at most `count`, otherwise a random sample."""
        entries = self.list()
        if len(entries) <= count:
            return entries
        return random.sample(entries, count)

    def themes(self) -> dict[str, int]:
        """Theme name -> number of entries tagged with it, most used first."""
        counts = {}
        for entry in self.list():
            for theme in entry.themes:
                counts[theme] = counts.get(theme, 0) + 1
        return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))

    # Keep last: shadows the builtin for any annotation defined after it
    def list(self) -> list[DictionaryEntry]:
        return load_records(self.store, DICTIONARY_KEY, DictionaryEntry)
