"""Per-word mastery tracking scoped by category and topic."""

import logging

from .config import MASTERY_KEY, MIN_MASTERY_LEVEL, MAX_MASTERY_LEVEL
from .errors import NotFound
from .interfaces import KeyValueStore
from .models import MasteryRecord, utcnow
from .utils import load_records, save_records

logger = logging.getLogger(__name__)


class MasteryStore:
    """Stores MasteryRecords as one list under a single key.

    Reads and writes go straight to the backing store, so a mutation is
    visible to the next read. There is no locking: callers must not run two
    read-modify-write cycles concurrently.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def all(self) -> list[MasteryRecord]:
        return load_records(self.store, MASTERY_KEY, MasteryRecord)

    def _save_all(self, records: list[MasteryRecord]) -> None:
        save_records(self.store, MASTERY_KEY, records, MasteryRecord)

    def list(self, category: str, topic: str | None = None) -> list[MasteryRecord]:
        """Records for a category, optionally narrowed to one topic."""
        return [
            r for r in self.all()
            if r.category == category and (not topic or r.topic == topic)
        ]

    def get(self, record_id: str) -> MasteryRecord:
        for record in self.all():
            if record.id == record_id:
                return record
        raise NotFound(f"No mastery record with id '{record_id}'")

    def track_word(self, word: str, translation: str, category: str, topic: str,
                   is_correct: bool, context: str | None = None) -> MasteryRecord:
        """Record an exposure to a word, creating its record the first time."""
        if not word or not translation or not category:
            raise ValueError("word, translation and category are required to track a word")

        record_id = MasteryRecord.make_id(word, translation)
        records = self.all()
        if any(r.id == record_id for r in records):
            return self.record_review(record_id, is_correct)

        record = MasteryRecord(
            id=record_id,
            word=word,
            translation=translation,
            context=context,
            category=category,
            topic=topic or '',
            mastery_level=MIN_MASTERY_LEVEL + 1 if is_correct else MIN_MASTERY_LEVEL,
            times_reviewed=1,
            times_correct=1 if is_correct else 0,
            last_reviewed=utcnow()
        )
        records.append(record)
        self._save_all(records)
        logger.info(f"Tracking new word '{word}' in {category}/{topic}")
        return record

    def record_review(self, record_id: str, success: bool) -> MasteryRecord:
        """Apply one review outcome. Raises NotFound for an unknown id."""
        records = self.all()
        for i, record in enumerate(records):
            if record.id != record_id:
                continue
            if success:
                level = min(record.mastery_level + 1, MAX_MASTERY_LEVEL)
            else:
                level = max(record.mastery_level - 1, MIN_MASTERY_LEVEL)
            updated = record.model_copy(update={
                'mastery_level': level,
                'times_reviewed': record.times_reviewed + 1,
                'times_correct': record.times_correct + (1 if success else 0),
                'last_reviewed': utcnow()
            })
            records[i] = updated
            self._save_all(records)
            return updated
        raise NotFound(f"No mastery record with id '{record_id}'")

    def update(self, record_id: str, word: str | None = None, translation: str | None = None,
               context: str | None = None) -> MasteryRecord:
        """Edit the text of a tracked word. The id and the counters are kept."""
        records = self.all()
        for i, record in enumerate(records):
            if record.id != record_id:
                continue
            changes = {}
            if word:
                changes['word'] = word
            if translation:
                changes['translation'] = translation
            if context is not None:
                changes['context'] = context or None
            records[i] = record.model_copy(update=changes)
            self._save_all(records)
            return records[i]
        raise NotFound(f"No mastery record with id '{record_id}'")

    def remove(self, record_id: str) -> None:
        records = self.all()
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            raise NotFound(f"No mastery record with id '{record_id}'")
        self._save_all(remaining)
        logger.info(f"Removed mastery record '{record_id}'")
