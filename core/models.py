"""Domain models for lessico application.

Every value persisted through a KeyValueStore is one of these schemas. They
serialize to camelCase JSON (the shape the mobile client stores) and are
validated when read back.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .config import (
    MIN_MASTERY_LEVEL, MAX_MASTERY_LEVEL,
    SOURCE_LANGUAGE, TARGET_LANGUAGE
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def word_key(word: str) -> str:
    """Comparison key for case-insensitive word matching."""
    return word.strip().lower()


class TranslationDirection(str, Enum):
    SOURCE_TO_TARGET = 'source_to_target'
    TARGET_TO_SOURCE = 'target_to_source'


class Record(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode='json', by_alias=True)

    @classmethod
    def from_dict(cls, data: dict):
        return cls.model_validate(data)


class WordPair(Record):
    """A source/target word pair with an optional example sentence."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    source_word: str = Field(min_length=1)
    target_word: str = Field(min_length=1)
    context: Optional[str] = None

    @property
    def key(self) -> str:
        return word_key(self.source_word)


class MasteryRecord(Record):
    """Tracked recall progress for one word in a category/topic."""

    id: str
    word: str
    translation: str
    context: Optional[str] = None
    category: str
    topic: str = ''
    mastery_level: int = Field(default=MIN_MASTERY_LEVEL, ge=MIN_MASTERY_LEVEL, le=MAX_MASTERY_LEVEL)
    times_reviewed: int = Field(default=0, ge=0)
    times_correct: int = Field(default=0, ge=0)
    last_reviewed: datetime = Field(default_factory=utcnow)

    @staticmethod
    def make_id(word: str, translation: str) -> str:
        """Stable id derived from the word and its translation."""
        return f"{word_key(word)}_{word_key(translation)}"

    def to_word_pair(self) -> WordPair:
        return WordPair(source_word=self.word, target_word=self.translation, context=self.context)

    def to_candidate(self) -> dict:
        """Payload describing this record to a Recommender."""
        return {
            'id': self.id,
            'word': self.word,
            'translation': self.translation,
            'lastReviewed': self.last_reviewed.isoformat(),
            'masteryLevel': self.mastery_level,
            'timesReviewed': self.times_reviewed
        }


class DictionaryEntry(Record):
    """A user-curated word in the personal dictionary."""

    id: str = ''
    source_word: str = Field(min_length=1)
    source_lang: str = SOURCE_LANGUAGE
    target_word: str = Field(min_length=1)
    target_lang: str = TARGET_LANGUAGE
    contextual_meaning: str = ''
    part_of_speech: str = ''
    examples: list[str] = Field(default_factory=list)
    themes: list[str] = Field(default_factory=list)
    date_added: Optional[datetime] = None

    @property
    def pair_key(self) -> tuple[str, str]:
        return (word_key(self.source_word), word_key(self.target_word))

    def to_word_pair(self) -> WordPair:
        return WordPair(
            source_word=self.source_word,
            target_word=self.target_word,
            context=self.contextual_meaning or None
        )


class FocusSession(Record):
    """The active focus instruction and the words generated for it so far."""

    focus_instruction: str = Field(min_length=1)
    date_created: datetime = Field(default_factory=utcnow)
    last_used: Optional[datetime] = None
    words: list[WordPair] = Field(default_factory=list)


class SessionResult(Record):
    """Outcome of a session start, read by the exercise screens."""

    word_pairs: list[WordPair]
    category: str
    topic: str
    date: datetime = Field(default_factory=utcnow)
    translation_direction: TranslationDirection = TranslationDirection.SOURCE_TO_TARGET
    custom_instruction: Optional[str] = None
    review_count: int = 0
    focus: bool = False
