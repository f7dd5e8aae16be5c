"""Abstract base classes for dependency injection."""

from abc import ABC, abstractmethod

from .models import TranslationDirection, WordPair


class WordGenerator(ABC):
    """Abstract base class for the word pair generator (an LLM in production)."""

    @abstractmethod
    def generate(self, topic: str, category: str | None, count: int,
                 context_words: list[WordPair], exclude_words: list[str],
                 direction: TranslationDirection) -> list[WordPair]:
        """Generate `count` word pairs about a topic.

        context_words are pairs the generator may weave into its prompt (review
        words); exclude_words are source words it must not repeat.
        Raises GenerationFailed on transport or parse errors.
        """
        pass


class Recommender(ABC):
    """Abstract base class for the review priority ranker."""

    @abstractmethod
    def rank(self, candidates: list[dict]) -> list[str]:
        """Rank review candidates.

        candidates are {id, word, translation, lastReviewed, masteryLevel,
        timesReviewed} dicts. Returns the ids of the 6 words to review, highest
        priority first. Raises GeneratorUnavailable on failure.
        """
        pass


class KeyValueStore(ABC):
    """Abstract base class for the key-value persistence medium."""

    @abstractmethod
    def get(self, key: str):
        """Get the JSON value stored under key, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, value) -> None:
        """Store a JSON-compatible value under key (last write wins)."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key. Removing a missing key is not an error."""
        pass
