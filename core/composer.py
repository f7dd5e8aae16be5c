"""Session composition: blends review words, new words and focus words."""

import logging

from .config import (
    MAX_REVIEW_WORDS, DICTIONARY_EXERCISE_SIZE,
    FOCUS_CATEGORY, PERSONAL_CATEGORY, PERSONAL_TOPIC
)
from .dictionary import PersonalDictionaryStore
from .errors import GenerationFailed, NotFound
from .focus import FocusModeManager
from .interfaces import WordGenerator
from .models import SessionResult, TranslationDirection, WordPair, word_key
from .preferences import PreferencesStore
from .review import ReviewSelector
from .session_state import SessionStateStore

logger = logging.getLogger(__name__)


def max_review_words(total_count: int) -> int:
    """Review words never exceed half the session (rounded down) nor MAX_REVIEW_WORDS."""
    return min(MAX_REVIEW_WORDS, total_count // 2)


def unique_pairs(pairs: list[WordPair], taken: set | None = None) -> list[WordPair]:
    """Drop pairs whose source word (case-insensitive) was already seen.

    `taken` is updated in place with the keys of the pairs kept.
    """
    taken = taken if taken is not None else set()
    kept = []
    for pair in pairs:
        if pair.key not in taken:
            taken.add(pair.key)
            kept.append(pair)
    return kept


class SessionComposer:
    """Decides which word pairs make up the next learning session.

    A compose call issues at most one WordGenerator call and persists nothing
    until that call has succeeded, so a failed compose leaves every store as
    it was.
    """

    def __init__(self, review_selector: ReviewSelector, generator: WordGenerator,
                 session_store: SessionStateStore, preferences: PreferencesStore,
                 focus_manager: FocusModeManager | None = None,
                 dictionary: PersonalDictionaryStore | None = None):
        self.review_selector = review_selector
        self.generator = generator
        self.session_store = session_store
        self.preferences = preferences
        self.focus_manager = focus_manager
        self.dictionary = dictionary
        self.last_result = None

    def compose(self, category: str, topic: str, total_count: int,
                exclude_words: list[str] | None = None,
                direction: TranslationDirection | str | None = None,
                custom_instruction: str | None = None) -> list[WordPair]:
        """Compose and save a session of `total_count` word pairs.

        Review words come first, in review priority order, followed by new
        words from the generator. Active focus mode bypasses category/topic
        selection entirely. Raises GenerationFailed when the generator fails
        or under-delivers; there is no retry.
        """
        if total_count < 1:
            raise ValueError(f"total_count must be at least 1, got {total_count}")
        direction = self.preferences.resolve(direction)
        exclude_words = list(exclude_words or [])

        if self.focus_manager and self.focus_manager.is_active():
            return self._compose_focus(total_count, exclude_words, direction)
        if self.dictionary and category == PERSONAL_CATEGORY and topic == PERSONAL_TOPIC:
            return self.compose_from_dictionary(total_count, direction)

        review_candidates = unique_pairs(
            [r.to_word_pair() for r in self.review_selector.select(category, topic)]
        )

        if not review_candidates:
            logger.info(f"No review words for {category}/{topic}, requesting {total_count} new words")
            review_words = []
            new_words = self._generate(topic, category, total_count, [], exclude_words, direction)
        else:
            review_words = review_candidates[:max_review_words(total_count)]
            num_new_words = total_count - len(review_words)
            logger.info(f"Session for {category}/{topic}: {len(review_words)} review + {num_new_words} new")
            exclude_words = exclude_words + [p.source_word for p in review_words]
            new_words = self._generate(topic, category, num_new_words, review_words,
                                       exclude_words, direction)

        pairs = review_words + new_words
        self._save(SessionResult(
            word_pairs=pairs,
            category=category,
            topic=topic,
            translation_direction=direction,
            custom_instruction=custom_instruction,
            review_count=len(review_words)
        ))
        return pairs

    def _compose_focus(self, total_count: int, exclude_words: list[str],
                       direction: TranslationDirection) -> list[WordPair]:
        """Reuse accumulated focus words, or generate them on first use."""
        instruction = self.focus_manager.get_current_focus()
        pairs = self.focus_manager.get_current_focus_words()
        if pairs:
            logger.info(f"Reusing {len(pairs)} focus words for '{instruction}'")
        else:
            exclude_words = exclude_words + self.focus_manager.get_seen_words(instruction)
            pairs = self._generate(instruction, None, total_count, [], exclude_words, direction)
            self.focus_manager.add_words_to_current_focus(pairs)
        self.focus_manager.update_last_used()

        self._save(SessionResult(
            word_pairs=pairs,
            category=FOCUS_CATEGORY,
            topic=instruction,
            translation_direction=direction,
            custom_instruction=instruction,
            focus=True
        ))
        return pairs

    def compose_from_dictionary(self, count: int = DICTIONARY_EXERCISE_SIZE,
                                direction: TranslationDirection | str | None = None) -> list[WordPair]:
        """Build a session from the personal dictionary. Raises NotFound if it is empty."""
        if self.dictionary is None:
            raise NotFound("No personal dictionary configured")
        direction = self.preferences.resolve(direction)
        entries = self.dictionary.sample_for_exercise(count)
        if not entries:
            raise NotFound("Personal dictionary is empty")
        pairs = unique_pairs([e.to_word_pair() for e in entries])
        self._save(SessionResult(
            word_pairs=pairs,
            category=PERSONAL_CATEGORY,
            topic=PERSONAL_TOPIC,
            translation_direction=direction
        ))
        return pairs

    def current_session(self) -> SessionResult | None:
        return self.session_store.load()

    def _save(self, result: SessionResult) -> None:
        self.session_store.save(result)
        self.last_result = result

    def _generate(self, topic: str, category: str | None, count: int,
                  context_words: list[WordPair], exclude_words: list[str],
                  direction: TranslationDirection) -> list[WordPair]:
        """One generator call; returns exactly `count` pairs, none of them an excluded word."""
        try:
            generated = self.generator.generate(
                topic=topic,
                category=category,
                count=count,
                context_words=context_words,
                exclude_words=exclude_words,
                direction=direction
            )
        except GenerationFailed:
            raise
        except Exception as e:
            logger.error(f"Word generator failed for '{topic}': {e}")
            raise GenerationFailed(f"Word generation failed: {e}", requested=count) from e

        taken = {word_key(w) for w in exclude_words}
        new_words = unique_pairs(generated or [], taken)[:count]
        if len(new_words) < count:
            logger.error(f"Generator returned {len(new_words)} usable pairs for '{topic}', expected {count}")
            raise GenerationFailed(
                f"Expected {count} new word pairs, got {len(new_words)}",
                requested=count, received=len(new_words)
            )
        return new_words
