from .models import (
    WordPair, TranslationDirection, MasteryRecord, DictionaryEntry,
    FocusSession, SessionResult
)
from .interfaces import WordGenerator, Recommender, KeyValueStore
from .errors import (
    LessicoError, GenerationFailed, GeneratorUnavailable,
    NotFound, CorruptRecord, StorageError
)
from .mastery import MasteryStore
from .dictionary import PersonalDictionaryStore
from .review import ReviewSelector
from .focus import FocusModeManager
from .session_state import SessionStateStore
from .preferences import PreferencesStore
from .composer import SessionComposer, max_review_words
from .utils import extract_json
from .config import (
    MAX_REVIEW_WORDS, RECOMMENDER_BATCH_SIZE, DEFAULT_SESSION_SIZE,
    MIN_MASTERY_LEVEL, MAX_MASTERY_LEVEL, FOCUS_HISTORY_LIMIT,
    SOURCE_LANGUAGE, TARGET_LANGUAGE
)

__all__ = [
    'WordPair', 'TranslationDirection', 'MasteryRecord', 'DictionaryEntry',
    'FocusSession', 'SessionResult',
    'WordGenerator', 'Recommender', 'KeyValueStore',
    'LessicoError', 'GenerationFailed', 'GeneratorUnavailable',
    'NotFound', 'CorruptRecord', 'StorageError',
    'MasteryStore', 'PersonalDictionaryStore', 'ReviewSelector',
    'FocusModeManager', 'SessionStateStore', 'PreferencesStore',
    'SessionComposer', 'max_review_words',
    'extract_json',
    'MAX_REVIEW_WORDS', 'RECOMMENDER_BATCH_SIZE', 'DEFAULT_SESSION_SIZE',
    'MIN_MASTERY_LEVEL', 'MAX_MASTERY_LEVEL', 'FOCUS_HISTORY_LIMIT',
    'SOURCE_LANGUAGE', 'TARGET_LANGUAGE'
]
