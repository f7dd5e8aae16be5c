"""Configuration constants for lessico application."""

SOURCE_LANGUAGE = 'it'
TARGET_LANGUAGE = 'fr'

# Session composition
MAX_REVIEW_WORDS = 6          # Absolute cap on review words per session
RECOMMENDER_BATCH_SIZE = 6    # Candidates above this count are ranked by the recommender
DEFAULT_SESSION_SIZE = 12     # Word pairs per session when the caller does not say

# Mastery tracking
MIN_MASTERY_LEVEL = 0
MAX_MASTERY_LEVEL = 5

# Focus mode
FOCUS_HISTORY_LIMIT = 10      # Archived focus sessions kept, newest first
FOCUS_CATEGORY = 'focus'

# Personal dictionary
DICTIONARY_EXERCISE_SIZE = 10
PERSONAL_CATEGORY = 'vocabulary'
PERSONAL_TOPIC = 'Personnel'

# Key-value storage keys
MASTERY_KEY = 'vocabulary_mastery'
DICTIONARY_KEY = 'personal_dictionary'
FOCUS_KEY = 'current_focus'
FOCUS_HISTORY_KEY = 'focus_sessions'
SESSION_KEY = 'current_session'
DIRECTION_KEY = 'translation_direction'
