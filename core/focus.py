"""Focus mode: a free-text instruction that overrides category/topic selection."""

import logging

from .config import FOCUS_KEY, FOCUS_HISTORY_KEY, FOCUS_HISTORY_LIMIT
from .errors import CorruptRecord
from .interfaces import KeyValueStore
from .models import FocusSession, WordPair, utcnow, word_key
from .utils import load_record, load_records, save_records

logger = logging.getLogger(__name__)


class FocusModeManager:
    """Two-state machine (inactive/active) around a single FocusSession.

    While active, words generated for the instruction accumulate in the
    session until it is cleared. Cleared sessions are archived in a short
    history so their words can be excluded next time the same instruction
    is used.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get_current_focus_session(self) -> FocusSession | None:
        try:
            return load_record(self.store, FOCUS_KEY, FocusSession)
        except CorruptRecord as e:
            logger.warning(f"Discarding unreadable focus session: {e}")
            return None

    def get_current_focus(self) -> str | None:
        session = self.get_current_focus_session()
        return session.focus_instruction if session else None

    def is_active(self) -> bool:
        return self.get_current_focus_session() is not None

    def set_current_focus(self, instruction: str) -> FocusSession:
        """Enter focus mode. An already active session is archived, not merged."""
        instruction = (instruction or '').strip()
        if not instruction:
            raise ValueError("Focus instruction must not be empty")
        previous = self.get_current_focus_session()
        if previous:
            self._archive(previous)
        now = utcnow()
        session = FocusSession(focus_instruction=instruction, date_created=now, last_used=now, words=[])
        self.store.set(FOCUS_KEY, session.to_dict())
        logger.info(f"Focus set: '{instruction}'")
        return session

    def add_words_to_current_focus(self, pairs: list[WordPair]) -> int:
        """Append pairs to the active session, skipping source words it already has.

        Returns the number of pairs appended (0 when focus is inactive).
        """
        session = self.get_current_focus_session()
        if session is None:
            return 0
        seen = {p.key for p in session.words}
        added = []
        for pair in pairs:
            if pair.key not in seen:
                seen.add(pair.key)
                added.append(pair)
        if added:
            updated = session.model_copy(update={'words': session.words + added})
            self.store.set(FOCUS_KEY, updated.to_dict())
        return len(added)

    def get_current_focus_words(self) -> list[WordPair]:
        session = self.get_current_focus_session()
        return list(session.words) if session else []

    def update_last_used(self) -> None:
        session = self.get_current_focus_session()
        if session:
            updated = session.model_copy(update={'last_used': utcnow()})
            self.store.set(FOCUS_KEY, updated.to_dict())

    def clear_current_focus(self) -> None:
        """Leave focus mode, archiving the session in the focus history."""
        session = self.get_current_focus_session()
        if session:
            self._archive(session)
            logger.info(f"Focus cleared: '{session.focus_instruction}'")
        self.store.remove(FOCUS_KEY)

    def get_focus_sessions(self) -> list[FocusSession]:
        """Archived focus sessions, newest first."""
        return load_records(self.store, FOCUS_HISTORY_KEY, FocusSession)

    def get_seen_words(self, instruction: str) -> list[str]:
        """Source words already generated for an instruction in past sessions."""
        target = word_key(instruction)
        words = []
        seen = set()
        for session in self.get_focus_sessions():
            if word_key(session.focus_instruction) != target:
                continue
            for pair in session.words:
                if pair.key not in seen:
                    seen.add(pair.key)
                    words.append(pair.source_word)
        return words

    def _archive(self, session: FocusSession) -> None:
        history = self.get_focus_sessions()
        history.insert(0, session)
        save_records(self.store, FOCUS_HISTORY_KEY, history[:FOCUS_HISTORY_LIMIT], FocusSession)
