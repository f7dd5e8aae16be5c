"""REST API client for lessico server."""

import requests
from typing import Optional


class LessicoAPIClient:
    """Client for communicating with the lessico REST API."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 120):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()

    def _request(self, method: str, endpoint: str, **kwargs) -> dict:
        response = self.session.request(
            method, f"{self.base_url}{endpoint}", timeout=self.timeout, **kwargs
        )
        response.raise_for_status()
        return response.json()

    def _get(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request."""
        return self._request('GET', endpoint, params=params or {})

    def _post(self, endpoint: str, data: dict) -> dict:
        """Make a POST request."""
        return self._request('POST', endpoint, json=data)

    def _put(self, endpoint: str, data: dict) -> dict:
        """Make a PUT request."""
        return self._request('PUT', endpoint, json=data)

    def _delete(self, endpoint: str) -> dict:
        """Make a DELETE request."""
        return self._request('DELETE', endpoint)

    def health_check(self) -> dict:
        """Check if the server is running."""
        return self._get("/")

    def start_session(self, topic: str, category: str = 'vocabulary', total_count: int = 12,
                      exclude_words: Optional[list] = None, direction: Optional[str] = None) -> dict:
        """Compose a new session."""
        data = {
            'category': category,
            'topic': topic,
            'total_count': total_count,
            'exclude_words': exclude_words or []
        }
        if direction:
            data['direction'] = direction
        return self._post("/api/session", data)

    def get_session(self) -> dict:
        """Get the current session."""
        return self._get("/api/session")

    def track_word(self, word: str, translation: str, category: str, topic: str,
                   is_correct: bool, context: Optional[str] = None) -> dict:
        """Record an answer for a word."""
        return self._post("/api/mastery/track", {
            'word': word,
            'translation': translation,
            'category': category,
            'topic': topic,
            'is_correct': is_correct,
            'context': context
        })

    def get_tracked_words(self, category: Optional[str] = None, topic: Optional[str] = None) -> dict:
        """Get tracked words."""
        params = {}
        if category:
            params['category'] = category
        if topic:
            params['topic'] = topic
        return self._get("/api/mastery", params)

    def get_focus(self) -> dict:
        return self._get("/api/focus")

    def set_focus(self, instruction: str) -> dict:
        return self._post("/api/focus", {'instruction': instruction})

    def clear_focus(self) -> dict:
        return self._delete("/api/focus")

    def get_dictionary(self) -> dict:
        return self._get("/api/dictionary")

    def add_dictionary_word(self, source_word: str, target_word: str,
                            contextual_meaning: str = '', themes: Optional[list] = None) -> dict:
        return self._post("/api/dictionary", {
            'sourceWord': source_word,
            'targetWord': target_word,
            'contextualMeaning': contextual_meaning,
            'themes': themes or []
        })

    def remove_dictionary_word(self, entry_id: str) -> dict:
        return self._delete(f"/api/dictionary/{entry_id}")

    def get_direction(self) -> dict:
        return self._get("/api/preferences/direction")

    def set_direction(self, direction: str) -> dict:
        return self._put("/api/preferences/direction", {'direction': direction})
