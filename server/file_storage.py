"""File-based storage implementation."""

import json
import logging
import os
import re

from core.errors import StorageError
from core.interfaces import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = '~/.config/lessico/config.json'

_KEY_PATTERN = re.compile(r'^[A-Za-z0-9_.-]+$')


def load_config(config_file: str = None) -> dict:
    """Load the JSON config file. Raises FileNotFoundError if it is missing."""
    config_file = os.path.expanduser(config_file or DEFAULT_CONFIG_FILE)
    if not os.path.exists(config_file):
        raise FileNotFoundError(
            f"Config file not found at {config_file}\n"
            f'Please create it with: {{"gemini_api_key": "YOUR_API_KEY_HERE"}}'
        )
    with open(config_file, 'r') as f:
        return json.load(f)


class FileStorage(KeyValueStore):
    """Stores each key as a JSON file in a state directory."""

    def __init__(self, state_dir: str = None):
        self.state_dir = state_dir or os.environ.get(
            'LESSICO_STATE_DIR',
            os.path.expanduser('~/.local/share/lessico')
        )

    def _get_file(self, key: str) -> str:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return os.path.join(self.state_dir, f'{key}.json')

    def get(self, key: str):
        path = self._get_file(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            # Moved aside so the next set() cannot overwrite it
            corrupt_path = path + '.corrupt'
            logger.warning(f"Unreadable JSON in {path}: {e}; moved to {corrupt_path}")
            try:
                os.replace(path, corrupt_path)
            except OSError as move_error:
                raise StorageError(f"Error quarantining {path}: {move_error}") from e
            return None
        except OSError as e:
            raise StorageError(f"Error reading {path}: {e}") from e

    def set(self, key: str, value) -> None:
        path = self._get_file(key)
        tmp_path = path + '.tmp'
        try:
            os.makedirs(self.state_dir, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(value, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except (OSError, TypeError) as e:
            raise StorageError(f"Error writing {path}: {e}") from e

    def remove(self, key: str) -> None:
        path = self._get_file(key)
        try:
            if os.path.exists(path):
                os.remove(path)
        except OSError as e:
            raise StorageError(f"Error removing {path}: {e}") from e

    def keys(self) -> list[str]:
        """List all stored keys."""
        if not os.path.exists(self.state_dir):
            return []
        return sorted(
            filename[:-5] for filename in os.listdir(self.state_dir)
            if filename.endswith('.json')
        )
