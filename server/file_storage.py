"""File-based storage implementation."""

import json
import logging
import os

from core.interfaces import Storage

logger = logging.getLogger(__name__)


class FileStorage(Storage):
    """File-based storage implementation (one JSON file per user and kind)."""

    def __init__(self, state_dir: str = None):
        # Project root is one level up from server/
        project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        self.state_dir = state_dir or os.environ.get('WORDLOOM_STATE_DIR') or project_root

    def _get_file(self, kind: str, user_id: str) -> str:
        """Get file path for a user's words or progress."""
        if user_id == "default":
            return os.path.join(self.state_dir, f'wordloom_{kind}.json')
        return os.path.join(self.state_dir, f'wordloom_{kind}_{user_id}.json')

    def _read(self, path: str):
        if not os.path.exists(path):
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading {path}: {e}")
            return None

    def _write(self, path: str, data) -> None:
        os.makedirs(self.state_dir, exist_ok=True)
        tmp_path = path + '.tmp'
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)

    def load_items(self, user_id: str = "default") -> list[dict]:
        data = self._read(self._get_file('words', user_id))
        if not isinstance(data, list):
            return []
        return data

    def save_items(self, items: list[dict], user_id: str = "default") -> None:
        self._write(self._get_file('words', user_id), items)

    def load_progress(self, user_id: str = "default") -> dict | None:
        data = self._read(self._get_file('progress', user_id))
        return data if isinstance(data, dict) else None

    def save_progress(self, progress: dict, user_id: str = "default") -> None:
        self._write(self._get_file('progress', user_id), progress)

    def load_writing(self, user_id: str = "default") -> dict | None:
        data = self._read(self._get_file('writing', user_id))
        return data if isinstance(data, dict) else None

    def save_writing(self, writing: dict, user_id: str = "default") -> None:
        self._write(self._get_file('writing', user_id), writing)

    def list_users(self) -> list[str]:
        """List all existing user IDs."""
        users = []
        if os.path.exists(self.state_dir):
            for filename in os.listdir(self.state_dir):
                if filename == 'wordloom_words.json':
                    users.append('default')
                elif filename.startswith('wordloom_words_') and filename.endswith('.json'):
                    users.append(filename[len('wordloom_words_'):-len('.json')])
        return sorted(users)

