"""REST API client for wordloom server."""

import requests
from typing import Optional


class WordloomAPIClient:
    """Client for communicating with the wordloom REST API."""

    def __init__(self, base_url: str = "http://localhost:8000", user_id: str = "default"):
        self.base_url = base_url.rstrip('/')
        self.user_id = user_id
        self.session = requests.Session()

    def _get(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request."""
        if params is None:
            params = {}
        params['user_id'] = self.user_id
        response = self.session.get(f"{self.base_url}{endpoint}", params=params)
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, data: dict, params: dict = None) -> dict:
        """Make a POST request."""
        response = self.session.post(f"{self.base_url}{endpoint}", json=data, params=params)
        response.raise_for_status()
        return response.json()

    def health_check(self) -> dict:
        """Check if the server is running."""
        response = self.session.get(f"{self.base_url}/")
        response.raise_for_status()
        return response.json()

    def get_dashboard(self) -> dict:
        """Get dashboard counters and today's progress."""
        return self._get("/api/dashboard")

    def list_words(self) -> list[dict]:
        return self._get("/api/words")['words']

    def add_word(self, word: str, meaning: str, entry_type: str = 'word',
                 sentences: Optional[list[dict]] = None) -> dict:
        return self._post("/api/words", {
            'word': word,
            'meaning': meaning,
            'entry_type': entry_type,
            'sentences': sentences or [],
            'user_id': self.user_id
        })

    def start_session(self, mode: str = 'normal', limit: Optional[int] = None) -> dict:
        """Start a study session in the given mode."""
        return self._post("/api/sessions", {'mode': mode, 'limit': limit, 'user_id': self.user_id})

    def get_question(self, session_id: str) -> dict:
        response = self.session.get(f"{self.base_url}/api/sessions/{session_id}/question")
        response.raise_for_status()
        return response.json()

    def submit_answer(self, session_id: str, answer: str = None,
                      answers: list[str] = None, correct: bool = None) -> dict:
        """Submit an answer for the current question."""
        return self._post(f"/api/sessions/{session_id}/answer", {
            'answer': answer,
            'answers': answers,
            'correct': correct
        })

    def skip(self, session_id: str) -> dict:
        return self._post(f"/api/sessions/{session_id}/skip", {})

    def export_words(self) -> dict:
        return self._get("/api/export")

    def import_words(self, payload: dict) -> dict:
        return self._post("/api/import", payload, params={'user_id': self.user_id})

    def get_writing(self, exclude_weakness: Optional[bool] = None) -> dict:
        """Today's writing target, draft and correction prompt."""
        params = {} if exclude_weakness is None else {'exclude_weakness': exclude_weakness}
        return self._get("/api/writing/today", params)

    def reshuffle_writing(self) -> dict:
        return self._post("/api/writing/reshuffle", {'user_id': self.user_id})

    def save_draft(self, draft: str) -> dict:
        response = self.session.put(f"{self.base_url}/api/writing/draft",
                                    json={'draft': draft, 'user_id': self.user_id})
        response.raise_for_status()
        return response.json()

    def mark_writing_done(self) -> dict:
        return self._post("/api/writing/done", {'user_id': self.user_id})

    def qa_prompt(self, item_id: str, question: str) -> dict:
        return self._post(f"/api/words/{item_id}/qa-prompt",
                          {'question': question, 'user_id': self.user_id})
