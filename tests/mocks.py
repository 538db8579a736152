"""Mock implementations and fixtures shared by the test modules."""

import copy

from core.interfaces import Storage
from core.models import Item, Sentence, Weakness

NOW = 1_700_000_000_000
MINUTE = 60 * 1000
DAY = 24 * 60 * MINUTE


class MockStorage(Storage):
    """In-memory storage for testing."""

    def __init__(self):
        self.items = {}
        self.progress = {}
        self.writing = {}
        self.save_calls = 0
        self.events = []

    def load_items(self, user_id: str = "default") -> list[dict]:
        return copy.deepcopy(self.items.get(user_id, []))

    def save_items(self, items: list[dict], user_id: str = "default") -> None:
        self.save_calls += 1
        self.items[user_id] = copy.deepcopy(items)

    def load_progress(self, user_id: str = "default") -> dict | None:
        return copy.deepcopy(self.progress.get(user_id))

    def save_progress(self, progress: dict, user_id: str = "default") -> None:
        self.progress[user_id] = copy.deepcopy(progress)

    def load_writing(self, user_id: str = "default") -> dict | None:
        return copy.deepcopy(self.writing.get(user_id))

    def save_writing(self, writing: dict, user_id: str = "default") -> None:
        self.writing[user_id] = copy.deepcopy(writing)

    def list_users(self) -> list[str]:
        return sorted(self.items.keys())

    def log_event(self, event: str, user_id: str, session_id: str = None, **data) -> None:
        self.events.append((event, user_id, data))


class FixedClock:
    """Clock returning a settable time."""

    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now


def make_item(word='affect', meaning='影響する', entry_type='word', *, item_id=None,
              stage=0, streak=0, stability=1, due_at=NOW, weakness=None, sentences=None):
    """Build an item with explicit learning state."""
    return Item(
        id=item_id or f'id-{word}',
        entry_type=entry_type,
        word=word,
        meaning=meaning,
        sentences=sentences if sentences is not None else [],
        current_stage=stage,
        stage_streak=streak,
        stability=stability,
        due_at=due_at,
        created_at=NOW - DAY,
        updated_at=NOW - DAY,
        weakness=Weakness(*weakness) if weakness else None
    )


def cloze_sentence(s5=None, s6=None):
    """'The weather can affect your mood .' with optional cloze indexes."""
    return Sentence('s1', 'The weather can affect your mood.', '天気は気分に影響することがある。',
                    ['The', 'weather', 'can', 'affect', 'your', 'mood', '.'], s5, s6)
