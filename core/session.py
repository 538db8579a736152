"""Session queue building and per-session state."""

import random
import uuid

from .config import (
    DEFAULT_SESSION_LIMIT, MAX_SESSION_LIMIT,
    WEAKNESS_SESSION_SIZE, CHALLENGE_SESSION_SIZE, CHALLENGE_MIN_STABILITY
)
from .models import Item
from .progression import MODE_NORMAL, MODE_WEAKNESS, MODE_CHALLENGE, MODES

EMPTY_MESSAGES = {
    MODE_NORMAL: 'Nothing is due right now. Add some words to get started.',
    MODE_WEAKNESS: 'No weak words. Do a normal study session first.',
    MODE_CHALLENGE: 'No words are ready for a challenge yet. Keep practising to build stability.',
}


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_SESSION_LIMIT
    return max(1, min(MAX_SESSION_LIMIT, int(limit)))


def is_challenge_ready(item: Item, now: int) -> bool:
    """Mastered, not under remediation and not currently due."""
    return (item.stability >= CHALLENGE_MIN_STABILITY
            and item.weakness is None
            and item.due_at > now)


def build_queue(items: list[Item], mode: str, now: int, rng: random.Random,
                limit: int | None = None) -> list[Item]:
    """Select and order the items for one study session.

    An empty result is a valid session with nothing to study.
    """
    if mode == MODE_NORMAL:
        candidates = [item for item in items if item.due_at <= now]
        size = clamp_limit(limit)
    elif mode == MODE_WEAKNESS:
        candidates = [item for item in items if item.weakness is not None]
        size = WEAKNESS_SESSION_SIZE
    elif mode == MODE_CHALLENGE:
        candidates = [item for item in items if is_challenge_ready(item, now)]
        size = CHALLENGE_SESSION_SIZE
    else:
        raise ValueError(f"Unknown study mode: {mode}")

    rng.shuffle(candidates)
    return candidates[:size]


class StudySession:
    """One pass over a queue of items in a single mode."""

    def __init__(self, mode: str, item_ids: list[str], session_id: str = None):
        if mode not in MODES:
            raise ValueError(f"Unknown study mode: {mode}")
        self.id = session_id or str(uuid.uuid4())[:8]
        self.mode = mode
        self.item_ids = item_ids
        self.index = 0
        self.answered = 0
        self.correct = 0
        self.current = None  # StageContent presented for item_ids[index]

    @property
    def target(self) -> int:
        return len(self.item_ids)

    @property
    def is_finished(self) -> bool:
        return self.index >= len(self.item_ids)

    @property
    def current_item_id(self) -> str | None:
        if self.is_finished:
            return None
        return self.item_ids[self.index]

    def advance(self) -> None:
        self.index += 1
        self.current = None

    def empty_message(self) -> str:
        return EMPTY_MESSAGES[self.mode]

    def to_dict(self) -> dict:
        return {
            'session_id': self.id,
            'mode': self.mode,
            'target': self.target,
            'position': min(self.index + 1, self.target),
            'answered': self.answered,
            'correct': self.correct,
            'finished': self.is_finished,
            'message': self.empty_message() if self.target == 0 else None
        }
