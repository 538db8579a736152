"""Daily writing practice: one target word per local day."""

import logging
import random

from .config import WRITING_STATE_VERSION
from .interfaces import Storage
from .models import Item
from .utils import day_key

logger = logging.getLogger(__name__)


class DailyWriting:
    """Today's writing target plus the learner's draft for the day."""

    def __init__(self, date: str | None = None, target_id: str | None = None,
                 exclude_weakness: bool = False, updated_at: int = 0,
                 draft: str = '', ai_done: bool = False):
        self.date = date
        self.target_id = target_id
        self.exclude_weakness = exclude_weakness
        self.updated_at = updated_at
        self.draft = draft
        self.ai_done = ai_done

    def to_dict(self) -> dict:
        return {
            'version': WRITING_STATE_VERSION,
            'dateKey': self.date,
            'targetId': self.target_id,
            'excludeWeakness': self.exclude_weakness,
            'updatedAt': self.updated_at,
            'draft': self.draft,
            'aiDone': self.ai_done
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'DailyWriting':
        if data.get('version') != WRITING_STATE_VERSION:
            raise ValueError(f"Unsupported writing state version: {data.get('version')}")
        return cls(
            data.get('dateKey'),
            data.get('targetId'),
            bool(data.get('excludeWeakness', False)),
            int(data.get('updatedAt') or 0),
            data.get('draft') or '',
            bool(data.get('aiDone', False))
        )


def pick_writing_target(items: list[Item], exclude_weakness: bool,
                        rng: random.Random) -> str | None:
    pool = [item for item in items if not (exclude_weakness and item.weakness is not None)]
    if not pool:
        return None
    return rng.choice(pool).id


def ensure_today(state: DailyWriting | None, items: list[Item], now: int,
                 rng: random.Random, exclude_weakness: bool = False) -> DailyWriting:
    """Keep today's target if it still exists and fits the filter, else draw a new one.

    Switching the weakness filter on keeps a target that is not weak;
    switching it off draws again. Draft and done flag carry over within a day.
    """
    today = day_key(now)
    same_day = state is not None and state.date == today
    draft = state.draft if same_day else ''
    ai_done = state.ai_done if same_day else False

    if same_day and state.target_id is not None:
        target = next((item for item in items if item.id == state.target_id), None)
        if target is not None:
            if state.exclude_weakness == exclude_weakness:
                return state
            if exclude_weakness and target.weakness is None:
                return DailyWriting(today, target.id, True, now, draft, ai_done)

    target_id = pick_writing_target(items, exclude_weakness, rng)
    return DailyWriting(today, target_id, exclude_weakness, now, draft, ai_done)


def reshuffle_today(state: DailyWriting | None, items: list[Item], now: int,
                    rng: random.Random, exclude_weakness: bool = False) -> DailyWriting:
    """Draw a fresh target for today, keeping the day's draft."""
    today = day_key(now)
    same_day = state is not None and state.date == today
    return DailyWriting(
        today,
        pick_writing_target(items, exclude_weakness, rng),
        exclude_weakness,
        now,
        state.draft if same_day else '',
        state.ai_done if same_day else False
    )


class DailyWritingTracker:
    """Persisted daily writing state for one user."""

    def __init__(self, storage: Storage, user_id: str = "default", rng: random.Random = None):
        self.storage = storage
        self.user_id = user_id
        self.rng = rng or random.Random()

    def _load(self) -> DailyWriting | None:
        data = self.storage.load_writing(self.user_id)
        if not data:
            return None
        try:
            return DailyWriting.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.error(f"Discarding unreadable writing state for {self.user_id}: {e}")
            return None

    def _save(self, state: DailyWriting) -> DailyWriting:
        self.storage.save_writing(state.to_dict(), self.user_id)
        return state

    def today(self, items: list[Item], now: int, exclude_weakness: bool | None = None) -> DailyWriting:
        """Today's state. A None filter keeps the stored preference."""
        state = self._load()
        if exclude_weakness is None:
            exclude_weakness = state.exclude_weakness if state else False
        updated = ensure_today(state, items, now, self.rng, exclude_weakness)
        if state is None or updated.to_dict() != state.to_dict():
            self._save(updated)
        return updated

    def reshuffle(self, items: list[Item], now: int, exclude_weakness: bool | None = None) -> DailyWriting:
        state = self._load()
        if exclude_weakness is None:
            exclude_weakness = state.exclude_weakness if state else False
        updated = reshuffle_today(state, items, now, self.rng, exclude_weakness)
        logger.info(f"Reshuffled writing target for {self.user_id}: {updated.target_id}")
        return self._save(updated)

    def save_draft(self, items: list[Item], now: int, draft: str) -> DailyWriting:
        state = self.today(items, now)
        state.draft = draft or ''
        state.updated_at = now
        return self._save(state)

    def mark_done(self, items: list[Item], now: int) -> DailyWriting:
        state = self.today(items, now)
        state.ai_done = True
        state.updated_at = now
        return self._save(state)
