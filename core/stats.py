"""Dashboard counters over an item collection."""

from .config import DAY_MS, LEARNED_STAGE, UPCOMING_DAYS
from .models import Item
from .session import is_challenge_ready


def due_now_count(items: list[Item], now: int) -> int:
    return sum(1 for item in items if item.due_at <= now)


def overdue_count(items: list[Item], now: int) -> int:
    """Items that became due more than a day ago."""
    return sum(1 for item in items if item.due_at <= now - DAY_MS)


def upcoming_count(items: list[Item], now: int, days: int = UPCOMING_DAYS) -> int:
    """Items not yet due that fall due within the next `days` days."""
    horizon = now + days * DAY_MS
    return sum(1 for item in items if now < item.due_at <= horizon)


def weak_count(items: list[Item]) -> int:
    return sum(1 for item in items if item.weakness is not None)


def learned_count(items: list[Item]) -> int:
    return sum(1 for item in items if item.current_stage >= LEARNED_STAGE)


def in_progress_count(items: list[Item]) -> int:
    return sum(1 for item in items if 0 < item.current_stage < LEARNED_STAGE)


def challenge_ready_count(items: list[Item], now: int) -> int:
    return sum(1 for item in items if is_challenge_ready(item, now))


def dashboard(items: list[Item], now: int) -> dict:
    return {
        'total_words': len(items),
        'weak_words': weak_count(items),
        'due_now': due_now_count(items, now),
        'overdue': overdue_count(items, now),
        'upcoming': upcoming_count(items, now),
        'learned': learned_count(items),
        'in_progress': in_progress_count(items),
        'challenge_ready': challenge_ready_count(items, now)
    }
