"""Item repository and daily progress tracker on top of a Storage backend."""

import logging
from typing import Callable

from .interfaces import Storage
from .models import DailyProgress, Item

logger = logging.getLogger(__name__)


class ItemRepository:
    """Read-modify-write access to one user's item collection.

    Records are values: every write replaces a whole item, and callers get
    copies they may change freely. Subscribers are called with no arguments
    after each mutation.
    """

    def __init__(self, storage: Storage, user_id: str = "default"):
        self.storage = storage
        self.user_id = user_id
        self._subscribers: list[Callable[[], None]] = []

    def _load(self) -> list[Item]:
        items = []
        for data in self.storage.load_items(self.user_id):
            try:
                items.append(Item.from_dict(data))
            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"Skipping malformed item record for {self.user_id}: {e}")
        return items

    def _save(self, items: list[Item]) -> None:
        self.storage.save_items([item.to_dict() for item in items], self.user_id)
        self._notify()

    def get_all(self) -> list[Item]:
        return self._load()

    def get(self, item_id: str) -> Item | None:
        for item in self._load():
            if item.id == item_id:
                return item
        return None

    def upsert(self, item: Item) -> None:
        """Replace the item with the same id, or insert it at the front."""
        items = self._load()
        for i, existing in enumerate(items):
            if existing.id == item.id:
                items[i] = item.copy()
                break
        else:
            items.insert(0, item.copy())
        self._save(items)

    def delete(self, item_id: str) -> bool:
        items = self._load()
        remaining = [item for item in items if item.id != item_id]
        if len(remaining) == len(items):
            return False
        self._save(remaining)
        return True

    def replace_all(self, items: list[Item]) -> None:
        self._save([item.copy() for item in items])

    def update(self, item_id: str, transition: Callable[[Item], Item]) -> Item | None:
        """Apply one transition to the current record and write it back whole.

        Returns the updated item, or None when the id is no longer stored.
        """
        items = self._load()
        for i, existing in enumerate(items):
            if existing.id == item_id:
                updated = transition(existing)
                items[i] = updated
                self._save(items)
                return updated.copy()
        logger.debug(f"Ignoring update for missing item {item_id}")
        return None

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a change callback. Returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback()
            except Exception as e:
                logger.error(f"Items-changed subscriber failed: {e}")


class ProgressTracker:
    """Daily count of graded answers for one user."""

    def __init__(self, storage: Storage, user_id: str = "default"):
        self.storage = storage
        self.user_id = user_id

    def _load(self) -> DailyProgress:
        data = self.storage.load_progress(self.user_id)
        if not data:
            return DailyProgress()
        try:
            return DailyProgress.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.error(f"Resetting unreadable progress record for {self.user_id}: {e}")
            return DailyProgress()

    def today_count(self, now: int) -> int:
        return self._load().count_for(now)

    def increment(self, now: int, by: int = 1) -> int:
        progress = self._load()
        progress.increment(now, by)
        self.storage.save_progress(progress.to_dict(), self.user_id)
        return progress.count
