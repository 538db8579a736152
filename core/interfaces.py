"""Abstract base classes for dependency injection."""

from abc import ABC, abstractmethod


class Storage(ABC):
    """Abstract base class for item and progress storage.

    Items are persisted wholesale: the full collection is read and written
    as one list of dicts.
    """

    @abstractmethod
    def load_items(self, user_id: str = "default") -> list[dict]:
        """Load all item records for a user. Returns [] if none stored."""
        pass

    @abstractmethod
    def save_items(self, items: list[dict], user_id: str = "default") -> None:
        """Replace all item records for a user."""
        pass

    @abstractmethod
    def load_progress(self, user_id: str = "default") -> dict | None:
        """Load the daily progress record. Returns None if not found."""
        pass

    @abstractmethod
    def save_progress(self, progress: dict, user_id: str = "default") -> None:
        """Save the daily progress record."""
        pass

    @abstractmethod
    def load_writing(self, user_id: str = "default") -> dict | None:
        """Load the daily writing record. Returns None if not found."""
        pass

    @abstractmethod
    def save_writing(self, writing: dict, user_id: str = "default") -> None:
        """Save the daily writing record."""
        pass

    @abstractmethod
    def list_users(self) -> list[str]:
        """List user IDs that have stored items."""
        pass
