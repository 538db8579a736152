"""PostgreSQL storage implementation."""

import json
import logging
import os

import psycopg2
from psycopg2.extras import RealDictCursor

from core.interfaces import Storage

logger = logging.getLogger(__name__)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS user_words (
        user_id VARCHAR(255) PRIMARY KEY,
        words JSONB NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS daily_progress (
        user_id VARCHAR(255) PRIMARY KEY,
        progress JSONB NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS daily_writing (
        user_id VARCHAR(255) PRIMARY KEY,
        writing JSONB NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS events (
        id SERIAL PRIMARY KEY,
        timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        event VARCHAR(50) NOT NULL,
        user_id VARCHAR(255) NOT NULL,
        session_id VARCHAR(64),
        data JSONB
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_events_user_id ON events(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_events_event ON events(event)",
]


class PostgresStorage(Storage):
    """PostgreSQL-based storage.

    A user's word collection is a single JSONB array in `user_words`, so a
    save replaces it wholesale. Daily progress is one JSONB document per user.
    """

    def __init__(self, db_url: str = None):
        self.db_url = db_url or os.environ.get('DATABASE_URL', 'postgresql://localhost:5432/wordloom')
        self._conn = None
        self._initialized = False

    @property
    def conn(self):
        """Lazy connection initialization."""
        if self._conn is None or self._conn.closed:
            self._conn = psycopg2.connect(self.db_url)
            if not self._initialized:
                with self._conn.cursor() as cur:
                    for statement in SCHEMA:
                        cur.execute(statement)
                self._conn.commit()
                self._initialized = True
        return self._conn

    def _rollback(self):
        if self._conn and not self._conn.closed:
            self._conn.rollback()

    def close(self):
        if self._conn and not self._conn.closed:
            self._conn.close()

    def _load_document(self, table: str, column: str, user_id: str):
        with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(f"SELECT {column} FROM {table} WHERE user_id = %s", (user_id,))
            row = cur.fetchone()
        return row[column] if row else None

    def _save_document(self, table: str, column: str, user_id: str, value) -> None:
        with self.conn.cursor() as cur:
            cur.execute(f"""
                INSERT INTO {table} (user_id, {column}, updated_at)
                VALUES (%s, %s, CURRENT_TIMESTAMP)
                ON CONFLICT (user_id)
                DO UPDATE SET {column} = EXCLUDED.{column}, updated_at = CURRENT_TIMESTAMP
            """, (user_id, json.dumps(value)))
        self.conn.commit()

    def load_items(self, user_id: str = "default") -> list[dict]:
        try:
            words = self._load_document('user_words', 'words', user_id)
        except psycopg2.Error as e:
            logger.error(f"Error loading words for {user_id}: {e}")
            self._rollback()
            return []
        return words if isinstance(words, list) else []

    def save_items(self, items: list[dict], user_id: str = "default") -> None:
        try:
            self._save_document('user_words', 'words', user_id, items)
        except psycopg2.Error as e:
            logger.error(f"Error saving {len(items)} words for {user_id}: {e}")
            self._rollback()
            raise

    def load_progress(self, user_id: str = "default") -> dict | None:
        try:
            progress = self._load_document('daily_progress', 'progress', user_id)
        except psycopg2.Error as e:
            logger.error(f"Error loading progress for {user_id}: {e}")
            self._rollback()
            return None
        return progress if isinstance(progress, dict) else None

    def save_progress(self, progress: dict, user_id: str = "default") -> None:
        try:
            self._save_document('daily_progress', 'progress', user_id, progress)
        except psycopg2.Error as e:
            logger.error(f"Error saving progress for {user_id}: {e}")
            self._rollback()
            raise

    def load_writing(self, user_id: str = "default") -> dict | None:
        try:
            writing = self._load_document('daily_writing', 'writing', user_id)
        except psycopg2.Error as e:
            logger.error(f"Error loading writing state for {user_id}: {e}")
            self._rollback()
            return None
        return writing if isinstance(writing, dict) else None

    def save_writing(self, writing: dict, user_id: str = "default") -> None:
        try:
            self._save_document('daily_writing', 'writing', user_id, writing)
        except psycopg2.Error as e:
            logger.error(f"Error saving writing state for {user_id}: {e}")
            self._rollback()
            raise

    def list_users(self) -> list[str]:
        try:
            with self.conn.cursor() as cur:
                cur.execute("SELECT user_id FROM user_words ORDER BY user_id")
                return [row[0] for row in cur.fetchall()]
        except psycopg2.Error as e:
            logger.error(f"Error listing users: {e}")
            self._rollback()
            return []

    # Event log
    def log_event(self, event: str, user_id: str, session_id: str = None, **data) -> None:
        """Append an event; failures are logged and dropped."""
        try:
            with self.conn.cursor() as cur:
                cur.execute(
                    "INSERT INTO events (event, user_id, session_id, data) VALUES (%s, %s, %s, %s)",
                    (event, user_id, session_id, json.dumps(data) if data else None)
                )
            self.conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Error logging event {event}: {e}")
            self._rollback()

    def get_user_events(self, user_id: str, event_type: str = None, limit: int = 100) -> list[dict]:
        """Most recent events for a user, newest first."""
        query = "SELECT id, timestamp, event, session_id, data FROM events WHERE user_id = %s"
        params = [user_id]
        if event_type:
            query += " AND event = %s"
            params.append(event_type)
        query += " ORDER BY timestamp DESC LIMIT %s"
        params.append(limit)
        try:
            with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(query, params)
                rows = [dict(row) for row in cur.fetchall()]
        except psycopg2.Error as e:
            logger.error(f"Error reading events for {user_id}: {e}")
            self._rollback()
            return []
        for row in rows:
            if row.get('timestamp'):
                row['timestamp'] = row['timestamp'].isoformat()
        return rows
