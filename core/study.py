"""Study orchestration: sessions, questions and answer recording."""

import logging
import random
from typing import Callable

from .models import Item
from .progression import MODE_WEAKNESS, apply_answer, is_persisted_mode
from .repository import ItemRepository, ProgressTracker
from .session import StudySession, build_queue
from .stages import StageContent, active_stage, grade, select_content
from .utils import now_ms

logger = logging.getLogger(__name__)


class StudyService:
    """Runs study sessions against one user's repository.

    The clock and random source are injected so scheduling and queue order
    are reproducible in tests.
    """

    def __init__(self, repository: ItemRepository, progress: ProgressTracker,
                 clock: Callable[[], int] = now_ms, rng: random.Random = None):
        self.repository = repository
        self.progress = progress
        self.clock = clock
        self.rng = rng or random.Random()

    def start_session(self, mode: str, limit: int | None = None) -> StudySession:
        now = self.clock()
        queue = build_queue(self.repository.get_all(), mode, now, self.rng, limit)
        session = StudySession(mode, [item.id for item in queue])
        logger.info(f"Started {mode} session {session.id} with {session.target} items")
        return session

    def current_question(self, session: StudySession) -> StageContent | None:
        """Content for the current queue position, skipping items deleted meanwhile.

        Returns None once the session is finished. The same content is
        returned until the question is answered or skipped.
        """
        while not session.is_finished:
            if session.current is not None:
                return session.current
            items = self.repository.get_all()
            item = next((i for i in items if i.id == session.current_item_id), None)
            if item is None:
                logger.debug(f"Item {session.current_item_id} vanished from session {session.id}")
                session.advance()
                continue
            stage = active_stage(item, session.mode)
            session.current = select_content(item, stage, items, self.rng)
            return session.current
        return None

    def answer(self, session: StudySession, response) -> dict:
        """Grade the current question and record the outcome.

        Normal and Weakness answers update the item and today's progress;
        Challenge answers are feedback only.
        """
        content = self.current_question(session)
        if content is None:
            raise ValueError(f"Session {session.id} is finished")
        correct = grade(content, response)
        result = self.record(session.mode, content.item_id, content.stage, correct)
        result['expected'] = content.expected
        session.answered += 1
        if correct:
            session.correct += 1
        session.advance()
        result['session'] = session.to_dict()
        return result

    def skip(self, session: StudySession) -> None:
        """Move past the current question without grading it."""
        if not session.is_finished:
            logger.info(f"Skipping item {session.current_item_id} in session {session.id}")
            session.advance()

    def record(self, mode: str, item_id: str, stage: int, correct: bool) -> dict:
        """Apply one graded answer to the stored item."""
        now = self.clock()
        item = None
        persist = is_persisted_mode(mode)
        if persist and mode == MODE_WEAKNESS:
            current = self.repository.get(item_id)
            if current is None or current.weakness is None:
                logger.debug(f"Item {item_id} has no weakness to remediate; answer not recorded")
                persist = False
        if persist:
            item = self.repository.update(
                item_id, lambda current: apply_answer(current, mode, stage, correct, now))
            if item is not None:
                self.progress.increment(now)
        logger.info(f"{mode} answer for {item_id} at stage {stage}: "
                    f"{'correct' if correct else 'incorrect'}")
        return {
            'correct': correct,
            'persisted': item is not None,
            'item': item.to_dict() if item else None,
            'today_progress': self.progress.today_count(now)
        }

    def create_item(self, word: str, meaning: str, entry_type: str, sentences: list,
                    qa_memo: str | None = None) -> Item:
        item = Item.create(word, meaning, self.clock(), entry_type, sentences, qa_memo)
        self.repository.upsert(item)
        return item
