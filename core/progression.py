"""Per-item progression state machine.

Two independent tracks:
- Normal: long-term stage/streak plus stability and due date.
- Weakness: short-term remediation record, cleared after repeated success.

Every transition takes an item and returns a new one; the input is never
mutated.
"""

from .config import (
    REQUIRED_STREAK_EARLY, REQUIRED_STREAK_LATE, LATE_STAGE_START,
    WEAKNESS_CLEAR_STREAK
)
from .models import Item, Weakness
from .scheduling import next_due_at, next_stability

MODE_NORMAL = 'normal'
MODE_WEAKNESS = 'weakness'
MODE_CHALLENGE = 'challenge'
MODES = (MODE_NORMAL, MODE_WEAKNESS, MODE_CHALLENGE)


def required_streak(stage: int) -> int:
    """Consecutive correct answers needed to leave a stage."""
    if stage >= LATE_STAGE_START:
        return REQUIRED_STREAK_LATE
    return REQUIRED_STREAK_EARLY


def apply_normal_answer(item: Item, tested_stage: int, correct: bool, now: int) -> Item:
    updated = item.copy()
    updated.stability = next_stability(item.stability, correct)
    updated.due_at = next_due_at(now, updated.stability, correct)
    updated.updated_at = now

    if correct:
        updated.stage_streak = item.stage_streak + 1
        if updated.stage_streak >= required_streak(item.current_stage):
            updated.current_stage = item.current_stage + 1
            updated.stage_streak = 0
    else:
        # Long-term stage is kept; the failure is flagged for remediation
        updated.stage_streak = 0
        updated.weakness = Weakness(tested_stage, 0, now)
    return updated


def apply_weakness_answer(item: Item, tested_stage: int, correct: bool, now: int) -> Item:
    updated = item.copy()
    if item.weakness is None:
        return updated

    if correct:
        streak = item.weakness.streak + 1
        if streak >= WEAKNESS_CLEAR_STREAK:
            updated.weakness = None
        else:
            updated.weakness = Weakness(item.weakness.stage, streak, now)
    else:
        updated.weakness = Weakness(tested_stage, 0, now)
    updated.updated_at = now
    return updated


def apply_answer(item: Item, mode: str, tested_stage: int, correct: bool, now: int) -> Item:
    """Apply an answer event for the given study mode.

    Challenge answers are self-assessment only and leave the item untouched.
    """
    if mode == MODE_NORMAL:
        return apply_normal_answer(item, tested_stage, correct, now)
    if mode == MODE_WEAKNESS:
        return apply_weakness_answer(item, tested_stage, correct, now)
    if mode == MODE_CHALLENGE:
        return item.copy()
    raise ValueError(f"Unknown study mode: {mode}")


def is_persisted_mode(mode: str) -> bool:
    return mode in (MODE_NORMAL, MODE_WEAKNESS)
