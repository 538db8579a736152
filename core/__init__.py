from .models import Item, Sentence, Weakness, DailyProgress
from .interfaces import Storage
from .utils import tokenize, build_cloze_preview, normalize_answer, now_ms
from .progression import MODE_NORMAL, MODE_WEAKNESS, MODE_CHALLENGE, apply_answer
from .repository import ItemRepository, ProgressTracker
from .session import StudySession, build_queue
from .stages import StageContent, active_stage, select_content, grade
from .study import StudyService
from .transfer import ImportFormatError
from .writing import DailyWriting, DailyWritingTracker
from .prompts import build_qa_prompt, build_writing_prompt
from .config import (
    WORD_STAGES, PHRASE_STAGES,
    WEAKNESS_CLEAR_STREAK, CHALLENGE_MIN_STABILITY,
    DEFAULT_SESSION_LIMIT, MAX_SESSION_LIMIT, DAILY_GOAL
)

__all__ = [
    'Item', 'Sentence', 'Weakness', 'DailyProgress',
    'Storage',
    'tokenize', 'build_cloze_preview', 'normalize_answer', 'now_ms',
    'MODE_NORMAL', 'MODE_WEAKNESS', 'MODE_CHALLENGE', 'apply_answer',
    'ItemRepository', 'ProgressTracker',
    'StudySession', 'build_queue',
    'StageContent', 'active_stage', 'select_content', 'grade',
    'StudyService',
    'ImportFormatError',
    'DailyWriting', 'DailyWritingTracker',
    'build_qa_prompt', 'build_writing_prompt',
    'WORD_STAGES', 'PHRASE_STAGES',
    'WEAKNESS_CLEAR_STREAK', 'CHALLENGE_MIN_STABILITY',
    'DEFAULT_SESSION_LIMIT', 'MAX_SESSION_LIMIT', 'DAILY_GOAL'
]
