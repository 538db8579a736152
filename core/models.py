"""Domain models for wordloom application."""

import uuid

from .config import ENTRY_TYPES, ENTRY_PHRASE, ENTRY_WORD, MIN_STABILITY, MAX_STABILITY
from .utils import day_key, tokenize


def _as_int(value, default: int) -> int:
    """Integer field from stored data; null or junk falls back to default."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_stability(value) -> float:
    try:
        stability = float(value or MIN_STABILITY)
    except (TypeError, ValueError):
        stability = MIN_STABILITY
    return max(MIN_STABILITY, min(MAX_STABILITY, stability))


class Weakness:
    """Short-term remediation flag, independent of long-term progress."""

    def __init__(self, stage: int, streak: int, updated_at: int):
        self.stage = stage
        self.streak = streak
        self.updated_at = updated_at

    def to_dict(self) -> dict:
        return {
            'stage': self.stage,
            'streak': self.streak,
            'updatedAt': self.updated_at
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Weakness':
        return cls(int(data['stage']), _as_int(data.get('streak'), 0), _as_int(data.get('updatedAt'), 0))

    def __eq__(self, other):
        if not isinstance(other, Weakness):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Weakness(stage={self.stage}, streak={self.streak})"


class Sentence:
    """An example sentence owned by an item, with optional cloze configuration."""

    def __init__(self, id: str, en: str, ja: str, tokens: list[str],
                 s5: list[int] | None = None, s6: list[int] | None = None):
        self.id = id
        self.en = en
        self.ja = ja
        self.tokens = tokens
        self.s5 = s5  # Stage 5 target token indexes
        self.s6 = s6  # Stage 6 blank token indexes

    @classmethod
    def create(cls, en: str, ja: str = '', s5: list[int] | None = None,
               s6: list[int] | None = None) -> 'Sentence':
        """Create a sentence, tokenizing the English text."""
        tokens = tokenize(en)
        for indexes in (s5, s6):
            for idx in indexes or []:
                if idx < 0 or idx >= len(tokens):
                    raise ValueError(f"Token index {idx} out of range for '{en}'")
        return cls(str(uuid.uuid4()), en, ja, tokens, s5, s6)

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'en': self.en,
            'ja': self.ja,
            'tokens': list(self.tokens)
        }
        if self.s5 is not None:
            data['s5'] = {'targetTokenIndexes': list(self.s5)}
        if self.s6 is not None:
            data['s6'] = {'blankTokenIndexes': list(self.s6)}
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Sentence':
        s5 = data.get('s5')
        s6 = data.get('s6')
        return cls(
            data['id'],
            data.get('en') or '',
            data.get('ja') or '',
            list(data.get('tokens') or []),
            list(s5.get('targetTokenIndexes') or []) if s5 else None,
            list(s6.get('blankTokenIndexes') or []) if s6 else None
        )


class Item:
    """A registered word or phrase with its learning state."""

    def __init__(self, id: str, entry_type: str, word: str, meaning: str,
                 sentences: list[Sentence], current_stage: int, stage_streak: int,
                 stability: float, due_at: int, created_at: int, updated_at: int,
                 weakness: Weakness | None = None, qa_memo: str | None = None):
        if entry_type not in ENTRY_TYPES:
            raise ValueError(f"Unknown entry type: {entry_type}")
        self.id = id
        self.entry_type = entry_type
        self.word = word
        self.meaning = meaning
        self.qa_memo = qa_memo
        self.sentences = sentences
        self.current_stage = current_stage
        self.stage_streak = stage_streak
        self.stability = stability
        self.due_at = due_at
        self.weakness = weakness
        self.created_at = created_at
        self.updated_at = updated_at

    @classmethod
    def create(cls, word: str, meaning: str, now: int, entry_type: str = ENTRY_WORD,
               sentences: list[Sentence] = None, qa_memo: str | None = None) -> 'Item':
        """Register a new item, due immediately at stage 0."""
        return cls(
            id=str(uuid.uuid4()),
            entry_type=entry_type,
            word=word,
            meaning=meaning,
            sentences=sentences or [],
            current_stage=0,
            stage_streak=0,
            stability=MIN_STABILITY,
            due_at=now,
            created_at=now,
            updated_at=now,
            qa_memo=qa_memo
        )

    @property
    def is_phrase(self) -> bool:
        return self.entry_type == ENTRY_PHRASE

    def copy(self) -> 'Item':
        """Independent copy of this record."""
        return Item.from_dict(self.to_dict())

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'entryType': self.entry_type,
            'word': self.word,
            'meaning': self.meaning,
            'sentences': [s.to_dict() for s in self.sentences],
            'currentStage': self.current_stage,
            'stageStreak': self.stage_streak,
            'stability': self.stability,
            'dueAt': self.due_at,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at
        }
        if self.qa_memo is not None:
            data['qaMemo'] = self.qa_memo
        if self.weakness is not None:
            data['weakness'] = self.weakness.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Item':
        weakness = data.get('weakness')
        # A weakness without a usable stage is treated as absent
        if not isinstance(weakness, dict) or _as_int(weakness.get('stage'), None) is None:
            weakness = None
        created_at = _as_int(data.get('createdAt'), 0)
        return cls(
            id=data['id'],
            entry_type=data.get('entryType') or ENTRY_WORD,
            word=data['word'],
            meaning=data.get('meaning') or '',
            sentences=[Sentence.from_dict(s) for s in data.get('sentences') or []],
            current_stage=max(0, _as_int(data.get('currentStage'), 0)),
            stage_streak=max(0, _as_int(data.get('stageStreak'), 0)),
            stability=_as_stability(data.get('stability')),
            due_at=_as_int(data.get('dueAt'), created_at),
            created_at=created_at,
            updated_at=_as_int(data.get('updatedAt'), created_at),
            weakness=Weakness.from_dict(weakness) if weakness else None,
            qa_memo=data.get('qaMemo')
        )

    def __eq__(self, other):
        if not isinstance(other, Item):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Item(id={self.id!r}, word={self.word!r}, stage={self.current_stage})"


class DailyProgress:
    """Date-keyed count of graded answers; resets at the local day boundary."""

    def __init__(self, date: str | None = None, count: int = 0):
        self.date = date
        self.count = count

    def count_for(self, now: int) -> int:
        return self.count if self.date == day_key(now) else 0

    def increment(self, now: int, by: int = 1) -> None:
        today = day_key(now)
        if self.date == today:
            self.count += by
        else:
            self.date = today
            self.count = by

    def to_dict(self) -> dict:
        return {'date': self.date, 'count': self.count}

    @classmethod
    def from_dict(cls, data: dict) -> 'DailyProgress':
        return cls(data.get('date'), int(data.get('count', 0)))
