"""Stage content selection and answer grading.

Stages:
    0  meaning recognition (choose the meaning)
    1  production recognition (choose the word)
    2  audio to meaning (word withheld, choose the meaning)
    3  typed production (type the word exactly)
    5  single-token cloze (words only)
    6  multi-token cloze
    7  self-judged translation
"""

import random

from .config import (
    ENTRY_PHRASE, WORD_STAGES, PHRASE_STAGES, CHOICE_COUNT, S6_MIN_BLANKS
)
from .models import Item, Sentence
from .progression import MODE_WEAKNESS
from .utils import build_cloze_preview, normalize_answer

STAGE_MEANING_CHOICE = 0
STAGE_WORD_CHOICE = 1
STAGE_AUDIO_CHOICE = 2
STAGE_TYPED = 3
STAGE_CLOZE_SINGLE = 5
STAGE_CLOZE_MULTIPLE = 6
STAGE_SELF_JUDGE = 7

CHOICE_STAGES = (STAGE_MEANING_CHOICE, STAGE_WORD_CHOICE, STAGE_AUDIO_CHOICE)

STAGE_NAMES = {
    STAGE_MEANING_CHOICE: 'EN → JA',
    STAGE_WORD_CHOICE: 'JA → EN',
    STAGE_AUDIO_CHOICE: 'Audio → JA',
    STAGE_TYPED: 'JA → EN (type)',
    STAGE_CLOZE_SINGLE: 'Cloze (single)',
    STAGE_CLOZE_MULTIPLE: 'Cloze (multiple blanks)',
    STAGE_SELF_JUDGE: 'JA sentence → EN (self judge)',
}

# Answer shape a client must collect for each stage
STAGE_KINDS = {
    STAGE_MEANING_CHOICE: 'choice',
    STAGE_WORD_CHOICE: 'choice',
    STAGE_AUDIO_CHOICE: 'choice',
    STAGE_TYPED: 'typed',
    STAGE_CLOZE_SINGLE: 'typed',
    STAGE_CLOZE_MULTIPLE: 'blanks',
    STAGE_SELF_JUDGE: 'self_judge',
}


def stages_for(entry_type: str) -> list[int]:
    return PHRASE_STAGES if entry_type == ENTRY_PHRASE else WORD_STAGES


def clamp_stage(entry_type: str, stage: int) -> int:
    """Map a raw stage number onto the entry type's stage sequence.

    Below the first stage gives the first, past the last gives the last, and
    a stage missing from the sequence moves up to the next one present.
    """
    stages = stages_for(entry_type)
    for candidate in stages:
        if candidate >= stage:
            return candidate
    return stages[-1]


def active_stage(item: Item, mode: str) -> int:
    """Stage at which an item is tested in the given mode."""
    if mode == MODE_WEAKNESS and item.weakness is not None:
        return item.weakness.stage
    return clamp_stage(item.entry_type, item.current_stage)


class StageContent:
    """What to present for one question, plus what counts as correct."""

    def __init__(self, item_id: str, stage: int, available: bool = True,
                 prompt: str = '', choices: list[str] = None, expected: list[str] = None,
                 sentence: Sentence = None, cloze: str | None = None,
                 audio_text: str | None = None, reason: str | None = None):
        self.item_id = item_id
        self.stage = stage
        self.available = available
        self.prompt = prompt
        self.choices = choices or []
        self.expected = expected or []
        self.sentence = sentence
        self.cloze = cloze
        self.audio_text = audio_text
        self.reason = reason

    @classmethod
    def unavailable(cls, item_id: str, stage: int, reason: str) -> 'StageContent':
        return cls(item_id, stage, available=False, reason=reason)

    @property
    def answer_text(self) -> str:
        return ' '.join(self.expected)

    def to_dict(self, reveal: bool = False) -> dict:
        """Serialize for a client; expected answers only when revealed."""
        data = {
            'item_id': self.item_id,
            'stage': self.stage,
            'stage_name': STAGE_NAMES.get(self.stage, str(self.stage)),
            'kind': STAGE_KINDS.get(self.stage),
            'available': self.available,
            'prompt': self.prompt,
            'choices': self.choices,
            'cloze': self.cloze,
            'audio_text': self.audio_text,
            'sentence': self.sentence.to_dict() if self.sentence else None,
            'blank_count': len(self.expected) if self.stage == STAGE_CLOZE_MULTIPLE else None,
            'reason': self.reason
        }
        if reveal:
            data['expected'] = self.expected
        return data


def build_choices(correct: str, distractors: list[str], rng: random.Random) -> list[str]:
    """Shuffle the correct label in with up to CHOICE_COUNT - 1 distractors.

    A small pool gives fewer choices; the question stays answerable.
    """
    seen = {correct}
    unique = []
    for label in distractors:
        label = (label or '').strip()
        if label and label not in seen:
            seen.add(label)
            unique.append(label)
    picked = rng.sample(unique, min(len(unique), CHOICE_COUNT - 1))
    choices = [correct] + picked
    rng.shuffle(choices)
    return choices


def cloze_single_sentences(item: Item) -> list[Sentence]:
    """Sentences whose s5 target count fits the entry type (1 for words, 2+ for phrases)."""
    result = []
    for s in item.sentences:
        targets = s.s5 or []
        if not s.tokens or not all(0 <= i < len(s.tokens) for i in targets):
            continue
        if (item.is_phrase and len(targets) >= 2) or (not item.is_phrase and len(targets) == 1):
            result.append(s)
    return result


def cloze_multiple_sentences(item: Item) -> list[Sentence]:
    result = []
    for s in item.sentences:
        blanks = s.s6 or []
        if s.tokens and len(blanks) >= S6_MIN_BLANKS and all(0 <= i < len(s.tokens) for i in blanks):
            result.append(s)
    return result


def translation_sentences(item: Item) -> list[Sentence]:
    return [s for s in item.sentences if (s.en or '').strip() and (s.ja or '').strip()]


def select_content(item: Item, stage: int, pool: list[Item], rng: random.Random) -> StageContent:
    """Pick the question for an item at a stage.

    `pool` is the full collection, used for multiple-choice distractors.
    """
    others = [other for other in pool if other.id != item.id]

    if stage in (STAGE_MEANING_CHOICE, STAGE_AUDIO_CHOICE):
        correct = item.meaning.strip()
        choices = build_choices(correct, [o.meaning for o in others], rng)
        if stage == STAGE_AUDIO_CHOICE:
            return StageContent(item.id, stage, prompt='Listen and choose the meaning',
                                choices=choices, expected=[correct], audio_text=item.word)
        return StageContent(item.id, stage, prompt=item.word, choices=choices, expected=[correct])

    if stage == STAGE_WORD_CHOICE:
        correct = item.word.strip()
        choices = build_choices(correct, [o.word for o in others], rng)
        return StageContent(item.id, stage, prompt=item.meaning, choices=choices, expected=[correct])

    if stage == STAGE_TYPED:
        return StageContent(item.id, stage, prompt=item.meaning, expected=[item.word])

    if stage == STAGE_CLOZE_SINGLE:
        candidates = cloze_single_sentences(item)
        if not candidates:
            return StageContent.unavailable(item.id, stage, 'No sentence has a cloze target (s5) configured')
        sentence = rng.choice(candidates)
        targets = sorted(sentence.s5)
        return StageContent(item.id, stage, prompt=sentence.ja, sentence=sentence,
                            expected=[' '.join(sentence.tokens[i] for i in targets)],
                            cloze=build_cloze_preview(sentence.tokens, targets))

    if stage == STAGE_CLOZE_MULTIPLE:
        candidates = cloze_multiple_sentences(item)
        if not candidates:
            return StageContent.unavailable(
                item.id, stage, f'No sentence has {S6_MIN_BLANKS} or more cloze blanks (s6) configured')
        sentence = rng.choice(candidates)
        blanks = sorted(sentence.s6)
        return StageContent(item.id, stage, prompt=sentence.ja, sentence=sentence,
                            expected=[sentence.tokens[i] for i in blanks],
                            cloze=build_cloze_preview(sentence.tokens, blanks))

    if stage == STAGE_SELF_JUDGE:
        candidates = translation_sentences(item)
        if not candidates:
            return StageContent.unavailable(item.id, stage, 'No sentence has both English and Japanese text')
        sentence = rng.choice(candidates)
        return StageContent(item.id, stage, prompt=sentence.ja, sentence=sentence, expected=[sentence.en])

    return StageContent.unavailable(item.id, stage, f'Unknown stage {stage}')


def grade(content: StageContent, response) -> bool:
    """Check a response against presented content.

    Choice stages take the chosen label, stage 3 the typed word (exact after
    trimming), cloze stages free text compared leniently (stage 6 also takes
    one answer per blank) and stage 7 the learner's own verdict.
    """
    if not content.available:
        raise ValueError(f"Stage {content.stage} is not configured for item {content.item_id}")

    if content.stage in CHOICE_STAGES:
        return isinstance(response, str) and response.strip() == content.expected[0]

    if content.stage == STAGE_TYPED:
        return isinstance(response, str) and response.strip() == content.expected[0]

    if content.stage == STAGE_CLOZE_MULTIPLE and isinstance(response, (list, tuple)):
        if len(response) != len(content.expected):
            return False
        return all(normalize_answer(a) == normalize_answer(e)
                   for a, e in zip(response, content.expected))

    if content.stage in (STAGE_CLOZE_SINGLE, STAGE_CLOZE_MULTIPLE):
        if not isinstance(response, str):
            return False
        return normalize_answer(response) == normalize_answer(content.answer_text)

    if content.stage == STAGE_SELF_JUDGE:
        if isinstance(response, str):
            return response.strip().upper() == 'OK'
        return bool(response)

    raise ValueError(f"Cannot grade stage {content.stage}")
