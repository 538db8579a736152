"""Utility functions for wordloom application."""

import re
import time
from datetime import datetime

# No space is inserted before these tokens when joining
NO_SPACE_BEFORE = {'.', ',', '!', '?', ':', ';', ')', ']', '}', '”', '"', '’', "'", '…', '...'}
# ...nor after these
NO_SPACE_AFTER = {'(', '[', '{', '“', '"'}

_MULTI_CHAR_TOKENS = ('...', '…', '—')


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def day_key(timestamp_ms: int) -> str:
    """Local calendar date (YYYY-MM-DD) for a timestamp."""
    return datetime.fromtimestamp(timestamp_ms / 1000).date().isoformat()


def _is_word_char(ch: str) -> bool:
    return (ch.isascii() and ch.isalnum()) or ch in ("'", '’', '-')


def tokenize(text: str) -> list[str]:
    """Split an English sentence into tokens.

    Punctuation, quotes and brackets become their own tokens. Apostrophes and
    hyphens stay inside words, and "...", "…" and "—" are single tokens.
    Anything else (emoji and the like) becomes a one-character token.
    """
    s = (text or '').strip()
    tokens = []
    i = 0
    while i < len(s):
        ch = s[i]
        if ch.isspace():
            i += 1
            continue
        special = next((t for t in _MULTI_CHAR_TOKENS if s.startswith(t, i)), None)
        if special:
            tokens.append(special)
            i += len(special)
            continue
        if _is_word_char(ch):
            j = i + 1
            while j < len(s) and _is_word_char(s[j]):
                j += 1
            tokens.append(s[i:j])
            i = j
            continue
        tokens.append(ch)
        i += 1
    return tokens


def join_tokens(tokens: list[str]) -> str:
    """Join tokens back into readable text."""
    out = ''
    for i, token in enumerate(tokens):
        prev = tokens[i - 1] if i > 0 else ''
        need_space = i > 0 and token not in NO_SPACE_BEFORE and prev not in NO_SPACE_AFTER
        out += (' ' if need_space else '') + token
    return out


def build_cloze_preview(tokens: list[str], blank_indexes: list[int]) -> str:
    """Render tokens with the given indexes replaced by ____1, ____2, ..."""
    numbering = {idx: n for n, idx in enumerate(sorted(blank_indexes), start=1)}
    rendered = [f'____{numbering[i]}' if i in numbering else t for i, t in enumerate(tokens)]
    return join_tokens(rendered)


def normalize_answer(text: str) -> str:
    """Lowercase, strip punctuation and collapse whitespace for lenient comparison."""
    text = (text or '').lower()
    text = re.sub(r"[^\w\s'’-]", '', text)
    return ' '.join(text.split())
