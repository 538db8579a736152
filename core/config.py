"""Configuration constants for wordloom application."""

ENTRY_WORD = 'word'
ENTRY_PHRASE = 'phrase'
ENTRY_TYPES = (ENTRY_WORD, ENTRY_PHRASE)

# Stage sequences (stage 5, the single-token cloze, does not exist for phrases)
WORD_STAGES = [0, 1, 2, 3, 5, 6, 7]
PHRASE_STAGES = [0, 1, 2, 3, 6, 7]

# Stage advancement
REQUIRED_STREAK_EARLY = 2     # Consecutive correct answers to leave stages 0-4
REQUIRED_STREAK_LATE = 5      # Consecutive correct answers to leave stages 5+
LATE_STAGE_START = 5

# Stability model
MIN_STABILITY = 1
MAX_STABILITY = 20
STABILITY_GAIN = 0.15
STABILITY_LOSS = 0.25

# (stability threshold, interval in days), ascending
INTERVAL_TABLE = [
    (1, 0.5),
    (2, 1),
    (4, 2),
    (6, 4),
    (8, 7),
    (10, 14),
    (12, 28),
    (14, 60),
    (16, 120),
    (18, 240),
    (20, 360),
]
DEFAULT_INTERVAL_DAYS = 0.5
RETRY_MINUTES = 10            # Wrong answers come back after this many minutes

MINUTE_MS = 60 * 1000
DAY_MS = 24 * 60 * MINUTE_MS

# Weakness remediation
WEAKNESS_CLEAR_STREAK = 2

# Session sizes
DEFAULT_SESSION_LIMIT = 20
MAX_SESSION_LIMIT = 100
WEAKNESS_SESSION_SIZE = 10
CHALLENGE_SESSION_SIZE = 10
CHALLENGE_MIN_STABILITY = 12

# Multiple choice
CHOICE_COUNT = 4

# Cloze arity
S6_MIN_BLANKS = 2

# Dashboard
DAILY_GOAL = 20
LEARNED_STAGE = 6
UPCOMING_DAYS = 3

# Export format
EXPORT_VERSION = 1

# Daily writing state format
WRITING_STATE_VERSION = 1
