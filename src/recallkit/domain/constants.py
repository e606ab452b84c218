"""Centralized constants for the recallkit scheduler.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

from datetime import timedelta

# ---------- Ease factor ----------
MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 2.5
DEFAULT_EASE_FACTOR = 2.5
HARD_EASE_PENALTY = 0.15
EASY_EASE_BONUS = 0.1

# ---------- Intervals (days) ----------
INITIAL_INTERVAL = 1  # interval stored on a freshly created card
HARD_INTERVALS = (1, 2)
GOOD_INTERVALS = (1, 6)
EASY_INTERVALS = (4, 8)
HARD_INTERVAL_MODIFIER = 0.8
EASY_INTERVAL_MODIFIER = 1.3

# ---------- Re-queue ----------
AGAIN_REQUEUE_DELAY = timedelta(minutes=1)

# ---------- Queue Builder ----------
REVIEWS_PER_NEW_CARD = 2

# ---------- Study settings defaults ----------
DEFAULT_DAILY_GOAL = 20
DEFAULT_MAX_NEW_CARDS = 10
DEFAULT_MAX_REVIEWS = 50

# ---------- Analytics ----------
DEFAULT_RESPONSE_TIME = 5.0  # seconds, used when a card has no history
LOW_ACCURACY_THRESHOLD = 0.6
HIGH_ACCURACY_THRESHOLD = 0.9
HARD_EASE_THRESHOLD = 2.0
MEDIUM_EASE_THRESHOLD = 2.3
UPCOMING_WINDOW_DAYS = 7
DAILY_AVERAGE_WINDOW = 30
RECENT_SESSION_WINDOW = 7

# ---------- Card states ----------
LEARNING_MAX_REPETITIONS = 2

# ---------- Storage ----------
CARDS_FILE = "cards.json"
PROGRESS_FILE = "progress.json"
SESSIONS_FILE = "sessions.json"
CATEGORIES_FILE = "categories.json"
SETTINGS_FILE = "settings.json"
DEFAULT_CATEGORY_COLOR = "#3b82f6"
