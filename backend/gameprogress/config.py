"""
Runtime configuration read from environment variables.

All settings are plain module-level constants resolved once at import time,
so tests override them by setting the environment before importing the app
(or by patching the constant directly).
"""

import os

# Database connection URL
# Fallback to SQLite for local development when PostgreSQL is not available
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./game_progress.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Comma-separated list of allowed CORS origins ("*" allows everything)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# ── Badge policy ──────────────────────────────────────────────
# A session must score strictly above this to earn the game's badge
BADGE_SCORE_THRESHOLD = int(os.getenv("BADGE_SCORE_THRESHOLD", "20"))

# ── Student defaults ──────────────────────────────────────────
DEFAULT_CLASS_NAME = os.getenv("DEFAULT_CLASS_NAME", "Fun Class")
DEFAULT_NAME_TEMPLATE = "Student {student_id}"

LEADERBOARD_SIZE = int(os.getenv("LEADERBOARD_SIZE", "10"))

# ── Store access ──────────────────────────────────────────────
# Seconds to wait on the database (busy timeout, pool checkout) and on the
# per-student write lock before giving up with Unavailable
STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", "5"))

# How many times a session write is retried after losing a version race
SESSION_MAX_RETRIES = int(os.getenv("SESSION_MAX_RETRIES", "5"))
