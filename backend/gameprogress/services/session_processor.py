"""
Session Processor - applies one completed-game report to a student.

Processing pipeline for each report:
1. Validate the report (BadRequest, nothing touched)
2. Load the student (NotFound: sessions never create students)
3. sessions += 1
4. high_score = max(high_score, score)
5. time_spent[game] += time spent in this session
6. Apply the badge policy (at most one badge per game, ever)
7. Recompute the derived overall score
8. Commit atomically and return the student plus the new badge, if any
"""

import time
from datetime import date
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from gameprogress.errors import BadRequest
from gameprogress.games_config import get_game
from gameprogress.models.badge import Badge
from gameprogress.models.student import Student
from gameprogress.services.badges import award_badge, refresh_overall_score
from gameprogress.services.student_store import write_student
from gameprogress.logging_config import get_logger, log_with_context

# Channel logger for session processing
logger = get_logger("sessions")


def _require_count(name: str, value) -> int:
    # bool is an int subclass but never a valid count
    if isinstance(value, bool) or not isinstance(value, int):
        raise BadRequest("{} must be an integer".format(name))
    if value < 0:
        raise BadRequest("{} must not be negative".format(name))
    return value


def validate_report(student_id, game_num, score, misses, time_spent_ms):
    """Reject malformed session reports before any state is touched."""
    if not isinstance(student_id, str) or not student_id.strip():
        raise BadRequest("studentId is required")
    _require_count("gameNum", game_num)
    if game_num < 1:
        raise BadRequest("gameNum must be a positive integer")
    _require_count("score", score)
    _require_count("misses", misses)
    _require_count("timeSpent", time_spent_ms)


def apply_session(student: Student, game_num: int, score: int, time_spent_ms: int,
                  today: Optional[date] = None) -> Optional[Badge]:
    """
    Fold one session result into the student's cumulative statistics.

    Mutates ``student`` in place and returns the newly awarded Badge or None.
    """
    student.sessions = (student.sessions or 0) + 1

    if score > (student.high_score or 0):
        student.high_score = score

    # Reassign rather than mutate so the JSON column is flagged dirty
    key = str(game_num)
    totals = dict(student.time_spent or {})
    totals[key] = totals.get(key, 0) + time_spent_ms
    student.time_spent = totals

    new_badge = award_badge(student, game_num, score, today=today)
    refresh_overall_score(student)
    return new_badge


def process_session(db: Session, student_id: str, game_num: int, score: int,
                    misses: int = 0, time_spent_ms: int = 0,
                    today: Optional[date] = None) -> Tuple[Student, Optional[Badge]]:
    """
    Record a completed game for a student.

    Args:
        db: Database session
        student_id: Student who played
        game_num: Game number from the catalog
        score: Final score of the session
        misses: Number of misses (validated and logged, not stored)
        time_spent_ms: Milliseconds spent in the session
        today: Award date override (defaults to the local date)

    Returns:
        (updated Student, newly awarded Badge or None)
    """
    start_time = time.time()
    validate_report(student_id, game_num, score, misses, time_spent_ms)

    student, new_badge = write_student(
        db, student_id,
        lambda s: apply_session(s, game_num, score, time_spent_ms, today=today),
        "process_session"
    )

    # Numbers outside the catalog are accepted; they just log without a title
    game = get_game(game_num)

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Session recorded: game {} score {} (sessions={}, high_score={})".format(
            game_num, score, student.sessions, student.high_score),
        context={"student_id": student_id, "game": game_num},
        extra_data={
            "game_name": game["name"] if game else None,
            "duration_ms": round(duration_ms, 2),
            "misses": misses,
            "time_spent_ms": time_spent_ms,
            "new_badge": new_badge is not None
        })
    return student, new_badge
