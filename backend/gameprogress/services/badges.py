"""
Badge Policy - decides when a session earns a badge and derives the
student's overall score from the badges they hold.

Rules:
1. A session earns its game's badge when score > BADGE_SCORE_THRESHOLD
2. A student holds at most one badge per game, ever; replays never
   award a second one
3. overall_score = mean of all badge scores, rounded half up (0 if none)
"""

from datetime import date
from typing import Iterable, Optional

from gameprogress import config
from gameprogress.models.badge import Badge
from gameprogress.models.student import Student
from gameprogress.logging_config import get_logger, log_with_context

# Channel logger for badge decisions
logger = get_logger("badges")


def award_label(game_num: int) -> str:
    """Human-readable label for the badge of a game."""
    return "Master of Game {}".format(game_num)


def has_badge_for(badges: Iterable[Badge], game_num: int) -> bool:
    return any(b.game == game_num for b in badges)


def should_award(badges: Iterable[Badge], game_num: int, score: int,
                 threshold: Optional[int] = None) -> bool:
    """Whether a session with ``score`` on ``game_num`` earns a new badge."""
    if threshold is None:
        threshold = config.BADGE_SCORE_THRESHOLD
    return score > threshold and not has_badge_for(badges, game_num)


def compute_overall_score(scores: Iterable[int]) -> int:
    """
    Mean of the given badge scores rounded to the nearest integer.

    Halves round up (22.5 -> 23), matching what the game console shows.
    Integer arithmetic keeps the rounding exact.
    """
    scores = list(scores)
    if not scores:
        return 0
    total = sum(scores)
    count = len(scores)
    return (2 * total + count) // (2 * count)


def refresh_overall_score(student: Student) -> int:
    """Recompute and store the derived overall score of a student."""
    student.overall_score = compute_overall_score(b.score for b in student.badges)
    return student.overall_score


def award_badge(student: Student, game_num: int, score: int,
                today: Optional[date] = None) -> Optional[Badge]:
    """
    Apply the badge policy to one session result.

    Appends the new Badge to ``student.badges`` and returns it, or returns
    None when the session does not qualify.
    """
    if not should_award(student.badges, game_num, score):
        log_with_context(logger, "DEBUG",
            "No badge for game {} (score {})".format(game_num, score),
            context={"student_id": student.student_id, "game": game_num})
        return None

    award_date = today or date.today()
    badge = Badge(
        type=award_label(game_num),
        game=game_num,
        date=award_date.isoformat(),
        score=score
    )
    student.badges.append(badge)

    log_with_context(logger, "INFO",
        "Badge awarded: {} (score {})".format(badge.type, score),
        context={"student_id": student.student_id, "game": game_num},
        extra_data={"threshold": config.BADGE_SCORE_THRESHOLD,
                    "badge_count": len(student.badges)})
    return badge
