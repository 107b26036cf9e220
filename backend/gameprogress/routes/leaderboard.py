"""
Leaderboard API route - top students by best single-session score.

Ranks students by high score (highest first); students with equal scores
keep the order in which they were created.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from gameprogress.database import get_db
from gameprogress.services.student_store import top_students, serialize_student
from gameprogress.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")


@router.get("/api/leaderboard")
def get_leaderboard(
    limit: Optional[int] = Query(None, ge=1, le=100, description="Number of students to return"),
    db: Session = Depends(get_db)
):
    """Get the top students by high score (10 unless ``limit`` is given)."""
    students = top_students(db, limit)

    log_with_context(logger, "INFO",
        "Leaderboard generated: {} students".format(len(students)),
        extra_data={"entries": len(students)})

    return [serialize_student(s) for s in students]
