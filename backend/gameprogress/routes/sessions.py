"""
Session ingestion API route - called by the console when a game ends.

Records the result against the student's statistics and reports any badge
earned by this session.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from gameprogress.database import get_db
from gameprogress.services.session_processor import process_session
from gameprogress.services.student_store import serialize_student, serialize_badge

router = APIRouter()


# ── Pydantic schemas ─────────────────────────────────────────

class SessionReport(BaseModel):
    """Schema for one completed game."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    student_id: str = Field(..., alias="studentId", min_length=1, max_length=64,
                            description="Student who played")
    game_num: int = Field(..., alias="gameNum", ge=1, strict=True, description="Game number")
    score: int = Field(..., ge=0, strict=True, description="Final score of the session")
    misses: int = Field(0, ge=0, strict=True, description="Number of misses")
    time_spent: int = Field(0, alias="timeSpent", ge=0, strict=True,
                            description="Milliseconds spent in the session")


@router.post("/api/sessions")
def record_session(report: SessionReport, db: Session = Depends(get_db)):
    """
    Apply a finished game to the student's record.

    Returns ``{"student": ..., "newBadge": ...}``; newBadge is null when the
    session did not earn one. 404 if the student does not exist.
    """
    student, new_badge = process_session(
        db,
        report.student_id,
        report.game_num,
        report.score,
        misses=report.misses,
        time_spent_ms=report.time_spent
    )
    return {
        "student": serialize_student(student),
        "newBadge": serialize_badge(new_badge) if new_badge is not None else None
    }
