"""
Student profile API routes - what the game console calls.

Provides endpoints for:
- Loading a profile (created with defaults on first lookup)
- Updating name/class
- Deleting a student and all their progress
"""

from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from gameprogress.database import get_db
from gameprogress.services.student_store import (
    get_or_create_student, update_profile, delete_student, serialize_student
)

router = APIRouter()

# Matches the students.student_id column width
StudentIdPath = Annotated[str, Path(min_length=1, max_length=64, description="Student identity key")]


# ── Pydantic schemas ─────────────────────────────────────────

class ProfileUpdate(BaseModel):
    """Profile fields a client may change; anything else in the body is ignored."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, description="New display name")
    class_name: Optional[str] = Field(None, alias="class", min_length=1,
                                      description="New class/group name")


@router.get("/api/students/{student_id}")
def get_student_profile(student_id: StudentIdPath, db: Session = Depends(get_db)):
    """Load a student's profile, creating a default one if the id is new."""
    student = get_or_create_student(db, student_id)
    return serialize_student(student)


@router.put("/api/students/{student_id}")
def update_student_profile(student_id: StudentIdPath, request: ProfileUpdate,
                           db: Session = Depends(get_db)):
    """Update name and/or class of an existing student (404 if unknown)."""
    student = update_profile(db, student_id, name=request.name,
                             class_name=request.class_name)
    return serialize_student(student)


@router.delete("/api/students/{student_id}")
def delete_student_record(student_id: StudentIdPath, db: Session = Depends(get_db)):
    """Permanently delete a student with all badges and play time."""
    delete_student(db, student_id)
    return {"message": "Student deleted", "studentId": student_id}
