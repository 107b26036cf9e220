"""
Admin API routes - student management for teachers.

Provides endpoints for:
- Creating a student with a chosen id, name and class
- Listing every student sorted by name
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from gameprogress.database import get_db
from gameprogress.services.student_store import (
    create_student, list_students, serialize_student
)
from gameprogress.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")


# ── Pydantic schemas ─────────────────────────────────────────

class StudentCreate(BaseModel):
    """Schema for the admin create-student form."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    student_id: str = Field(..., alias="studentId", min_length=1, max_length=64,
                            description="Identity key the student types in")
    name: str = Field(..., min_length=1, description="Display name")
    class_name: str = Field(..., alias="class", min_length=1, description="Class/group name")


@router.post("/api/admin/students", status_code=201)
def admin_create_student(request: StudentCreate, db: Session = Depends(get_db)):
    """Create a new student; 409 if the id is already taken."""
    student = create_student(db, request.student_id, request.name, request.class_name)
    return serialize_student(student)


@router.get("/api/admin/students")
def admin_list_students(db: Session = Depends(get_db)):
    """List all students for the admin table, sorted by name."""
    students = list_students(db)
    log_with_context(logger, "INFO", "Listed {} students".format(len(students)),
        extra_data={"count": len(students)})
    return [serialize_student(s) for s in students]
