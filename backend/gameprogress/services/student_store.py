"""
Student Store - durable keyed storage of Student records.

Operations:
- get-or-create on profile lookup (default name/class, zero stats)
- admin create (Conflict on duplicate id)
- strict profile update (NotFound when absent)
- delete (cascades to badges)
- list sorted by name, top-N by high score

Every write goes through ``write_student``, which serializes writers per
student and retries when the row version check detects a lost race.
"""

import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from gameprogress import config
from gameprogress.errors import Conflict, NotFound, Unavailable
from gameprogress.models.badge import Badge
from gameprogress.models.student import Student
from gameprogress.services.locks import student_lock
from gameprogress.logging_config import get_logger, log_with_context

logger = get_logger("db")


@contextmanager
def store_errors(db: Session, operation: str):
    """
    Translate storage failures into Unavailable.

    Connection errors, lock timeouts and pool exhaustion all mean the store
    could not be reached in time; the transaction is rolled back so nothing
    is partially persisted.
    """
    try:
        yield
    except (OperationalError, PoolTimeoutError) as e:
        db.rollback()
        log_with_context(logger, "ERROR",
            "Store unavailable during {}: {}".format(operation, str(e)),
            extra_data={"operation": operation, "error_type": type(e).__name__},
            exc_info=True)
        raise Unavailable("Student store is unavailable, please retry") from e


def serialize_badge(badge: Badge) -> dict:
    return {
        "type": badge.type,
        "game": badge.game,
        "date": badge.date,
        "score": badge.score
    }


def serialize_student(student: Student) -> dict:
    """Serialize a Student ORM object to the client's JSON shape."""
    return {
        "studentId": student.student_id,
        "name": student.name,
        "class": student.class_name,
        "sessions": student.sessions,
        "badges": [serialize_badge(b) for b in student.badges],
        "highScore": student.high_score,
        "overallScore": student.overall_score,
        "timeSpent": dict(student.time_spent or {})
    }


def new_student(student_id: str, name: Optional[str] = None,
                class_name: Optional[str] = None) -> Student:
    """Build an unsaved Student with zero stats and default profile fields."""
    now = datetime.now(timezone.utc)
    return Student(
        student_id=student_id,
        name=config.DEFAULT_NAME_TEMPLATE.format(student_id=student_id) if name is None else name,
        class_name=config.DEFAULT_CLASS_NAME if class_name is None else class_name,
        sessions=0,
        high_score=0,
        overall_score=0,
        time_spent={},
        created_at=now,
        updated_at=now
    )


def get_student(db: Session, student_id: str, for_update: bool = False) -> Optional[Student]:
    """
    Load a student by id, or None.

    ``for_update`` re-reads the row even if it is already in the session and
    takes a row lock where the database supports it.
    """
    query = db.query(Student).filter(Student.student_id == student_id)
    if for_update:
        query = query.populate_existing().with_for_update()
    return query.first()


def require_student(db: Session, student_id: str, for_update: bool = False) -> Student:
    student = get_student(db, student_id, for_update=for_update)
    if student is None:
        raise NotFound("Student {} not found".format(student_id))
    return student


def write_student(db: Session, student_id: str, mutate: Callable[[Student], object],
                  operation: str):
    """
    Run a read-modify-write on one student and commit it.

    ``mutate`` receives a freshly loaded Student and returns any value the
    caller needs. The whole cycle runs under the student's write lock; if
    the commit still loses a race (row version changed underneath us, or a
    unique constraint fired) the transaction is rolled back and the cycle
    restarts from a fresh read, up to SESSION_MAX_RETRIES times.
    """
    attempts = max(1, config.SESSION_MAX_RETRIES)
    last_error = None
    with student_lock(student_id):
        for attempt in range(1, attempts + 1):
            with store_errors(db, operation):
                student = require_student(db, student_id, for_update=True)
                result = mutate(student)
                try:
                    db.commit()
                except (StaleDataError, IntegrityError) as e:
                    db.rollback()
                    last_error = e
                    log_with_context(logger, "WARNING",
                        "Concurrent update detected during {}, retrying".format(operation),
                        context={"student_id": student_id},
                        extra_data={"attempt": attempt, "error_type": type(e).__name__})
                    continue
                return student, result

    log_with_context(logger, "ERROR",
        "Gave up on {} after {} attempts".format(operation, attempts),
        context={"student_id": student_id},
        exc_info=last_error)
    raise Unavailable("Student record is busy, please retry")


def get_or_create_student(db: Session, student_id: str) -> Student:
    """Return the student, creating a default profile on first lookup."""
    with store_errors(db, "get_or_create"):
        student = get_student(db, student_id)
        if student is not None:
            return student

        student = new_student(student_id)
        db.add(student)
        try:
            db.commit()
        except IntegrityError:
            # Another request created the same id between our read and insert
            db.rollback()
            return require_student(db, student_id)

    log_with_context(logger, "INFO", "Created new student: {}".format(student_id),
        context={"student_id": student_id},
        extra_data={"source": "lookup"})
    return student


def create_student(db: Session, student_id: str, name: str, class_name: str) -> Student:
    """Admin create; Conflict if the id is already taken."""
    with store_errors(db, "create"):
        if get_student(db, student_id) is not None:
            raise Conflict("Student {} already exists".format(student_id))

        student = new_student(student_id, name, class_name)
        db.add(student)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise Conflict("Student {} already exists".format(student_id)) from e

    log_with_context(logger, "INFO", "Created new student: {}".format(student_id),
        context={"student_id": student_id},
        extra_data={"source": "admin"})
    return student


def update_profile(db: Session, student_id: str, name: Optional[str] = None,
                   class_name: Optional[str] = None) -> Student:
    """
    Overwrite the supplied profile fields of an existing student.

    Strict semantics: an unknown id raises NotFound rather than creating a
    record. Fields passed as None are left untouched.
    """
    def apply(student: Student):
        if name is not None:
            student.name = name
        if class_name is not None:
            student.class_name = class_name

    student, _ = write_student(db, student_id, apply, "update_profile")
    log_with_context(logger, "INFO", "Updated profile of student {}".format(student_id),
        context={"student_id": student_id},
        extra_data={"fields": [f for f, v in (("name", name), ("class", class_name)) if v is not None]})
    return student


def delete_student(db: Session, student_id: str) -> None:
    """Remove the student and all embedded badges; NotFound if absent."""
    write_student(db, student_id, db.delete, "delete")
    log_with_context(logger, "INFO", "Deleted student {}".format(student_id),
        context={"student_id": student_id})


def list_students(db: Session) -> List[Student]:
    """All students ordered by name ascending."""
    with store_errors(db, "list"):
        return db.query(Student).order_by(Student.name.asc(), Student.student_id.asc()).all()


def top_students(db: Session, limit: int = None) -> List[Student]:
    """
    The ``limit`` students with the highest high score, best first.

    Ties keep insertion order (earliest created first).
    """
    if limit is None:
        limit = config.LEADERBOARD_SIZE
    start_time = time.time()
    with store_errors(db, "leaderboard"):
        students = db.query(Student).order_by(
            Student.high_score.desc(),
            Student.created_at.asc()
        ).limit(limit).all()

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "DEBUG",
        "Loaded top {} students".format(len(students)),
        extra_data={"limit": limit, "duration_ms": round(duration_ms, 2)})
    return students
