"""
Student model - represents one learner playing the minigames.

Each student is uniquely identified by the ``student_id`` the child types in
on the game console. The row carries the cumulative statistics updated by
session processing, and owns its badges and per-game play time.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Text, Integer, DateTime, String, JSON, Index
from sqlalchemy.orm import relationship
from gameprogress.database import Base


class Student(Base):
    """
    SQLAlchemy model for the students table.

    ``version`` is a mapper-managed row version: every UPDATE is issued as
    ``... WHERE version = <read version>`` so a writer working from a stale
    snapshot fails with StaleDataError instead of overwriting newer stats.
    """
    __tablename__ = "students"

    student_id = Column(String(64), primary_key=True,
                        doc="Identity key entered by the student; immutable")
    name = Column(Text, nullable=False,
                  doc="Display name")
    class_name = Column("class", Text, nullable=False,
                        doc="Display class/group name")
    sessions = Column(Integer, nullable=False, default=0,
                      doc="Number of processed session reports")
    high_score = Column(Integer, nullable=False, default=0,
                        doc="Best single-session score; never decreases")
    overall_score = Column(Integer, nullable=False, default=0,
                           doc="Rounded mean of badge scores (derived)")
    time_spent = Column(JSON, nullable=False, default=dict,
                        doc="Cumulative milliseconds played per game: {game_num: ms}")
    version = Column(Integer, nullable=False,
                     doc="Optimistic concurrency counter")
    created_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc),
                        doc="Timestamp when student record was created")
    updated_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc),
                        doc="Timestamp of the last modification")

    # Relationship: one student owns many badges, listed in award order
    badges = relationship("Badge", back_populates="student", order_by="Badge.id",
                          cascade="all, delete-orphan")

    # Indexes for the admin list (by name) and leaderboard (by high score)
    __table_args__ = (
        Index("ix_students_name", "name"),
        Index("ix_students_high_score", "high_score"),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Student(id={self.student_id}, name='{self.name}', sessions={self.sessions})>"
