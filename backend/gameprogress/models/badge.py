"""
Badge model - an award earned by a student for one game.

Badges are embedded in their student: they are only ever created by session
processing and only ever removed together with the student.
"""

from sqlalchemy import Column, Text, Integer, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship
from gameprogress.database import Base


class Badge(Base):
    """
    SQLAlchemy model for the badges table.

    The (student_id, game) unique constraint backs the one-badge-per-game
    rule at the storage level.
    """
    __tablename__ = "badges"

    id = Column(Integer, primary_key=True, autoincrement=True,
                doc="Surrogate key; ascending ids give award order")
    student_id = Column(String(64), ForeignKey("students.student_id", ondelete="CASCADE"),
                        nullable=False, doc="Owning student")
    type = Column(Text, nullable=False,
                  doc="Award label shown to the child")
    game = Column(Integer, nullable=False,
                  doc="Game number the badge was earned for")
    date = Column(String(10), nullable=False,
                  doc="Local calendar date of the award (YYYY-MM-DD)")
    score = Column(Integer, nullable=False,
                   doc="Session score that earned the badge; fixed at award time")

    student = relationship("Student", back_populates="badges")

    __table_args__ = (
        UniqueConstraint("student_id", "game", name="uq_badges_student_game"),
    )

    def __repr__(self):
        return f"<Badge(student={self.student_id}, game={self.game}, score={self.score})>"
