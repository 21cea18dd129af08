from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint,
)
from database.db import Base

# rubric: completion / thinking / workflow, 0-10 each
RUBRIC_MAX = 30
ASSIGNMENT_POINTS_DEFAULT = 30


class Assignment(Base):
    __tablename__ = "assignments"
    __table_args__ = (CheckConstraint("points_possible > 0", name="ck_assignment_points_positive"),)

    id = Column(Integer, primary_key=True, index=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    due_at = Column(DateTime(timezone=True))
    position = Column(Integer, nullable=False, default=0)                  # display order
    is_draft = Column(Boolean, nullable=False, default=False)
    points_possible = Column(Float, nullable=False, default=ASSIGNMENT_POINTS_DEFAULT)
    include_in_final = Column(Boolean, nullable=False, default=True)


class AssignmentDoc(Base):
    __tablename__ = "assignment_docs"
    __table_args__ = (UniqueConstraint("assignment_id", "student_id", name="uq_assignment_doc_student"),)

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)

    # ✅ rubric sub-scores, null until graded
    score_completion = Column(Integer)
    score_thinking = Column(Integer)
    score_workflow = Column(Integer)

    feedback = Column(Text, nullable=False, default="")
    graded_at = Column(DateTime(timezone=True))
    graded_by = Column(String(50))
