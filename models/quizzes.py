from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint,
)
from database.db import Base

QUIZ_POINTS_DEFAULT = 100
QUIZ_STATUSES = ("draft", "active", "closed")


class Quiz(Base):
    __tablename__ = "quizzes"
    __table_args__ = (CheckConstraint("points_possible > 0", name="ck_quiz_points_positive"),)

    id = Column(Integer, primary_key=True, index=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, default="draft")            # draft | active | closed
    points_possible = Column(Float, nullable=False, default=QUIZ_POINTS_DEFAULT)
    include_in_final = Column(Boolean, nullable=False, default=True)


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"
    __table_args__ = (CheckConstraint("correct_option >= 0", name="ck_quiz_question_correct_option"),)

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    question_text = Column(Text, nullable=False, default="")
    options = Column(JSON, nullable=False, default=list)                   # ["A", "B", ...]
    correct_option = Column(Integer)                                       # null = not scorable
    position = Column(Integer, nullable=False, default=0)


class QuizResponse(Base):
    __tablename__ = "quiz_responses"
    __table_args__ = (UniqueConstraint("question_id", "student_id", name="uq_quiz_response_question_student"),)

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("quiz_questions.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    selected_option = Column(Integer, nullable=False)


class QuizStudentScore(Base):
    """Teacher-entered score that replaces automatic scoring for one student"""
    __tablename__ = "quiz_student_scores"
    __table_args__ = (
        UniqueConstraint("quiz_id", "student_id", name="uq_quiz_student_score"),
        CheckConstraint("manual_override_score >= 0", name="ck_quiz_override_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    manual_override_score = Column(Float)                                  # null = use auto score
    graded_at = Column(DateTime(timezone=True))
    graded_by = Column(String(50))
