"""
Shared fixtures for the gradebook API tests.
Every test gets a fresh in-memory SQLite database; no MySQL needed.
"""
import os

os.environ.setdefault("SQLALCHEMY_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.db import get_db, init_db
from main import app
from models.assignments import Assignment, AssignmentDoc
from models.classrooms import Classroom, ClassroomEnrollment
from models.gradebook_settings import GradebookSettings
from models.quizzes import Quiz, QuizQuestion, QuizResponse, QuizStudentScore
from models.students import Student
from models.teachers import Teacher

TEACHER_TOKEN = "teacher-token"
OTHER_TOKEN = "other-teacher-token"


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {TEACHER_TOKEN}"}


@pytest.fixture
def teacher(db_session):
    row = Teacher(name="Ms. Rivera", email="rivera@example.com", api_token=TEACHER_TOKEN)
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture
def other_teacher(db_session):
    row = Teacher(name="Mr. Okafor", email="okafor@example.com", api_token=OTHER_TOKEN)
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture
def classroom(db_session, teacher):
    row = Classroom(title="GLD2O", teacher_id=teacher.id)
    db_session.add(row)
    db_session.commit()
    return row


class Factory:
    """Small helpers that insert rows and commit"""

    def __init__(self, session):
        self.db = session

    def _save(self, row):
        self.db.add(row)
        self.db.commit()
        return row

    def student(self, classroom, email, first_name=None, last_name=None, enroll=True):
        student = self._save(Student(email=email, first_name=first_name, last_name=last_name))
        if enroll:
            self._save(ClassroomEnrollment(classroom_id=classroom.id, student_id=student.id))
        return student

    def assignment(self, classroom, title="Assignment", position=0, points_possible=30,
                   is_draft=False, include_in_final=True, due_at=None):
        return self._save(Assignment(
            classroom_id=classroom.id, title=title, position=position, points_possible=points_possible,
            is_draft=is_draft, include_in_final=include_in_final, due_at=due_at,
        ))

    def grade(self, assignment, student, completion, thinking, workflow):
        return self._save(AssignmentDoc(
            assignment_id=assignment.id, student_id=student.id,
            score_completion=completion, score_thinking=thinking, score_workflow=workflow,
        ))

    def quiz(self, classroom, title="Quiz", status="active", points_possible=100,
             include_in_final=True, correct_options=()):
        quiz = self._save(Quiz(
            classroom_id=classroom.id, title=title, status=status,
            points_possible=points_possible, include_in_final=include_in_final,
        ))
        quiz.test_questions = [
            self._save(QuizQuestion(quiz_id=quiz.id, question_text=f"Q{i + 1}", options=["A", "B", "C", "D"],
                                    correct_option=correct, position=i))
            for i, correct in enumerate(correct_options)
        ]
        return quiz

    def answer(self, quiz, student, selected):
        """selected: one option per question in order; None skips that question"""
        for question, option in zip(quiz.test_questions, selected):
            if option is None:
                continue
            self._save(QuizResponse(quiz_id=quiz.id, question_id=question.id,
                                    student_id=student.id, selected_option=option))

    def override(self, quiz, student, score):
        return self._save(QuizStudentScore(quiz_id=quiz.id, student_id=student.id, manual_override_score=score))

    def settings(self, classroom, use_weights, assignments_weight=70, quizzes_weight=30):
        return self._save(GradebookSettings(
            classroom_id=classroom.id, use_weights=use_weights,
            assignments_weight=assignments_weight, quizzes_weight=quizzes_weight,
        ))


@pytest.fixture
def factory(db_session):
    return Factory(db_session)
