"""
services/gradebook_service.py

Teacher gradebook: loads a classroom's roster, rubric grades, quiz answers and
overrides, scores every item, and builds the response bodies for routers/gradebook.py.
Also holds the write paths (settings, quiz overrides, rubric grades).
"""

import logging
import math
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.assignments import Assignment, AssignmentDoc
from models.classrooms import Classroom, ClassroomEnrollment
from models.quizzes import Quiz, QuizQuestion, QuizResponse, QuizStudentScore
from models.students import Student
from models.teachers import Teacher
from schemas.common import round2
from schemas.gradebook import (
    AssignmentGradeCreate,
    ClassAssignmentSummary,
    ClassQuizSummary,
    ClassSummary,
    GradebookResponse,
    GradebookSettingsOut,
    GradebookSettingsUpdate,
    GradebookTotals,
    QuizOverrideUpdate,
    SelectedStudent,
    StudentAssignmentDetail,
    StudentGradeRow,
    StudentQuizDetail,
)
from services.errors import ForbiddenError, GradebookError, GradebookValidationError, NotFoundError
from services.grading.aggregate import calculate_final_percent
from services.grading.scores import Excluded, Override, Scored, normalize_assignment_score, score_quiz
from services.grading.settings_resolver import resolve_settings, save_settings

logger = logging.getLogger(__name__)

RUBRIC_FIELDS = ("score_completion", "score_thinking", "score_workflow")
RUBRIC_FIELD_MAX = 10


# ==========================================================
# [shared] ownership / enrollment checks
# ==========================================================
def get_owned_classroom(db: Session, teacher: Teacher, classroom_id: int) -> Classroom:
    classroom = db.get(Classroom, classroom_id)
    if classroom is None:
        raise NotFoundError("Classroom not found")
    if classroom.teacher_id != teacher.id:
        raise ForbiddenError("Forbidden")
    return classroom


def is_enrolled(db: Session, classroom_id: int, student_id: int) -> bool:
    return (
        db.query(ClassroomEnrollment.id)
        .filter(
            ClassroomEnrollment.classroom_id == classroom_id,
            ClassroomEnrollment.student_id == student_id,
        )
        .first()
        is not None
    )


def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Error saving {action}")
        raise GradebookError(f"Failed to save {action}")


# ==========================================================
# [READ] gradebook
# ==========================================================
def _rubric_score(assignment: Assignment, doc: Optional[AssignmentDoc]) -> Scored:
    if doc is None:
        return Excluded("not graded")
    return normalize_assignment_score(
        doc.score_completion, doc.score_thinking, doc.score_workflow, assignment.points_possible
    )


def _counts_toward_final(item) -> bool:
    return item.include_in_final is not False and not getattr(item, "is_draft", False)


def build_gradebook(
    db: Session, teacher: Teacher, classroom_id: int, student_id: Optional[int] = None
) -> GradebookResponse:
    get_owned_classroom(db, teacher, classroom_id)
    settings = resolve_settings(db, classroom_id)

    roster: List[Student] = (
        db.query(Student)
        .join(ClassroomEnrollment, ClassroomEnrollment.student_id == Student.id)
        .filter(ClassroomEnrollment.classroom_id == classroom_id)
        .all()
    )
    student_ids = [s.id for s in roster]
    if student_id is not None and student_id not in student_ids:
        raise NotFoundError("Student is not enrolled in this classroom")

    assignments: List[Assignment] = (
        db.query(Assignment)
        .filter(Assignment.classroom_id == classroom_id)
        .order_by(Assignment.position, Assignment.id)
        .all()
    )
    assignment_ids = [a.id for a in assignments]
    docs: List[AssignmentDoc] = (
        db.query(AssignmentDoc)
        .filter(AssignmentDoc.assignment_id.in_(assignment_ids), AssignmentDoc.student_id.in_(student_ids))
        .all()
        if assignment_ids and student_ids else []
    )

    # ✅ draft quizzes are invisible to the gradebook
    quizzes: List[Quiz] = (
        db.query(Quiz)
        .filter(Quiz.classroom_id == classroom_id, Quiz.status != "draft")
        .order_by(Quiz.id)
        .all()
    )
    quiz_ids = [q.id for q in quizzes]
    questions: List[QuizQuestion] = (
        db.query(QuizQuestion).filter(QuizQuestion.quiz_id.in_(quiz_ids)).all() if quiz_ids else []
    )
    responses: List[QuizResponse] = (
        db.query(QuizResponse)
        .filter(QuizResponse.quiz_id.in_(quiz_ids), QuizResponse.student_id.in_(student_ids))
        .all()
        if quiz_ids and student_ids else []
    )
    overrides: List[QuizStudentScore] = (
        db.query(QuizStudentScore)
        .filter(QuizStudentScore.quiz_id.in_(quiz_ids), QuizStudentScore.student_id.in_(student_ids))
        .all()
        if quiz_ids and student_ids else []
    )

    # ----------------------------------------------------------
    # index rows
    # ----------------------------------------------------------
    doc_map: Dict[tuple, AssignmentDoc] = {(d.student_id, d.assignment_id): d for d in docs}

    correct_by_quiz: Dict[int, Dict[int, Optional[int]]] = defaultdict(dict)
    for question in questions:
        correct_by_quiz[question.quiz_id][question.id] = question.correct_option

    selected_by_student_quiz: Dict[tuple, Dict[int, int]] = defaultdict(dict)
    for response in responses:
        selected_by_student_quiz[(response.student_id, response.quiz_id)][response.question_id] = response.selected_option

    override_map = {(o.student_id, o.quiz_id): o.manual_override_score for o in overrides}

    # ----------------------------------------------------------
    # score every (student, item)
    # ----------------------------------------------------------
    assignment_scores: Dict[int, Dict[int, Scored]] = {}
    quiz_scores: Dict[int, Dict[int, Scored]] = {}
    for sid in student_ids:
        assignment_scores[sid] = {a.id: _rubric_score(a, doc_map.get((sid, a.id))) for a in assignments}
        quiz_scores[sid] = {
            q.id: score_quiz(
                correct_by_quiz.get(q.id, {}),
                selected_by_student_quiz.get((sid, q.id), {}),
                q.points_possible,
                override_map.get((sid, q.id)),
            )
            for q in quizzes
        }

    counted_assignments = [a for a in assignments if _counts_toward_final(a)]
    counted_quizzes = [q for q in quizzes if _counts_toward_final(q)]

    rows: List[StudentGradeRow] = []
    finals: List[float] = []          # unrounded, for the class average
    for student in roster:
        result = calculate_final_percent(
            settings.use_weights,
            settings.assignments_weight,
            settings.quizzes_weight,
            [assignment_scores[student.id][a.id] for a in counted_assignments],
            [quiz_scores[student.id][q.id] for q in counted_quizzes],
        )
        if result.final_percent is not None:
            finals.append(result.final_percent)
        rows.append(StudentGradeRow(
            student_id=student.id,
            student_email=student.email,
            student_first_name=student.first_name,
            student_last_name=student.last_name,
            assignments_percent=round2(result.assignments_percent),
            quizzes_percent=round2(result.quizzes_percent),
            final_percent=round2(result.final_percent),
        ))

    names = {s.id: s.display_name for s in roster}
    rows.sort(key=lambda r: (names[r.student_id].lower(), r.student_id))

    selected = None
    if student_id is not None:
        row = next(r for r in rows if r.student_id == student_id)
        selected = SelectedStudent(
            **row.model_dump(),
            assignments=[
                _assignment_detail(a, assignment_scores[student_id][a.id]) for a in assignments
            ],
            quizzes=sorted(
                (
                    _quiz_detail(q, quiz_scores[student_id][q.id])
                    for q in counted_quizzes
                    if not isinstance(quiz_scores[student_id][q.id], Excluded)
                ),
                key=lambda d: d.title.lower(),
            ),
        )

    class_summary = ClassSummary(
        total_students=len(student_ids),
        students_with_final=len(finals),
        average_final_percent=round2(sum(finals) / len(finals)) if finals else None,
        assignments=[_assignment_summary(a, [assignment_scores[sid][a.id] for sid in student_ids]) for a in assignments],
        quizzes=[
            _quiz_summary(q, [quiz_scores[sid][q.id] for sid in student_ids] if _counts_toward_final(q) else [])
            for q in quizzes
        ],
    )

    logger.info(
        f"Gradebook built: classroom_id={classroom_id} students={len(student_ids)} "
        f"assignments={len(assignments)} quizzes={len(quizzes)}"
    )
    return GradebookResponse(
        settings=settings,
        students=rows,
        selected_student=selected,
        class_summary=class_summary,
        totals=GradebookTotals(assignments=len(assignments), quizzes=len(quizzes)),
    )


def _assignment_detail(assignment: Assignment, score: Scored) -> StudentAssignmentDetail:
    graded = not isinstance(score, Excluded)
    return StudentAssignmentDetail(
        assignment_id=assignment.id,
        title=assignment.title,
        due_at=assignment.due_at,
        is_draft=bool(assignment.is_draft),
        earned=round2(score.earned) if graded else None,
        possible=round2(assignment.points_possible),
        percent=round2(score.percent) if graded else None,
        is_graded=graded,
    )


def _quiz_detail(quiz: Quiz, score: Scored) -> StudentQuizDetail:
    return StudentQuizDetail(
        quiz_id=quiz.id,
        title=quiz.title,
        earned=round2(score.earned),
        possible=round2(score.possible),
        percent=round2(score.percent),
        status=quiz.status,
        is_manual_override=isinstance(score, Override),
    )


def _assignment_summary(assignment: Assignment, scores: List[Scored]) -> ClassAssignmentSummary:
    percents = [s.percent for s in scores if not isinstance(s, Excluded)]
    return ClassAssignmentSummary(
        assignment_id=assignment.id,
        title=assignment.title,
        due_at=assignment.due_at,
        is_draft=bool(assignment.is_draft),
        possible=round2(assignment.points_possible),
        graded_count=len(percents),
        average_percent=round2(sum(percents) / len(percents)) if percents else None,
    )


def _quiz_summary(quiz: Quiz, scores: List[Scored]) -> ClassQuizSummary:
    percents = [s.percent for s in scores if not isinstance(s, Excluded)]
    return ClassQuizSummary(
        quiz_id=quiz.id,
        title=quiz.title,
        status=quiz.status,
        possible=round2(quiz.points_possible),
        scored_count=len(percents),
        average_percent=round2(sum(percents) / len(percents)) if percents else None,
    )


# ==========================================================
# [WRITE] settings
# ==========================================================
def update_settings(db: Session, teacher: Teacher, update: GradebookSettingsUpdate) -> GradebookSettingsOut:
    get_owned_classroom(db, teacher, update.classroom_id)
    try:
        return save_settings(db, update)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error saving gradebook settings")
        raise GradebookError("Failed to save settings")


# ==========================================================
# [WRITE] quiz manual override
# ==========================================================
def set_quiz_override(db: Session, teacher: Teacher, payload: QuizOverrideUpdate) -> QuizStudentScore:
    override = payload.manual_override_score
    if override is not None and (not math.isfinite(override) or override < 0):
        raise GradebookValidationError("manual_override_score must be null or a non-negative number")

    quiz = db.get(Quiz, payload.quiz_id)
    if quiz is None:
        raise NotFoundError("Quiz not found")
    if quiz.classroom_id != payload.classroom_id:
        raise GradebookValidationError("Quiz does not belong to classroom")

    classroom = db.get(Classroom, quiz.classroom_id)
    if classroom is None or classroom.teacher_id != teacher.id:
        raise ForbiddenError("Forbidden")

    max_points = quiz.points_possible if quiz.points_possible is not None else 100
    if override is not None and override > max_points:
        raise GradebookValidationError(f"manual_override_score cannot exceed points_possible ({max_points:g})")

    if not is_enrolled(db, payload.classroom_id, payload.student_id):
        raise GradebookValidationError("Student is not enrolled in this classroom")

    row = (
        db.query(QuizStudentScore)
        .filter(QuizStudentScore.quiz_id == quiz.id, QuizStudentScore.student_id == payload.student_id)
        .first()
    )
    if row is None:
        row = QuizStudentScore(quiz_id=quiz.id, student_id=payload.student_id)
        db.add(row)

    row.manual_override_score = override
    row.graded_at = datetime.now(timezone.utc)
    row.graded_by = "teacher"
    _commit(db, "quiz override")

    logger.info(f"Quiz override saved: quiz_id={quiz.id} student_id={payload.student_id} score={override}")
    return row


# ==========================================================
# [WRITE] assignment rubric grade
# ==========================================================
def grade_assignment(
    db: Session, teacher: Teacher, assignment_id: int, payload: AssignmentGradeCreate
) -> AssignmentDoc:
    scores = {}
    for name in RUBRIC_FIELDS:
        value = getattr(payload, name)
        if not float(value).is_integer() or value < 0 or value > RUBRIC_FIELD_MAX:
            raise GradebookValidationError(f"{name} must be an integer 0-{RUBRIC_FIELD_MAX}")
        scores[name] = int(value)

    assignment = db.get(Assignment, assignment_id)
    if assignment is None:
        raise NotFoundError("Assignment not found")

    classroom = db.get(Classroom, assignment.classroom_id)
    if classroom is None or classroom.teacher_id != teacher.id:
        raise ForbiddenError("Forbidden")

    if not is_enrolled(db, assignment.classroom_id, payload.student_id):
        raise GradebookValidationError("Student is not enrolled in this classroom")

    # ✅ upsert: a student can be graded before any submission exists
    doc = (
        db.query(AssignmentDoc)
        .filter(AssignmentDoc.assignment_id == assignment_id, AssignmentDoc.student_id == payload.student_id)
        .first()
    )
    if doc is None:
        doc = AssignmentDoc(assignment_id=assignment_id, student_id=payload.student_id)
        db.add(doc)

    for name, value in scores.items():
        setattr(doc, name, value)
    doc.feedback = payload.feedback
    doc.graded_at = datetime.now(timezone.utc)
    doc.graded_by = "teacher"
    _commit(db, "grade")
    db.refresh(doc)

    logger.info(f"Assignment graded: assignment_id={assignment_id} student_id={payload.student_id}")
    return doc
