from sqlalchemy.orm import Session
from database.db import SessionLocal, init_db
from models.assignments import Assignment, AssignmentDoc
from models.classrooms import Classroom
from models.quizzes import Quiz, QuizQuestion, QuizResponse
from models.teachers import Teacher
from scripts.import_roster import import_roster

DEMO_TOKEN = "demo-teacher-token"  # ✅ Authorization: Bearer demo-teacher-token

DEMO_ROSTER = [
    {"email": "ava.chen@example.com", "first_name": "Ava", "last_name": "Chen"},
    {"email": "liam.patel@example.com", "first_name": "Liam", "last_name": "Patel"},
    {"email": "noah.garcia@example.com", "first_name": "Noah", "last_name": "Garcia"},
]

# (title, points_possible, {email: (completion, thinking, workflow)})
DEMO_ASSIGNMENTS = [
    ("Reflection journal", 30, {
        "ava.chen@example.com": (10, 9, 10),
        "liam.patel@example.com": (7, 6, 8),
    }),
    ("Career interview", 20, {
        "ava.chen@example.com": (8, 8, 9),
        "liam.patel@example.com": (9, None, 9),   # thinking not graded yet
    }),
]

# (correct_option per question, {email: selected options})
DEMO_QUIZ = ([0, 2, 1, None], {
    "ava.chen@example.com": [0, 2, 1, 3],
    "liam.patel@example.com": [0, 1, 1, 0],
})


def seed_demo(db: Session) -> Classroom:
    """Idempotent: returns the existing demo classroom when it is already there"""
    teacher = db.query(Teacher).filter(Teacher.api_token == DEMO_TOKEN).first()
    if teacher is None:
        teacher = Teacher(name="Demo Teacher", email="teacher@example.com", api_token=DEMO_TOKEN)
        db.add(teacher)
        db.flush()

    classroom = db.query(Classroom).filter(Classroom.teacher_id == teacher.id).first()
    if classroom is not None:
        return classroom

    classroom = Classroom(title="GLD2O - Career Studies", teacher_id=teacher.id)
    db.add(classroom)
    db.flush()

    import_roster(db, classroom.id, DEMO_ROSTER)
    students = {e.student.email: e.student for e in classroom.enrollments}

    for position, (title, points, grades) in enumerate(DEMO_ASSIGNMENTS, start=1):
        assignment = Assignment(classroom_id=classroom.id, title=title, position=position, points_possible=points)
        db.add(assignment)
        db.flush()
        for email, (completion, thinking, workflow) in grades.items():
            db.add(AssignmentDoc(
                assignment_id=assignment.id,
                student_id=students[email].id,
                score_completion=completion,
                score_thinking=thinking,
                score_workflow=workflow,
                graded_by="teacher",
            ))

    correct_options, answers = DEMO_QUIZ
    quiz = Quiz(classroom_id=classroom.id, title="Unit 1 check-in", status="closed")
    db.add(quiz)
    db.flush()

    questions = []
    for position, correct in enumerate(correct_options):
        question = QuizQuestion(
            quiz_id=quiz.id,
            question_text=f"Question {position + 1}",
            options=["A", "B", "C", "D"],
            correct_option=correct,
            position=position,
        )
        db.add(question)
        questions.append(question)
    db.flush()

    for email, selected in answers.items():
        for question, option in zip(questions, selected):
            db.add(QuizResponse(
                quiz_id=quiz.id, question_id=question.id, student_id=students[email].id, selected_option=option,
            ))

    db.commit()
    return classroom


if __name__ == "__main__":
    init_db()
    db: Session = SessionLocal()
    try:
        classroom = seed_demo(db)
        print(f"✅ demo data ready: classroom_id={classroom.id} token={DEMO_TOKEN}")
    finally:
        db.close()
