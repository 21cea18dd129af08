import csv
import sys
from sqlalchemy import func
from sqlalchemy.orm import Session
from database.db import SessionLocal, init_db
from models.classrooms import Classroom, ClassroomEnrollment
from models.students import Student

CSV_PATH = "data/roster.csv"  # ✅ email,first_name,last_name


def import_roster(db: Session, classroom_id: int, rows) -> dict:
    """
    Enroll every CSV row into the classroom.
    - students are matched by email (case-insensitive) and created when missing
    - rows already enrolled are skipped
    """
    classroom = db.get(Classroom, classroom_id)
    if classroom is None:
        raise ValueError(f"Classroom {classroom_id} not found")

    created, enrolled, skipped = 0, 0, 0
    for row in rows:
        email = (row.get("email") or "").strip().lower()
        if not email:
            skipped += 1
            continue

        student = db.query(Student).filter(func.lower(Student.email) == email).first()
        if student is None:
            student = Student(
                email=email,
                first_name=(row.get("first_name") or "").strip() or None,
                last_name=(row.get("last_name") or "").strip() or None,
            )
            db.add(student)
            db.flush()
            created += 1

        exists = (
            db.query(ClassroomEnrollment.id)
            .filter(ClassroomEnrollment.classroom_id == classroom_id, ClassroomEnrollment.student_id == student.id)
            .first()
        )
        if exists:
            skipped += 1
            continue

        db.add(ClassroomEnrollment(classroom_id=classroom_id, student_id=student.id))
        enrolled += 1

    db.commit()
    return {"created": created, "enrolled": enrolled, "skipped": skipped}


def migrate_roster(classroom_id: int, csv_path: str = CSV_PATH):
    init_db()
    db: Session = SessionLocal()
    try:
        with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
            result = import_roster(db, classroom_id, csv.DictReader(csvfile))
    finally:
        db.close()
    print(f"✅ roster CSV -> DB done: {result}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: python -m scripts.import_roster <classroom_id> [csv_path]")
        sys.exit(1)
    migrate_roster(int(sys.argv[1]), *sys.argv[2:3])
