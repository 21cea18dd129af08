from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database.db import Base


class Classroom(Base):
    __tablename__ = "classrooms"

    id = Column(Integer, primary_key=True, index=True)                    # classroom id (PK)
    title = Column(String(200), nullable=False)                           # e.g. "GLD2O - Period 3"
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False)
    archived_at = Column(DateTime(timezone=True))                         # null while active

    # ==========================================================
    # [relationships]
    # ==========================================================

    # ✅ owning teacher (N:1)
    teacher = relationship("Teacher", back_populates="classrooms")

    # ✅ roster (1:N)
    enrollments = relationship(
        "ClassroomEnrollment",
        back_populates="classroom",
        cascade="all, delete-orphan",
    )


class ClassroomEnrollment(Base):
    __tablename__ = "classroom_enrollments"
    __table_args__ = (UniqueConstraint("classroom_id", "student_id", name="uq_enrollment_classroom_student"),)

    id = Column(Integer, primary_key=True, index=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)

    classroom = relationship("Classroom", back_populates="enrollments")
    student = relationship("Student", back_populates="enrollments")
