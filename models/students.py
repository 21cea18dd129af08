from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from database.db import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)          # student id (PK)
    email = Column(String(255), unique=True, nullable=False)    # login email
    first_name = Column(String(100))                            # profile first name
    last_name = Column(String(100))                             # profile last name

    enrollments = relationship("ClassroomEnrollment", back_populates="student")

    @property
    def display_name(self) -> str:
        """'Last First', falling back to the email when the profile is empty"""
        name = f"{self.last_name or ''} {self.first_name or ''}".strip()
        return name or self.email
