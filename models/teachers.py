from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from database.db import Base


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, index=True)          # teacher id (PK)
    name = Column(String(100), nullable=False)                  # display name
    email = Column(String(255), unique=True, nullable=False)    # login email
    api_token = Column(String(128), unique=True, index=True)    # bearer token for the API

    # ✅ classrooms owned by this teacher (1:N)
    classrooms = relationship("Classroom", back_populates="teacher")
