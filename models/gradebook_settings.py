from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, func
from database.db import Base


class GradebookSettings(Base):
    __tablename__ = "gradebook_settings"

    # ✅ one row per classroom
    classroom_id = Column(Integer, ForeignKey("classrooms.id", ondelete="CASCADE"), primary_key=True)
    use_weights = Column(Boolean, nullable=False, default=False)
    assignments_weight = Column(Integer, nullable=False, default=70)       # 0-100
    quizzes_weight = Column(Integer, nullable=False, default=30)           # 0-100
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
