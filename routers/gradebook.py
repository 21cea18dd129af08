from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import require_teacher
from models.teachers import Teacher
from schemas.gradebook import (
    GradebookResponse,
    GradebookSettingsEnvelope,
    GradebookSettingsUpdate,
    QuizOverrideUpdate,
    SuccessResponse,
)
from services import gradebook_service

router = APIRouter(prefix="/teacher/gradebook", tags=["gradebook"])


# ==========================================================
# [READ] classroom gradebook
# ==========================================================

# ✅ per-student category/final percents, optional per-student breakdown, class summary
@router.get("", response_model=GradebookResponse)
def get_gradebook(
    classroom_id: int,
    student_id: Optional[int] = None,
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(require_teacher),
):
    return gradebook_service.build_gradebook(db, teacher, classroom_id, student_id)


# ==========================================================
# [UPDATE] weighting settings
# ==========================================================

# ✅ upsert the classroom's weighting; rejected before any write if the weights are invalid
@router.patch("", response_model=GradebookSettingsEnvelope)
def update_gradebook_settings(
    payload: GradebookSettingsUpdate,
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(require_teacher),
):
    settings = gradebook_service.update_settings(db, teacher, payload)
    return {"settings": settings}


# ==========================================================
# [UPDATE] quiz manual override
# ==========================================================

# ✅ replaces auto scoring for one student on one quiz; null clears it
@router.patch("/quiz-overrides", response_model=SuccessResponse)
def update_quiz_override(
    payload: QuizOverrideUpdate,
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(require_teacher),
):
    gradebook_service.set_quiz_override(db, teacher, payload)
    return {"success": True}
