from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import require_teacher
from models.teachers import Teacher
from schemas.gradebook import AssignmentDocEnvelope, AssignmentDocOut, AssignmentGradeCreate
from services import gradebook_service

router = APIRouter(prefix="/teacher/assignments", tags=["assignments"])


# ==========================================================
# [CREATE/UPDATE] rubric grade
# ==========================================================

# ✅ completion / thinking / workflow, 0-10 each; works even without a submission
@router.post("/{assignment_id}/grade", response_model=AssignmentDocEnvelope)
def grade_assignment(
    assignment_id: int,
    payload: AssignmentGradeCreate,
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(require_teacher),
):
    doc = gradebook_service.grade_assignment(db, teacher, assignment_id, payload)
    return {"doc": AssignmentDocOut.model_validate(doc)}
