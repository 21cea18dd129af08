from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ==========================================================
# [settings]
# ==========================================================

# ✅ resolved settings (stored row or defaults)
class GradebookSettingsOut(BaseModel):
    use_weights: bool = False
    assignments_weight: int = 70
    quizzes_weight: int = 30

    model_config = ConfigDict(from_attributes=True)


# ✅ PATCH body; unset fields fall back to the defaults.
# Weights stay loosely typed so the resolver can name the failed constraint itself.
class GradebookSettingsUpdate(BaseModel):
    classroom_id: int
    use_weights: Optional[bool] = None
    assignments_weight: Optional[float] = None
    quizzes_weight: Optional[float] = None


class GradebookSettingsEnvelope(BaseModel):
    settings: GradebookSettingsOut


# ==========================================================
# [quiz override / rubric grade]
# ==========================================================

class QuizOverrideUpdate(BaseModel):
    classroom_id: int
    quiz_id: int
    student_id: int
    manual_override_score: Optional[float] = None         # null clears the override


class AssignmentGradeCreate(BaseModel):
    student_id: int
    score_completion: float
    score_thinking: float
    score_workflow: float
    feedback: str = ""


class AssignmentDocOut(BaseModel):
    id: int
    assignment_id: int
    student_id: int
    score_completion: Optional[int] = None
    score_thinking: Optional[int] = None
    score_workflow: Optional[int] = None
    feedback: str = ""
    graded_at: Optional[datetime] = None
    graded_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AssignmentDocEnvelope(BaseModel):
    doc: AssignmentDocOut


class SuccessResponse(BaseModel):
    success: bool = True


# ==========================================================
# [gradebook read]
# ==========================================================

class StudentGradeRow(BaseModel):
    student_id: int
    student_email: str
    student_first_name: Optional[str] = None
    student_last_name: Optional[str] = None
    assignments_percent: Optional[float] = None
    quizzes_percent: Optional[float] = None
    final_percent: Optional[float] = None


class StudentAssignmentDetail(BaseModel):
    assignment_id: int
    title: str
    due_at: Optional[datetime] = None
    is_draft: bool
    earned: Optional[float] = None
    possible: float
    percent: Optional[float] = None
    is_graded: bool


class StudentQuizDetail(BaseModel):
    quiz_id: int
    title: str
    earned: float
    possible: float
    percent: float
    status: Optional[str] = None
    is_manual_override: bool


class SelectedStudent(StudentGradeRow):
    assignments: List[StudentAssignmentDetail] = Field(default_factory=list)
    quizzes: List[StudentQuizDetail] = Field(default_factory=list)


class ClassAssignmentSummary(BaseModel):
    assignment_id: int
    title: str
    due_at: Optional[datetime] = None
    is_draft: bool
    possible: float
    graded_count: int
    average_percent: Optional[float] = None


class ClassQuizSummary(BaseModel):
    quiz_id: int
    title: str
    status: Optional[str] = None
    possible: float
    scored_count: int
    average_percent: Optional[float] = None


class ClassSummary(BaseModel):
    total_students: int
    students_with_final: int
    average_final_percent: Optional[float] = None
    assignments: List[ClassAssignmentSummary] = Field(default_factory=list)
    quizzes: List[ClassQuizSummary] = Field(default_factory=list)


class GradebookTotals(BaseModel):
    assignments: int
    quizzes: int


class GradebookResponse(BaseModel):
    settings: GradebookSettingsOut
    students: List[StudentGradeRow]
    selected_student: Optional[SelectedStudent] = None
    class_summary: ClassSummary
    totals: GradebookTotals
