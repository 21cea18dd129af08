"""
services/grading/scores.py

Per-item scoring for the gradebook.

Every scored item comes back as one of three shapes:
- Override(earned, possible)  : teacher-entered quiz score, used as is
- Computed(earned, possible)  : derived from rubric sub-scores or quiz answers
- Excluded(reason)            : not enough data to score, or worth no points; never counted as zero
"""

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Union

from models.assignments import ASSIGNMENT_POINTS_DEFAULT, RUBRIC_MAX
from models.quizzes import QUIZ_POINTS_DEFAULT


@dataclass(frozen=True)
class Override:
    earned: float
    possible: float

    @property
    def percent(self) -> float:
        return self.earned / self.possible * 100


@dataclass(frozen=True)
class Computed:
    earned: float
    possible: float

    @property
    def percent(self) -> float:
        return self.earned / self.possible * 100


@dataclass(frozen=True)
class Excluded:
    reason: str


Scored = Union[Override, Computed, Excluded]


def is_included(score: Scored) -> bool:
    return not isinstance(score, Excluded)


# ==========================================================
# [1] assignment rubric -> earned / possible
# ==========================================================
def normalize_assignment_score(
    score_completion: Optional[float],
    score_thinking: Optional[float],
    score_workflow: Optional[float],
    points_possible: Optional[float] = None,
) -> Scored:
    """
    Scale a three-part rubric (out of RUBRIC_MAX) to the assignment's point value.
    A missing sub-score excludes the assignment; there is no partial credit.
    """
    subscores = (score_completion, score_thinking, score_workflow)
    if any(s is None for s in subscores):
        return Excluded("incomplete rubric")

    possible = float(points_possible if points_possible is not None else ASSIGNMENT_POINTS_DEFAULT)
    if possible <= 0:
        return Excluded("no points possible")
    raw = sum(float(s) for s in subscores)
    return Computed(earned=(raw / RUBRIC_MAX) * possible, possible=possible)


# ==========================================================
# [2] quiz responses / override -> earned / possible
# ==========================================================
def score_quiz(
    correct_options: Mapping[int, Optional[int]],
    selected_options: Mapping[int, int],
    points_possible: Optional[float] = None,
    manual_override: Optional[float] = None,
) -> Scored:
    """
    correct_options:  question_id -> correct option index (None = unscorable)
    selected_options: question_id -> option the student picked
    """
    possible = float(points_possible if points_possible is not None else QUIZ_POINTS_DEFAULT)
    if possible <= 0:
        return Excluded("no points possible")

    if manual_override is not None:
        return Override(earned=float(manual_override), possible=possible)

    scorable = {qid: correct for qid, correct in correct_options.items() if correct is not None}
    if not scorable:
        return Excluded("no scorable questions")

    correct_count = sum(
        1 for qid, correct in scorable.items()
        if selected_options.get(qid) is not None and selected_options[qid] == correct
    )
    return Computed(earned=correct_count / len(scorable) * possible, possible=possible)


def included_scores(scores: Iterable[Scored]) -> list:
    """Drop Excluded items, keeping the order of the rest"""
    return [s for s in scores if is_included(s)]
