"""
services/grading/aggregate.py

Category percents and the final percent for one student.
No rounding here; routers round when they build the response body.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from services.grading.scores import Scored, included_scores


@dataclass(frozen=True)
class CategoryResult:
    """Percent for one category, or no data when nothing in it was scored"""
    percent: Optional[float]
    item_count: int

    @property
    def has_data(self) -> bool:
        return self.percent is not None


@dataclass(frozen=True)
class FinalGradeResult:
    assignments: CategoryResult
    quizzes: CategoryResult
    final_percent: Optional[float]

    @property
    def assignments_percent(self) -> Optional[float]:
        return self.assignments.percent

    @property
    def quizzes_percent(self) -> Optional[float]:
        return self.quizzes.percent


def category_result(items: Sequence) -> CategoryResult:
    """100 * sum(earned) / sum(possible) over the items that have points"""
    valid = [i for i in items if i.possible > 0 and i.earned >= 0]
    possible = sum(i.possible for i in valid)
    if not valid or possible <= 0:
        return CategoryResult(percent=None, item_count=0)
    earned = sum(i.earned for i in valid)
    return CategoryResult(percent=earned / possible * 100, item_count=len(valid))


def _item_mean(items: Sequence) -> Optional[float]:
    percents = [i.percent for i in items if i.possible > 0 and i.earned >= 0]
    if not percents:
        return None
    return sum(percents) / len(percents)


def calculate_final_percent(
    use_weights: bool,
    assignments_weight: int,
    quizzes_weight: int,
    assignments: Sequence[Scored],
    quizzes: Sequence[Scored],
) -> FinalGradeResult:
    """
    Excluded items in either list are ignored.

    Weighted:   category percents blended by weight, renormalized over the
                categories that have data.
    Unweighted: plain mean of every item percent, assignments and quizzes alike.
    """
    assignments = included_scores(assignments)
    quizzes = included_scores(quizzes)

    a = category_result(assignments)
    q = category_result(quizzes)

    if not a.has_data and not q.has_data:
        return FinalGradeResult(assignments=a, quizzes=q, final_percent=None)

    if not use_weights:
        return FinalGradeResult(assignments=a, quizzes=q, final_percent=_item_mean([*assignments, *quizzes]))

    components = []
    if a.has_data and assignments_weight > 0:
        components.append((a.percent, assignments_weight))
    if q.has_data and quizzes_weight > 0:
        components.append((q.percent, quizzes_weight))

    if not components:
        # scores exist but every weight that applies is zero
        fallback = a.percent if a.has_data else q.percent
        return FinalGradeResult(assignments=a, quizzes=q, final_percent=fallback)

    weight_total = sum(w for _, w in components)
    final = sum(p * w for p, w in components) / weight_total
    return FinalGradeResult(assignments=a, quizzes=q, final_percent=final)
