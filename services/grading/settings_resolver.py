"""
services/grading/settings_resolver.py

Per-classroom gradebook settings.
- Read: stored row, or the defaults when the classroom never saved any (defaults are not written).
- Write: validate first, then upsert keyed by classroom_id. Concurrent writers: last one wins.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from models.gradebook_settings import GradebookSettings
from schemas.gradebook import GradebookSettingsOut, GradebookSettingsUpdate
from services.errors import GradebookValidationError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = GradebookSettingsOut(use_weights=False, assignments_weight=70, quizzes_weight=30)


def resolve_settings(db: Session, classroom_id: int) -> GradebookSettingsOut:
    row = db.get(GradebookSettings, classroom_id)
    if row is None:
        return DEFAULT_SETTINGS.model_copy()
    return GradebookSettingsOut.model_validate(row)


def _check_weight(name: str, value: Optional[float], default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not float(value).is_integer():
        raise GradebookValidationError(f"{name} must be an integer")
    weight = int(value)
    if weight < 0 or weight > 100:
        raise GradebookValidationError(f"{name} must be between 0 and 100")
    return weight


def validate_settings_update(update: GradebookSettingsUpdate) -> GradebookSettingsOut:
    """Fill unset fields from the defaults and check the weight constraints"""
    use_weights = DEFAULT_SETTINGS.use_weights if update.use_weights is None else bool(update.use_weights)
    assignments_weight = _check_weight("assignments_weight", update.assignments_weight, DEFAULT_SETTINGS.assignments_weight)
    quizzes_weight = _check_weight("quizzes_weight", update.quizzes_weight, DEFAULT_SETTINGS.quizzes_weight)

    # the split only matters once weighting is on
    if use_weights and assignments_weight + quizzes_weight != 100:
        raise GradebookValidationError("assignments_weight + quizzes_weight must equal 100")

    return GradebookSettingsOut(
        use_weights=use_weights,
        assignments_weight=assignments_weight,
        quizzes_weight=quizzes_weight,
    )


def save_settings(db: Session, update: GradebookSettingsUpdate) -> GradebookSettingsOut:
    resolved = validate_settings_update(update)

    row = db.get(GradebookSettings, update.classroom_id)
    if row is None:
        row = GradebookSettings(classroom_id=update.classroom_id)
        db.add(row)

    for key, value in resolved.model_dump().items():
        setattr(row, key, value)

    db.commit()
    db.refresh(row)
    logger.info(
        f"Gradebook settings saved: classroom_id={update.classroom_id} "
        f"use_weights={row.use_weights} weights={row.assignments_weight}/{row.quizzes_weight}"
    )
    return GradebookSettingsOut.model_validate(row)
