"""
schemas/common.py

- Shared schemas reused across the project
- Pydantic v2
- Contents:
  1) standard error body: ErrorDetail, ErrorResponse
  2) two-decimal rounding used when response bodies are built
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


# =========================================================
# 1) standard error body
# =========================================================

class ErrorDetail(BaseModel):
    """Smallest unit holding an error code and message"""
    code: str = Field(..., description="error code (e.g. VALIDATION_ERROR, NOT_FOUND, INTERNAL_ERROR)")
    message: str = Field(..., description="human readable error message")


class ErrorResponse(BaseModel):
    """
    Standard error body returned by the global error handlers
    - middlewares/error_handler.py returns this shape so the OpenAPI docs stay clean
    """
    error: ErrorDetail
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="response timestamp (UTC)"
    )
    trace_id: Optional[str] = Field(
        default=None, description="request trace id (copied from X-Request-ID when present)"
    )

    model_config = ConfigDict(extra="ignore")


# =========================================================
# 2) presentation rounding
# =========================================================

def round2(value: Optional[float]) -> Optional[float]:
    """Round to 2 decimals for display; None passes through"""
    if value is None:
        return None
    return round(value, 2)
