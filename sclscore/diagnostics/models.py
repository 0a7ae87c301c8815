"""Data models for scoring diagnostics.

Tracks coercions, ignored entries, and degraded explanations for a
single scored submission.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

Stage = Literal["validation", "aggregation", "classification", "explanation"]


class ScoringStatus(str, Enum):
    """Status of a scored submission."""

    SUCCESS = "success"  # Every entry used as given
    PARTIAL = "partial"  # Report produced, but entries were coerced or ignored
    DEGRADED = "degraded"  # Report produced with placeholder explanations


class DiagnosticWarning(BaseModel):
    """A warning raised while scoring."""

    stage: Stage
    code: str  # Warning code like "SCORE_COERCED"
    message: str
    item_id: int | None = None
    details: dict | None = None


class QualityMetrics(BaseModel):
    """Quality metrics for a scored submission."""

    completeness: float = Field(ge=0.0, le=1.0)  # Fraction of items answered
    missing_items: list[int] = Field(default_factory=list)
    coerced_items: list[int] = Field(default_factory=list)
    out_of_range_items: list[int] = Field(default_factory=list)
    duplicate_items: list[int] = Field(default_factory=list)
    items_total: int = 0
    items_present: int = 0


class ScoringDiagnostic(BaseModel):
    """Diagnostics for one scored submission."""

    inventory_id: str
    inventory_version: str
    status: ScoringStatus
    warnings: list[DiagnosticWarning] = Field(default_factory=list)
    quality: QualityMetrics | None = None
