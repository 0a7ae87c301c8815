"""Diagnostics collection for the scoring engine.

Tracks coercions, ignored entries, and placeholder explanations
while a submission is scored.
"""

from sclscore.diagnostics.collector import DiagnosticsCollector
from sclscore.diagnostics.models import (
    DiagnosticWarning,
    QualityMetrics,
    ScoringDiagnostic,
    ScoringStatus,
)

__all__ = [
    "DiagnosticsCollector",
    "DiagnosticWarning",
    "QualityMetrics",
    "ScoringDiagnostic",
    "ScoringStatus",
]
