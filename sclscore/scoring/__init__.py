"""Scoring engine, classifier, and report models."""

from sclscore.scoring.errors import (
    ConfigurationError,
    InternalError,
    ScoringError,
    ValidationError,
)
from sclscore.scoring.classifier import (
    OverallAssessment,
    OverallRule,
    classify_factor,
    classify_overall,
    decision_table_level,
)
from sclscore.scoring.coercion import coerce_score, normalize_item_id
from sclscore.scoring.knowledge import KnowledgeBase
from sclscore.scoring.report import (
    AdditionalItems,
    FactorExplanation,
    FactorResult,
    FactorStatus,
    ScoreReport,
    ScoreStats,
)
from sclscore.scoring.engine import ScoringEngine

__all__ = [
    "ScoringEngine",
    "ScoreReport",
    "ScoreStats",
    "FactorResult",
    "FactorStatus",
    "FactorExplanation",
    "AdditionalItems",
    "OverallAssessment",
    "OverallRule",
    "KnowledgeBase",
    "classify_factor",
    "classify_overall",
    "decision_table_level",
    "coerce_score",
    "normalize_item_id",
    "ScoringError",
    "ValidationError",
    "ConfigurationError",
    "InternalError",
]
