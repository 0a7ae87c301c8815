"""sclscore: Scoring engine for the SCL-90 symptom inventory."""

__version__ = "0.1.0"

# Imports must come after __version__ to avoid circular import
from sclscore.scoring import ScoreReport, ScoringEngine

__all__ = ["__version__", "ScoreReport", "ScoringEngine"]
