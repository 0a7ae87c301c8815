"""Severity classification for factor and overall scores.

Factor averages are matched against the inventory's ordered severity
bands. The overall result is classified by one of two rules:

- ``mean``: the item mean is matched against the same bands.
- ``decision_table``: an ordered, first-match-wins table over total score,
  positive item count, and factor averages. Kept for compatibility with
  reports produced by earlier releases. It is not monotonic: raising one
  item can move a result from moderate to mild when the positive item
  count crosses 80.
"""

from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel, ConfigDict

from sclscore.registry.models import SeverityBand, SeverityLevel

OverallRule = Literal["mean", "decision_table"]

# Decision table thresholds for a 90-item inventory scored 0-4.
NORMAL_TOTAL_BELOW = 160
NORMAL_POSITIVE_MAX = 43
SEVERE_TOTAL_MIN = 300
SEVERE_POSITIVE_ABOVE = 80
MODERATE_TOTAL_RANGE = (200, 299)
MODERATE_POSITIVE_RANGE = (60, 80)
FACTOR_MILD_MIN = 2
FACTOR_MODERATE_MIN = 3
FACTOR_SEVERE_MIN = 4


class OverallAssessment(BaseModel):
    """Aggregate severity assessment for a submission."""

    model_config = ConfigDict(frozen=True)

    level: SeverityLevel
    text: str
    color: str


def classify_factor(average: float, bands: Sequence[SeverityBand]) -> SeverityBand:
    """Classify a factor average against ordered severity bands.

    Returns the first band whose exclusive upper bound exceeds the average,
    or the last (open-ended) band.
    """
    for band in bands[:-1]:
        if band.upper is not None and average < band.upper:
            return band
    return bands[-1]


def band_for_level(level: SeverityLevel, bands: Sequence[SeverityBand]) -> SeverityBand:
    """Get the band for a level, falling back to the nearest lower band."""
    candidates = [band for band in bands if band.level.rank <= level.rank]
    if candidates:
        return candidates[-1]
    return bands[0]


def _assessment(band: SeverityBand) -> OverallAssessment:
    return OverallAssessment(level=band.level, text=band.label, color=band.color)


def decision_table_level(
    total_score: int,
    positive_item_count: int,
    factor_averages: Sequence[float],
) -> SeverityLevel:
    """Apply the ordered overall decision table. The first matching rule wins."""
    all_normal = all(avg < FACTOR_MILD_MIN for avg in factor_averages)
    if (
        total_score < NORMAL_TOTAL_BELOW
        and positive_item_count <= NORMAL_POSITIVE_MAX
        and all_normal
    ):
        return SeverityLevel.NORMAL

    has_severe = any(avg >= FACTOR_SEVERE_MIN for avg in factor_averages)
    if (
        total_score >= SEVERE_TOTAL_MIN or has_severe
    ) and positive_item_count > SEVERE_POSITIVE_ABOVE:
        return SeverityLevel.SEVERE

    has_moderate = any(
        FACTOR_MODERATE_MIN <= avg < FACTOR_SEVERE_MIN for avg in factor_averages
    )
    low, high = MODERATE_TOTAL_RANGE
    pos_low, pos_high = MODERATE_POSITIVE_RANGE
    if (low <= total_score <= high or has_moderate) and (
        pos_low <= positive_item_count <= pos_high
    ):
        return SeverityLevel.MODERATE

    if total_score >= NORMAL_TOTAL_BELOW or positive_item_count > NORMAL_POSITIVE_MAX:
        return SeverityLevel.MILD

    return SeverityLevel.NORMAL


def classify_overall(
    total_score: int,
    item_count: int,
    positive_item_count: int,
    factor_averages: Sequence[float],
    bands: Sequence[SeverityBand],
    rule: OverallRule = "mean",
) -> OverallAssessment:
    """Classify the submission as a whole.

    Args:
        total_score: Sum of all item scores.
        item_count: Number of items in the inventory.
        positive_item_count: Number of items scored at or above the positive threshold.
        factor_averages: Full-precision factor averages.
        bands: Ordered severity bands of the inventory.
        rule: "mean" or "decision_table".

    Returns:
        OverallAssessment with the level, display text, and color.
    """
    if rule == "mean":
        return _assessment(classify_factor(total_score / item_count, bands))
    if rule == "decision_table":
        level = decision_table_level(total_score, positive_item_count, factor_averages)
        return _assessment(band_for_level(level, bands))
    raise ValueError(f"Unknown overall rule: {rule}")
