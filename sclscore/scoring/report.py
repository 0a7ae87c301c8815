"""Report models returned by the scoring engine.

Serialized field names are camelCase to match the HTTP contract.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from sclscore.diagnostics import ScoringDiagnostic
from sclscore.registry.models import SeverityLevel
from sclscore.scoring.classifier import OverallAssessment


class ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class FactorStatus(ReportModel):
    """Severity level of a factor with its display metadata."""

    level: SeverityLevel
    text: str
    color: str


class FactorResult(ReportModel):
    """Score and classification for one factor."""

    name: str
    factor_id: str
    total_score: int
    average_score: float
    status: FactorStatus


class FactorExplanation(ReportModel):
    """Narrative text matched to a factor's classification."""

    name: str
    factor_id: str
    status: FactorStatus
    symptoms: str
    advice: str


class AdditionalItems(ReportModel):
    """Items that count towards the total but belong to no factor."""

    item_ids: list[int]
    total_score: int


class ScoreStats(ReportModel):
    """Descriptive statistics over all items.

    The positive item count is item-level: the number of items scored at
    or above the positive threshold. `positiveFactorCount` carries the same
    number under the field name used by earlier releases.
    """

    total_score: int
    item_average_score: float
    positive_item_count: int
    positive_item_percentage: str

    @computed_field(alias="positiveFactorCount")
    @property
    def positive_factor_count(self) -> int:
        return self.positive_item_count

    @computed_field(alias="positiveFactorPercentage")
    @property
    def positive_factor_percentage(self) -> str:
        return self.positive_item_percentage


class ScoreReport(ReportModel):
    """Complete report for a scored submission."""

    stats: ScoreStats
    overall_assessment: OverallAssessment
    factor_details: list[FactorResult]
    detailed_explanations: list[FactorExplanation]
    additional_items: AdditionalItems
    diagnostics: ScoringDiagnostic | None = Field(default=None, exclude=True)

    def get_factor(self, factor_id: str) -> FactorResult | None:
        """Get a factor result by its ID."""
        for factor in self.factor_details:
            if factor.factor_id == factor_id:
                return factor
        return None

    def to_response(self) -> dict:
        """Serialize to the JSON-ready response shape."""
        return self.model_dump(mode="json", by_alias=True)
