"""Scoring engine for SCL-90 style inventories.

The engine is data-driven: factor membership, severity bands, and
explanatory text all come from the inventory and knowledge base it is
constructed with. It holds no mutable state, so one instance can serve
any number of concurrent submissions.
"""

import logging
from collections.abc import Mapping, Sequence

from sclscore.diagnostics import DiagnosticsCollector
from sclscore.registry import InventoryRegistry, InventorySpec
from sclscore.registry.models import FactorSpec, SeverityBand
from sclscore.scoring.classifier import OverallRule, classify_factor, classify_overall
from sclscore.scoring.coercion import coerce_score, is_exact_score, normalize_item_id
from sclscore.scoring.errors import (
    ConfigurationError,
    InternalError,
    ScoringError,
    ValidationError,
)
from sclscore.scoring.knowledge import KnowledgeBase
from sclscore.scoring.report import (
    AdditionalItems,
    FactorExplanation,
    FactorResult,
    FactorStatus,
    ScoreReport,
    ScoreStats,
)

logger = logging.getLogger(__name__)


def _status(band: SeverityBand) -> FactorStatus:
    return FactorStatus(level=band.level, text=band.label, color=band.color)


class ScoringEngine:
    """Converts raw item responses into a scored report.

    Steps:
    - Validate the submission shape and coerce scores to integers
    - Aggregate totals, the item mean, and the positive item count
    - Classify each factor and the submission as a whole
    - Attach knowledge base text for each factor's level
    """

    def __init__(
        self,
        inventory: InventorySpec,
        knowledge: KnowledgeBase,
        overall_rule: OverallRule = "mean",
    ) -> None:
        if overall_rule not in ("mean", "decision_table"):
            raise ValueError(f"Unknown overall rule: {overall_rule}")
        self.inventory = inventory
        self.knowledge = knowledge
        self.overall_rule = overall_rule

        for factor_id, level in knowledge.missing_entries(inventory):
            logger.error(
                "Knowledge base has no entry for %s at level %s",
                factor_id,
                level.value,
                extra={"factor_id": factor_id, "level": level.value},
            )

    @classmethod
    def from_registry(
        cls,
        registry: InventoryRegistry,
        inventory_id: str = "scl90",
        version: str = "1.0.0",
        overall_rule: OverallRule = "mean",
    ) -> "ScoringEngine":
        """Build an engine from an inventory and knowledge base in a registry."""
        inventory = registry.get(inventory_id, version)
        knowledge = KnowledgeBase(registry.get_knowledge(inventory_id, version))
        return cls(inventory, knowledge, overall_rule=overall_rule)

    def score(self, responses: object) -> ScoreReport:
        """Score a complete submission.

        Args:
            responses: Sequence of exactly `item_count` entries, each a
                mapping with `id` and `score` keys.

        Returns:
            ScoreReport with statistics, classifications, and explanations.

        Raises:
            ValidationError: If the submission is not a sequence of the
                expected length.
            InternalError: If scoring fails unexpectedly.
        """
        self._validate_shape(responses)
        try:
            return self._score(responses)
        except ScoringError:
            raise
        except Exception as e:
            raise InternalError("Unexpected failure while scoring submission") from e

    def _validate_shape(self, responses: object) -> None:
        expected = self.inventory.item_count
        if isinstance(responses, (str, bytes)) or not isinstance(responses, Sequence):
            logger.warning(
                "Rejected submission: answers are not a list",
                extra={"answers_type": type(responses).__name__},
            )
            raise ValidationError("Submitted answers must be a list")
        if len(responses) != expected:
            logger.warning(
                "Rejected submission: expected %d answers, got %d",
                expected,
                len(responses),
                extra={"expected": expected, "received": len(responses)},
            )
            raise ValidationError(
                f"Submitted answers must contain exactly {expected} entries, got {len(responses)}"
            )

    def _collect_answers(
        self,
        responses: Sequence,
        collector: DiagnosticsCollector,
    ) -> dict[int, int]:
        """Map item ids to coerced scores. Later entries for the same id win."""
        inv = self.inventory
        answers: dict[int, int] = {}

        for position, entry in enumerate(responses, 1):
            if isinstance(entry, Mapping):
                raw_id = entry.get("id")
                raw_score = entry.get("score")
            else:
                raw_id = raw_score = None

            item_id = normalize_item_id(raw_id)
            if item_id is None or not 1 <= item_id <= inv.item_count:
                collector.add_warning(
                    stage="aggregation",
                    code="UNKNOWN_ITEM",
                    message=f"Entry {position} has no valid item id ({raw_id!r}); ignored",
                    details={"position": position},
                )
                continue

            score = coerce_score(raw_score)
            if not is_exact_score(raw_score):
                collector.record_coercion(item_id, raw_score, score)
            if not inv.min_score <= score <= inv.max_score:
                collector.record_out_of_range(item_id, score, inv.min_score, inv.max_score)

            collector.record_item(item_id)
            answers[item_id] = score

        return answers

    def _score_factor(self, factor: FactorSpec, answers: dict[int, int]) -> FactorResult:
        total = sum(answers.get(item_id, 0) for item_id in factor.items)
        average = total / factor.item_count
        band = classify_factor(average, self.inventory.bands)
        return FactorResult(
            name=factor.name,
            factor_id=factor.factor_id,
            total_score=total,
            average_score=average,
            status=_status(band),
        )

    def _explain(
        self,
        result: FactorResult,
        collector: DiagnosticsCollector,
    ) -> FactorExplanation:
        try:
            entry = self.knowledge.lookup(result.factor_id, result.status.level)
        except ConfigurationError as e:
            logger.error(
                "%s; returning placeholder text",
                e,
                extra={"factor_id": e.factor_id, "level": e.level},
            )
            collector.record_placeholder(e.factor_id, e.level)
            entry = self.knowledge.placeholder

        return FactorExplanation(
            name=result.name,
            factor_id=result.factor_id,
            status=result.status,
            symptoms=entry.symptoms,
            advice=entry.advice,
        )

    def _score(self, responses: Sequence) -> ScoreReport:
        inv = self.inventory
        collector = DiagnosticsCollector(inv.inventory_id, inv.version, inv.item_count)
        answers = self._collect_answers(responses, collector)

        scores = [answers.get(item_id, 0) for item_id in range(1, inv.item_count + 1)]
        total_score = sum(scores)
        positive_count = sum(1 for score in scores if score >= inv.positive_threshold)

        stats = ScoreStats(
            total_score=total_score,
            item_average_score=round(total_score / inv.item_count, 2),
            positive_item_count=positive_count,
            positive_item_percentage=f"{positive_count / inv.item_count * 100:.0f}%",
        )

        factor_details = [self._score_factor(factor, answers) for factor in inv.factors]

        overall = classify_overall(
            total_score=total_score,
            item_count=inv.item_count,
            positive_item_count=positive_count,
            factor_averages=[f.average_score for f in factor_details],
            bands=inv.bands,
            rule=self.overall_rule,
        )

        explanations = [self._explain(result, collector) for result in factor_details]

        additional = AdditionalItems(
            item_ids=list(inv.additional_items),
            total_score=sum(answers.get(item_id, 0) for item_id in inv.additional_items),
        )

        diagnostics = collector.finalize()
        if diagnostics.warnings:
            logger.info(
                "Scored submission with %d warnings",
                len(diagnostics.warnings),
                extra={"status": diagnostics.status.value},
            )

        return ScoreReport(
            stats=stats,
            overall_assessment=overall,
            factor_details=factor_details,
            detailed_explanations=explanations,
            additional_items=additional,
            diagnostics=diagnostics,
        )
