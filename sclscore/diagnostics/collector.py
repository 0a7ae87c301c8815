"""Collector for scoring diagnostics."""

from sclscore.diagnostics.models import (
    DiagnosticWarning,
    QualityMetrics,
    ScoringDiagnostic,
    ScoringStatus,
    Stage,
)


class DiagnosticsCollector:
    """Collects warnings and quality metrics while a submission is scored."""

    def __init__(self, inventory_id: str, inventory_version: str, item_count: int) -> None:
        self.inventory_id = inventory_id
        self.inventory_version = inventory_version
        self.item_count = item_count

        self._warnings: list[DiagnosticWarning] = []
        self._present: set[int] = set()
        self._coerced: list[int] = []
        self._out_of_range: list[int] = []
        self._duplicates: list[int] = []
        self._degraded = False

    def add_warning(
        self,
        stage: Stage,
        code: str,
        message: str,
        item_id: int | None = None,
        details: dict | None = None,
    ) -> None:
        """Add a warning to the diagnostics.

        Args:
            stage: Scoring stage where the warning occurred.
            code: Warning code (e.g., "UNKNOWN_ITEM").
            message: Human-readable warning message.
            item_id: Optional item the warning relates to.
            details: Optional additional details.
        """
        self._warnings.append(
            DiagnosticWarning(
                stage=stage,
                code=code,
                message=message,
                item_id=item_id,
                details=details,
            )
        )

    def record_item(self, item_id: int) -> None:
        """Record that an item was answered, noting repeats."""
        if item_id in self._present:
            self._duplicates.append(item_id)
            self.add_warning(
                stage="aggregation",
                code="DUPLICATE_ITEM",
                message=f"Item {item_id} answered more than once; last answer kept",
                item_id=item_id,
            )
        self._present.add(item_id)

    def record_coercion(self, item_id: int | None, raw: object, value: int) -> None:
        if item_id is not None:
            self._coerced.append(item_id)
        self.add_warning(
            stage="validation",
            code="SCORE_COERCED",
            message=f"Score {raw!r} coerced to {value}",
            item_id=item_id,
        )

    def record_out_of_range(self, item_id: int, value: int, low: int, high: int) -> None:
        self._out_of_range.append(item_id)
        self.add_warning(
            stage="validation",
            code="SCORE_OUT_OF_RANGE",
            message=f"Item {item_id}: score {value} outside [{low}, {high}], used as given",
            item_id=item_id,
        )

    def record_placeholder(self, factor_id: str, level: str) -> None:
        self._degraded = True
        self.add_warning(
            stage="explanation",
            code="KNOWLEDGE_MISSING",
            message=f"No explanation for {factor_id} at level {level}; placeholder used",
            details={"factor_id": factor_id, "level": level},
        )

    def finalize(self) -> ScoringDiagnostic:
        """Compute the final status and quality metrics."""
        expected = set(range(1, self.item_count + 1))
        present = self._present & expected
        missing = sorted(expected - present)

        if self._degraded:
            status = ScoringStatus.DEGRADED
        elif self._warnings or missing:
            status = ScoringStatus.PARTIAL
        else:
            status = ScoringStatus.SUCCESS

        quality = QualityMetrics(
            completeness=len(present) / self.item_count if self.item_count else 1.0,
            missing_items=missing,
            coerced_items=sorted(set(self._coerced)),
            out_of_range_items=sorted(set(self._out_of_range)),
            duplicate_items=sorted(set(self._duplicates)),
            items_total=self.item_count,
            items_present=len(present),
        )

        return ScoringDiagnostic(
            inventory_id=self.inventory_id,
            inventory_version=self.inventory_version,
            status=status,
            warnings=list(self._warnings),
            quality=quality,
        )
