"""Pydantic models for inventory and knowledge base specifications."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SeverityLevel(str, Enum):
    """Ordered severity classification levels."""

    NORMAL = "normal"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    EXTREME = "extreme"

    @property
    def rank(self) -> int:
        """Position of the level in severity order (normal is 0)."""
        return list(SeverityLevel).index(self)


class SeverityBand(BaseModel):
    """Classification band: averages below `upper` fall into this level."""

    model_config = ConfigDict(frozen=True)

    level: SeverityLevel
    label: str
    color: str
    upper: float | None = None


class FactorSpec(BaseModel):
    """Factor (symptom dimension) definition within an inventory."""

    model_config = ConfigDict(frozen=True)

    factor_id: str
    name: str
    items: tuple[int, ...]

    @property
    def item_count(self) -> int:
        return len(self.items)


class InventorySpec(BaseModel):
    """Complete inventory specification.

    Factor items and additional items must be disjoint and together cover
    exactly item ids 1..item_count.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["inventory_spec"]
    inventory_id: str
    version: str
    name: str
    description: str | None = None
    item_count: int
    min_score: int = 0
    max_score: int = 4
    positive_threshold: int = 2
    factors: tuple[FactorSpec, ...]
    additional_items: tuple[int, ...] = Field(default_factory=tuple)
    bands: tuple[SeverityBand, ...]

    @model_validator(mode="after")
    def check_coverage(self) -> "InventorySpec":
        """Ensure every item belongs to exactly one factor or the additional group."""
        seen: dict[int, str] = {}
        groups = [(f.factor_id, f.items) for f in self.factors]
        groups.append(("additional_items", self.additional_items))
        for group_id, items in groups:
            for item_id in items:
                if item_id in seen:
                    raise ValueError(
                        f"Item {item_id} appears in both {seen[item_id]} and {group_id}"
                    )
                seen[item_id] = group_id

        expected = set(range(1, self.item_count + 1))
        missing = sorted(expected - seen.keys())
        extra = sorted(seen.keys() - expected)
        if missing:
            raise ValueError(f"Items not assigned to any group: {missing}")
        if extra:
            raise ValueError(f"Items outside 1..{self.item_count}: {extra}")
        return self

    @model_validator(mode="after")
    def check_bands(self) -> "InventorySpec":
        """Ensure bands are ascending and only the last band is open-ended."""
        if not self.bands:
            raise ValueError("At least one severity band is required")
        previous: float | None = None
        for band in self.bands[:-1]:
            if band.upper is None:
                raise ValueError(f"Only the last band may omit 'upper' ({band.level.value})")
            if previous is not None and band.upper <= previous:
                raise ValueError("Band upper bounds must be strictly ascending")
            previous = band.upper
        if self.bands[-1].upper is not None:
            raise ValueError("The last band must have 'upper' set to null")
        ranks = [band.level.rank for band in self.bands]
        if ranks != sorted(set(ranks)):
            raise ValueError("Band levels must be distinct and in severity order")
        return self

    @property
    def levels(self) -> tuple[SeverityLevel, ...]:
        """Levels reachable with this inventory's bands."""
        return tuple(band.level for band in self.bands)

    def get_factor(self, factor_id: str) -> FactorSpec | None:
        """Get a factor by its ID."""
        for factor in self.factors:
            if factor.factor_id == factor_id:
                return factor
        return None


class KnowledgeEntry(BaseModel):
    """Narrative text for one factor at one severity level."""

    model_config = ConfigDict(frozen=True)

    symptoms: str
    advice: str


class KnowledgeBaseSpec(BaseModel):
    """Knowledge base keyed by factor ID and severity level."""

    model_config = ConfigDict(frozen=True)

    type: Literal["knowledge_base"]
    inventory_id: str
    version: str
    placeholder: KnowledgeEntry = KnowledgeEntry(
        symptoms="No description is available for this result.",
        advice="Consider discussing this area with a mental health professional.",
    )
    entries: dict[str, dict[SeverityLevel, KnowledgeEntry]]
