"""Knowledge base lookups for factor explanations."""

from sclscore.registry.models import (
    InventorySpec,
    KnowledgeBaseSpec,
    KnowledgeEntry,
    SeverityLevel,
)
from sclscore.scoring.errors import ConfigurationError


class KnowledgeBase:
    """Read-only view over a knowledge base spec.

    Entries are keyed by factor ID and severity level.
    """

    def __init__(self, spec: KnowledgeBaseSpec) -> None:
        self.spec = spec

    @property
    def placeholder(self) -> KnowledgeEntry:
        return self.spec.placeholder

    def lookup(self, factor_id: str, level: SeverityLevel) -> KnowledgeEntry:
        """Get the entry for a factor at a severity level.

        Raises:
            ConfigurationError: If no entry exists for the pair.
        """
        entry = self.spec.entries.get(factor_id, {}).get(level)
        if entry is None:
            raise ConfigurationError(factor_id, level.value)
        return entry

    def missing_entries(self, inventory: InventorySpec) -> list[tuple[str, SeverityLevel]]:
        """List (factor_id, level) pairs reachable in the inventory but absent here."""
        missing = []
        for factor in inventory.factors:
            levels = self.spec.entries.get(factor.factor_id, {})
            for level in inventory.levels:
                if level not in levels:
                    missing.append((factor.factor_id, level))
        return missing
