"""Registry modules for loading inventory and knowledge base specifications."""

from sclscore.registry.inventories import (
    DEFAULT_REGISTRY_PATH,
    InventoryNotFoundError,
    InventoryRegistry,
    InventoryValidationError,
)
from sclscore.registry.models import (
    FactorSpec,
    InventorySpec,
    KnowledgeBaseSpec,
    KnowledgeEntry,
    SeverityBand,
    SeverityLevel,
)

__all__ = [
    "DEFAULT_REGISTRY_PATH",
    "InventoryRegistry",
    "InventoryNotFoundError",
    "InventoryValidationError",
    "InventorySpec",
    "FactorSpec",
    "SeverityBand",
    "SeverityLevel",
    "KnowledgeBaseSpec",
    "KnowledgeEntry",
]
