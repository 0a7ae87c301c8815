"""Pytest configuration and shared fixtures."""

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from sclscore.registry import InventoryRegistry, InventorySpec, SeverityLevel
from sclscore.scoring import KnowledgeBase, ScoringEngine

AnswersFactory = Callable[..., list[dict]]


@pytest.fixture(autouse=True)
def reset_sclscore_logger():
    """Undo CLI logging setup so caplog keeps receiving records."""
    yield
    logger = logging.getLogger("sclscore")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def data_dir(project_root: Path) -> Path:
    """Return the packaged data directory."""
    return project_root / "sclscore" / "data"


@pytest.fixture
def registry() -> InventoryRegistry:
    """Registry over the packaged inventories."""
    return InventoryRegistry()


@pytest.fixture
def inventory(registry: InventoryRegistry) -> InventorySpec:
    """Load the SCL-90 inventory spec."""
    return registry.get("scl90", "1.0.0")


@pytest.fixture
def knowledge(registry: InventoryRegistry) -> KnowledgeBase:
    """Load the SCL-90 knowledge base."""
    return KnowledgeBase(registry.get_knowledge("scl90", "1.0.0"))


@pytest.fixture
def gappy_knowledge(registry: InventoryRegistry) -> KnowledgeBase:
    """Knowledge base with no text for severe somatization."""
    spec = registry.get_knowledge("scl90", "1.0.0")
    entries = {factor_id: dict(levels) for factor_id, levels in spec.entries.items()}
    del entries["somatization"][SeverityLevel.SEVERE]
    return KnowledgeBase(spec.model_copy(update={"entries": entries}))


@pytest.fixture
def engine(inventory: InventorySpec, knowledge: KnowledgeBase) -> ScoringEngine:
    """Create a scoring engine with the default overall rule."""
    return ScoringEngine(inventory, knowledge)


@pytest.fixture
def make_answers() -> AnswersFactory:
    """Build a 90-entry submission.

    `default` is the score for every item; `overrides` maps item id to score.
    """

    def factory(default: int = 0, overrides: dict[int, object] | None = None) -> list[dict]:
        overrides = overrides or {}
        return [
            {"id": item_id, "score": overrides.get(item_id, default)}
            for item_id in range(1, 91)
        ]

    return factory
