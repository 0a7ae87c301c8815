"""Tests for the inventory registry."""

import json
import shutil
from pathlib import Path

import pytest

from sclscore.registry import (
    InventoryNotFoundError,
    InventoryRegistry,
    InventorySpec,
    InventoryValidationError,
    SeverityLevel,
)
from sclscore.scoring import KnowledgeBase


def write_registry(root: Path, data_dir: Path, inventory: dict, with_schemas: bool = False) -> Path:
    """Write a registry containing one inventory and the shipped knowledge base."""
    inv_dir = root / "inventories" / "scl90"
    inv_dir.mkdir(parents=True)
    with open(inv_dir / "1-0-0.json", "w") as f:
        json.dump(inventory, f)
    shutil.copytree(data_dir / "knowledge", root / "knowledge")
    if with_schemas:
        shutil.copytree(data_dir / "schemas", root / "schemas")
    return root


@pytest.fixture
def raw_inventory(data_dir: Path) -> dict:
    with open(data_dir / "inventories" / "scl90" / "1-0-0.json") as f:
        return json.load(f)


class TestInventoryRegistry:
    """Tests for InventoryRegistry."""

    def test_load_scl90(self, inventory: InventorySpec) -> None:
        assert inventory.inventory_id == "scl90"
        assert inventory.version == "1.0.0"
        assert inventory.item_count == 90
        assert len(inventory.factors) == 9
        assert inventory.additional_items == (19, 44, 59, 60, 64, 66, 89)

    def test_factor_names(self, inventory: InventorySpec) -> None:
        names = [f.name for f in inventory.factors]
        assert names == [
            "Somatization",
            "Obsessive-Compulsive",
            "Interpersonal Sensitivity",
            "Depression",
            "Anxiety",
            "Hostility",
            "Phobic Anxiety",
            "Paranoid Ideation",
            "Psychoticism",
        ]

    def test_items_cover_inventory_exactly_once(self, inventory: InventorySpec) -> None:
        all_items = [i for f in inventory.factors for i in f.items]
        all_items.extend(inventory.additional_items)
        assert len(all_items) == 90
        assert sorted(all_items) == list(range(1, 91))

    def test_factor_sizes(self, inventory: InventorySpec) -> None:
        sizes = {f.factor_id: f.item_count for f in inventory.factors}
        assert sizes["somatization"] == 12
        assert sizes["depression"] == 13
        assert sizes["hostility"] == 6
        assert all(6 <= size <= 13 for size in sizes.values())

    def test_four_level_bands(self, inventory: InventorySpec) -> None:
        assert inventory.levels == (
            SeverityLevel.NORMAL,
            SeverityLevel.MILD,
            SeverityLevel.MODERATE,
            SeverityLevel.SEVERE,
        )
        assert [b.upper for b in inventory.bands] == [2, 3, 4, None]

    def test_get_factor(self, inventory: InventorySpec) -> None:
        factor = inventory.get_factor("paranoid_ideation")
        assert factor is not None
        assert factor.items == (8, 18, 43, 68, 76, 83)
        assert inventory.get_factor("nonexistent") is None

    def test_cached(self, registry: InventoryRegistry) -> None:
        assert registry.get("scl90", "1.0.0") is registry.get("scl90", "1.0.0")

    def test_list_and_latest(self, registry: InventoryRegistry) -> None:
        assert registry.list_inventories() == ["scl90"]
        assert registry.list_versions("scl90") == ["1.0.0"]
        assert registry.list_versions("unknown") == []
        assert registry.get_latest("scl90").version == "1.0.0"

    def test_not_found(self, registry: InventoryRegistry) -> None:
        with pytest.raises(InventoryNotFoundError):
            registry.get("scl90", "9.9.9")
        with pytest.raises(InventoryNotFoundError):
            registry.get_latest("unknown")

    def test_spec_is_frozen(self, inventory: InventorySpec) -> None:
        with pytest.raises(Exception):
            inventory.item_count = 89


class TestCoverageValidation:
    """Tests for factor coverage checks at load time."""

    def test_duplicate_item_rejected(
        self, tmp_path: Path, data_dir: Path, raw_inventory: dict
    ) -> None:
        raw_inventory["factors"][0]["items"].append(3)  # 3 already in obsessive_compulsive
        registry = InventoryRegistry(write_registry(tmp_path, data_dir, raw_inventory))

        with pytest.raises(InventoryValidationError, match="Item 3"):
            registry.get("scl90", "1.0.0")

    def test_missing_item_rejected(
        self, tmp_path: Path, data_dir: Path, raw_inventory: dict
    ) -> None:
        raw_inventory["additional_items"].remove(89)
        registry = InventoryRegistry(write_registry(tmp_path, data_dir, raw_inventory))

        with pytest.raises(InventoryValidationError, match="89"):
            registry.get("scl90", "1.0.0")

    def test_item_out_of_range_rejected(
        self, tmp_path: Path, data_dir: Path, raw_inventory: dict
    ) -> None:
        raw_inventory["additional_items"].append(91)
        registry = InventoryRegistry(write_registry(tmp_path, data_dir, raw_inventory))

        with pytest.raises(InventoryValidationError, match="91"):
            registry.get("scl90", "1.0.0")

    def test_bands_must_ascend(
        self, tmp_path: Path, data_dir: Path, raw_inventory: dict
    ) -> None:
        raw_inventory["bands"][1]["upper"] = 1
        registry = InventoryRegistry(write_registry(tmp_path, data_dir, raw_inventory))

        with pytest.raises(InventoryValidationError, match="ascending"):
            registry.get("scl90", "1.0.0")

    def test_last_band_open_ended(
        self, tmp_path: Path, data_dir: Path, raw_inventory: dict
    ) -> None:
        raw_inventory["bands"][-1]["upper"] = 5
        registry = InventoryRegistry(write_registry(tmp_path, data_dir, raw_inventory))

        with pytest.raises(InventoryValidationError, match="last band"):
            registry.get("scl90", "1.0.0")

    def test_schema_validation(
        self, tmp_path: Path, data_dir: Path, raw_inventory: dict
    ) -> None:
        raw_inventory["type"] = "questionnaire"
        registry = InventoryRegistry(
            write_registry(tmp_path, data_dir, raw_inventory, with_schemas=True)
        )

        with pytest.raises(InventoryValidationError, match="schema"):
            registry.get("scl90", "1.0.0")


class TestKnowledgeBase:
    """Tests for the shipped knowledge base."""

    def test_complete_for_every_factor_and_level(
        self, inventory: InventorySpec, knowledge: KnowledgeBase
    ) -> None:
        assert knowledge.missing_entries(inventory) == []

    def test_lookup(self, knowledge: KnowledgeBase) -> None:
        entry = knowledge.lookup("depression", SeverityLevel.SEVERE)
        assert "counsellor" in entry.advice

    def test_lookup_missing_raises(self, knowledge: KnowledgeBase) -> None:
        from sclscore.scoring import ConfigurationError

        with pytest.raises(ConfigurationError) as exc_info:
            knowledge.lookup("depression", SeverityLevel.EXTREME)

        assert exc_info.value.factor_id == "depression"
        assert exc_info.value.level == "extreme"

    def test_placeholder(self, knowledge: KnowledgeBase) -> None:
        assert knowledge.placeholder.symptoms
        assert knowledge.placeholder.advice
