"""Inventory registry for loading and caching inventory and knowledge specs."""

import json
import logging
from pathlib import Path

import jsonschema
from pydantic import ValidationError as PydanticValidationError

from sclscore.registry.models import InventorySpec, KnowledgeBaseSpec

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_PATH = Path(__file__).resolve().parent.parent / "data"

INVENTORY_SCHEMA = "inventory_spec.schema.json"
KNOWLEDGE_SCHEMA = "knowledge_base.schema.json"


class InventoryNotFoundError(Exception):
    """Raised when an inventory or knowledge base file is not found."""

    pass


class InventoryValidationError(Exception):
    """Raised when an inventory or knowledge base fails validation."""

    pass


def version_to_filename(version: str) -> str:
    """Convert version string to filename (1.0.0 -> 1-0-0.json)."""
    return version.replace(".", "-") + ".json"


class InventoryRegistry:
    """Registry for loading and caching inventory specifications.

    Loads specs from a directory structure:
        <registry_path>/inventories/<inventory_id>/<version>.json
        <registry_path>/knowledge/<inventory_id>/<version>.json
        <registry_path>/schemas/*.schema.json

    Where version uses dashes instead of dots (e.g., 1-0-0.json for 1.0.0).
    Schema validation is skipped when the schemas directory is absent.
    """

    def __init__(self, registry_path: Path | str | None = None) -> None:
        self.registry_path = Path(registry_path) if registry_path else DEFAULT_REGISTRY_PATH
        self.inventories_path = self.registry_path / "inventories"
        self.knowledge_path = self.registry_path / "knowledge"
        self.schemas_path = self.registry_path / "schemas"
        self._inventories: dict[tuple[str, str], InventorySpec] = {}
        self._knowledge: dict[tuple[str, str], KnowledgeBaseSpec] = {}
        self._schemas: dict[str, dict | None] = {}

    def _schema(self, filename: str) -> dict | None:
        if filename not in self._schemas:
            schema_path = self.schemas_path / filename
            if schema_path.exists():
                with open(schema_path) as f:
                    self._schemas[filename] = json.load(f)
            else:
                self._schemas[filename] = None
        return self._schemas[filename]

    def _load(self, path: Path, schema_name: str, label: str) -> dict:
        if not path.exists():
            raise InventoryNotFoundError(f"{label} not found (expected at {path})")

        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        schema = self._schema(schema_name)
        if schema:
            try:
                jsonschema.validate(data, schema)
            except jsonschema.ValidationError as e:
                raise InventoryValidationError(
                    f"{label} failed schema validation: {e.message}"
                ) from e
        return data

    def get(self, inventory_id: str, version: str) -> InventorySpec:
        """Get an inventory specification by ID and version.

        Raises:
            InventoryNotFoundError: If the spec file doesn't exist.
            InventoryValidationError: If the spec fails schema validation or
                its factor coverage is inconsistent.
        """
        cache_key = (inventory_id, version)
        if cache_key in self._inventories:
            return self._inventories[cache_key]

        path = self.inventories_path / inventory_id / version_to_filename(version)
        label = f"Inventory {inventory_id}@{version}"
        data = self._load(path, INVENTORY_SCHEMA, label)
        try:
            spec = InventorySpec.model_validate(data)
        except PydanticValidationError as e:
            raise InventoryValidationError(f"{label} is invalid: {e}") from e

        logger.debug("Loaded %s from %s", label, path)
        self._inventories[cache_key] = spec
        return spec

    def get_knowledge(self, inventory_id: str, version: str) -> KnowledgeBaseSpec:
        """Get the knowledge base for an inventory version."""
        cache_key = (inventory_id, version)
        if cache_key in self._knowledge:
            return self._knowledge[cache_key]

        path = self.knowledge_path / inventory_id / version_to_filename(version)
        label = f"Knowledge base {inventory_id}@{version}"
        data = self._load(path, KNOWLEDGE_SCHEMA, label)
        try:
            spec = KnowledgeBaseSpec.model_validate(data)
        except PydanticValidationError as e:
            raise InventoryValidationError(f"{label} is invalid: {e}") from e

        logger.debug("Loaded %s from %s", label, path)
        self._knowledge[cache_key] = spec
        return spec

    def list_inventories(self) -> list[str]:
        """List all available inventory IDs."""
        if not self.inventories_path.exists():
            return []
        return sorted(d.name for d in self.inventories_path.iterdir() if d.is_dir())

    def list_versions(self, inventory_id: str) -> list[str]:
        """List all available versions for an inventory."""
        inventory_path = self.inventories_path / inventory_id
        if not inventory_path.exists():
            return []
        return sorted(f.stem.replace("-", ".") for f in inventory_path.glob("*.json"))

    def get_latest(self, inventory_id: str) -> InventorySpec:
        """Get the latest version of an inventory.

        Raises:
            InventoryNotFoundError: If no versions exist.
        """
        versions = self.list_versions(inventory_id)
        if not versions:
            raise InventoryNotFoundError(f"No versions found for inventory: {inventory_id}")
        return self.get(inventory_id, versions[-1])
