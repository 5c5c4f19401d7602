"""
Content Database.

Handles discovery, loading and validation of authored module content
(manifest, background, welcome text, tasks, interactables, dialogue trees).

Layout on disk:
    <content_path>/modules/<module_id>/module.json

Each file is validated against module.schema.json before it is handed to
the module loader.
"""

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema

from runtime.core.config import EngineConfig
from runtime.core.errors import ErrorCode, ModuleError

DEFAULT_SCHEMA_DIR = Path(__file__).parent / "schemas"
MODULE_SCHEMA = "module.schema.json"
MODULE_FILE = "module.json"


class ContentDatabase:
    """
    Central storage for authored module content.
    """

    def __init__(self, content_path: Path | str, schema_path: Path | str | None = None):
        self._content_path = Path(content_path)
        self._schema_path = Path(schema_path) if schema_path else DEFAULT_SCHEMA_DIR
        self._schemas: dict[str, Any] = {}

        # Raw module data keyed by module id
        self.modules: dict[str, dict[str, Any]] = {}

        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: EngineConfig) -> "ContentDatabase":
        """Create a database for the content and schema paths of an engine config."""
        return cls(config.content_path, config.schema_path)

    @property
    def modules_dir(self) -> Path:
        return self._content_path / "modules"

    def load_all(self) -> dict[str, dict[str, Any]]:
        """Load every discoverable module, skipping invalid ones."""
        self._load_schemas()

        for module_id in self.discover_module_ids():
            try:
                self.modules[module_id] = self.load_module(module_id)
            except ModuleError as e:
                self.logger.error(f"Skipping module {module_id}: {e.message}")

        self.logger.info(f"Loaded {len(self.modules)} modules.")
        return self.modules

    def discover_module_ids(self) -> list[str]:
        """Find module ids by scanning the modules directory."""
        if not self.modules_dir.exists():
            self.logger.warning(f"Modules directory not found: {self.modules_dir}")
            return []

        return sorted(
            path.name
            for path in self.modules_dir.iterdir()
            if path.is_dir() and (path / MODULE_FILE).exists()
        )

    def load_module(self, module_id: str) -> dict[str, Any]:
        """
        Load and validate a single module file.

        Raises:
            ModuleError: NOT_FOUND, LOAD_FAILED or INVALID_STRUCTURE
        """
        if not self._schemas:
            self._load_schemas()

        file_path = self.modules_dir / module_id / MODULE_FILE
        if not file_path.exists():
            raise ModuleError(
                ErrorCode.MODULE_NOT_FOUND,
                module_id,
                f"Module file not found: {file_path}",
            )

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ModuleError(
                ErrorCode.MODULE_LOAD_FAILED,
                module_id,
                f"Failed to load {file_path}: {e}",
                {"path": str(file_path)},
            ) from e

        self.validate(module_id, data)

        if data.get('id', module_id) != module_id:
            raise ModuleError(
                ErrorCode.MODULE_INVALID_STRUCTURE,
                module_id,
                f"Module id {data['id']!r} does not match directory {module_id!r}",
            )
        data.setdefault('id', module_id)
        return data

    def validate(self, module_id: str, data: Any) -> None:
        """Validate raw module data against the module schema."""
        schema = self._schemas.get(MODULE_SCHEMA)
        if schema is None:
            self.logger.warning(f"No schema found for modules ({MODULE_SCHEMA})")
            return

        try:
            jsonschema.validate(instance=data, schema=schema)
        except jsonschema.ValidationError as e:
            raise ModuleError(
                ErrorCode.MODULE_INVALID_STRUCTURE,
                module_id,
                f"Validation error in module {module_id}: {e.message}",
                {"path": list(e.absolute_path)},
            ) from e

    def get_module(self, module_id: str) -> dict[str, Any] | None:
        return self.modules.get(module_id)

    def _load_schemas(self) -> None:
        """Load JSON schemas."""
        if not self._schema_path.exists():
            self.logger.warning(f"Schema directory not found: {self._schema_path}")
            return

        for schema_file in self._schema_path.glob("*.schema.json"):
            try:
                with open(schema_file, 'r', encoding='utf-8') as f:
                    self._schemas[schema_file.name] = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load schema {schema_file}: {e}")
