"""
Engine configuration.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class EngineConfig:
    """Configuration for the dialogue/progression engine."""

    def __init__(
        self,
        content_path: str = "game/content",
        schema_path: str | None = None,
        root_greeting: str = "Hello! What would you like to do?",
        task_choice_max_length: int = 50,
        propagate_to_fixed_point: bool = True,
    ):
        self.content_path = content_path
        # None means the schemas shipped with the runtime package
        self.schema_path = schema_path
        self.root_greeting = root_greeting
        self.task_choice_max_length = task_choice_max_length
        self.propagate_to_fixed_point = propagate_to_fixed_point

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EngineConfig:
        """Create a config from a dict, ignoring unknown keys."""
        known = {
            "content_path",
            "schema_path",
            "root_greeting",
            "task_choice_max_length",
            "propagate_to_fixed_point",
        }
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_file(cls, path: str | Path) -> EngineConfig:
        """Load a config from a JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> dict[str, Any]:
        return {
            "content_path": self.content_path,
            "schema_path": self.schema_path,
            "root_greeting": self.root_greeting,
            "task_choice_max_length": self.task_choice_max_length,
            "propagate_to_fixed_point": self.propagate_to_fixed_point,
        }
