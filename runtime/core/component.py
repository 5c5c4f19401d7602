"""
Component base class for persisted data.

Components are pure data containers with NO logic.
All logic lives in services (ProgressStore, UnlockService, ...). This
separation makes:
- Serialization trivial (save data is just model_dump())
- Testing easier
- Save files safe to load back (validation on the way in)

Usage:
    class ModuleProgress(Component):
        completed_tasks: list[str] = Field(default_factory=list)
        current_task_id: Optional[str] = None
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class Component(BaseModel):
    """
    Base class for all persisted data models.

    Uses Pydantic for:
    - Automatic validation
    - JSON serialization
    - Type hints
    - Default values

    IMPORTANT: Do NOT add methods that modify other objects.
    All logic belongs in services.
    """

    model_config = ConfigDict(
        # Allow arbitrary types (for references)
        arbitrary_types_allowed=True,
        # Validate on assignment
        validate_assignment=True,
        # Reject unknown keys in save data
        extra='forbid',
    )

    # Class variable: component type name (used for serialization)
    _type_name: ClassVar[str] = ""

    @classmethod
    def get_type_name(cls) -> str:
        """Get the component type name for serialization."""
        return cls._type_name or cls.__name__

    def clone(self) -> Component:
        """Create a deep copy of this component."""
        return self.model_copy(deep=True)


# Registry of component types for deserialization
_component_registry: dict[str, type[Component]] = {}


def register_component(cls: type[Component]) -> type[Component]:
    """
    Decorator to register a component type.

    Usage:
        @register_component
        class ModuleProgress(Component):
            completed_tasks: list[str]
    """
    type_name = cls.get_type_name()
    _component_registry[type_name] = cls
    return cls


def get_component_type(type_name: str) -> type[Component] | None:
    """Get component class by type name."""
    return _component_registry.get(type_name)
