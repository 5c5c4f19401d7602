"""
Modules - module definitions, registry, context and JSON loading.
"""

from gameplay.modules.definition import (
    InteractableType,
    ModuleManifest,
    Background,
    Welcome,
    ModuleConfig,
    Position,
    Interactable,
    NPC,
    GameObject,
    Location,
    ModuleHandlers,
    ModuleDefinition,
)
from gameplay.modules.registry import ModuleRegistry
from gameplay.modules.context import ModuleContext
from gameplay.modules.loader import ModuleLoader

__all__ = [
    "InteractableType",
    "ModuleManifest",
    "Background",
    "Welcome",
    "ModuleConfig",
    "Position",
    "Interactable",
    "NPC",
    "GameObject",
    "Location",
    "ModuleHandlers",
    "ModuleDefinition",
    "ModuleRegistry",
    "ModuleContext",
    "ModuleLoader",
]
