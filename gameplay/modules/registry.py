"""
Module registry - the set of known modules and the active one.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from runtime.core.errors import ErrorCode, ModuleError
from gameplay.modules.definition import ModuleDefinition
from gameplay.tasks.types import Task


class ModuleRegistry:
    """
    Registered module definitions, in registration order.

    Usage:
        registry = ModuleRegistry()
        registry.register(forest_module)
        registry.activate("forest")
    """

    def __init__(self, modules: Iterable[ModuleDefinition] = ()):
        self.logger = logging.getLogger(__name__)
        self._modules: dict[str, ModuleDefinition] = {}
        self._task_owners: dict[str, str] = {}
        self._active_id: Optional[str] = None

        for module in modules:
            self.register(module)

    def register(self, module: ModuleDefinition) -> None:
        """
        Register a module.

        Raises:
            ModuleError: MODULE_INVALID_STRUCTURE on duplicate task ids
                within the module or a manifest id mismatch
        """
        if module.config.manifest.id != module.id:
            raise ModuleError(
                ErrorCode.MODULE_INVALID_STRUCTURE,
                module.id,
                f"Manifest id '{module.config.manifest.id}' does not match module id '{module.id}'",
            )

        seen: set[str] = set()
        for task in module.tasks:
            if task.id in seen:
                raise ModuleError(
                    ErrorCode.MODULE_INVALID_STRUCTURE,
                    module.id,
                    f"Duplicate task id '{task.id}' in module '{module.id}'",
                    context={"task_id": task.id},
                )
            seen.add(task.id)

        if module.id in self._modules:
            self.logger.warning(f"Replacing registered module: {module.id}")
            self._task_owners = {
                task_id: owner for task_id, owner in self._task_owners.items()
                if owner != module.id
            }

        self._modules[module.id] = module
        for task in module.tasks:
            self._task_owners.setdefault(task.id, module.id)

        self.logger.info(f"Registered module: {module.id} ({len(module.tasks)} tasks)")

    def get(self, module_id: str) -> Optional[ModuleDefinition]:
        return self._modules.get(module_id)

    def require(self, module_id: str) -> ModuleDefinition:
        """Get a module or raise MODULE_NOT_FOUND."""
        module = self._modules.get(module_id)
        if module is None:
            raise ModuleError(ErrorCode.MODULE_NOT_FOUND, module_id, f"Module not found: {module_id}")
        return module

    def ids(self) -> list[str]:
        return list(self._modules)

    def all(self) -> list[ModuleDefinition]:
        return list(self._modules.values())

    def __contains__(self, module_id: str) -> bool:
        return module_id in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def find_task_module(self, task_id: str) -> Optional[str]:
        """Id of the first registered module that owns a task id."""
        return self._task_owners.get(task_id)

    def get_task(self, module_id: str, task_id: str) -> Optional[Task]:
        module = self._modules.get(module_id)
        return module.get_task(task_id) if module else None

    # ------------------------------------------------------------------
    # Active module
    # ------------------------------------------------------------------

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    def activate(self, module_id: str) -> ModuleDefinition:
        """
        Make a module the active one.

        Raises:
            ModuleError: MODULE_NOT_FOUND, or MODULE_ALREADY_ACTIVE when a
                different module is active
        """
        module = self.require(module_id)

        if self._active_id is not None and self._active_id != module_id:
            raise ModuleError(
                ErrorCode.MODULE_ALREADY_ACTIVE,
                module_id,
                f"Cannot activate '{module_id}': module '{self._active_id}' is active",
                context={"active_id": self._active_id},
            )

        self._active_id = module_id
        self.logger.info(f"Activated module: {module_id}")
        return module

    def deactivate(self) -> None:
        if self._active_id is not None:
            self.logger.info(f"Deactivated module: {self._active_id}")
        self._active_id = None
