"""
Unlock service - module unlocking, completion and cascading unlocks.

Progression state only moves forward (locked -> unlocked -> completed).
Whenever something completes, every locked module whose requirement is
now met without player input gets unlocked, repeating until a pass
unlocks nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Optional

from runtime.core.config import EngineConfig
from gameplay.progression.requirements import (
    PasswordRequirement,
    UnlockContext,
    UnlockRequirement,
    check_requirement,
    extract_module_dependencies,
    requires_user_interaction,
)
from gameplay.progression.store import ModuleProgressionState, ProgressStore

if TYPE_CHECKING:
    from gameplay.modules.registry import ModuleRegistry


@dataclass(frozen=True)
class UnlockCheck:
    can_unlock: bool
    requires_interaction: bool


@dataclass(frozen=True)
class UnlockAttempt:
    success: bool
    requires_password: bool


class UnlockService:
    """
    Unlock and completion logic over explicit registry/store handles.

    Usage:
        service = UnlockService(registry, store)
        service.initialize_module_progression()
        check = service.can_unlock("forest")
        attempt = service.unlock("vault", password="abc123")
    """

    def __init__(
        self,
        registry: ModuleRegistry,
        store: ProgressStore,
        config: Optional[EngineConfig] = None,
    ):
        self.registry = registry
        self.store = store
        self.config = config or EngineConfig()
        self.logger = logging.getLogger(__name__)

    def _context(self, module_id: str, password: Optional[str] = None) -> UnlockContext:
        return UnlockContext(module_id, self.store, self.registry, password)

    def _requirement_for(self, module_id: str) -> Optional[UnlockRequirement]:
        module = self.registry.get(module_id)
        return module.config.unlock_requirement if module else None

    # ------------------------------------------------------------------
    # Unlocking
    # ------------------------------------------------------------------

    def can_unlock(self, module_id: str, password: Optional[str] = None) -> UnlockCheck:
        """
        Check whether a module can be unlocked now.

        Args:
            module_id: Module to check
            password: Candidate password, if the player typed one

        Returns:
            UnlockCheck; requires_interaction tells the UI to ask for a password
        """
        module = self.registry.get(module_id)
        if module is None:
            return UnlockCheck(False, False)

        if self.store.get_module_progression(module_id) != ModuleProgressionState.LOCKED:
            return UnlockCheck(False, False)

        requirement = module.config.unlock_requirement
        if requirement is None:
            return UnlockCheck(True, False)

        if isinstance(requirement, PasswordRequirement):
            if password is None:
                return UnlockCheck(False, True)
            return UnlockCheck(password == requirement.password, True)

        met = check_requirement(requirement, self._context(module_id, password))
        needs_password = requires_user_interaction(requirement)
        return UnlockCheck(met, needs_password and not met)

    def unlock(self, module_id: str, password: Optional[str] = None) -> UnlockAttempt:
        """
        Try to unlock a module.

        Unlocking an already unlocked module is a no-op that reports failure.
        """
        check = self.can_unlock(module_id, password)
        if not check.can_unlock:
            return UnlockAttempt(False, check.requires_interaction)

        self.store.unlock_module(module_id)
        self.propagate_unlocks()
        return UnlockAttempt(True, False)

    def propagate_unlocks(self, exclude: Optional[str] = None) -> list[str]:
        """
        Unlock every locked module unlockable without player input.

        Args:
            exclude: Module to skip (the one that just changed)

        Returns:
            Ids of modules unlocked, in unlock order
        """
        unlocked: list[str] = []

        while True:
            newly_unlocked = []
            for module_id in self.registry.ids():
                if module_id == exclude:
                    continue
                if self.store.get_module_progression(module_id) != ModuleProgressionState.LOCKED:
                    continue

                try:
                    check = self.can_unlock(module_id)
                except Exception as e:
                    self.logger.error(f"Unlock check failed for module {module_id}: {e}")
                    continue

                if check.can_unlock and not check.requires_interaction:
                    self.store.unlock_module(module_id)
                    newly_unlocked.append(module_id)

            unlocked.extend(newly_unlocked)
            if not newly_unlocked or not self.config.propagate_to_fixed_point:
                break

        if unlocked:
            self.logger.info(f"Propagation unlocked: {', '.join(unlocked)}")
        return unlocked

    def check_module_dependencies(self, module_id: str) -> dict[str, bool]:
        """Map each module this module depends on to whether it is completed."""
        return {
            dependency: self.store.is_module_completed(dependency)
            for dependency in extract_module_dependencies(
                self._requirement_for(module_id), self.registry
            )
        }

    def can_unlock_interactable(
        self,
        module_id: str,
        interactable: Any,
        password: Optional[str] = None,
    ) -> UnlockCheck:
        """
        Check an interactable's own unlock requirement.

        Leaves are evaluated against the owning module; locked
        progression of the module itself is not considered here.
        """
        requirement = getattr(interactable, 'unlock_requirement', None)
        if requirement is None:
            return UnlockCheck(True, False)

        met = check_requirement(requirement, self._context(module_id, password))
        return UnlockCheck(met, requires_user_interaction(requirement) and not met)

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def is_module_fully_completed(self, module_id: str) -> bool:
        """A module is complete when it has tasks and all of them are solved."""
        module = self.registry.get(module_id)
        if module is None or not module.tasks:
            return False

        completed = self.store.get_completed_tasks(module_id)
        return all(task.id in completed for task in module.tasks)

    def evaluate_module_completion(self, module_id: str, propagate: bool = True) -> bool:
        """
        Mark a module completed if all its tasks are done.

        Args:
            module_id: Module to evaluate
            propagate: Run unlock propagation after completing it

        Returns:
            True if the module is completed (now or before)
        """
        if self.store.is_module_completed(module_id):
            return True
        if not self.is_module_fully_completed(module_id):
            return False

        self.store.complete_module(module_id)
        if propagate:
            self.propagate_unlocks(exclude=module_id)
        return True

    def complete_task(self, module_id: str, task_id: str) -> None:
        """
        Record a solved task and cascade its effects.

        Propagation also runs when the module is not complete yet, so
        modules gated on a single task unlock right away.
        """
        self.store.complete_task(module_id, task_id)
        if not self.evaluate_module_completion(module_id, propagate=False):
            self.logger.debug(f"Module {module_id} not complete after task {task_id}")
        self.propagate_unlocks(exclude=module_id)

    # ------------------------------------------------------------------
    # Session start
    # ------------------------------------------------------------------

    def initialize_module_progression(self, module_ids: Optional[Iterable[str]] = None) -> list[str]:
        """
        Recompute progression from scratch.

        Every non-completed module is reset to locked, then every module
        whose requirement is met without player input is unlocked.

        Returns:
            Ids of unlocked modules
        """
        ids = list(module_ids) if module_ids is not None else self.registry.ids()

        for module_id in ids:
            self.store.lock_module(module_id)

        unlocked = self.propagate_unlocks()
        self.logger.info(f"Initialized progression for {len(ids)} modules, {len(unlocked)} unlocked")
        return unlocked
