"""
Module context - the view of progress that dialogue content works with.

Dynamic dialogue fields, conditions and actions all receive a
ModuleContext. It binds one module id to the explicit store handle.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from gameplay.tasks.types import Task, task_id_of

if TYPE_CHECKING:
    from gameplay.modules.definition import Interactable, ModuleDefinition
    from gameplay.progression.store import ProgressStore


logger = logging.getLogger(__name__)


class ModuleContext:
    """
    Module-scoped progress access.

    Attributes:
        module_id: Module this context is bound to
        store: Progress store handle
        module: Module definition, when available
        requested_submission: Task id the last action asked to submit
    """

    def __init__(
        self,
        module_id: str,
        store: ProgressStore,
        module: Optional[ModuleDefinition] = None,
        on_open_task_submission: Optional[Callable[[Task], None]] = None,
    ):
        self.module_id = module_id
        self.store = store
        self.module = module
        self.on_open_task_submission = on_open_task_submission
        self.requested_submission: Optional[str] = None

    # Tasks

    def accept_task(self, task: Union[Task, str]) -> None:
        self.store.accept_task(self.module_id, task)

    def complete_task(self, task: Union[Task, str]) -> None:
        self.store.complete_task(self.module_id, task)

    def is_task_completed(self, task: Union[Task, str]) -> bool:
        return self.store.is_task_completed(self.module_id, task)

    def get_current_task_id(self) -> Optional[str]:
        return self.store.get_current_task_id(self.module_id)

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.module.get_task(task_id) if self.module else None

    def open_task_submission(self, task: Union[Task, str]) -> None:
        """Ask the UI to show the submission screen for a task."""
        task_id = task_id_of(task)
        self.requested_submission = task_id

        if self.on_open_task_submission is None:
            logger.debug(f"No submission handler for task {task_id}")
            return

        resolved = task if isinstance(task, Task) else self.get_task(task_id)
        if resolved is None:
            logger.debug(f"Task {task_id} not found in module {self.module_id}")
            return
        self.on_open_task_submission(resolved)

    # State

    def get_module_state(self, key: str, default: Any = None) -> Any:
        return self.store.get_module_state(self.module_id, key, default)

    def set_module_state(self, key: str, value: Any) -> None:
        self.store.set_module_state(self.module_id, key, value)

    def get_interactable_state(self, interactable_id: str, key: str, default: Any = None) -> Any:
        return self.store.get_interactable_state(self.module_id, interactable_id, key, default)

    def set_interactable_state(self, interactable_id: str, key: str, value: Any) -> None:
        self.store.set_interactable_state(self.module_id, interactable_id, key, value)

    def get_interactable(self, interactable_id: str) -> Optional[Interactable]:
        return self.module.get_interactable(interactable_id) if self.module else None

    # Greetings

    def has_seen_greeting(self, dialogue_id: str) -> bool:
        return self.store.has_seen_greeting(self.module_id, dialogue_id)

    def mark_greeting_seen(self, dialogue_id: str) -> None:
        self.store.mark_greeting_seen(self.module_id, dialogue_id)
