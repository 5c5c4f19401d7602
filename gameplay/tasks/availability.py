"""
Task availability queries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

from gameplay.progression.requirements import UnlockContext, check_requirement
from gameplay.tasks.types import Task, TaskStatus

if TYPE_CHECKING:
    from gameplay.modules.registry import ModuleRegistry
    from gameplay.progression.store import ProgressStore


def is_task_available(
    task: Task,
    module_id: str,
    store: ProgressStore,
    registry: Optional[ModuleRegistry] = None,
) -> bool:
    """A task is available when it is not solved and its requirement is met."""
    if store.is_task_completed(module_id, task):
        return False
    return check_requirement(task.unlock_requirement, UnlockContext(module_id, store, registry))


def get_available_tasks(
    tasks: Sequence[Task],
    module_id: str,
    store: ProgressStore,
    registry: Optional[ModuleRegistry] = None,
) -> list[Task]:
    return [task for task in tasks if is_task_available(task, module_id, store, registry)]


def get_active_tasks(tasks: Sequence[Task], module_id: str, store: ProgressStore) -> list[Task]:
    """Tasks that are the module's current task (at most one)."""
    current = store.get_current_task_id(module_id)
    return [task for task in tasks if task.id == current]


def get_task_status(
    task: Task,
    module_id: str,
    store: ProgressStore,
    registry: Optional[ModuleRegistry] = None,
) -> TaskStatus:
    if store.is_task_completed(module_id, task):
        return TaskStatus.COMPLETED
    if store.get_current_task_id(module_id) == task.id:
        return TaskStatus.ACTIVE
    if is_task_available(task, module_id, store, registry):
        return TaskStatus.AVAILABLE
    return TaskStatus.LOCKED
