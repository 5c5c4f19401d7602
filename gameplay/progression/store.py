"""
Progress store - per-module progress and module progression state.

One ProgressStore instance is the single source of truth for a player
session. It is passed explicitly to every service that needs it.

Persisted shape:
    {
        "version": "1.0",
        "progress": {module_id: ModuleProgress},
        "progression": {module_id: "locked" | "unlocked" | "completed"},
    }
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Union

from pydantic import Field

from runtime.core.component import Component, register_component
from runtime.core.events import EventBus, ProgressionEvent

if TYPE_CHECKING:
    from gameplay.tasks.types import Task


logger = logging.getLogger(__name__)


class ModuleProgressionState(str, Enum):
    """Module progression. Only ever advances, except on explicit reset."""
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return _STATE_ORDER[self]


_STATE_ORDER = {
    ModuleProgressionState.LOCKED: 0,
    ModuleProgressionState.UNLOCKED: 1,
    ModuleProgressionState.COMPLETED: 2,
}


@register_component
class ModuleProgress(Component):
    """
    Per-module progress blob.

    Attributes:
        completed_tasks: Ids of solved tasks (no duplicates, in solve order)
        current_task_id: Id of the accepted task, if any
        seen_greetings: Dialogue ids whose greeting was shown
        module_state: Module-scoped custom fields
        interactable_state: Custom fields per interactable id
    """
    completed_tasks: list[str] = Field(default_factory=list)
    current_task_id: Optional[str] = None
    seen_greetings: dict[str, bool] = Field(default_factory=dict)
    module_state: dict[str, Any] = Field(default_factory=dict)
    interactable_state: dict[str, dict[str, Any]] = Field(default_factory=dict)


@register_component
class ModuleProgression(Component):
    """Progression state of one module plus when it changed."""
    module_id: str
    state: ModuleProgressionState = ModuleProgressionState.LOCKED
    unlocked_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class SaveData(Component):
    """Everything the store persists. Timestamps are session-only."""
    version: str = "1.0"
    progress: dict[str, ModuleProgress] = Field(default_factory=dict)
    progression: dict[str, ModuleProgressionState] = Field(default_factory=dict)


def _task_id(task: Union[Task, str]) -> str:
    return task if isinstance(task, str) else task.id


class ProgressStore:
    """
    Holds module progress and progression for one player session.

    Usage:
        store = ProgressStore(event_bus)
        store.accept_task("forest", "intro")
        store.complete_task("forest", "intro")
        store.unlock_module("village")
    """

    VERSION = "1.0"

    def __init__(self, event_bus: Optional[EventBus] = None):
        self.event_bus = event_bus
        self._progress: dict[str, ModuleProgress] = {}
        self._progression: dict[str, ModuleProgression] = {}

    # ------------------------------------------------------------------
    # Module progress
    # ------------------------------------------------------------------

    def get_progress(self, module_id: str) -> Optional[ModuleProgress]:
        """Get module progress, None if the module was never entered."""
        return self._progress.get(module_id)

    def ensure_progress(self, module_id: str) -> ModuleProgress:
        """Get module progress, creating it on first entry."""
        progress = self._progress.get(module_id)
        if progress is None:
            progress = ModuleProgress()
            self._progress[module_id] = progress
        return progress

    def accept_task(self, module_id: str, task: Union[Task, str]) -> None:
        """Make a task the module's current task."""
        task_id = _task_id(task)
        progress = self.ensure_progress(module_id)
        if progress.current_task_id == task_id:
            return

        progress.current_task_id = task_id
        self._publish(ProgressionEvent.TASK_ACCEPTED, module_id=module_id, task_id=task_id)

    def complete_task(self, module_id: str, task: Union[Task, str]) -> bool:
        """
        Mark a task complete and clear it as current task.

        Returns:
            True if the task was not complete before
        """
        task_id = _task_id(task)
        progress = self.ensure_progress(module_id)
        if task_id in progress.completed_tasks:
            return False

        progress.completed_tasks = [*progress.completed_tasks, task_id]
        progress.current_task_id = None
        logger.info(f"Task completed: {module_id}/{task_id}")
        self._publish(ProgressionEvent.TASK_COMPLETED, module_id=module_id, task_id=task_id)
        return True

    def is_task_completed(self, module_id: str, task: Union[Task, str]) -> bool:
        progress = self._progress.get(module_id)
        return progress is not None and _task_id(task) in progress.completed_tasks

    def get_completed_tasks(self, module_id: str) -> set[str]:
        progress = self._progress.get(module_id)
        return set(progress.completed_tasks) if progress else set()

    def get_current_task_id(self, module_id: str) -> Optional[str]:
        progress = self._progress.get(module_id)
        return progress.current_task_id if progress else None

    def has_seen_greeting(self, module_id: str, dialogue_id: str) -> bool:
        progress = self._progress.get(module_id)
        return bool(progress and progress.seen_greetings.get(dialogue_id))

    def mark_greeting_seen(self, module_id: str, dialogue_id: str) -> None:
        progress = self.ensure_progress(module_id)
        progress.seen_greetings = {**progress.seen_greetings, dialogue_id: True}

    def get_module_state(self, module_id: str, key: str, default: Any = None) -> Any:
        progress = self._progress.get(module_id)
        if progress is None:
            return default
        return progress.module_state.get(key, default)

    def set_module_state(self, module_id: str, key: str, value: Any) -> None:
        progress = self.ensure_progress(module_id)
        progress.module_state = {**progress.module_state, key: value}

    def get_interactable_state(
        self,
        module_id: str,
        interactable_id: str,
        key: str,
        default: Any = None,
    ) -> Any:
        progress = self._progress.get(module_id)
        if progress is None:
            return default
        return progress.interactable_state.get(interactable_id, {}).get(key, default)

    def set_interactable_state(
        self,
        module_id: str,
        interactable_id: str,
        key: str,
        value: Any,
    ) -> None:
        progress = self.ensure_progress(module_id)
        fields = {**progress.interactable_state.get(interactable_id, {}), key: value}
        progress.interactable_state = {**progress.interactable_state, interactable_id: fields}

    # ------------------------------------------------------------------
    # Module progression
    # ------------------------------------------------------------------

    def get_module_progression(self, module_id: str) -> ModuleProgressionState:
        """Get a module's progression state (locked if unknown)."""
        progression = self._progression.get(module_id)
        return progression.state if progression else ModuleProgressionState.LOCKED

    def get_progression_map(self) -> dict[str, ModuleProgressionState]:
        return {module_id: p.state for module_id, p in self._progression.items()}

    def is_module_completed(self, module_id: str) -> bool:
        return self.get_module_progression(module_id) == ModuleProgressionState.COMPLETED

    def unlock_module(self, module_id: str) -> bool:
        """
        Move a module from locked to unlocked.

        Returns:
            True if the state changed; unlocked/completed modules are left alone
        """
        if self.get_module_progression(module_id) != ModuleProgressionState.LOCKED:
            return False

        self._advance(module_id, ModuleProgressionState.UNLOCKED)
        logger.info(f"Module unlocked: {module_id}")
        self._publish(ProgressionEvent.MODULE_UNLOCKED, module_id=module_id)
        return True

    def complete_module(self, module_id: str) -> bool:
        """
        Mark a module completed.

        Returns:
            True if the state changed
        """
        if self.is_module_completed(module_id):
            return False

        self._advance(module_id, ModuleProgressionState.COMPLETED)
        logger.info(f"Module completed: {module_id}")
        self._publish(ProgressionEvent.MODULE_COMPLETED, module_id=module_id)
        return True

    def lock_module(self, module_id: str) -> None:
        """
        Explicitly reset a module's progression to locked.

        Completed modules stay completed; use reset() to clear those.
        """
        if self.is_module_completed(module_id):
            return
        self._progression[module_id] = ModuleProgression(module_id=module_id)

    def reset(self, module_id: Optional[str] = None) -> None:
        """
        Delete progress and progression.

        Args:
            module_id: Module to reset, or None for everything
        """
        if module_id is None:
            module_ids = set(self._progress) | set(self._progression)
            self._progress.clear()
            self._progression.clear()
        else:
            module_ids = {module_id}
            self._progress.pop(module_id, None)
            self._progression.pop(module_id, None)

        for reset_id in sorted(module_ids):
            self._publish(ProgressionEvent.MODULE_RESET, module_id=reset_id)

    def _advance(self, module_id: str, state: ModuleProgressionState) -> None:
        progression = self._progression.get(module_id) or ModuleProgression(module_id=module_id)
        if state.rank <= progression.state.rank:
            logger.debug(
                f"Ignoring progression change {progression.state.value} -> "
                f"{state.value} for {module_id}"
            )
            return

        now = datetime.now(timezone.utc)
        progression.state = state
        if state == ModuleProgressionState.UNLOCKED:
            progression.unlocked_at = now
        elif state == ModuleProgressionState.COMPLETED:
            progression.completed_at = now
            if progression.unlocked_at is None:
                progression.unlocked_at = now
        self._progression[module_id] = progression

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def get_save_data(self) -> dict[str, Any]:
        """Get save data (JSON-compatible)."""
        data = SaveData(
            version=self.VERSION,
            progress=self._progress,
            progression=self.get_progression_map(),
        )
        return data.model_dump(mode='json')

    def load_save_data(self, data: dict[str, Any]) -> None:
        """Replace the store contents with previously saved data."""
        save = SaveData.model_validate(data)
        self._progress = dict(save.progress)
        self._progression = {
            module_id: ModuleProgression(module_id=module_id, state=state)
            for module_id, state in save.progression.items()
        }
        logger.info(
            f"Loaded progress for {len(self._progress)} modules, "
            f"progression for {len(self._progression)}"
        )

    def save_to_file(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.get_save_data(), f, indent=2)

    def load_from_file(self, path: str | Path) -> None:
        with open(path, 'r', encoding='utf-8') as f:
            self.load_save_data(json.load(f))

    def _publish(self, event_type: ProgressionEvent, **data: Any) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)
