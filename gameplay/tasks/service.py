"""
Task service - submission workflow.

Looks up the task, runs its validator and, on success, records the
completion and cascades unlocks. A submission always yields exactly
one TaskResult; validator crashes become an evaluation_error result.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from runtime.core.errors import ErrorCode, TaskError, get_error_message
from gameplay.tasks.types import TaskResult, TaskSubmission
from gameplay.tasks.validators import failure

if TYPE_CHECKING:
    from gameplay.modules.registry import ModuleRegistry
    from gameplay.progression.unlock import UnlockService


class TaskService:
    """
    Validates submissions and records completions.

    Usage:
        service = TaskService(registry, unlock_service)
        result = service.submit("forest", "essay", TextSubmission("..."))
    """

    def __init__(self, registry: ModuleRegistry, unlock_service: UnlockService):
        self.registry = registry
        self.unlock_service = unlock_service
        self.logger = logging.getLogger(__name__)

    def submit(self, module_id: str, task_id: str, submission: TaskSubmission) -> TaskResult:
        """
        Validate a submission.

        Args:
            module_id: Module owning the task
            task_id: Task to validate
            submission: What the player handed in

        Returns:
            The validator's result, or a failure for unknown tasks and crashes
        """
        try:
            result = self.evaluate(module_id, task_id, submission)
        except TaskError as e:
            if e.code == ErrorCode.TASK_NOT_FOUND:
                self.logger.warning(e.message)
                return failure('task_not_found', f"Task {task_id} not found.")
            self.logger.error(f"Error evaluating task {module_id}/{task_id}: {e.message}")
            return failure('evaluation_error', "There was an error checking your answer. Please try again.")

        if result.solved:
            self.unlock_service.complete_task(module_id, task_id)
        return result

    def evaluate(self, module_id: str, task_id: str, submission: TaskSubmission) -> TaskResult:
        """
        Run a task's validator without recording anything.

        Raises:
            TaskError: TASK_NOT_FOUND, or TASK_EVALUATION_ERROR if the validator fails
        """
        task = self.registry.get_task(module_id, task_id)
        if task is None:
            raise TaskError(
                ErrorCode.TASK_NOT_FOUND,
                task_id,
                f"Task not found: {module_id}/{task_id}",
                module_id=module_id,
            )

        try:
            return task.validate(submission)
        except Exception as e:
            raise TaskError(
                ErrorCode.TASK_EVALUATION_ERROR,
                task_id,
                get_error_message(e),
                module_id=module_id,
            ) from e
