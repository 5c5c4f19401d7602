"""
Dialogue condition evaluation.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from gameplay import logic
from gameplay.dialog.types import (
    CustomCondition,
    InteractableStateCheck,
    ModuleStateCheck,
    StateCheck,
    TaskActive,
    TaskComplete,
)


logger = logging.getLogger(__name__)


def evaluate_condition(condition: Any, context: Any, module_data: Optional[Any] = None) -> bool:
    """
    Evaluate a condition against the module context.

    Args:
        condition: A condition, an AllOf/AnyOf tree or a bare predicate
        context: ModuleContext (or anything with the same query methods)
        module_data: The module definition, for predicates that need it

    Returns:
        Truth value; unknown condition kinds are false
    """
    return logic.evaluate(condition, lambda leaf: _check_leaf(leaf, context))


def _check_leaf(leaf: Any, context: Any) -> bool:
    if isinstance(leaf, TaskComplete):
        return context.is_task_completed(leaf.task)

    if isinstance(leaf, TaskActive):
        return context.get_current_task_id() == leaf.task

    if isinstance(leaf, (StateCheck, ModuleStateCheck)):
        return logic.strict_equals(context.get_module_state(leaf.key), leaf.value)

    if isinstance(leaf, InteractableStateCheck):
        return logic.strict_equals(
            context.get_interactable_state(leaf.interactable, leaf.key), leaf.value
        )

    if isinstance(leaf, CustomCondition):
        return bool(leaf.check(context))

    if callable(leaf):
        return bool(leaf(context))

    logger.debug(f"Unknown condition {leaf!r} evaluates to false")
    return False
