"""
Unlock requirements - what gates a module, task or interactable.

A requirement is a predicate tree: AllOf/AnyOf inner nodes from
gameplay.logic, leaves defined here. Leaves are evaluated against an
UnlockContext, which carries the explicit store and registry handles.

Usage:
    requirement = all_of(
        module_complete("intro"),
        any_of(task_complete("essay"), password("abc123", hint="Ask the owl")),
    )
    met = check_requirement(requirement, UnlockContext("forest", store, registry))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Optional, Union

from gameplay import logic
from gameplay.logic import AllOf, AnyOf, iter_leaves
from gameplay.progression.store import ModuleProgressionState

if TYPE_CHECKING:
    from gameplay.modules.registry import ModuleRegistry
    from gameplay.progression.store import ProgressStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PasswordRequirement:
    password: str
    hint: Optional[str] = None

    type: ClassVar[str] = "password"


@dataclass(frozen=True)
class TaskCompleteRequirement:
    task: str

    type: ClassVar[str] = "task-complete"


@dataclass(frozen=True)
class ModuleCompleteRequirement:
    module_id: str

    type: ClassVar[str] = "module-complete"


@dataclass(frozen=True)
class StateRequirement:
    """Strict equality on the subject module's custom state."""
    key: str
    value: Any

    type: ClassVar[str] = "state-check"


@dataclass(frozen=True)
class CustomRequirement:
    check: Callable[[UnlockContext], bool]

    type: ClassVar[str] = "custom"


UnlockRequirement = Union[
    PasswordRequirement,
    TaskCompleteRequirement,
    ModuleCompleteRequirement,
    StateRequirement,
    CustomRequirement,
    AllOf,
    AnyOf,
]


@dataclass
class UnlockContext:
    """
    Everything a requirement may look at.

    Attributes:
        module_id: The module being unlocked (or owning the task/interactable)
        store: Progress store handle
        registry: Module registry handle, used to locate task owners
        password: Candidate password supplied by the player, if any
    """
    module_id: str
    store: ProgressStore
    registry: Optional[ModuleRegistry] = None
    password: Optional[str] = None


@dataclass
class RequirementDisplayInfo:
    """Flattened requirement info for lock screens."""
    type: str
    module_id: Optional[str] = None
    task_id: Optional[str] = None
    task_name: Optional[str] = None
    hint: Optional[str] = None


# Builders

def password(value: str, hint: Optional[str] = None) -> PasswordRequirement:
    return PasswordRequirement(value, hint)


def task_complete(task: Any) -> TaskCompleteRequirement:
    """Require a task; accepts a Task or a task id."""
    return TaskCompleteRequirement(task if isinstance(task, str) else task.id)


def module_complete(module_id: str) -> ModuleCompleteRequirement:
    return ModuleCompleteRequirement(module_id)


def state_check(key: str, value: Any) -> StateRequirement:
    return StateRequirement(key, value)


def custom_check(check: Callable[[UnlockContext], bool]) -> CustomRequirement:
    return CustomRequirement(check)


all_of = logic.all_of
any_of = logic.any_of


# Evaluation

def check_requirement(requirement: Optional[UnlockRequirement], context: UnlockContext) -> bool:
    """
    Evaluate a requirement tree.

    Password leaves are only true when the context carries the exact
    password; unlock flows that must not take a password leave it None.
    Exceptions from custom checks propagate to the caller.
    """
    if requirement is None:
        return True
    return logic.evaluate(requirement, lambda leaf: _check_leaf(leaf, context))


def _check_leaf(leaf: Any, context: UnlockContext) -> bool:
    store = context.store

    if isinstance(leaf, PasswordRequirement):
        return context.password is not None and context.password == leaf.password

    if isinstance(leaf, TaskCompleteRequirement):
        owner = None
        if context.registry is not None:
            owner = context.registry.find_task_module(leaf.task)
        return store.is_task_completed(owner or context.module_id, leaf.task)

    if isinstance(leaf, ModuleCompleteRequirement):
        return store.get_module_progression(leaf.module_id) == ModuleProgressionState.COMPLETED

    if isinstance(leaf, StateRequirement):
        return logic.strict_equals(store.get_module_state(context.module_id, leaf.key), leaf.value)

    if isinstance(leaf, CustomRequirement):
        return bool(leaf.check(context))

    logger.debug(f"Unknown requirement {leaf!r} evaluates to false")
    return False


def requires_user_interaction(requirement: Optional[UnlockRequirement]) -> bool:
    """True when any leaf of the tree needs a password from the player."""
    if requirement is None:
        return False
    return any(isinstance(leaf, PasswordRequirement) for leaf in iter_leaves(requirement))


def extract_module_dependencies(
    requirement: Optional[UnlockRequirement],
    registry: Optional[ModuleRegistry] = None,
) -> list[str]:
    """
    Module ids a requirement depends on, in declaration order.

    Task-complete leaves count as a dependency on the task's owning
    module when the registry can locate it.
    """
    if requirement is None:
        return []

    dependencies: list[str] = []
    for leaf in iter_leaves(requirement):
        module_id = None
        if isinstance(leaf, ModuleCompleteRequirement):
            module_id = leaf.module_id
        elif isinstance(leaf, TaskCompleteRequirement) and registry is not None:
            module_id = registry.find_task_module(leaf.task)

        if module_id and module_id not in dependencies:
            dependencies.append(module_id)
    return dependencies


def extract_requirement_details(
    requirement: Optional[UnlockRequirement],
    registry: Optional[ModuleRegistry] = None,
) -> list[RequirementDisplayInfo]:
    """Flatten a requirement tree into display records, one per leaf."""
    if requirement is None:
        return []

    details = []
    for leaf in iter_leaves(requirement):
        if isinstance(leaf, PasswordRequirement):
            details.append(RequirementDisplayInfo(type=leaf.type, hint=leaf.hint))
        elif isinstance(leaf, ModuleCompleteRequirement):
            details.append(RequirementDisplayInfo(type=leaf.type, module_id=leaf.module_id))
        elif isinstance(leaf, TaskCompleteRequirement):
            module_id = registry.find_task_module(leaf.task) if registry else None
            task = registry.get_task(module_id, leaf.task) if registry and module_id else None
            details.append(RequirementDisplayInfo(
                type=leaf.type,
                module_id=module_id,
                task_id=leaf.task,
                task_name=task.name if task else leaf.task,
            ))
        else:
            details.append(RequirementDisplayInfo(type=getattr(leaf, 'type', 'custom')))
    return details
