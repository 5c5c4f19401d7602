"""
Progression - progress store, unlock requirements and unlock propagation.
"""

from gameplay.progression.store import (
    ModuleProgressionState,
    ModuleProgress,
    ModuleProgression,
    SaveData,
    ProgressStore,
)
from gameplay.progression.requirements import (
    PasswordRequirement,
    TaskCompleteRequirement,
    ModuleCompleteRequirement,
    StateRequirement,
    CustomRequirement,
    UnlockRequirement,
    UnlockContext,
    RequirementDisplayInfo,
    password,
    task_complete,
    module_complete,
    state_check,
    custom_check,
    all_of,
    any_of,
    check_requirement,
    requires_user_interaction,
    extract_module_dependencies,
    extract_requirement_details,
)
from gameplay.progression.unlock import UnlockCheck, UnlockAttempt, UnlockService

__all__ = [
    # Store
    "ModuleProgressionState",
    "ModuleProgress",
    "ModuleProgression",
    "SaveData",
    "ProgressStore",
    # Requirements
    "PasswordRequirement",
    "TaskCompleteRequirement",
    "ModuleCompleteRequirement",
    "StateRequirement",
    "CustomRequirement",
    "UnlockRequirement",
    "UnlockContext",
    "RequirementDisplayInfo",
    "password",
    "task_complete",
    "module_complete",
    "state_check",
    "custom_check",
    "all_of",
    "any_of",
    "check_requirement",
    "requires_user_interaction",
    "extract_module_dependencies",
    "extract_requirement_details",
    # Service
    "UnlockCheck",
    "UnlockAttempt",
    "UnlockService",
]
