"""
Dialog - branching dialogue trees with context-dependent content.

Exports:
- Types: nodes, edges, trees, conditions, choice actions
- resolve, resolve_node_at_runtime, resolve_next: Dynamic fields
- evaluate_condition: Condition evaluator
- get_initial_dialogue_node, get_available_choices, get_next_dialogue_node
- process_actions, navigation_signal: Action pipeline
- DialogueOverlay, generate_root_dialogue: Task-driven root node
- DialogueTreeBuilder, DialogParser: Authoring
- DialogueSession: Conversation runner
"""

from gameplay.dialog.types import (
    NOT_SET,
    Literal,
    Computed,
    TaskComplete,
    TaskActive,
    StateCheck,
    InteractableStateCheck,
    ModuleStateCheck,
    CustomCondition,
    Condition,
    AcceptTask,
    SetState,
    SetModuleState,
    SetInteractableState,
    CallFunction,
    GoTo,
    CloseDialogue,
    NoAction,
    ChoiceAction,
    ChoiceDefinition,
    DialogueNodeDefinition,
    DialogueNode,
    DialogueEdge,
    EntryCondition,
    EntryConfig,
    DialogueTree,
    AvailableChoice,
)
from gameplay.dialog.resolution import (
    resolve,
    resolve_condition,
    resolve_node_at_runtime,
    resolve_next,
)
from gameplay.dialog.conditions import evaluate_condition
from gameplay.dialog.root import (
    DialogueOverlay,
    format_task_choice,
    generate_root_dialogue,
    generate_root_dialogue_edges,
)
from gameplay.dialog.navigation import (
    get_initial_dialogue_node,
    get_available_choices,
    get_next_dialogue_node,
)
from gameplay.dialog.actions import execute_action, process_actions, navigation_signal
from gameplay.dialog.builder import DialogueTreeBuilder, create_dialogue_node, build_tree
from gameplay.dialog.parser import DialogParser
from gameplay.dialog.session import DialogueSession

__all__ = [
    # Dynamic fields
    "NOT_SET",
    "Literal",
    "Computed",
    "resolve",
    "resolve_condition",
    "resolve_node_at_runtime",
    "resolve_next",
    # Conditions
    "TaskComplete",
    "TaskActive",
    "StateCheck",
    "InteractableStateCheck",
    "ModuleStateCheck",
    "CustomCondition",
    "Condition",
    "evaluate_condition",
    # Actions
    "AcceptTask",
    "SetState",
    "SetModuleState",
    "SetInteractableState",
    "CallFunction",
    "GoTo",
    "CloseDialogue",
    "NoAction",
    "ChoiceAction",
    "execute_action",
    "process_actions",
    "navigation_signal",
    # Graph
    "ChoiceDefinition",
    "DialogueNodeDefinition",
    "DialogueNode",
    "DialogueEdge",
    "EntryCondition",
    "EntryConfig",
    "DialogueTree",
    "AvailableChoice",
    # Navigation
    "DialogueOverlay",
    "format_task_choice",
    "generate_root_dialogue",
    "generate_root_dialogue_edges",
    "get_initial_dialogue_node",
    "get_available_choices",
    "get_next_dialogue_node",
    # Authoring
    "DialogueTreeBuilder",
    "create_dialogue_node",
    "build_tree",
    "DialogParser",
    # Runner
    "DialogueSession",
]
