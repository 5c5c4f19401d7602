"""
Dynamic field resolution.

Turns literal-or-function content into concrete values at visit time.
Nothing is cached; functions are re-invoked on every call.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol

from gameplay.dialog.types import (
    ChoiceDefinition,
    Computed,
    DialogueNode,
    DialogueNodeDefinition,
    Literal,
    _NotSet,
)

if TYPE_CHECKING:
    from gameplay.dialog.types import DialogueEdge


logger = logging.getLogger(__name__)


class DialogueGraph(Protocol):
    """Read access shared by DialogueTree and DialogueOverlay."""

    def get_node(self, node_id: str) -> Optional[DialogueNode]: ...

    def get_definition(self, node_id: str) -> Optional[DialogueNodeDefinition]: ...

    def find_edge(self, node_id: str, choice_key: str) -> Optional[DialogueEdge]: ...


def resolve(value: Any, context: Any) -> Any:
    """
    Resolve a literal-or-function field.

    Literal -> its value, Computed or bare callable -> fn(context),
    anything else is returned unchanged.
    """
    if isinstance(value, Literal):
        return value.value
    if isinstance(value, Computed):
        return value.fn(context)
    if callable(value):
        return value(context)
    return value


def resolve_lines(lines: Any, context: Any) -> tuple[str, ...]:
    resolved = resolve(lines, context)
    if resolved is None:
        return ()
    if isinstance(resolved, str):
        return (resolved,)
    return tuple(resolved)


def resolve_choices(choices: Any, context: Any) -> dict[str, ChoiceDefinition]:
    """Resolve a choice map; plain strings become text-only definitions."""
    resolved = resolve(choices, context) or {}
    return {
        key: choice if isinstance(choice, ChoiceDefinition) else ChoiceDefinition(text=choice)
        for key, choice in resolved.items()
    }


def resolve_actions(actions: Any, context: Any) -> tuple:
    """Resolve actions and normalize None / single action / list to a tuple."""
    resolved = resolve(actions, context)
    if resolved is None:
        return ()
    if isinstance(resolved, (list, tuple)):
        return tuple(resolved)
    return (resolved,)


def resolve_condition(condition: Any, context: Any) -> Any:
    """
    Resolve a condition field.

    Unlike resolve(), a bare callable is kept: it is the predicate itself.
    """
    if isinstance(condition, Literal):
        return condition.value
    if isinstance(condition, Computed):
        return condition.fn(context)
    return condition


def resolve_node_at_runtime(node: DialogueNode, graph: DialogueGraph, context: Any) -> DialogueNode:
    """
    Produce the node as the player should see it now.

    Nodes without a definition are returned unchanged.
    """
    definition = graph.get_definition(node.id)
    if definition is None:
        return node

    lines = resolve_lines(definition.lines, context)

    choices: Mapping[str, str] = node.choices
    if definition.choices is not None:
        choices = {
            key: resolve(choice.text, context)
            for key, choice in resolve_choices(definition.choices, context).items()
        }

    return replace(node, lines=lines, choices=choices)


def resolve_next(next_value: Any, context: Any, graph: DialogueGraph) -> Optional[DialogueNode]:
    """
    Resolve a dynamic next reference.

    A node id or node definition is looked up in the graph (unknown ids
    close), a node is returned as is, None or NOT_SET close.
    """
    resolved = resolve(next_value, context)

    if resolved is None or isinstance(resolved, _NotSet):
        return None

    if isinstance(resolved, str):
        node = graph.get_node(resolved)
        if node is None:
            logger.debug(f"Next node '{resolved}' not found, closing dialogue")
        return node

    if isinstance(resolved, DialogueNode):
        return resolved

    if isinstance(resolved, DialogueNodeDefinition):
        return graph.get_node(resolved.id)

    logger.debug(f"Unresolvable next reference {resolved!r}, closing dialogue")
    return None
