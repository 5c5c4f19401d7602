"""
Dialogue navigation - initial node, available choices and next node.

Every lookup is total: broken references close the dialogue and are
logged at debug level instead of raising.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional

from runtime.core.config import EngineConfig
from gameplay.dialog.conditions import evaluate_condition
from gameplay.dialog.resolution import (
    DialogueGraph,
    resolve,
    resolve_actions,
    resolve_choices,
    resolve_condition,
    resolve_next,
)
from gameplay.dialog.root import DialogueOverlay, generate_root_dialogue, generate_root_dialogue_edges
from gameplay.dialog.types import (
    NOT_SET,
    AvailableChoice,
    ChoiceDefinition,
    DialogueNode,
    EntryConfig,
    Literal,
)

if TYPE_CHECKING:
    from gameplay.modules.definition import NPC


logger = logging.getLogger(__name__)


def get_initial_dialogue_node(
    npc: NPC,
    context: Any,
    overlay: DialogueOverlay,
    config: Optional[EngineConfig] = None,
    module_data: Optional[Any] = None,
) -> Optional[DialogueNode]:
    """
    Pick the node a conversation with an NPC starts at.

    If the NPC owns the active task, the root hub node is merged into
    the session overlay and returned. Otherwise the tree's entry decides.

    Args:
        npc: The NPC being talked to
        context: Module context
        overlay: Session overlay wrapping npc.dialogue_tree
        config: Engine config (root greeting, task choice length)
        module_data: Module definition, passed through to conditions

    Returns:
        Start node, or None when the NPC has nothing to say
    """
    tree = npc.dialogue_tree
    if tree is None:
        return None

    root = generate_root_dialogue(npc, context, config)
    if root is not None:
        overlay.merge(root, generate_root_dialogue_edges(root, tree, context))
        return root

    entry = tree.entry

    if entry is None:
        return tree.nodes[0] if tree.nodes else None

    if isinstance(entry, EntryConfig):
        for entry_condition in entry.conditions:
            if evaluate_condition(entry_condition.condition, context, module_data):
                return _lookup(overlay, entry_condition.node)
        return _lookup(overlay, entry.default)

    return _lookup(overlay, entry)


def _lookup(graph: DialogueGraph, node_id: str) -> Optional[DialogueNode]:
    node = graph.get_node(node_id)
    if node is None:
        logger.debug(f"Dialogue node '{node_id}' not found")
    return node


def _live_choices(node: DialogueNode, graph: DialogueGraph, context: Any) -> dict[str, ChoiceDefinition]:
    definition = graph.get_definition(node.id)
    if definition is not None and definition.choices is not None:
        return resolve_choices(definition.choices, context)
    return {key: ChoiceDefinition(text=text) for key, text in node.choices.items()}


def get_available_choices(
    node: DialogueNode,
    graph: DialogueGraph,
    context: Any,
    module_data: Optional[Any] = None,
) -> list[AvailableChoice]:
    """
    Choices the player can pick at a node, in declaration order.

    Choices whose condition is false are dropped. Inline choice actions
    take precedence over the edge's actions.
    """
    available = []

    for key, choice in _live_choices(node, graph, context).items():
        if choice.condition is not None:
            condition = resolve_condition(choice.condition, context)
            if not evaluate_condition(condition, context, module_data):
                continue

        if choice.actions is not None:
            actions = resolve_actions(choice.actions, context)
        else:
            edge = graph.find_edge(node.id, key)
            actions = edge.actions if edge else ()

        available.append(AvailableChoice(key=key, text=resolve(choice.text, context), actions=actions))

    return available


def _has_static_choices(choices: Any) -> bool:
    return isinstance(choices, (Mapping, Literal))


def get_next_dialogue_node(
    node: DialogueNode,
    choice_key: Optional[str],
    graph: DialogueGraph,
    context: Any,
    module_data: Optional[Any] = None,
) -> Optional[DialogueNode]:
    """
    Follow a choice (or auto-advance when choice_key is None).

    Returns:
        The next node, or None to close the dialogue
    """
    definition = graph.get_definition(node.id)

    if choice_key is None:
        if definition is None:
            return None
        return resolve_next(definition.next, context, graph)

    edge = graph.find_edge(node.id, choice_key)
    if edge is None:
        logger.debug(f"No edge for choice '{choice_key}' on node '{node.id}', closing dialogue")
        return None

    if edge.condition is not None:
        condition = resolve_condition(edge.condition, context)
        if not evaluate_condition(condition, context, module_data):
            return None

    if definition is not None and _has_static_choices(definition.choices):
        choice = resolve_choices(definition.choices, context).get(choice_key)
        if choice is not None and choice.next is not NOT_SET:
            return resolve_next(choice.next, context, graph)

    if edge.next is None:
        return None
    return _lookup(graph, edge.next)
