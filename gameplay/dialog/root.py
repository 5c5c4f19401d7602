"""
Root dialogue - task-driven hub node synthesized per NPC.

When an NPC owns the player's active task, talking to it opens a hub
node offering normal talk, the active task and goodbye. The hub is
never written into the shared tree: it lives in a per-session
DialogueOverlay that is consulted before the tree.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Optional

from runtime.core.config import EngineConfig
from gameplay.dialog.conditions import evaluate_condition
from gameplay.dialog.types import (
    DialogueEdge,
    DialogueNode,
    DialogueNodeDefinition,
    DialogueTree,
    EntryConfig,
    TaskActive,
)
from gameplay.tasks.availability import get_active_tasks

if TYPE_CHECKING:
    from gameplay.modules.definition import NPC
    from gameplay.tasks.types import Task


logger = logging.getLogger(__name__)


ROOT_TALK = "talk"
ROOT_GOODBYE = "goodbye"
TASK_CHOICE_PREFIX = "task_"


class DialogueOverlay:
    """
    Session-local additions layered over an immutable DialogueTree.

    Lookups check the overlay first, then the tree. Merging is
    idempotent: node ids and (node, choice) edges already present in
    either layer are skipped.
    """

    def __init__(self, tree: DialogueTree):
        self.tree = tree
        self._nodes: dict[str, DialogueNode] = {}
        self._edges: list[DialogueEdge] = []

    @property
    def entry(self):
        return self.tree.entry

    @property
    def nodes(self) -> tuple[DialogueNode, ...]:
        return self.tree.nodes + tuple(self._nodes.values())

    @property
    def edges(self) -> tuple[DialogueEdge, ...]:
        return self.tree.edges + tuple(self._edges)

    def get_node(self, node_id: str) -> Optional[DialogueNode]:
        return self._nodes.get(node_id) or self.tree.get_node(node_id)

    def get_definition(self, node_id: str) -> Optional[DialogueNodeDefinition]:
        if node_id in self._nodes:
            return None
        return self.tree.get_definition(node_id)

    def find_edge(self, node_id: str, choice_key: str) -> Optional[DialogueEdge]:
        for edge in self._edges:
            if edge.from_node == node_id and edge.choice_key == choice_key:
                return edge
        return self.tree.find_edge(node_id, choice_key)

    def merge(self, node: DialogueNode, edges: Iterable[DialogueEdge] = ()) -> None:
        if self.get_node(node.id) is None:
            self._nodes[node.id] = node

        for edge in edges:
            if self.find_edge(edge.from_node, edge.choice_key) is None:
                self._edges.append(edge)

    def clear(self) -> None:
        self._nodes.clear()
        self._edges.clear()


def format_task_choice(task: Task, status: str, max_length: int = 50) -> str:
    """Format '[Task] - <name> (<status>)', truncated with '...'."""
    text = f"[Task] - {task.name} ({status})"
    if len(text) > max_length:
        text = text[:max_length - 3] + "..."
    return text


def generate_root_dialogue(
    npc: NPC,
    context: Any,
    config: Optional[EngineConfig] = None,
) -> Optional[DialogueNode]:
    """
    Build the hub node for an NPC.

    Returns:
        The root node, or None when the NPC owns no active task
    """
    config = config or EngineConfig()

    if not npc.tasks or npc.dialogue_tree is None:
        return None

    active_tasks = get_active_tasks(npc.tasks, context.module_id, context.store)
    if not active_tasks:
        return None

    choices: dict[str, str] = {}
    if npc.dialogue_tree.has_dialogue_content():
        choices[ROOT_TALK] = f"Talk to {npc.name}..."

    for task in active_tasks:
        choices[f"{TASK_CHOICE_PREFIX}{task.id}"] = format_task_choice(
            task, "In Progress", config.task_choice_max_length
        )

    choices[ROOT_GOODBYE] = "Goodbye"

    return DialogueNode(
        id=f"{npc.id}_root",
        lines=(config.root_greeting,),
        choices=choices,
    )


def _talk_target(tree: DialogueTree, context: Any) -> Optional[str]:
    entry = tree.entry

    if isinstance(entry, str):
        return entry

    if isinstance(entry, EntryConfig):
        for entry_condition in entry.conditions:
            # Choosing to talk means normal dialogue, not task submission
            if isinstance(entry_condition.condition, TaskActive):
                continue
            if evaluate_condition(entry_condition.condition, context):
                return entry_condition.node
        return entry.default

    return tree.nodes[0].id if tree.nodes else None


def generate_root_dialogue_edges(
    root: DialogueNode,
    tree: DialogueTree,
    context: Any,
) -> list[DialogueEdge]:
    """
    Connect the hub node to the tree.

    talk goes to the entry (task-active entry conditions skipped),
    task_<id> goes to the node marked with that task, goodbye closes.
    Choices without a target get no edge and therefore close.
    """
    edges = []

    for choice_key in root.choices:
        if choice_key == ROOT_TALK:
            target = _talk_target(tree, context)
            if target is not None:
                edges.append(DialogueEdge(root.id, choice_key, target))

        elif choice_key.startswith(TASK_CHOICE_PREFIX):
            task_id = choice_key[len(TASK_CHOICE_PREFIX):]
            node = tree.find_task_node(task_id)
            if node is not None:
                edges.append(DialogueEdge(root.id, choice_key, node.id))
            else:
                logger.debug(f"No task-ready node for task {task_id} in tree '{tree.id}'")

        elif choice_key == ROOT_GOODBYE:
            edges.append(DialogueEdge(root.id, choice_key, None))

    return edges
