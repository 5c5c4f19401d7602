"""
Dialogue tree builder.

Collects node definitions, extracts one edge per statically declared
choice with a next, and validates every reference on build().

Usage:
    tree = (
        DialogueTreeBuilder("guide")
        .node(DialogueNodeDefinition(
            id="start",
            lines=["Welcome!"],
            choices={
                "help": ChoiceDefinition("I need help", next="help"),
                "bye": ChoiceDefinition("Bye", next=None),
            },
        ))
        .node(DialogueNodeDefinition(id="help", lines=["Ask the owl."]))
        .configure_entry()
            .when(TaskComplete("intro")).use("help")
            .default("start")
        .build()
    )
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from runtime.core.errors import DialogueError, ErrorCode
from gameplay.dialog.types import (
    NOT_SET,
    ChoiceDefinition,
    Computed,
    CustomCondition,
    DialogueEdge,
    DialogueNode,
    DialogueNodeDefinition,
    DialogueTree,
    EntryCondition,
    EntryConfig,
    Literal,
)

NodeRef = Union[str, DialogueNode, DialogueNodeDefinition]


def _node_id(ref: NodeRef) -> str:
    return ref if isinstance(ref, str) else ref.id


def _is_dynamic(value: Any) -> bool:
    return isinstance(value, Computed) or callable(value)


def _static(value: Any) -> Any:
    return value.value if isinstance(value, Literal) else value


def create_dialogue_node(definition: DialogueNodeDefinition) -> DialogueNode:
    """
    Build the static node for a definition.

    Computed lines and choice texts are left empty here and resolved
    at visit time.
    """
    lines: tuple[str, ...] = ()
    if not _is_dynamic(definition.lines):
        static_lines = _static(definition.lines) or ()
        lines = (static_lines,) if isinstance(static_lines, str) else tuple(static_lines)

    choices: dict[str, str] = {}
    if definition.choices is not None and not _is_dynamic(definition.choices):
        for key, choice in _static(definition.choices).items():
            text = choice.text if isinstance(choice, ChoiceDefinition) else choice
            choices[key] = "" if _is_dynamic(text) else _static(text)

    return DialogueNode(id=definition.id, lines=lines, choices=choices, task=definition.task)


class DialogueTreeBuilder:
    """Fluent builder for immutable dialogue trees."""

    def __init__(self, tree_id: str = ""):
        self.tree_id = tree_id
        self._nodes: list[DialogueNode] = []
        self._definitions: dict[str, DialogueNodeDefinition] = {}
        self._edges: list[DialogueEdge] = []
        self._entry: Union[str, EntryConfig, None] = None

    def node(self, definition: Union[DialogueNodeDefinition, DialogueNode]) -> DialogueTreeBuilder:
        """Add a node; plain DialogueNodes get a text-only definition."""
        if isinstance(definition, DialogueNode):
            node = definition
            definition = DialogueNodeDefinition(
                id=node.id,
                lines=list(node.lines),
                choices={key: ChoiceDefinition(text) for key, text in node.choices.items()} or None,
                task=node.task,
            )
        else:
            node = create_dialogue_node(definition)

        if node.id in self._definitions:
            raise DialogueError(
                ErrorCode.DIALOGUE_INVALID_REFERENCE,
                self.tree_id,
                f"Duplicate dialogue node id: {node.id}",
            )

        self._definitions[node.id] = definition
        self._nodes.append(node)
        self._extract_edges(definition)
        return self

    def nodes(self, *definitions: Union[DialogueNodeDefinition, DialogueNode]) -> DialogueTreeBuilder:
        for definition in definitions:
            self.node(definition)
        return self

    def _extract_edges(self, definition: DialogueNodeDefinition) -> None:
        # Choice maps produced by a function have no edges
        if definition.choices is None or _is_dynamic(definition.choices):
            return

        for key, choice in _static(definition.choices).items():
            if not isinstance(choice, ChoiceDefinition) or choice.next is NOT_SET:
                continue

            next_value = choice.next
            if isinstance(next_value, (DialogueNode, DialogueNodeDefinition)):
                if next_value.id not in self._definitions:
                    self.node(next_value)
                target = next_value.id
            elif isinstance(next_value, str):
                target = next_value
            else:
                # None closes; computed targets are resolved at visit time
                target = None

            condition = None if _is_dynamic(choice.condition) else _static(choice.condition)
            actions = () if _is_dynamic(choice.actions) else _static(choice.actions)
            if actions is None:
                actions = ()
            elif not isinstance(actions, (list, tuple)):
                actions = (actions,)

            self._edges.append(DialogueEdge(
                from_node=definition.id,
                choice_key=key,
                next=target,
                condition=condition,
                actions=tuple(actions),
            ))

    def entry(self, node: NodeRef) -> DialogueTreeBuilder:
        """Use a fixed entry node."""
        self._entry = _node_id(node)
        return self

    def configure_entry(self) -> DialogueEntryBuilder:
        """Start a conditional entry configuration."""
        return DialogueEntryBuilder(self)

    def _set_entry_config(self, config: EntryConfig) -> None:
        self._entry = config

    def build(self) -> DialogueTree:
        """
        Validate and freeze the tree.

        Raises:
            DialogueError: DIALOGUE_INVALID_REFERENCE for empty trees,
                edges or entries pointing at unknown nodes
        """
        self._validate()
        return DialogueTree(
            nodes=tuple(self._nodes),
            edges=tuple(self._edges),
            entry=self._entry,
            definitions=dict(self._definitions),
            id=self.tree_id,
        )

    def _fail(self, message: str, **context: Any) -> DialogueError:
        return DialogueError(
            ErrorCode.DIALOGUE_INVALID_REFERENCE,
            self.tree_id,
            message,
            context=context,
        )

    def _validate(self) -> None:
        if not self._nodes:
            raise self._fail("Dialogue tree must have at least one node")

        known = set(self._definitions)

        for edge in self._edges:
            if edge.next is not None and edge.next not in known:
                raise self._fail(
                    f"Node '{edge.next}' not found. Referenced from node "
                    f"'{edge.from_node}' choice '{edge.choice_key}'.",
                    node=edge.next,
                    from_node=edge.from_node,
                    choice=edge.choice_key,
                )

        for definition in self._definitions.values():
            if isinstance(definition.next, str) and definition.next not in known:
                raise self._fail(
                    f"Node '{definition.next}' not found. Referenced as next of '{definition.id}'.",
                    node=definition.next,
                    from_node=definition.id,
                )

        if isinstance(self._entry, str) and self._entry not in known:
            raise self._fail(f"Entry node not found: {self._entry}", node=self._entry)

        if isinstance(self._entry, EntryConfig):
            if self._entry.default not in known:
                raise self._fail(
                    f"Entry default node not found: {self._entry.default}",
                    node=self._entry.default,
                )
            for entry_condition in self._entry.conditions:
                if entry_condition.node not in known:
                    raise self._fail(
                        f"Entry condition node not found: {entry_condition.node}",
                        node=entry_condition.node,
                    )


class DialogueEntryBuilder:
    """Ordered conditional entries; default() closes the configuration."""

    def __init__(self, tree_builder: DialogueTreeBuilder):
        self._tree_builder = tree_builder
        self._conditions: list[EntryCondition] = []

    def when(self, condition: Any) -> _EntryConditionBuilder:
        if callable(condition) and not isinstance(condition, CustomCondition):
            condition = CustomCondition(condition)
        return _EntryConditionBuilder(self, condition)

    def _add(self, condition: Any, node: NodeRef) -> None:
        self._conditions.append(EntryCondition(condition, _node_id(node)))

    def default(self, node: NodeRef) -> DialogueTreeBuilder:
        self._tree_builder._set_entry_config(EntryConfig(
            conditions=tuple(self._conditions),
            default=_node_id(node),
        ))
        return self._tree_builder


class _EntryConditionBuilder:

    def __init__(self, entry_builder: DialogueEntryBuilder, condition: Any):
        self._entry_builder = entry_builder
        self._condition = condition

    def use(self, node: NodeRef) -> DialogueEntryBuilder:
        self._entry_builder._add(self._condition, node)
        return self._entry_builder


def build_tree(
    *definitions: DialogueNodeDefinition,
    entry: Optional[Union[NodeRef, EntryConfig]] = None,
    tree_id: str = "",
) -> DialogueTree:
    """Shorthand for building a tree from definitions and an optional entry."""
    builder = DialogueTreeBuilder(tree_id).nodes(*definitions)
    if isinstance(entry, EntryConfig):
        builder._set_entry_config(entry)
    elif entry is not None:
        builder.entry(entry)
    return builder.build()
