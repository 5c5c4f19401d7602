"""
Dialogue types - nodes, edges, trees, conditions and choice actions.

Authored content (DialogueNodeDefinition, ChoiceDefinition) may hold
literal values or functions of the module context; everything else is
plain data. Trees are immutable once built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    ClassVar,
    Generic,
    Mapping,
    Optional,
    TypeVar,
    Union,
)

from gameplay.logic import AllOf, AnyOf

if TYPE_CHECKING:
    from gameplay.modules.context import ModuleContext
    from gameplay.tasks.types import Task


T = TypeVar('T')


class _NotSet:
    """Marks a field the author left out (distinct from an explicit None)."""

    _instance: ClassVar[Optional[_NotSet]] = None

    def __new__(cls) -> _NotSet:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_SET"


NOT_SET = _NotSet()


# ----------------------------------------------------------------------
# Literal-or-function fields
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Literal(Generic[T]):
    """A content field that never changes."""
    value: T


@dataclass(frozen=True)
class Computed(Generic[T]):
    """A content field recomputed from the context on every visit."""
    fn: Callable[[ModuleContext], T]


# A bare value or bare callable is accepted wherever a Dynamic is
Dynamic = Union[Literal[T], Computed[T], T, Callable[['ModuleContext'], T]]


# ----------------------------------------------------------------------
# Conditions
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class TaskComplete:
    task: str

    type: ClassVar[str] = "task-complete"


@dataclass(frozen=True)
class TaskActive:
    task: str

    type: ClassVar[str] = "task-active"


@dataclass(frozen=True)
class StateCheck:
    key: str
    value: Any

    type: ClassVar[str] = "state-check"


@dataclass(frozen=True)
class InteractableStateCheck:
    interactable: str
    key: str
    value: Any

    type: ClassVar[str] = "interactable-state"


@dataclass(frozen=True)
class ModuleStateCheck:
    key: str
    value: Any

    type: ClassVar[str] = "module-state"


@dataclass(frozen=True)
class CustomCondition:
    check: Callable[[ModuleContext], bool]

    type: ClassVar[str] = "custom"


Condition = Union[
    TaskComplete,
    TaskActive,
    StateCheck,
    InteractableStateCheck,
    ModuleStateCheck,
    CustomCondition,
    AllOf,
    AnyOf,
    Callable[['ModuleContext'], bool],
]


# ----------------------------------------------------------------------
# Choice actions
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class AcceptTask:
    task: str

    type: ClassVar[str] = "accept-task"


@dataclass(frozen=True)
class SetState:
    key: str
    value: Any

    type: ClassVar[str] = "set-state"


@dataclass(frozen=True)
class SetModuleState:
    key: str
    value: Any

    type: ClassVar[str] = "set-module-state"


@dataclass(frozen=True)
class SetInteractableState:
    interactable: str
    key: str
    value: Any

    type: ClassVar[str] = "set-interactable-state"


@dataclass(frozen=True)
class CallFunction:
    """Invoke a handler with the context; awaitable results are awaited."""
    handler: Callable[[ModuleContext], Any]

    type: ClassVar[str] = "call-function"


@dataclass(frozen=True)
class GoTo:
    node: Optional[str]

    type: ClassVar[str] = "go-to"


@dataclass(frozen=True)
class CloseDialogue:
    type: ClassVar[str] = "close-dialogue"


@dataclass(frozen=True)
class NoAction:
    type: ClassVar[str] = "none"


ChoiceAction = Union[
    AcceptTask,
    SetState,
    SetModuleState,
    SetInteractableState,
    CallFunction,
    GoTo,
    CloseDialogue,
    NoAction,
]


# ----------------------------------------------------------------------
# Authored definitions
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class ChoiceDefinition:
    """
    One authored choice.

    Attributes:
        text: Display text
        next: Node id, None to close, or NOT_SET to defer to the edge
        actions: Actions run when the choice is picked
        condition: Hides the choice when false
    """
    text: Dynamic[str]
    next: Any = NOT_SET
    actions: Optional[Dynamic[list[ChoiceAction]]] = None
    condition: Optional[Dynamic[Condition]] = None


@dataclass(frozen=True)
class DialogueNodeDefinition:
    """
    One authored node.

    choices is either a key -> ChoiceDefinition mapping or a function of
    the context producing one. next is used for auto-advance when the
    node shows no choices.
    """
    id: str
    lines: Dynamic[list[str]]
    choices: Optional[Dynamic[Mapping[str, ChoiceDefinition]]] = None
    next: Any = NOT_SET
    task: Optional[Task] = None


# ----------------------------------------------------------------------
# Runtime graph
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class DialogueNode:
    """A node as shown to the player. Recomputed on every visit."""
    id: str
    lines: tuple[str, ...] = ()
    choices: Mapping[str, str] = field(default_factory=dict)
    task: Optional[Task] = None

    def has_content(self) -> bool:
        return any(line.strip() for line in self.lines)


@dataclass(frozen=True)
class DialogueEdge:
    """
    Connection for one choice of one node.

    next is the target node id; None closes the dialogue.
    """
    from_node: str
    choice_key: str
    next: Optional[str]
    condition: Optional[Condition] = None
    actions: tuple[ChoiceAction, ...] = ()


@dataclass(frozen=True)
class EntryCondition:
    condition: Condition
    node: str


@dataclass(frozen=True)
class EntryConfig:
    """Conditional entry: first matching condition wins, else default."""
    conditions: tuple[EntryCondition, ...]
    default: str


@dataclass(frozen=True)
class DialogueTree:
    """
    Immutable dialogue graph.

    Attributes:
        nodes: Static nodes in declaration order
        edges: One edge per (node, choice) pair
        entry: Entry node id, EntryConfig, or None for the first node
        definitions: Authored definitions keyed by node id
        id: Optional tree id for logging and errors
    """
    nodes: tuple[DialogueNode, ...] = ()
    edges: tuple[DialogueEdge, ...] = ()
    entry: Union[str, EntryConfig, None] = None
    definitions: Mapping[str, DialogueNodeDefinition] = field(default_factory=dict)
    id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, 'nodes', tuple(self.nodes))
        object.__setattr__(self, 'edges', tuple(self.edges))
        object.__setattr__(self, 'definitions', MappingProxyType(dict(self.definitions)))

    def get_node(self, node_id: str) -> Optional[DialogueNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_definition(self, node_id: str) -> Optional[DialogueNodeDefinition]:
        return self.definitions.get(node_id)

    def find_edge(self, node_id: str, choice_key: str) -> Optional[DialogueEdge]:
        for edge in self.edges:
            if edge.from_node == node_id and edge.choice_key == choice_key:
                return edge
        return None

    def find_task_node(self, task_id: str) -> Optional[DialogueNode]:
        """The node marked with the given task (its task-ready node)."""
        for node in self.nodes:
            if node.task is not None and node.task.id == task_id:
                return node
        return None

    def has_dialogue_content(self) -> bool:
        """True when at least one node has a non-blank or computed line."""
        if any(node.has_content() for node in self.nodes):
            return True
        return any(
            isinstance(definition.lines, Computed) or callable(definition.lines)
            for definition in self.definitions.values()
        )


@dataclass(frozen=True)
class AvailableChoice:
    """A choice the player can pick right now."""
    key: str
    text: str
    actions: tuple[ChoiceAction, ...] = ()
