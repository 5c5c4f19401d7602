"""
Module definitions - manifest, scenery, tasks and interactables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Union

from gameplay.dialog.types import DialogueTree
from gameplay.tasks.types import Task

if TYPE_CHECKING:
    from gameplay.dialog.types import ChoiceAction
    from gameplay.modules.context import ModuleContext
    from gameplay.progression.requirements import UnlockRequirement


class InteractableType(Enum):
    NPC = "npc"
    OBJECT = "object"
    LOCATION = "location"


@dataclass
class ModuleManifest:
    id: str
    name: str
    version: str = "1.0.0"
    summary: str = ""
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass
class Background:
    color: Optional[str] = None
    image: Optional[str] = None


@dataclass
class Welcome:
    """Greeting shown when the player enters the module."""
    speaker: str = ""
    lines: list[str] = field(default_factory=list)


@dataclass
class ModuleConfig:
    manifest: ModuleManifest
    background: Background = field(default_factory=Background)
    welcome: Welcome = field(default_factory=Welcome)
    unlock_requirement: Optional[UnlockRequirement] = None


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass
class Interactable:
    """Base for anything the player can click in a module."""
    id: str
    name: str
    position: Position = field(default_factory=Position)
    unlock_requirement: Optional[UnlockRequirement] = None
    dialogue_tree: Optional[DialogueTree] = None

    type: InteractableType = field(default=InteractableType.OBJECT, init=False)


@dataclass
class NPC(Interactable):
    """A character that owns tasks and talks through a dialogue tree."""
    avatar: Optional[str] = None
    tasks: list[Task] = field(default_factory=list)

    type: InteractableType = field(default=InteractableType.NPC, init=False)


@dataclass
class GameObject(Interactable):
    type: InteractableType = field(default=InteractableType.OBJECT, init=False)


@dataclass
class Location(Interactable):
    type: InteractableType = field(default=InteractableType.LOCATION, init=False)


ChoiceActionHandler = Callable[
    [str, 'ChoiceAction', 'ModuleContext'],
    Union[None, Awaitable[None]],
]


@dataclass
class ModuleHandlers:
    """
    Optional module hooks.

    on_choice_action(dialogue_id, action, context) runs after each
    executed choice action.
    """
    on_choice_action: Optional[ChoiceActionHandler] = None


@dataclass
class ModuleDefinition:
    """A complete, authored module."""
    id: str
    config: ModuleConfig
    tasks: list[Task] = field(default_factory=list)
    interactables: list[Interactable] = field(default_factory=list)
    handlers: ModuleHandlers = field(default_factory=ModuleHandlers)

    @property
    def name(self) -> str:
        return self.config.manifest.name

    def get_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def get_interactable(self, interactable_id: str) -> Optional[Interactable]:
        for interactable in self.interactables:
            if interactable.id == interactable_id:
                return interactable
        return None

    def get_npcs(self) -> list[NPC]:
        return [i for i in self.interactables if isinstance(i, NPC)]

    def get_task_owner(self, task_id: str) -> Optional[NPC]:
        """The NPC that hands out a task, if any."""
        for npc in self.get_npcs():
            if any(task.id == task_id for task in npc.tasks):
                return npc
        return None
