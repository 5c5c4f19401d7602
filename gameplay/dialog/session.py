"""
Dialogue session - runs one conversation with one NPC.

Owns the per-session overlay, tracks the current node, executes choice
actions and publishes DialogueEvents. Rendering layers drive it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from runtime.core.config import EngineConfig
from runtime.core.events import DialogueEvent, EventBus
from gameplay.dialog.actions import navigation_signal, process_actions
from gameplay.dialog.navigation import (
    get_available_choices,
    get_initial_dialogue_node,
    get_next_dialogue_node,
)
from gameplay.dialog.resolution import resolve_node_at_runtime
from gameplay.dialog.root import DialogueOverlay
from gameplay.dialog.types import AvailableChoice, CloseDialogue, DialogueNode, DialogueTree, GoTo

if TYPE_CHECKING:
    from gameplay.modules.context import ModuleContext
    from gameplay.modules.definition import NPC


class DialogueSession:
    """
    A single conversation.

    Usage:
        session = DialogueSession(npc, context, event_bus)
        node = session.start()
        while node:
            choices = session.get_choices()
            node = await session.choose(choices[0].key)
    """

    def __init__(
        self,
        npc: NPC,
        context: ModuleContext,
        event_bus: Optional[EventBus] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.npc = npc
        self.context = context
        self.events = event_bus
        self.config = config or EngineConfig()
        self.logger = logging.getLogger(__name__)

        self.overlay = DialogueOverlay(npc.dialogue_tree or DialogueTree(id=npc.id))
        self._node: Optional[DialogueNode] = None
        self._active = False

    @property
    def dialogue_id(self) -> str:
        return self.overlay.tree.id or self.npc.id

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def current_node(self) -> Optional[DialogueNode]:
        """The current node, resolved for display."""
        if self._node is None:
            return None
        return resolve_node_at_runtime(self._node, self.overlay, self.context)

    def start(self) -> Optional[DialogueNode]:
        """
        Start the conversation.

        Returns:
            The resolved first node, or None if the NPC has nothing to say
        """
        node = get_initial_dialogue_node(
            self.npc, self.context, self.overlay, self.config, self.context.module
        )
        if node is None:
            self.logger.debug(f"No dialogue for {self.npc.id}")
            return None

        self._active = True
        self._publish(DialogueEvent.DIALOGUE_STARTED)
        return self._enter(node)

    def get_choices(self) -> list[AvailableChoice]:
        if self._node is None:
            return []
        return get_available_choices(self._node, self.overlay, self.context, self.context.module)

    async def choose(self, choice_key: str) -> Optional[DialogueNode]:
        """
        Pick a choice: run its actions, then move on.

        Action failures are logged and the remaining actions still run;
        nothing is rolled back.

        Returns:
            The next resolved node, or None when the dialogue closed
        """
        if self._node is None:
            return None

        choice = next((c for c in self.get_choices() if c.key == choice_key), None)
        if choice is None:
            self.logger.warning(f"Choice '{choice_key}' not available on node '{self._node.id}'")
            return self.current_node

        self._publish(DialogueEvent.CHOICE_SELECTED, node_id=self._node.id, choice_key=choice_key)

        self.context.requested_submission = None
        await self._run_actions(choice)

        if self.context.requested_submission is not None:
            # The submission screen takes over
            self.end()
            return None

        signal = navigation_signal(choice.actions)
        if isinstance(signal, CloseDialogue) or (isinstance(signal, GoTo) and signal.node is None):
            self.end()
            return None

        if isinstance(signal, GoTo):
            next_node = self.overlay.get_node(signal.node)
        else:
            next_node = get_next_dialogue_node(
                self._node, choice_key, self.overlay, self.context, self.context.module
            )

        if next_node is None:
            self.end()
            return None
        return self._enter(next_node)

    async def advance(self) -> Optional[DialogueNode]:
        """Follow the current node's own next (nodes without choices)."""
        if self._node is None:
            return None

        next_node = get_next_dialogue_node(
            self._node, None, self.overlay, self.context, self.context.module
        )
        if next_node is None:
            self.end()
            return None
        return self._enter(next_node)

    def end(self) -> None:
        if not self._active:
            return

        self._active = False
        self._node = None
        self._publish(DialogueEvent.DIALOGUE_ENDED)

    async def _run_actions(self, choice: AvailableChoice) -> None:
        hook = None
        if self.context.module is not None:
            hook = self.context.module.handlers.on_choice_action

        for action in choice.actions:
            try:
                await process_actions(action, self.context, hook, self.dialogue_id)
            except Exception as e:
                self.logger.error(f"Error executing action {action.type} in '{self.dialogue_id}': {e}")

    def _enter(self, node: DialogueNode) -> DialogueNode:
        self._node = node
        self._publish(DialogueEvent.NODE_ENTERED, node_id=node.id)
        return self.current_node

    def _publish(self, event_type: DialogueEvent, **data) -> None:
        if self.events:
            self.events.publish(
                event_type,
                dialogue_id=self.dialogue_id,
                npc_id=self.npc.id,
                module_id=self.context.module_id,
                **data,
            )
