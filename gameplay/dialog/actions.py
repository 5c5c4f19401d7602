"""
Choice action execution.

Actions run strictly in order; an async handler suspends the pipeline
until it finishes. Exceptions propagate to the caller.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

from gameplay.dialog.types import (
    AcceptTask,
    CallFunction,
    ChoiceAction,
    CloseDialogue,
    GoTo,
    NoAction,
    SetInteractableState,
    SetModuleState,
    SetState,
)


logger = logging.getLogger(__name__)

ActionHook = Callable[[str, ChoiceAction, Any], Union[None, Awaitable[None]]]


async def execute_action(action: ChoiceAction, context: Any) -> None:
    """Execute one action against the module context."""
    if isinstance(action, AcceptTask):
        context.accept_task(action.task)

    elif isinstance(action, (SetState, SetModuleState)):
        context.set_module_state(action.key, action.value)

    elif isinstance(action, SetInteractableState):
        context.set_interactable_state(action.interactable, action.key, action.value)

    elif isinstance(action, CallFunction):
        result = action.handler(context)
        if inspect.isawaitable(result):
            await result

    elif isinstance(action, (GoTo, CloseDialogue, NoAction)):
        # Navigation signals, see navigation_signal()
        pass

    else:
        logger.debug(f"Ignoring unknown action {action!r}")


def normalize_actions(actions: Union[ChoiceAction, Sequence[ChoiceAction], None]) -> list[ChoiceAction]:
    if actions is None:
        return []
    if isinstance(actions, (list, tuple)):
        return list(actions)
    return [actions]


async def process_actions(
    actions: Union[ChoiceAction, Sequence[ChoiceAction], None],
    context: Any,
    on_action: Optional[ActionHook] = None,
    dialogue_id: str = "",
) -> None:
    """
    Execute actions sequentially.

    Args:
        actions: A single action, a list of actions or None
        context: Module context the actions mutate
        on_action: Module on_choice_action handler, awaited after each action
            as on_action(dialogue_id, action, context)
        dialogue_id: Dialogue the actions were triggered from
    """
    for action in normalize_actions(actions):
        await execute_action(action, context)

        if on_action is not None:
            result = on_action(dialogue_id, action, context)
            if inspect.isawaitable(result):
                await result



def navigation_signal(actions: Union[ChoiceAction, Sequence[ChoiceAction], None]) -> Optional[ChoiceAction]:
    """The last go-to or close-dialogue action, if any."""
    signal = None
    for action in normalize_actions(actions):
        if isinstance(action, (GoTo, CloseDialogue)):
            signal = action
    return signal
