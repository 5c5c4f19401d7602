"""
Module loader - turns authored module JSON into ModuleDefinitions.

Conditions, actions, requirements and validators are tagged JSON
objects ({"type": "task-complete", "task": "intro"}). Functions cannot
be written in JSON, so call-function actions name a handler that must
be passed to the loader.

Usage:
    database = ContentDatabase.from_config(config)
    loader = ModuleLoader(database, handlers={"open_map": open_map})
    modules = loader.load_all(registry)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from runtime.core.errors import DialogueError, ErrorCode, ModuleError
from runtime.resources.database import ContentDatabase
from gameplay.logic import AllOf, AnyOf
from gameplay.dialog.builder import DialogueTreeBuilder
from gameplay.dialog.types import (
    NOT_SET,
    AcceptTask,
    CallFunction,
    ChoiceDefinition,
    CloseDialogue,
    DialogueNodeDefinition,
    DialogueTree,
    EntryCondition,
    EntryConfig,
    GoTo,
    InteractableStateCheck,
    ModuleStateCheck,
    NoAction,
    SetInteractableState,
    SetModuleState,
    SetState,
    StateCheck,
    TaskActive,
    TaskComplete,
)
from gameplay.modules.definition import (
    NPC,
    Background,
    GameObject,
    Interactable,
    Location,
    ModuleConfig,
    ModuleDefinition,
    ModuleHandlers,
    ModuleManifest,
    Position,
    Welcome,
)
from gameplay.modules.registry import ModuleRegistry
from gameplay.progression.requirements import (
    ModuleCompleteRequirement,
    PasswordRequirement,
    StateRequirement,
    TaskCompleteRequirement,
)
from gameplay.tasks.types import (
    SubmissionConfig,
    SubmissionType,
    Task,
    TaskDialogues,
    TaskValidator,
)
from gameplay.tasks.validators import (
    combine_validators,
    keywords_validator,
    success,
    text_length_validator,
    word_count_validator,
)


class ModuleLoader:
    """
    Builds module definitions from a ContentDatabase.

    Args:
        database: Source of validated module JSON
        handlers: call-function handler names -> callables
        module_handlers: Module id -> ModuleHandlers (on_choice_action hooks)
    """

    def __init__(
        self,
        database: ContentDatabase,
        handlers: Optional[dict[str, Callable[..., Any]]] = None,
        module_handlers: Optional[dict[str, ModuleHandlers]] = None,
    ):
        self.database = database
        self.handlers = handlers or {}
        self.module_handlers = module_handlers or {}
        self.logger = logging.getLogger(__name__)

    def load(self, module_id: str) -> ModuleDefinition:
        """
        Load one module.

        Raises:
            ModuleError: NOT_FOUND, LOAD_FAILED or INVALID_STRUCTURE
        """
        data = self.database.load_module(module_id)
        try:
            return self.build(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ModuleError(
                ErrorCode.MODULE_INVALID_STRUCTURE,
                module_id,
                f"Invalid module {module_id}: {e}",
            ) from e

    def load_all(self, registry: Optional[ModuleRegistry] = None) -> list[ModuleDefinition]:
        """
        Load every discoverable module, skipping broken ones.

        Args:
            registry: If given, each loaded module is registered into it
        """
        modules = []
        for module_id in self.database.discover_module_ids():
            try:
                module = self.load(module_id)
                if registry is not None:
                    registry.register(module)
            except ModuleError as e:
                self.logger.warning(f"Skipping module {module_id}: {e.message}")
                continue
            modules.append(module)

        self.logger.info(f"Loaded {len(modules)} modules")
        return modules

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def build(self, data: dict[str, Any]) -> ModuleDefinition:
        """Build a ModuleDefinition from schema-valid module data."""
        module_id = data['id']
        manifest_data = data['manifest']

        config = ModuleConfig(
            manifest=ModuleManifest(
                id=manifest_data['id'],
                name=manifest_data['name'],
                version=manifest_data.get('version', "1.0.0"),
                summary=manifest_data.get('summary', ""),
                meta=manifest_data.get('meta', {}),
            ),
            background=Background(**data.get('background', {})),
            welcome=Welcome(**data['welcome']),
            unlock_requirement=self.parse_requirement(data.get('unlock_requirement')),
        )

        tasks = [self.parse_task(task_data) for task_data in data.get('tasks', [])]
        tasks_by_id = {task.id: task for task in tasks}

        interactables = [
            self.parse_interactable(module_id, item, tasks_by_id)
            for item in data.get('interactables', [])
        ]

        return ModuleDefinition(
            id=module_id,
            config=config,
            tasks=tasks,
            interactables=interactables,
            handlers=self.module_handlers.get(module_id, ModuleHandlers()),
        )

    def parse_requirement(self, data: Optional[dict[str, Any]]) -> Any:
        if data is None:
            return None

        kind = data['type']
        if kind == 'password':
            return PasswordRequirement(data['password'], data.get('hint'))
        if kind == 'task-complete':
            return TaskCompleteRequirement(data['task'])
        if kind == 'module-complete':
            return ModuleCompleteRequirement(data['module'])
        if kind == 'state-check':
            return StateRequirement(data['key'], data.get('value'))
        if kind == 'and':
            return AllOf(tuple(self.parse_requirement(r) for r in data.get('requirements', [])))
        if kind == 'or':
            return AnyOf(tuple(self.parse_requirement(r) for r in data.get('requirements', [])))

        raise ValueError(f"Unknown requirement type: {kind}")

    def parse_condition(self, data: Optional[dict[str, Any]]) -> Any:
        if data is None:
            return None

        kind = data['type']
        if kind == 'task-complete':
            return TaskComplete(data['task'])
        if kind == 'task-active':
            return TaskActive(data['task'])
        if kind == 'state-check':
            return StateCheck(data['key'], data.get('value'))
        if kind == 'module-state':
            return ModuleStateCheck(data['key'], data.get('value'))
        if kind == 'interactable-state':
            return InteractableStateCheck(data['interactable'], data['key'], data.get('value'))
        if kind == 'and':
            return AllOf(tuple(self.parse_condition(c) for c in data.get('conditions', [])))
        if kind == 'or':
            return AnyOf(tuple(self.parse_condition(c) for c in data.get('conditions', [])))

        raise ValueError(f"Unknown condition type: {kind}")

    def parse_action(self, data: dict[str, Any]) -> Any:
        kind = data['type']
        if kind == 'accept-task':
            return AcceptTask(data['task'])
        if kind == 'set-state':
            return SetState(data['key'], data.get('value'))
        if kind == 'set-module-state':
            return SetModuleState(data['key'], data.get('value'))
        if kind == 'set-interactable-state':
            return SetInteractableState(data['interactable'], data['key'], data.get('value'))
        if kind == 'call-function':
            name = data['handler']
            if name not in self.handlers:
                raise ValueError(f"Unknown handler: {name}")
            return CallFunction(self.handlers[name])
        if kind == 'go-to':
            return GoTo(data.get('node'))
        if kind == 'close-dialogue':
            return CloseDialogue()
        if kind == 'none':
            return NoAction()

        raise ValueError(f"Unknown action type: {kind}")

    def parse_validator(self, data: dict[str, Any]) -> TaskValidator:
        on_valid = None
        if 'success' in data:
            success_data = data['success']
            result = success(
                success_data.get('reason', 'complete'),
                success_data.get('message', 'Great work!'),
                success_data.get('score', 100),
            )
            def on_valid(*_: Any) -> Any:
                return result

        kind = data['type']
        if kind == 'length':
            return text_length_validator(data.get('min', 0), on_valid)
        if kind == 'word-count':
            return word_count_validator(data.get('min', 0), on_valid)
        if kind == 'keywords':
            return keywords_validator(data.get('keywords', []), on_valid)
        if kind == 'combine':
            return combine_validators([self.parse_validator(v) for v in data.get('validators', [])])

        raise ValueError(f"Unknown validator type: {kind}")

    def parse_task(self, data: dict[str, Any]) -> Task:
        submission_data = data.get('submission', {'type': 'text'})
        dialogues = data.get('dialogues', {})

        return Task(
            id=data['id'],
            name=data['name'],
            validate=self.parse_validator(data['validator']),
            description=data.get('description', ""),
            submission=SubmissionConfig(
                type=SubmissionType(submission_data['type']),
                component=submission_data.get('component'),
                config=submission_data.get('config', {}),
            ),
            unlock_requirement=self.parse_requirement(data.get('unlock_requirement')),
            dialogues=TaskDialogues(
                offer=dialogues.get('offer', []),
                ready=dialogues.get('ready', []),
                complete=dialogues.get('complete', []),
            ),
            meta=data.get('meta', {}),
        )

    def parse_dialogue(
        self,
        module_id: str,
        dialogue_id: str,
        data: dict[str, Any],
        tasks_by_id: dict[str, Task],
    ) -> DialogueTree:
        builder = DialogueTreeBuilder(dialogue_id)

        for node_data in data['nodes']:
            task_id = node_data.get('task')
            if task_id is not None and task_id not in tasks_by_id:
                raise ModuleError(
                    ErrorCode.MODULE_INVALID_STRUCTURE,
                    module_id,
                    f"Dialogue node '{node_data['id']}' references unknown task '{task_id}'",
                )

            choices = None
            if 'choices' in node_data:
                choices = {
                    key: self._parse_choice(choice_data)
                    for key, choice_data in node_data['choices'].items()
                }

            builder.node(DialogueNodeDefinition(
                id=node_data['id'],
                lines=list(node_data['lines']),
                choices=choices,
                next=node_data.get('next', NOT_SET),
                task=tasks_by_id.get(task_id) if task_id else None,
            ))

        entry = data.get('entry')
        if isinstance(entry, str):
            builder.entry(entry)
        elif isinstance(entry, dict):
            builder._set_entry_config(EntryConfig(
                conditions=tuple(
                    EntryCondition(self.parse_condition(item['condition']), item['node'])
                    for item in entry.get('conditions', [])
                ),
                default=entry['default'],
            ))

        try:
            return builder.build()
        except DialogueError as e:
            raise ModuleError(
                ErrorCode.MODULE_INVALID_STRUCTURE,
                module_id,
                f"Invalid dialogue '{dialogue_id}': {e.message}",
                context=e.context,
            ) from e

    def _parse_choice(self, data: dict[str, Any]) -> ChoiceDefinition:
        actions = data.get('actions')
        kwargs: dict[str, Any] = {
            'text': data['text'],
            'condition': self.parse_condition(data.get('condition')),
            'actions': [self.parse_action(a) for a in actions] if actions is not None else None,
        }
        if 'next' in data:
            kwargs['next'] = data['next']
        return ChoiceDefinition(**kwargs)

    def parse_interactable(
        self,
        module_id: str,
        data: dict[str, Any],
        tasks_by_id: dict[str, Task],
    ) -> Interactable:
        kind = data['type']
        common = {
            'id': data['id'],
            'name': data['name'],
            'position': Position(**data.get('position', {})),
            'unlock_requirement': self.parse_requirement(data.get('unlock_requirement')),
        }

        if 'dialogue' in data:
            common['dialogue_tree'] = self.parse_dialogue(
                module_id, data['id'], data['dialogue'], tasks_by_id
            )

        if kind == 'npc':
            unknown = [task_id for task_id in data.get('tasks', []) if task_id not in tasks_by_id]
            if unknown:
                raise ModuleError(
                    ErrorCode.MODULE_INVALID_STRUCTURE,
                    module_id,
                    f"NPC '{data['id']}' references unknown tasks: {', '.join(unknown)}",
                )
            return NPC(
                avatar=data.get('avatar'),
                tasks=[tasks_by_id[task_id] for task_id in data.get('tasks', [])],
                **common,
            )
        if kind == 'location':
            return Location(**common)
        return GameObject(**common)
