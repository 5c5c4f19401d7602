"""
Dialogue parser - builds dialogue trees from a simple text format.

```
$owl = "Hoot"

# start
Welcome, traveller.
{owl} says the owl.

>> (help) I need help -> help [active:intro]
! accept intro
>> (bye) Goodbye -> END

---

# help
Finish the intro task first.
-> start
```

Each `# id` starts a node; plain lines are dialogue lines. `>>` lines
are choices with an optional `(key)` (default `choice_<n>`), a target
(`END` closes) and an optional `[condition]`. `!` lines add actions to
the preceding choice. `->` sets the node-level next.

Conditions: `task:<id>`, `active:<id>`, `state:<key>=<json>`.
Actions: `accept <task_id>`, `set <key> = <json>`.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from runtime.core.errors import DialogueError, ErrorCode
from gameplay.dialog.builder import DialogueTreeBuilder
from gameplay.dialog.types import (
    AcceptTask,
    ChoiceDefinition,
    DialogueNodeDefinition,
    DialogueTree,
    SetModuleState,
    StateCheck,
    TaskActive,
    TaskComplete,
)

END = "END"


@dataclass
class ParsedChoice:
    """A parsed choice option."""
    key: str
    text: str
    next_node: Optional[str]
    condition: Optional[str] = None
    actions: list[str] = field(default_factory=list)


@dataclass
class ParsedNode:
    """A parsed dialogue node."""
    id: str
    lines: list[str] = field(default_factory=list)
    next_node: Optional[str] = None
    choices: list[ParsedChoice] = field(default_factory=list)


@dataclass
class ParsedDialog:
    """A complete parsed dialogue script."""
    id: str
    nodes: list[ParsedNode] = field(default_factory=list)
    start_node: Optional[str] = None
    variables: dict[str, Any] = field(default_factory=dict)


class DialogParser:
    """
    Parses dialogue scripts from a simple text format.
    """

    # Regex patterns
    NODE_PATTERN = re.compile(r'^#\s*(\w+)\s*$')
    CHOICE_PATTERN = re.compile(
        r'^>>\s*(?:\((\w+)\)\s*)?(.+?)\s*->\s*(\w+)(?:\s*\[(.+?)\])?\s*$'
    )
    NEXT_PATTERN = re.compile(r'^->\s*(\w+)\s*$')
    ACTION_PATTERN = re.compile(r'^!\s*(.+)$')
    VARIABLE_PATTERN = re.compile(r'^\$(\w+)\s*=\s*(.+)$')

    def parse_file(self, path: str | Path) -> ParsedDialog:
        """Parse a dialogue script file."""
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()

        dialog = self.parse_string(content)
        dialog.id = path.stem
        return dialog

    def parse_string(self, content: str) -> ParsedDialog:
        """Parse a dialogue script string."""
        dialog = ParsedDialog(id="parsed")
        current_node: Optional[ParsedNode] = None

        for line in content.split('\n'):
            line = line.strip()

            if not line or line.startswith('//'):
                continue

            # Node separator
            if line == '---':
                current_node = None
                continue

            # Node ID
            match = self.NODE_PATTERN.match(line)
            if match:
                current_node = ParsedNode(id=match.group(1))
                dialog.nodes.append(current_node)
                continue

            # Variable definition (outside nodes)
            match = self.VARIABLE_PATTERN.match(line)
            if match and not current_node:
                key = match.group(1)
                value = match.group(2).strip()
                try:
                    dialog.variables[key] = json.loads(value)
                except json.JSONDecodeError:
                    dialog.variables[key] = value
                continue

            if not current_node:
                continue

            match = self.CHOICE_PATTERN.match(line)
            if match:
                key = match.group(1) or f"choice_{len(current_node.choices) + 1}"
                target = match.group(3)
                current_node.choices.append(ParsedChoice(
                    key=key,
                    text=match.group(2),
                    next_node=None if target == END else target,
                    condition=match.group(4),
                ))
                continue

            match = self.NEXT_PATTERN.match(line)
            if match:
                target = match.group(1)
                current_node.next_node = None if target == END else target
                continue

            match = self.ACTION_PATTERN.match(line)
            if match:
                if not current_node.choices:
                    raise DialogueError(
                        ErrorCode.DIALOGUE_INVALID_REFERENCE,
                        dialog.id,
                        f"Action outside a choice in node '{current_node.id}': {line}",
                    )
                current_node.choices[-1].actions.append(match.group(1).strip())
                continue

            # Regular text line
            current_node.lines.append(line)

        if dialog.nodes:
            dialog.start_node = dialog.nodes[0].id

        return dialog

    def to_tree(self, dialog: ParsedDialog) -> DialogueTree:
        """
        Build a validated DialogueTree from a parsed script.

        Raises:
            DialogueError: On unknown references or malformed conditions/actions
        """
        builder = DialogueTreeBuilder(dialog.id)

        for node in dialog.nodes:
            choices = {
                choice.key: ChoiceDefinition(
                    text=self._process_text(choice.text, dialog.variables),
                    next=choice.next_node,
                    condition=self._parse_condition(choice.condition, dialog.id),
                    actions=[self._parse_action(action, dialog.id) for action in choice.actions] or None,
                )
                for choice in node.choices
            }
            builder.node(DialogueNodeDefinition(
                id=node.id,
                lines=[self._process_text(line, dialog.variables) for line in node.lines],
                choices=choices or None,
                next=node.next_node,
            ))

        if dialog.start_node:
            builder.entry(dialog.start_node)

        return builder.build()

    def load_tree(self, path: str | Path) -> DialogueTree:
        return self.to_tree(self.parse_file(path))

    def _process_text(self, text: str, variables: dict[str, Any]) -> str:
        """Process text variables like {owl}."""
        result = text
        for key, value in variables.items():
            result = result.replace(f"{{{key}}}", str(value))
        return result

    def _parse_condition(self, condition: Optional[str], dialog_id: str) -> Any:
        if condition is None:
            return None

        kind, _, argument = condition.partition(':')
        kind = kind.strip()
        argument = argument.strip()

        if kind == 'task' and argument:
            return TaskComplete(argument)
        if kind == 'active' and argument:
            return TaskActive(argument)
        if kind == 'state' and '=' in argument:
            key, _, value = argument.partition('=')
            return StateCheck(key.strip(), self._parse_value(value.strip()))

        raise DialogueError(
            ErrorCode.DIALOGUE_INVALID_REFERENCE,
            dialog_id,
            f"Unknown condition: {condition}",
        )

    def _parse_action(self, action: str, dialog_id: str) -> Any:
        verb, _, argument = action.partition(' ')
        argument = argument.strip()

        if verb == 'accept' and argument:
            return AcceptTask(argument)
        if verb == 'set' and '=' in argument:
            key, _, value = argument.partition('=')
            return SetModuleState(key.strip(), self._parse_value(value.strip()))

        raise DialogueError(
            ErrorCode.DIALOGUE_INVALID_REFERENCE,
            dialog_id,
            f"Unknown action: {action}",
        )

    @staticmethod
    def _parse_value(value: str) -> Any:
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
