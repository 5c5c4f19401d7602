import pytest
from runtime.core.errors import DialogueError
from gameplay.dialog.parser import DialogParser
from gameplay.dialog.types import AcceptTask, SetModuleState, StateCheck, TaskActive, TaskComplete

SCRIPT = """
$owl = "Hoot"

# start
Welcome, traveller.
{owl} says the owl.

>> (help) I need help -> help [active:intro]
! accept intro
! set asked = true
>> (bye) Goodbye -> END

---

# help
Finish the intro task first.
-> start
"""

@pytest.fixture
def parser():
    return DialogParser()

def test_parse_string(parser):
    dialog = parser.parse_string(SCRIPT)

    assert dialog.start_node == "start"
    assert [n.id for n in dialog.nodes] == ["start", "help"]
    assert dialog.variables == {"owl": "Hoot"}

    start = dialog.nodes[0]
    assert start.lines == ["Welcome, traveller.", "{owl} says the owl."]
    assert [c.key for c in start.choices] == ["help", "bye"]
    assert start.choices[0].condition == "active:intro"
    assert start.choices[0].actions == ["accept intro", "set asked = true"]
    assert start.choices[1].next_node is None
    assert dialog.nodes[1].next_node == "start"

def test_default_choice_keys(parser):
    dialog = parser.parse_string("# a\nHi\n>> Yes -> END\n>> No -> END\n")
    assert [c.key for c in dialog.nodes[0].choices] == ["choice_1", "choice_2"]

def test_to_tree(parser):
    tree = parser.to_tree(parser.parse_string(SCRIPT))

    assert tree.entry == "start"
    assert tree.get_node("start").lines[1] == "Hoot says the owl."

    edge = tree.find_edge("start", "help")
    assert edge.next == "help"
    assert edge.condition == TaskActive("intro")
    assert edge.actions == (AcceptTask("intro"), SetModuleState("asked", True))
    assert tree.find_edge("start", "bye").next is None
    assert tree.get_definition("help").next == "start"

@pytest.mark.parametrize("condition, expected", [
    ("task:intro", TaskComplete("intro")),
    ("active:intro", TaskActive("intro")),
    ("state:level=2", StateCheck("level", 2)),
    ("state:door=open", StateCheck("door", "open")),
])
def test_conditions(parser, condition, expected):
    tree = parser.to_tree(parser.parse_string(f"# a\nHi\n>> (go) Go -> END [{condition}]\n"))
    assert tree.find_edge("a", "go").condition == expected

def test_unknown_condition_fails(parser):
    with pytest.raises(DialogueError):
        parser.to_tree(parser.parse_string("# a\nHi\n>> (go) Go -> END [weather:sunny]\n"))

def test_unknown_action_fails(parser):
    with pytest.raises(DialogueError):
        parser.to_tree(parser.parse_string("# a\nHi\n>> (go) Go -> END\n! dance\n"))

def test_action_outside_choice_fails(parser):
    with pytest.raises(DialogueError):
        parser.parse_string("# a\n! accept intro\n")

def test_unknown_target_fails(parser):
    with pytest.raises(DialogueError):
        parser.to_tree(parser.parse_string("# a\nHi\n>> Go -> nowhere\n"))

def test_load_tree(parser, tmp_path):
    path = tmp_path / "owl.dlg"
    path.write_text(SCRIPT, encoding="utf-8")

    tree = parser.load_tree(path)

    assert tree.id == "owl"
    assert tree.get_node("help") is not None
