import json
import pytest
from runtime.core.errors import ErrorCode, ModuleError
from runtime.resources.database import ContentDatabase
from gameplay.dialog.session import DialogueSession
from gameplay.dialog.types import CallFunction, EntryConfig, TaskActive
from gameplay.logic import AllOf
from gameplay.modules.context import ModuleContext
from gameplay.modules.definition import NPC, InteractableType, ModuleHandlers
from gameplay.modules.loader import ModuleLoader
from gameplay.modules.registry import ModuleRegistry
from gameplay.progression.requirements import ModuleCompleteRequirement, PasswordRequirement
from gameplay.progression.unlock import UnlockService
from gameplay.tasks.service import TaskService
from gameplay.tasks.types import SubmissionType, TextSubmission

FOREST = {
    "manifest": {"id": "forest", "name": "Whispering Forest", "version": "1.2.0", "summary": "Trees"},
    "background": {"color": "#113311"},
    "welcome": {"speaker": "Owl", "lines": ["Welcome to the forest."]},
    "unlock_requirement": {
        "type": "and",
        "requirements": [
            {"type": "module-complete", "module": "intro"},
            {"type": "password", "password": "leaf", "hint": "Look up"},
        ],
    },
    "tasks": [
        {
            "id": "trees",
            "name": "Name the Trees",
            "validator": {
                "type": "combine",
                "validators": [
                    {"type": "length", "min": 10},
                    {"type": "keywords", "keywords": ["oak"]},
                ],
            },
            "dialogues": {"offer": ["Can you name the trees?"]},
        }
    ],
    "interactables": [
        {
            "id": "owl",
            "type": "npc",
            "name": "Owl",
            "position": {"x": 10, "y": 20},
            "tasks": ["trees"],
            "dialogue": {
                "nodes": [
                    {
                        "id": "hello",
                        "lines": ["Hoot."],
                        "choices": {
                            "accept": {
                                "text": "I'll do it",
                                "next": None,
                                "actions": [
                                    {"type": "accept-task", "task": "trees"},
                                    {"type": "call-function", "handler": "cheer"},
                                ],
                            },
                            "bye": {"text": "Bye", "next": None},
                        },
                    },
                    {"id": "ready", "lines": ["Tell me the trees."], "task": "trees"},
                ],
                "entry": {
                    "conditions": [
                        {"condition": {"type": "task-active", "task": "trees"}, "node": "ready"}
                    ],
                    "default": "hello",
                },
            },
        },
        {"id": "gate", "type": "location", "name": "Gate"},
    ],
}

INTRO = {
    "manifest": {"id": "intro", "name": "Intro", "version": "1.0.0"},
    "welcome": {"speaker": "Guide", "lines": ["Hi"]},
    "tasks": [{"id": "essay", "name": "Essay", "validator": {"type": "length", "min": 5}}],
}

def write_module(root, module_id, data):
    module_dir = root / "modules" / module_id
    module_dir.mkdir(parents=True)
    (module_dir / "module.json").write_text(json.dumps(data), encoding="utf-8")

@pytest.fixture
def cheered():
    return []

@pytest.fixture
def loader(tmp_path, cheered):
    write_module(tmp_path, "forest", FOREST)
    write_module(tmp_path, "intro", INTRO)
    return ModuleLoader(ContentDatabase(tmp_path), handlers={"cheer": lambda ctx: cheered.append(ctx.module_id)})

def test_load_module(loader):
    module = loader.load("forest")

    assert module.id == "forest"
    assert module.name == "Whispering Forest"
    assert module.config.manifest.version == "1.2.0"
    assert module.config.background.color == "#113311"
    assert module.config.welcome.lines == ["Welcome to the forest."]

    requirement = module.config.unlock_requirement
    assert isinstance(requirement, AllOf)
    assert requirement.items == (ModuleCompleteRequirement("intro"), PasswordRequirement("leaf", "Look up"))

def test_load_tasks(loader):
    task = loader.load("forest").get_task("trees")

    assert task.submission.type == SubmissionType.TEXT
    assert task.dialogues.offer == ["Can you name the trees?"]
    assert task.validate(TextSubmission("birch and maple")).reason == "missing_keywords"
    assert task.validate(TextSubmission("a big oak tree")).solved

def test_load_interactables(loader):
    module = loader.load("forest")
    owl = module.get_interactable("owl")
    gate = module.get_interactable("gate")

    assert isinstance(owl, NPC)
    assert owl.position.x == 10
    assert [t.id for t in owl.tasks] == ["trees"]
    assert gate.type == InteractableType.LOCATION
    assert gate.dialogue_tree is None

    tree = owl.dialogue_tree
    assert tree.id == "owl"
    assert isinstance(tree.entry, EntryConfig)
    assert tree.entry.conditions[0].condition == TaskActive("trees")
    assert tree.find_task_node("trees").id == "ready"
    assert isinstance(tree.find_edge("hello", "accept").actions[1], CallFunction)

def test_load_all_registers(loader):
    registry = ModuleRegistry()
    modules = loader.load_all(registry)

    assert [m.id for m in modules] == ["forest", "intro"]
    assert registry.find_task_module("essay") == "intro"

def test_load_all_skips_broken_modules(loader, tmp_path):
    write_module(tmp_path, "broken", {**INTRO, "manifest": {"id": "broken", "name": "B", "version": "1"},
                                      "interactables": [{"id": "x", "type": "npc", "name": "X", "tasks": ["ghost"]}]})

    modules = loader.load_all()

    assert "broken" not in [m.id for m in modules]

def test_unknown_task_reference(loader, tmp_path):
    data = {**INTRO, "manifest": {"id": "bad", "name": "Bad", "version": "1"},
            "interactables": [{"id": "x", "type": "npc", "name": "X", "tasks": ["ghost"]}]}
    write_module(tmp_path, "bad", data)

    with pytest.raises(ModuleError) as exc_info:
        loader.load("bad")

    assert exc_info.value.code == ErrorCode.MODULE_INVALID_STRUCTURE
    assert "ghost" in exc_info.value.message

def test_unknown_handler(tmp_path):
    write_module(tmp_path, "forest", FOREST)
    loader = ModuleLoader(ContentDatabase(tmp_path))

    with pytest.raises(ModuleError) as exc_info:
        loader.load("forest")

    assert exc_info.value.code == ErrorCode.MODULE_INVALID_STRUCTURE
    assert "cheer" in exc_info.value.message

def test_broken_dialogue_reference(tmp_path):
    data = json.loads(json.dumps(FOREST))
    data["interactables"][0]["dialogue"]["entry"] = "nowhere"
    write_module(tmp_path, "forest", data)
    loader = ModuleLoader(ContentDatabase(tmp_path), handlers={"cheer": print})

    with pytest.raises(ModuleError) as exc_info:
        loader.load("forest")

    assert exc_info.value.code == ErrorCode.MODULE_INVALID_STRUCTURE

def test_module_handlers_attached(tmp_path):
    write_module(tmp_path, "intro", INTRO)
    handlers = ModuleHandlers(on_choice_action=lambda dialogue_id, action, ctx: None)
    loader = ModuleLoader(ContentDatabase(tmp_path), module_handlers={"intro": handlers})

    assert loader.load("intro").handlers is handlers

@pytest.mark.asyncio
async def test_play_through(loader, store, cheered):
    registry = ModuleRegistry()
    loader.load_all(registry)
    unlocks = UnlockService(registry, store)
    tasks = TaskService(registry, unlocks)
    unlocks.initialize_module_progression()

    assert tasks.submit("intro", "essay", TextSubmission("hello world")).solved
    check = unlocks.can_unlock("forest")
    assert check.requires_interaction and not check.can_unlock
    assert unlocks.unlock("forest", password="leaf").success

    forest = registry.get("forest")
    owl = forest.get_interactable("owl")
    context = ModuleContext("forest", store, forest)

    session = DialogueSession(owl, context)
    assert session.start().id == "hello"
    assert await session.choose("accept") is None
    assert cheered == ["forest"]
    assert context.get_current_task_id() == "trees"

    # With the task active the owl opens with the task hub
    session = DialogueSession(owl, context)
    assert session.start().id == "owl_root"
    assert (await session.choose("task_trees")).id == "ready"

    assert tasks.submit("forest", "trees", TextSubmission("the old oak")).solved
    assert unlocks.is_module_fully_completed("forest")
