import os
import sys
import pytest

# Ensure runtime/gameplay packages can be imported
sys.path.append(os.getcwd())


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from runtime.core.events import EventBus
    return EventBus()


@pytest.fixture
def store(event_bus):
    """Fresh ProgressStore wired to the event bus."""
    from gameplay.progression.store import ProgressStore
    return ProgressStore(event_bus)


@pytest.fixture
def make_task():
    """Factory for tasks with a length validator."""
    from gameplay.tasks.types import Task
    from gameplay.tasks.validators import text_length_validator

    def _make(task_id, name=None, min_length=5, unlock_requirement=None):
        return Task(
            id=task_id,
            name=name or task_id.title(),
            validate=text_length_validator(min_length),
            description=f"Write about {task_id}",
            unlock_requirement=unlock_requirement,
        )

    return _make


@pytest.fixture
def make_module():
    """Factory for minimal module definitions."""
    from gameplay.modules.definition import ModuleConfig, ModuleDefinition, ModuleManifest

    def _make(module_id, tasks=(), unlock_requirement=None, interactables=()):
        return ModuleDefinition(
            id=module_id,
            config=ModuleConfig(
                manifest=ModuleManifest(id=module_id, name=module_id.title()),
                unlock_requirement=unlock_requirement,
            ),
            tasks=list(tasks),
            interactables=list(interactables),
        )

    return _make


@pytest.fixture
def registry(make_module, make_task):
    """
    Registry with three modules:
    - intro: open, one task
    - forest: requires intro completed, two tasks
    - vault: password protected
    """
    from gameplay.modules.registry import ModuleRegistry
    from gameplay.progression.requirements import module_complete, password

    return ModuleRegistry([
        make_module("intro", tasks=[make_task("essay")]),
        make_module(
            "forest",
            tasks=[make_task("trees"), make_task("birds")],
            unlock_requirement=module_complete("intro"),
        ),
        make_module("vault", tasks=[make_task("lock")], unlock_requirement=password("abc123")),
    ])


@pytest.fixture
def unlock_service(registry, store):
    from gameplay.progression.unlock import UnlockService
    return UnlockService(registry, store)


@pytest.fixture
def context(store):
    """ModuleContext for an 'intro' module without a definition."""
    from gameplay.modules.context import ModuleContext
    return ModuleContext("intro", store)
