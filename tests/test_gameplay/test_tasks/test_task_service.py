import pytest
from runtime.core.errors import ErrorCode, TaskError
from runtime.core.events import ProgressionEvent
from gameplay.progression.store import ModuleProgressionState
from gameplay.tasks.service import TaskService
from gameplay.tasks.types import Task, TextSubmission

@pytest.fixture
def service(registry, unlock_service):
    return TaskService(registry, unlock_service)

def test_unknown_task(service):
    result = service.submit("intro", "missing", TextSubmission("hello there"))

    assert result.solved is False
    assert result.reason == "task_not_found"
    assert result.details == "Task missing not found."

def test_failed_validation_records_nothing(service, store):
    result = service.submit("intro", "essay", TextSubmission("hi"))

    assert result.reason == "too_short"
    assert not store.is_task_completed("intro", "essay")

def test_success_completes_and_propagates(service, store, unlock_service, event_bus):
    unlock_service.initialize_module_progression()
    unlocked = []
    def on_unlocked(event):
        unlocked.append(event["module_id"])
    event_bus.subscribe(ProgressionEvent.MODULE_UNLOCKED, on_unlocked)

    result = service.submit("intro", "essay", TextSubmission("a long answer"))

    assert result.solved is True
    assert store.is_task_completed("intro", "essay")
    assert store.get_module_progression("intro") == ModuleProgressionState.COMPLETED
    assert store.get_module_progression("forest") == ModuleProgressionState.UNLOCKED
    assert unlocked == ["forest"]

def test_validator_crash_becomes_evaluation_error(service, registry, make_module):
    def explode(submission):
        raise RuntimeError("boom")

    registry.register(make_module("broken", tasks=[Task(id="bad", name="Bad", validate=explode)]))

    result = service.submit("broken", "bad", TextSubmission("anything"))

    assert result.solved is False
    assert result.reason == "evaluation_error"
    assert result.details == "There was an error checking your answer. Please try again."

def test_evaluate_raises(service):
    with pytest.raises(TaskError) as exc_info:
        service.evaluate("intro", "missing", TextSubmission("x"))

    assert exc_info.value.code == ErrorCode.TASK_NOT_FOUND
    assert exc_info.value.module_id == "intro"
