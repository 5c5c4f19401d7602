import pytest
from runtime.core.config import EngineConfig
from gameplay.modules.definition import GameObject
from gameplay.modules.registry import ModuleRegistry
from gameplay.progression.requirements import custom_check, password, task_complete
from gameplay.progression.store import ModuleProgressionState
from gameplay.progression.unlock import UnlockService

LOCKED = ModuleProgressionState.LOCKED
UNLOCKED = ModuleProgressionState.UNLOCKED
COMPLETED = ModuleProgressionState.COMPLETED

def test_initialize_unlocks_open_modules(unlock_service, store):
    unlocked = unlock_service.initialize_module_progression()

    assert unlocked == ["intro"]
    assert store.get_module_progression("intro") == UNLOCKED
    assert store.get_module_progression("forest") == LOCKED
    assert store.get_module_progression("vault") == LOCKED

def test_initialize_keeps_completed_modules(unlock_service, store):
    store.complete_module("intro")

    unlock_service.initialize_module_progression()

    assert store.get_module_progression("intro") == COMPLETED
    assert store.get_module_progression("forest") == UNLOCKED

def test_initialize_relocks_password_modules(unlock_service, store):
    assert unlock_service.unlock("vault", password="abc123").success
    unlock_service.initialize_module_progression()

    assert store.get_module_progression("vault") == LOCKED

def test_password_without_candidate(unlock_service):
    check = unlock_service.can_unlock("vault")

    assert check.can_unlock is False
    assert check.requires_interaction is True

def test_password_unlock(unlock_service, store):
    attempt = unlock_service.unlock("vault", password="abc123")

    assert attempt.success is True
    assert attempt.requires_password is False
    assert store.get_module_progression("vault") == UNLOCKED

def test_wrong_password_stays_locked(unlock_service, store):
    check = unlock_service.can_unlock("vault", password="nope")
    attempt = unlock_service.unlock("vault", password="nope")

    assert check.can_unlock is False
    assert check.requires_interaction is True
    assert attempt.success is False
    assert attempt.requires_password is True
    assert store.get_module_progression("vault") == LOCKED

def test_unknown_module(unlock_service):
    check = unlock_service.can_unlock("nowhere")
    assert (check.can_unlock, check.requires_interaction) == (False, False)

def test_completed_module_cannot_unlock(unlock_service, store):
    store.complete_module("vault")

    check = unlock_service.can_unlock("vault", password="abc123")

    assert check.can_unlock is False
    assert check.requires_interaction is False

def test_unlock_already_unlocked_is_noop(unlock_service, store):
    unlock_service.initialize_module_progression()

    attempt = unlock_service.unlock("intro")

    assert attempt.success is False
    assert store.get_module_progression("intro") == UNLOCKED

def test_module_complete_chain(unlock_service, store):
    unlock_service.initialize_module_progression()
    store.complete_task("intro", "essay")

    assert unlock_service.evaluate_module_completion("intro", propagate=False) is True
    assert store.get_module_progression("forest") == LOCKED
    assert unlock_service.can_unlock("forest").can_unlock is True

    assert unlock_service.unlock("forest").success
    assert store.get_module_progression("forest") == UNLOCKED

def test_module_incomplete_until_all_tasks_done(unlock_service, store):
    unlock_service.complete_task("forest", "trees")
    assert not unlock_service.is_module_fully_completed("forest")
    assert store.get_module_progression("forest") != COMPLETED

    unlock_service.complete_task("forest", "birds")
    assert store.get_module_progression("forest") == COMPLETED

def test_module_without_tasks_never_completes(make_module, store):
    service = UnlockService(ModuleRegistry([make_module("empty")]), store)
    assert service.evaluate_module_completion("empty") is False

def test_complete_task_cascades_through_chain(make_module, make_task, store):
    registry = ModuleRegistry([
        make_module("c", unlock_requirement=custom_check(
            lambda ctx: ctx.store.get_module_progression("b") == UNLOCKED
        )),
        make_module("b", unlock_requirement=task_complete("first")),
        make_module("a", tasks=[make_task("first"), make_task("second")]),
    ])
    service = UnlockService(registry, store)
    service.initialize_module_progression()

    # a is not complete yet, its first task alone gates b
    service.complete_task("a", "first")

    assert store.get_module_progression("a") == UNLOCKED
    assert store.get_module_progression("b") == UNLOCKED
    assert store.get_module_progression("c") == UNLOCKED

def test_single_pass_when_fixed_point_disabled(make_module, make_task, store):
    registry = ModuleRegistry([
        make_module("c", unlock_requirement=custom_check(
            lambda ctx: ctx.store.get_module_progression("b") == UNLOCKED
        )),
        make_module("b", unlock_requirement=task_complete("first")),
        make_module("a", tasks=[make_task("first"), make_task("second")]),
    ])
    service = UnlockService(registry, store, EngineConfig(propagate_to_fixed_point=False))
    store.complete_task("a", "first")

    assert service.propagate_unlocks() == ["b", "a"]
    assert store.get_module_progression("c") == LOCKED

    service_fixed = UnlockService(registry, store)
    assert service_fixed.propagate_unlocks() == ["c"]

def test_fixed_point_unlocks_dependent_chain(make_module, make_task, store):
    registry = ModuleRegistry([
        make_module("c", unlock_requirement=custom_check(
            lambda ctx: ctx.store.get_module_progression("b") == UNLOCKED
        )),
        make_module("b", unlock_requirement=task_complete("first")),
        make_module("a", tasks=[make_task("first")]),
    ])
    service = UnlockService(registry, store)
    store.unlock_module("a")
    store.complete_task("a", "first")

    assert service.propagate_unlocks() == ["b", "c"]

def test_failing_requirement_is_isolated(make_module, store, caplog):
    def explode(ctx):
        raise RuntimeError("bad check")

    registry = ModuleRegistry([
        make_module("broken", unlock_requirement=custom_check(explode)),
        make_module("fine"),
    ])
    service = UnlockService(registry, store)

    unlocked = service.propagate_unlocks()

    assert unlocked == ["fine"]
    assert store.get_module_progression("broken") == LOCKED
    assert "bad check" in caplog.text

def test_propagation_skips_password_modules(unlock_service, store):
    unlock_service.propagate_unlocks()
    assert store.get_module_progression("vault") == LOCKED

def test_check_module_dependencies(unlock_service, store):
    assert unlock_service.check_module_dependencies("forest") == {"intro": False}
    store.complete_module("intro")
    assert unlock_service.check_module_dependencies("forest") == {"intro": True}
    assert unlock_service.check_module_dependencies("intro") == {}

def test_can_unlock_interactable(unlock_service, store):
    chest = GameObject(id="chest", name="Chest", unlock_requirement=password("open"))
    rock = GameObject(id="rock", name="Rock")

    assert unlock_service.can_unlock_interactable("intro", rock).can_unlock
    assert unlock_service.can_unlock_interactable("intro", chest).requires_interaction
    assert unlock_service.can_unlock_interactable("intro", chest, password="open").can_unlock

@pytest.mark.parametrize("module_id", ["intro", "forest", "vault"])
def test_can_unlock_is_false_after_completion(unlock_service, store, module_id):
    store.complete_module(module_id)
    assert unlock_service.can_unlock(module_id, password="abc123").can_unlock is False
