import pytest
from runtime.core.errors import ErrorCode, ModuleError
from gameplay.modules.definition import ModuleConfig, ModuleDefinition, ModuleManifest
from gameplay.modules.registry import ModuleRegistry

def test_lookup(registry):
    assert len(registry) == 3
    assert "forest" in registry
    assert registry.ids() == ["intro", "forest", "vault"]
    assert registry.get("missing") is None
    assert registry.get_task("forest", "birds").name == "Birds"
    assert registry.get_task("forest", "essay") is None

def test_require_missing(registry):
    with pytest.raises(ModuleError) as exc_info:
        registry.require("missing")

    assert exc_info.value.code == ErrorCode.MODULE_NOT_FOUND

def test_find_task_module(registry, make_module, make_task):
    assert registry.find_task_module("trees") == "forest"
    assert registry.find_task_module("nope") is None

    # First registered owner wins
    registry.register(make_module("copycat", tasks=[make_task("trees")]))
    assert registry.find_task_module("trees") == "forest"

def test_duplicate_task_ids_rejected(make_module, make_task):
    registry = ModuleRegistry()

    with pytest.raises(ModuleError) as exc_info:
        registry.register(make_module("twins", tasks=[make_task("a"), make_task("a")]))

    assert exc_info.value.code == ErrorCode.MODULE_INVALID_STRUCTURE
    assert "twins" not in registry

def test_manifest_id_mismatch_rejected():
    module = ModuleDefinition(id="a", config=ModuleConfig(manifest=ModuleManifest(id="b", name="B")))

    with pytest.raises(ModuleError):
        ModuleRegistry().register(module)

def test_replace_module(registry, make_module, make_task, caplog):
    registry.register(make_module("forest", tasks=[make_task("mushrooms")]))

    assert registry.get_task("forest", "mushrooms") is not None
    assert registry.find_task_module("trees") is None
    assert "Replacing registered module: forest" in caplog.text

def test_activate(registry):
    assert registry.active_id is None

    module = registry.activate("forest")
    assert module.id == "forest"
    assert registry.active_id == "forest"

    # Re-activating the same module is fine
    registry.activate("forest")

    with pytest.raises(ModuleError) as exc_info:
        registry.activate("intro")
    assert exc_info.value.code == ErrorCode.MODULE_ALREADY_ACTIVE

    registry.deactivate()
    registry.activate("intro")
    assert registry.active_id == "intro"
