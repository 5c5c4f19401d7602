"""
Gameplay

Dialogue, task and progression engines built on the runtime package.

Modules:
- logic: AllOf/AnyOf combinators shared by conditions and requirements
- tasks: Task model, validators, submission workflow
- progression: Progress store, unlock requirements, unlock propagation
- dialog: Dialogue trees, navigation, actions, sessions
- modules: Module definitions, registry, context, JSON loader

Quick Start:
    from runtime import EngineConfig, EventBus, ContentDatabase
    from gameplay.modules import ModuleLoader, ModuleRegistry, ModuleContext
    from gameplay.progression import ProgressStore, UnlockService
    from gameplay.dialog import DialogueSession

    config = EngineConfig()
    events = EventBus()
    store = ProgressStore(events)
    registry = ModuleRegistry()
    ModuleLoader(ContentDatabase.from_config(config)).load_all(registry)

    unlocks = UnlockService(registry, store, config)
    unlocks.initialize_module_progression()
"""
