"""
Runtime

Infrastructure shared by the dialogue and progression engines:
configuration, persisted data models, typed events, errors and
authored content loading.

Quick Start:
    from runtime import EngineConfig, EventBus, ContentDatabase

    config = EngineConfig(content_path="game/content")
    database = ContentDatabase.from_config(config)
    raw_modules = database.load_all()
"""

__version__ = "0.1.0"
__author__ = "Developer"

from runtime.core import (
    EngineConfig,
    Component,
    register_component,
    EventBus,
    Event,
    ProgressionEvent,
    DialogueEvent,
    ErrorCode,
    AppError,
    ModuleError,
    TaskError,
    DialogueError,
)
from runtime.resources import ContentDatabase

__all__ = [
    # Config
    "EngineConfig",
    # Data
    "Component",
    "register_component",
    # Events
    "EventBus",
    "Event",
    "ProgressionEvent",
    "DialogueEvent",
    # Errors
    "ErrorCode",
    "AppError",
    "ModuleError",
    "TaskError",
    "DialogueError",
    # Resources
    "ContentDatabase",
]
