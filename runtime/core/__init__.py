"""
Core runtime module.

Exports:
- EngineConfig: Engine configuration
- Component, register_component: Persisted data base and registration
- EventBus, Event, ProgressionEvent, DialogueEvent: Event system
- ErrorCode, AppError, ModuleError, TaskError, DialogueError: Errors
"""

from runtime.core.config import EngineConfig
from runtime.core.component import Component, register_component, get_component_type
from runtime.core.events import EventBus, Event, ProgressionEvent, DialogueEvent
from runtime.core.errors import (
    ErrorCode,
    AppError,
    ModuleError,
    TaskError,
    DialogueError,
    get_error_message,
)

__all__ = [
    # Config
    "EngineConfig",
    # Data
    "Component",
    "register_component",
    "get_component_type",
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
    "get_error_message",
]
