"""
Error types - structured exception hierarchy.

Lets callers distinguish module, task and dialogue failures and
carry the offending id along. Expected outcomes (locked module,
wrong password, failed validation) are results, not exceptions.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """Error codes for every failure the engine reports."""
    # Modules
    MODULE_NOT_FOUND = "MODULE_NOT_FOUND"
    MODULE_LOAD_FAILED = "MODULE_LOAD_FAILED"
    MODULE_INVALID_STRUCTURE = "MODULE_INVALID_STRUCTURE"
    MODULE_ALREADY_ACTIVE = "MODULE_ALREADY_ACTIVE"

    # Tasks
    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    TASK_EVALUATION_ERROR = "TASK_EVALUATION_ERROR"
    TASK_INVALID_SUBMISSION = "TASK_INVALID_SUBMISSION"

    # Dialogue
    DIALOGUE_NOT_FOUND = "DIALOGUE_NOT_FOUND"
    DIALOGUE_INVALID_REFERENCE = "DIALOGUE_INVALID_REFERENCE"


class AppError(Exception):
    """Base class for all engine errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = context or {}


class ModuleError(AppError):
    """A module could not be found, loaded or activated."""

    def __init__(
        self,
        code: ErrorCode,
        module_id: str,
        message: str,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(code, message, context)
        self.module_id = module_id


class TaskError(AppError):
    """A task is unknown or its evaluation failed."""

    def __init__(
        self,
        code: ErrorCode,
        task_id: str,
        message: str,
        module_id: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(code, message, context)
        self.task_id = task_id
        self.module_id = module_id


class DialogueError(AppError):
    """A dialogue tree is missing or references unknown nodes."""

    def __init__(
        self,
        code: ErrorCode,
        dialogue_id: str,
        message: str,
        module_id: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(code, message, context)
        self.dialogue_id = dialogue_id
        self.module_id = module_id


def get_error_message(error: object) -> str:
    """Extract a message from an exception or string."""
    if isinstance(error, BaseException):
        return str(error)
    if isinstance(error, str):
        return error
    return "Unknown error"
