"""
Task types - submissions, results, task definitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

if TYPE_CHECKING:
    from gameplay.progression.requirements import UnlockRequirement


class SubmissionType(Enum):
    """How the player hands in a task."""
    TEXT = "text"
    IMAGE = "image"
    CODE = "code"
    MULTIPLE_CHOICE = "multiple_choice"
    CUSTOM = "custom"


class TaskStatus(Enum):
    """Task status from the player's point of view."""
    LOCKED = auto()       # Unlock requirement not met
    AVAILABLE = auto()    # Can be accepted
    ACTIVE = auto()       # Currently accepted
    COMPLETED = auto()    # Solved


@dataclass(frozen=True)
class TextSubmission:
    text: str
    type: SubmissionType = field(default=SubmissionType.TEXT, init=False)


@dataclass(frozen=True)
class ImageSubmission:
    image: Any  # Path, URL or raw bytes; interpreted by the validator
    type: SubmissionType = field(default=SubmissionType.IMAGE, init=False)


@dataclass(frozen=True)
class CodeSubmission:
    code: str
    language: Optional[str] = None
    type: SubmissionType = field(default=SubmissionType.CODE, init=False)


@dataclass(frozen=True)
class MultipleChoiceSubmission:
    choice: str
    type: SubmissionType = field(default=SubmissionType.MULTIPLE_CHOICE, init=False)


@dataclass(frozen=True)
class CustomSubmission:
    data: Any
    component: Optional[str] = None
    type: SubmissionType = field(default=SubmissionType.CUSTOM, init=False)


TaskSubmission = Union[
    TextSubmission,
    ImageSubmission,
    CodeSubmission,
    MultipleChoiceSubmission,
    CustomSubmission,
]


@dataclass(frozen=True)
class TaskResult:
    """
    Outcome of validating a submission.

    Attributes:
        solved: True for success, False for failure
        reason: Short machine-readable reason code ("complete", "too_short")
        details: Human-readable message for the player
        score: Optional score (0-100), successes only
    """
    solved: bool
    reason: str
    details: str
    score: Optional[float] = None


# Pure function: submission in, result out
TaskValidator = Callable[[TaskSubmission], TaskResult]


@dataclass
class SubmissionConfig:
    """What kind of submission UI a task expects."""
    type: SubmissionType = SubmissionType.TEXT
    component: Optional[str] = None
    config: dict[str, Any] = field(default_factory=dict)


@dataclass
class TaskOverview:
    requirements: str = ""
    goals: list[str] = field(default_factory=list)


@dataclass
class TaskDialogues:
    """Lines an NPC uses when offering, collecting and closing a task."""
    offer: list[str] = field(default_factory=list)
    ready: list[str] = field(default_factory=list)
    complete: list[str] = field(default_factory=list)


@dataclass
class Task:
    """A unit of player work with a pure validation function."""
    id: str
    name: str
    validate: TaskValidator
    description: str = ""
    submission: SubmissionConfig = field(default_factory=SubmissionConfig)
    overview: Optional[TaskOverview] = None
    unlock_requirement: Optional[UnlockRequirement] = None
    dialogues: TaskDialogues = field(default_factory=TaskDialogues)

    # Hints, examples and anything else the UI or an assistant may use
    meta: dict[str, Any] = field(default_factory=dict)


def task_id_of(task: Union[Task, str]) -> str:
    """Accept either a Task or a bare task id."""
    return task if isinstance(task, str) else task.id
