"""
Tasks - task model, submissions, validators and the submission workflow.
"""

from gameplay.tasks.types import (
    SubmissionType,
    TaskStatus,
    TextSubmission,
    ImageSubmission,
    CodeSubmission,
    MultipleChoiceSubmission,
    CustomSubmission,
    TaskSubmission,
    TaskResult,
    TaskValidator,
    SubmissionConfig,
    TaskOverview,
    TaskDialogues,
    Task,
)
from gameplay.tasks.validators import (
    success,
    failure,
    complete,
    get_text_from_submission,
    text_length_validator,
    word_count_validator,
    keywords_validator,
    combine_validators,
    text_submission,
    image_submission,
    code_submission,
    multiple_choice_submission,
    custom_submission,
)
from gameplay.tasks.availability import (
    is_task_available,
    get_available_tasks,
    get_active_tasks,
    get_task_status,
)
from gameplay.tasks.service import TaskService

__all__ = [
    # Types
    "SubmissionType",
    "TaskStatus",
    "TextSubmission",
    "ImageSubmission",
    "CodeSubmission",
    "MultipleChoiceSubmission",
    "CustomSubmission",
    "TaskSubmission",
    "TaskResult",
    "TaskValidator",
    "SubmissionConfig",
    "TaskOverview",
    "TaskDialogues",
    "Task",
    # Validators
    "success",
    "failure",
    "complete",
    "get_text_from_submission",
    "text_length_validator",
    "word_count_validator",
    "keywords_validator",
    "combine_validators",
    "text_submission",
    "image_submission",
    "code_submission",
    "multiple_choice_submission",
    "custom_submission",
    # Availability
    "is_task_available",
    "get_available_tasks",
    "get_active_tasks",
    "get_task_status",
    # Service
    "TaskService",
]
