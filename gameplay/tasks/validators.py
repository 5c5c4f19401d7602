"""
Task validators - result builders and composable validator factories.

Every factory returns a pure function submission -> TaskResult.
Validators never raise for bad input; they report it as a failure.

Usage:
    validate = combine_validators([
        text_length_validator(20),
        keywords_validator(["model", "data"]),
    ])
    result = validate(TextSubmission("The model learns from data."))
"""

from __future__ import annotations

import re
from typing import Callable, Optional, Sequence

from gameplay.tasks.types import (
    SubmissionConfig,
    SubmissionType,
    TaskResult,
    TaskSubmission,
    TaskValidator,
    TextSubmission,
)


def success(reason: str, details: str, score: Optional[float] = None) -> TaskResult:
    """Create a successful result."""
    return TaskResult(solved=True, reason=reason, details=details, score=score)


def failure(reason: str, details: str) -> TaskResult:
    """Create a failed result."""
    return TaskResult(solved=False, reason=reason, details=details)


def complete(details: str = "Great work!", score: float = 100) -> TaskResult:
    return success("complete", details, score)


def get_text_from_submission(submission: TaskSubmission) -> Optional[str]:
    """Return the stripped text of a text submission, None for anything else."""
    if isinstance(submission, TextSubmission):
        return submission.text.strip()
    return None


def _invalid_submission() -> TaskResult:
    return failure('invalid_submission', 'Please submit your answer as text.')


def text_length_validator(
    min_length: int,
    on_valid: Optional[Callable[[str], TaskResult]] = None,
) -> TaskValidator:
    """
    Require at least min_length characters of text.

    Args:
        min_length: Minimum number of characters (after stripping)
        on_valid: Builds the result for long-enough text (default: complete, 100)
    """
    def validate(submission: TaskSubmission) -> TaskResult:
        text = get_text_from_submission(submission)
        if text is None:
            return _invalid_submission()

        if len(text) < min_length:
            return failure(
                'too_short',
                f"Your answer is too short. Minimum length: {min_length} characters. "
                f"Current: {len(text)} characters.",
            )

        return on_valid(text) if on_valid else complete()

    return validate


def word_count_validator(
    min_words: int,
    on_valid: Optional[Callable[[str, int], TaskResult]] = None,
) -> TaskValidator:
    """Require at least min_words whitespace-separated words."""
    def validate(submission: TaskSubmission) -> TaskResult:
        text = get_text_from_submission(submission)
        if text is None:
            return _invalid_submission()

        word_count = len([word for word in re.split(r'\s+', text) if word])

        if word_count < min_words:
            return failure(
                'too_short',
                f"Your answer needs more words. Minimum: {min_words} words. "
                f"Current: {word_count} words.",
            )

        return on_valid(text, word_count) if on_valid else complete()

    return validate


def keywords_validator(
    keywords: Sequence[str],
    on_valid: Optional[Callable[[str, list[str]], TaskResult]] = None,
) -> TaskValidator:
    """
    Require every keyword to appear in the text.

    Matching is a case-insensitive substring test.
    """
    def validate(submission: TaskSubmission) -> TaskResult:
        text = get_text_from_submission(submission)
        if text is None:
            return _invalid_submission()

        lower_text = text.lower()
        found = [kw for kw in keywords if kw.lower() in lower_text]
        missing = [kw for kw in keywords if kw.lower() not in lower_text]

        if missing:
            missing_text = ', '.join(f'"{kw}"' for kw in missing)
            return failure(
                'missing_keywords',
                f"Your answer is missing required elements: {missing_text}",
            )

        return on_valid(text, found) if on_valid else complete()

    return validate


def combine_validators(validators: Sequence[TaskValidator]) -> TaskValidator:
    """
    Run validators in order.

    Returns the first failure, or the last validator's success.
    """
    if not validators:
        raise ValueError("combine_validators needs at least one validator")

    validators = list(validators)

    def validate(submission: TaskSubmission) -> TaskResult:
        result = None
        for validator in validators:
            result = validator(submission)
            if not result.solved:
                return result
        return result

    return validate


# Submission config builders

def text_submission(**config) -> SubmissionConfig:
    return SubmissionConfig(type=SubmissionType.TEXT, config=config)


def image_submission(**config) -> SubmissionConfig:
    return SubmissionConfig(type=SubmissionType.IMAGE, config=config)


def code_submission(language: Optional[str] = None, **config) -> SubmissionConfig:
    return SubmissionConfig(type=SubmissionType.CODE, config={"language": language, **config})


def multiple_choice_submission(options: Sequence[str], **config) -> SubmissionConfig:
    return SubmissionConfig(
        type=SubmissionType.MULTIPLE_CHOICE,
        config={"options": list(options), **config},
    )


def custom_submission(component: str, **config) -> SubmissionConfig:
    return SubmissionConfig(type=SubmissionType.CUSTOM, component=component, config=config)
