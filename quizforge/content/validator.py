"""Structural acceptance gate for candidate questions."""

from typing import Optional

from ..config import MIN_STEM_LENGTH
from ..records import Question

OPTIONS_REQUIRED = 4


def validate_question(candidate: Optional[Question]) -> list[str]:
    """Return a list of structural problems; empty means accepted.

    Shape only: no subject-specific reasoning happens here.
    """
    if candidate is None:
        return ["no candidate"]

    issues = []

    if len((candidate.text or "").strip()) <= MIN_STEM_LENGTH:
        issues.append(f"stem must be longer than {MIN_STEM_LENGTH} characters")

    options = list(candidate.options or ())
    if len(options) != OPTIONS_REQUIRED:
        issues.append(f"expected {OPTIONS_REQUIRED} options, got {len(options)}")

    if any(not isinstance(o, str) or not o.strip() for o in options):
        issues.append("options must be non-empty")
    elif len(set(options)) != len(options):
        issues.append("options must be distinct")

    if candidate.correct_answer not in options:
        issues.append("correct answer is not one of the options")

    return issues


def is_valid(candidate: Optional[Question]) -> bool:
    return not validate_question(candidate)
