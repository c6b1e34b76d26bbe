"""Recompute bounded arithmetic forms to certify or correct AI math questions."""

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..config import MATH_VERIFY_MAX_DIFFICULTY
from ..records import Question, SourceEvent

logger = logging.getLogger("quizforge.content")

NUMBER = r"(-?\d+(?:\.\d+)?)"

# Forms outside the checker; the source is trusted for these
EXEMPT_RE = re.compile(
    r"quadratic|logarithm|\blog\b|\bln\b|trigonometr|\bsin\b|\bcos\b|\btan\b"
    r"|derivative|differentiat|d/dx|²|³",
    re.IGNORECASE,
)

MULTIPLY_FORMS = [
    re.compile(NUMBER + r"\s*(?:×|\*|·|x|X)\s*" + NUMBER),
    re.compile(NUMBER + r"\s+(?:times|multiplied\s+by)\s+" + NUMBER, re.IGNORECASE),
    re.compile(r"product\s+of\s+" + NUMBER + r"\s+and\s+" + NUMBER, re.IGNORECASE),
]
ADD_FORMS = [
    re.compile(NUMBER + r"\s*\+\s*" + NUMBER),
    re.compile(NUMBER + r"\s+(?:plus|added\s+to)\s+" + NUMBER, re.IGNORECASE),
    re.compile(r"sum\s+of\s+" + NUMBER + r"\s+and\s+" + NUMBER, re.IGNORECASE),
]

ANSWER_NUMBER_RE = re.compile(r"^(?:[a-zA-Z]\s*=\s*|=\s*)?(-?\d[\d,]*(?:\.\d+)?)\s*[a-zA-Z ]*$")


def parse_number(text: str) -> Optional[Decimal]:
    """Read a plain numeric answer such as "12", "1,200", "x = 4" or "30 units"."""
    match = ANSWER_NUMBER_RE.match((text or "").strip())
    if not match:
        return None
    try:
        return Decimal(match.group(1).replace(",", ""))
    except InvalidOperation:
        return None


def format_number(value: Decimal) -> str:
    if value == value.to_integral_value():
        return str(int(value))
    return format(value.normalize(), "f")


def find_binary_form(stem: str) -> Optional[tuple[str, Decimal, Decimal]]:
    """Return (operator, left, right) when the stem holds exactly one two-operand form."""
    found = []
    for operator, forms in (("*", MULTIPLY_FORMS), ("+", ADD_FORMS)):
        for form in forms:
            for match in form.finditer(stem):
                found.append((operator, match))

    if len(found) != 1:
        return None

    operator, match = found[0]
    remainder = stem[:match.start()] + stem[match.end():]
    if re.search(r"\d", remainder):
        return None
    return operator, Decimal(match.group(1)), Decimal(match.group(2))


class MathVerifier:
    """Certify, correct or reject validated math candidates."""

    def __init__(self, max_difficulty: float = MATH_VERIFY_MAX_DIFFICULTY):
        self.max_difficulty = max_difficulty

    def is_exempt(self, candidate: Question, difficulty: float) -> bool:
        return difficulty > self.max_difficulty or bool(EXEMPT_RE.search(candidate.text))

    def verify(self, candidate: Question, difficulty: float) -> Optional[Question]:
        """Return the candidate (possibly corrected), or None when it cannot be salvaged."""
        if candidate.subject != "math" or self.is_exempt(candidate, difficulty):
            return candidate

        form = find_binary_form(candidate.text)
        if form is None:
            return candidate

        operator, left, right = form
        expected = left * right if operator == "*" else left + right

        declared = parse_number(candidate.correct_answer)
        if declared is not None and declared == expected:
            return candidate.with_source(SourceEvent.VERIFIED)

        logger.warning(
            "Math mismatch in %r: declared %r, expected %s",
            candidate.text, candidate.correct_answer, format_number(expected),
        )
        corrected = self._reconstruct(candidate, expected)
        if corrected is None:
            logger.warning("No safe reconstruction for %r", candidate.text)
        return corrected

    def _reconstruct(self, candidate: Question, expected: Decimal) -> Optional[Question]:
        parsed = [parse_number(o) for o in candidate.options]

        # The right value is already offered under another letter
        for option, value in zip(candidate.options, parsed):
            if value is not None and value == expected:
                return candidate.with_options(candidate.options, correct_answer=option).with_source(
                    SourceEvent.CORRECTED
                )

        # Swap the wrong declared value for the recomputed one, only among plain numbers
        if any(value is None for value in parsed):
            return None
        options = [
            format_number(expected) if option == candidate.correct_answer else option
            for option in candidate.options
        ]
        return candidate.with_options(options, correct_answer=format_number(expected)).with_source(
            SourceEvent.CORRECTED
        )
