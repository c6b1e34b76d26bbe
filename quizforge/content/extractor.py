"""Parse free-text completions into candidate multiple-choice questions."""

import logging
import re
from typing import Optional

from ..records import Question, QuestionSource

logger = logging.getLogger("quizforge.content")

CHOICES_REQUIRED = 4

SUPERSCRIPTS = str.maketrans("0123456789-", "⁰¹²³⁴⁵⁶⁷⁸⁹⁻")

LATEX_SYMBOLS = {
    r"\times": "×",
    r"\cdot": "·",
    r"\div": "÷",
    r"\pm": "±",
}

EXPONENT_RE = re.compile(r"(?<=[\w)])(?:\^\{(-?\d+)\}|\^(-?\d+)|\*\*(-?\d+))")
EMPHASIS_RE = re.compile(r"\*\*|__|~~|`")
ESCAPED_BRACKET_RE = re.compile(r"\\[()\[\]]")
SPACES_RE = re.compile(r"[ \t\u00a0]+")

QUESTION_LABEL_RE = re.compile(r"^(?:(?i:question)|Q)\s*\d*\s*[:.)]\s*(.*)$")
CHOICE_RE = re.compile(r"^(?:[-•*]\s*)?(?:(?i:option)\s+)?[(\[]?([A-D])\s*[)\].:]\s*(.*)$")
ANSWER_LABEL_RE = re.compile(r"^(?i:correct\s+answer|answer)\b")
ANSWER_RE = re.compile(
    r"^(?i:correct\s+answer|answer)\s*(?:(?i:is)\s*)?[:\-]?\s*[(\[]?([A-D])(?!\w)"
)
LOOSE_ANSWER_RE = re.compile(r"(?i:correct)[^\n]*?\b([A-D])\)")
SECTION_LABEL_RE = re.compile(r"^(?i:explanation|solution|reasoning|work)\s*:")
META_LINE_RE = re.compile(r"^(?i:topic|difficulty|note|hint)\s*:")

EXPLANATION_CUES_RE = re.compile(
    r"^(?:is\s+)?(?:the\s+)?(?:correct|incorrect|wrong)(?:\s+(?:answer|because|since)\b|[.!,:])"
    r"|^because\b.*\b(?:correct|answer)\b"
    r"|^(?:this|that)\s+is\s+(?:correct|incorrect|wrong|the)\b|^explanation\b",
    re.IGNORECASE,
)
CHOICE_DECORATION_RE = re.compile(
    r"\s*(?:[✓✔✅]|\((?:correct|right answer)\)|<-+\s*correct)\s*$",
    re.IGNORECASE,
)


def _superscript(match: re.Match) -> str:
    digits = next(group for group in match.groups() if group is not None)
    return digits.translate(SUPERSCRIPTS)


def normalize_text(raw: str) -> str:
    """Strip decoration and escapes, convert exponents and collapse whitespace.

    Line structure is kept since the choice grammar is line-based.
    """
    text = raw.replace("\r\n", "\n").replace("\r", "\n")
    for latex, symbol in LATEX_SYMBOLS.items():
        text = text.replace(latex, symbol)
    text = ESCAPED_BRACKET_RE.sub("", text)
    # Exponents before emphasis: "x**2" must not lose its marker first
    text = EXPONENT_RE.sub(_superscript, text)
    text = EMPHASIS_RE.sub("", text)

    lines = [SPACES_RE.sub(" ", line).strip() for line in text.split("\n")]
    return "\n".join(lines).strip()


def _clean_choice(text: str) -> str:
    text = CHOICE_DECORATION_RE.sub("", text.strip())
    return text.strip(" *_~").strip()


class ContentExtractor:
    """Extract a stem, four lettered options and the declared answer from raw text."""

    def extract(self, raw_text: Optional[str], subject: str, difficulty: float) -> Optional[Question]:
        """Return an `ai`-sourced candidate, or None on any hard failure."""
        if not raw_text or not raw_text.strip():
            logger.warning("Extraction failed: empty completion")
            return None

        lines = normalize_text(raw_text).split("\n")

        choices = self._extract_choices(lines)
        if len(choices) < CHOICES_REQUIRED:
            logger.warning("Extraction failed: found %d choices, need %d", len(choices), CHOICES_REQUIRED)
            return None
        if len(choices) > CHOICES_REQUIRED:
            logger.info("Found %d choices, keeping the first %d", len(choices), CHOICES_REQUIRED)
            choices = choices[:CHOICES_REQUIRED]

        stem = self._extract_stem(lines)
        if not stem:
            logger.warning("Extraction failed: no question stem")
            return None

        letter = self._extract_correct_letter(lines)
        by_letter = {}
        for choice_letter, text in choices:
            by_letter.setdefault(choice_letter, text)
        if letter is None or letter not in by_letter:
            logger.warning("Extraction failed: correct letter %r not among choices %s", letter, sorted(by_letter))
            return None

        return Question(
            text=stem,
            options=tuple(text for _, text in choices),
            correct_answer=by_letter[letter],
            difficulty=difficulty,
            subject=subject,
            source=QuestionSource.AI,
        )

    def _extract_choices(self, lines: list[str]) -> list[tuple[str, str]]:
        choices = []
        for line in lines:
            if choices and (ANSWER_LABEL_RE.match(line) or SECTION_LABEL_RE.match(line)):
                break
            match = CHOICE_RE.match(line)
            if not match:
                continue
            text = _clean_choice(match.group(2))
            if not text or EXPLANATION_CUES_RE.search(text):
                continue
            choices.append((match.group(1), text))
        return choices

    def _extract_stem(self, lines: list[str]) -> str:
        first_choice = next(
            (i for i, line in enumerate(lines) if CHOICE_RE.match(line)),
            len(lines),
        )

        for i, line in enumerate(lines[:first_choice]):
            match = QUESTION_LABEL_RE.match(line)
            if match:
                parts = [match.group(1)] + [
                    l for l in lines[i + 1:first_choice] if l and not META_LINE_RE.match(l)
                ]
                return " ".join(p for p in parts if p).strip()

        # No label: the last paragraph before the choices
        block: list[str] = []
        for line in reversed(lines[:first_choice]):
            if not line:
                if block:
                    break
                continue
            if META_LINE_RE.match(line):
                continue
            block.insert(0, line)
        return " ".join(block).strip()

    def _extract_correct_letter(self, lines: list[str]) -> Optional[str]:
        for line in lines:
            match = ANSWER_RE.match(line)
            if match:
                return match.group(1)
        match = LOOSE_ANSWER_RE.search("\n".join(lines))
        return match.group(1) if match else None
