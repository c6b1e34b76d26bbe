"""End-of-session statistics over the answer log."""

from dataclasses import dataclass, field
from typing import Iterable

from ..records import AnswerEvent

OVERCONFIDENT_AT = 0.8
UNDERCONFIDENT_AT = 0.4


@dataclass(frozen=True)
class SessionSummary:
    total_questions: int = 0
    correct_answers: int = 0
    accuracy: int = 0
    total_time: float = 0.0
    average_time: float = 0.0
    difficulty_progression: list[float] = field(default_factory=list)
    average_confidence: float = 0.0
    calibration_accuracy: float = 0.0
    overconfidence_rate: float = 0.0
    underconfidence_rate: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_questions": self.total_questions,
            "correct_answers": self.correct_answers,
            "accuracy": self.accuracy,
            "total_time": self.total_time,
            "average_time": self.average_time,
            "difficulty_progression": list(self.difficulty_progression),
            "confidence_analysis": {
                "average_confidence": self.average_confidence,
                "calibration_accuracy": self.calibration_accuracy,
                "overconfidence_rate": self.overconfidence_rate,
                "underconfidence_rate": self.underconfidence_rate,
            },
        }


def summarize_session(answers: Iterable[AnswerEvent]) -> SessionSummary:
    """Summarize answers in the order they were given. Empty input yields zeros."""
    answers = list(answers)
    if not answers:
        return SessionSummary()

    count = len(answers)
    correct = sum(1 for a in answers if a.is_correct)
    total_time = sum(a.time_spent for a in answers)

    calibration_error = sum(abs(a.confidence - (1.0 if a.is_correct else 0.0)) for a in answers)
    overconfident = sum(1 for a in answers if a.confidence >= OVERCONFIDENT_AT and not a.is_correct)
    underconfident = sum(1 for a in answers if a.confidence <= UNDERCONFIDENT_AT and a.is_correct)

    return SessionSummary(
        total_questions=count,
        correct_answers=correct,
        accuracy=round(100 * correct / count),
        total_time=total_time,
        average_time=round(total_time / count, 1),
        difficulty_progression=[a.difficulty_after for a in answers],
        average_confidence=sum(a.confidence for a in answers) / count,
        calibration_accuracy=1 - calibration_error / count,
        overconfidence_rate=overconfident / count,
        underconfidence_rate=underconfident / count,
    )
