"""Domain records shared by the content pipeline, the adaptive engine and the store."""

import enum
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional


class QuestionSource(str, enum.Enum):
    """Provenance of a question."""

    AI = "ai"
    AI_CORRECTED = "ai-corrected"
    FALLBACK = "fallback"


class SourceEvent(enum.Enum):
    """Pipeline outcomes that move a question between sources."""

    VERIFIED = "verified"
    CORRECTED = "corrected"
    REJECTED = "rejected"


_SOURCE_TRANSITIONS = {
    (QuestionSource.AI, SourceEvent.VERIFIED): QuestionSource.AI,
    (QuestionSource.AI, SourceEvent.CORRECTED): QuestionSource.AI_CORRECTED,
    (QuestionSource.AI_CORRECTED, SourceEvent.VERIFIED): QuestionSource.AI_CORRECTED,
    (QuestionSource.AI_CORRECTED, SourceEvent.CORRECTED): QuestionSource.AI_CORRECTED,
}


def next_source(source: QuestionSource, event: SourceEvent) -> QuestionSource:
    """Return the source a question moves to after a pipeline event.

    Total over every (source, event) pair: rejection always lands on
    FALLBACK and FALLBACK is absorbing.
    """
    if event is SourceEvent.REJECTED or source is QuestionSource.FALLBACK:
        return QuestionSource.FALLBACK
    return _SOURCE_TRANSITIONS[(source, event)]


def new_question_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Question:
    """A multiple-choice item. `correct_answer` always refers to an option by value."""

    text: str
    options: tuple[str, ...]
    correct_answer: str
    difficulty: float
    subject: str
    source: QuestionSource = QuestionSource.AI
    topic_id: Optional[str] = None
    id: str = field(default_factory=new_question_id)

    def with_options(self, options, correct_answer: Optional[str] = None) -> "Question":
        return replace(
            self,
            options=tuple(options),
            correct_answer=self.correct_answer if correct_answer is None else correct_answer,
        )

    def with_source(self, event: SourceEvent) -> "Question":
        return replace(self, source=next_source(self.source, event))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "options": list(self.options),
            "correct_answer": self.correct_answer,
            "difficulty": self.difficulty,
            "subject": self.subject,
            "source": self.source.value,
            "topic_id": self.topic_id,
        }


@dataclass(frozen=True)
class Topic:
    """A catalog topic. `difficulty_level` is on the 0-1 scale."""

    id: str
    slug: str
    subject: str
    name: str
    difficulty_level: float
    prerequisites: frozenset = frozenset()
    description: str = ""
    ephemeral: bool = False


@dataclass(frozen=True)
class MasteryRecord:
    """Running accuracy of one user on one topic."""

    user_id: str
    topic_id: str
    attempted: int = 0
    correct: int = 0
    mastery_level: float = 0.0
    consecutive_correct: int = 0
    confidence: float = 0.0
    last_practiced: Optional[datetime] = None


@dataclass(frozen=True)
class AnswerEvent:
    """One scored answer, as written to the answer log."""

    user_id: str
    question_id: str
    user_answer: str
    is_correct: bool
    confidence: float
    time_spent: float
    difficulty_before: float
    difficulty_after: float
    reward: float
    session_id: Optional[str] = None
    topic_id: Optional[str] = None
    answered_at: Optional[datetime] = None
