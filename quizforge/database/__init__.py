"""Database models, connection management and the quiz store."""

from .db import init_db, get_engine, get_session_factory
from .models import (
    Base,
    QuestionRow,
    TopicRow,
    TopicPrerequisiteRow,
    MasteryRow,
    AnswerRow,
)
from .store import QuizStore, PersistenceError, QuestionNotFoundError

__all__ = [
    "init_db",
    "get_engine",
    "get_session_factory",
    "Base",
    "QuestionRow",
    "TopicRow",
    "TopicPrerequisiteRow",
    "MasteryRow",
    "AnswerRow",
    "QuizStore",
    "PersistenceError",
    "QuestionNotFoundError",
]
