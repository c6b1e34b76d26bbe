"""Persistence collaborator: get/put by id plus subject-scoped catalog queries.

Every public method opens its own short transaction. Any SQLAlchemy failure
is re-raised as `PersistenceError`; nothing here retries except the mastery
read-modify-write, which retries when a concurrent writer got to the same
(user, topic) row first.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from ..config import MASTERY_WRITE_RETRIES
from ..records import AnswerEvent, MasteryRecord, Question, QuestionSource, Topic
from .db import get_session_factory
from .models import AnswerRow, MasteryRow, QuestionRow, TopicPrerequisiteRow, TopicRow

logger = logging.getLogger("quizforge.database")


class PersistenceError(Exception):
    """Raised when the store is unreachable or a read/write fails."""
    pass


class QuestionNotFoundError(LookupError):
    """Raised when a question id is not in the store."""
    pass


def _question_from_row(row: QuestionRow) -> Question:
    return Question(
        id=row.id,
        text=row.text,
        options=tuple(row.options),
        correct_answer=row.correct_answer,
        difficulty=row.difficulty,
        subject=row.subject,
        source=QuestionSource(row.source),
        topic_id=row.topic_id,
    )


def _topic_from_row(row: TopicRow) -> Topic:
    return Topic(
        id=row.id,
        slug=row.slug,
        subject=row.subject,
        name=row.name,
        difficulty_level=row.difficulty_level,
        prerequisites=frozenset(p.prerequisite_id for p in row.prerequisites),
        description=row.description or "",
    )


def _mastery_from_row(row: MasteryRow) -> MasteryRecord:
    return MasteryRecord(
        user_id=row.user_id,
        topic_id=row.topic_id,
        attempted=row.questions_attempted,
        correct=row.questions_correct,
        mastery_level=row.mastery_level,
        consecutive_correct=row.consecutive_correct,
        confidence=row.confidence_level,
        last_practiced=row.last_practiced,
    )


def _answer_from_row(row: AnswerRow) -> AnswerEvent:
    return AnswerEvent(
        session_id=row.session_id,
        user_id=row.user_id,
        question_id=row.question_id,
        topic_id=row.topic_id,
        user_answer=row.user_answer,
        is_correct=row.is_correct,
        confidence=row.confidence,
        time_spent=row.time_spent,
        difficulty_before=row.difficulty_before,
        difficulty_after=row.difficulty_after,
        reward=row.reward,
        answered_at=row.answered_at,
    )


class QuizStore:
    """SQLAlchemy-backed store for questions, topics, mastery and answers."""

    def __init__(self, session_factory: Optional[sessionmaker] = None, write_retries: int = MASTERY_WRITE_RETRIES):
        self._session_factory = session_factory or get_session_factory()
        self.write_retries = max(1, write_retries)

    @contextmanager
    def _session(self, action: str):
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Store failure during %s: %s", action, e)
            raise PersistenceError(f"{action} failed: {e}") from e
        finally:
            session.close()

    # --- Questions ---

    def put_question(self, question: Question) -> Question:
        with self._session("put_question") as session:
            session.add(QuestionRow(
                id=question.id,
                text=question.text,
                options=list(question.options),
                correct_answer=question.correct_answer,
                difficulty=question.difficulty,
                subject=question.subject,
                source=question.source.value,
                topic_id=question.topic_id,
            ))
            session.commit()
        logger.debug("Stored question %s (%s)", question.id, question.source.value)
        return question

    def get_question(self, question_id: str) -> Optional[Question]:
        with self._session("get_question") as session:
            row = session.get(QuestionRow, question_id)
            return _question_from_row(row) if row else None

    def set_question_topic(self, question_id: str, topic_id: str) -> bool:
        """Fill `topic_id` once. Returns False if it was already set."""
        with self._session("set_question_topic") as session:
            result = session.execute(
                update(QuestionRow)
                .where(QuestionRow.id == question_id, QuestionRow.topic_id.is_(None))
                .values(topic_id=topic_id)
            )
            session.commit()
            return result.rowcount == 1

    # --- Topic catalog ---

    def put_topics(self, topics: Iterable[Topic]) -> int:
        """Upsert catalog topics and their prerequisite edges."""
        topics = list(topics)
        with self._session("put_topics") as session:
            rows = {}
            for topic in topics:
                row = session.get(TopicRow, topic.id)
                if row is None:
                    row = TopicRow(id=topic.id)
                    session.add(row)
                row.slug = topic.slug
                row.subject = topic.subject
                row.name = topic.name
                row.description = topic.description
                row.difficulty_level = topic.difficulty_level
                rows[topic.id] = row
            session.flush()

            for topic in topics:
                row = rows[topic.id]
                existing = {p.prerequisite_id: p for p in row.prerequisites}
                for prerequisite_id, edge in existing.items():
                    if prerequisite_id not in topic.prerequisites:
                        row.prerequisites.remove(edge)
                for prerequisite_id in sorted(set(topic.prerequisites) - set(existing)):
                    row.prerequisites.append(
                        TopicPrerequisiteRow(topic_id=topic.id, prerequisite_id=prerequisite_id)
                    )
            session.commit()
        return len(topics)

    def get_topic(self, topic_id: str) -> Optional[Topic]:
        with self._session("get_topic") as session:
            row = session.get(TopicRow, topic_id)
            return _topic_from_row(row) if row else None

    def topics_for_subject(self, subject: str) -> list[Topic]:
        with self._session("topics_for_subject") as session:
            rows = session.scalars(
                select(TopicRow).where(TopicRow.subject == subject).order_by(TopicRow.slug)
            ).all()
            return [_topic_from_row(r) for r in rows]

    def all_topics(self) -> list[Topic]:
        with self._session("all_topics") as session:
            rows = session.scalars(select(TopicRow).order_by(TopicRow.slug)).all()
            return [_topic_from_row(r) for r in rows]

    # --- Mastery ---

    def get_mastery(self, user_id: str, topic_id: str) -> Optional[MasteryRecord]:
        with self._session("get_mastery") as session:
            row = session.scalar(
                select(MasteryRow).where(MasteryRow.user_id == user_id, MasteryRow.topic_id == topic_id)
            )
            return _mastery_from_row(row) if row else None

    def mastery_for_user(self, user_id: str) -> dict[str, MasteryRecord]:
        with self._session("mastery_for_user") as session:
            rows = session.scalars(select(MasteryRow).where(MasteryRow.user_id == user_id)).all()
            return {r.topic_id: _mastery_from_row(r) for r in rows}

    def update_mastery(
        self,
        user_id: str,
        topic_id: str,
        apply: Callable[[MasteryRecord], MasteryRecord],
    ) -> MasteryRecord:
        """Read-modify-write one (user, topic) record inside a single transaction.

        `apply` receives the current record (all-zero when none exists yet) and
        returns the replacement. The write is a compare-and-swap on the row's
        version column, so an update that read a stale record fails and the
        whole read-modify-write is retried. A racing first insert is retried
        the same way through the unique (user, topic) constraint.
        """
        for attempt in range(1, self.write_retries + 1):
            try:
                with self._session("update_mastery") as session:
                    row = session.scalar(
                        select(MasteryRow)
                        .where(MasteryRow.user_id == user_id, MasteryRow.topic_id == topic_id)
                    )
                    if row is None:
                        row = MasteryRow(
                            user_id=user_id,
                            topic_id=topic_id,
                            questions_attempted=0,
                            questions_correct=0,
                            mastery_level=0.0,
                            consecutive_correct=0,
                            confidence_level=0.0,
                        )
                        session.add(row)

                    updated = apply(_mastery_from_row(row))
                    row.questions_attempted = updated.attempted
                    row.questions_correct = updated.correct
                    row.mastery_level = updated.mastery_level
                    row.consecutive_correct = updated.consecutive_correct
                    row.confidence_level = updated.confidence
                    row.last_practiced = updated.last_practiced
                    session.commit()
                    return updated
            except PersistenceError as e:
                if isinstance(e.__cause__, (IntegrityError, StaleDataError)) and attempt < self.write_retries:
                    logger.warning(
                        "Concurrent mastery write for user %s topic %s (attempt %d/%d), retrying",
                        user_id, topic_id, attempt, self.write_retries,
                    )
                    continue
                raise
        raise PersistenceError("update_mastery exhausted retries")

    # --- Answer log ---

    def put_answer(self, answer: AnswerEvent) -> None:
        with self._session("put_answer") as session:
            session.add(AnswerRow(
                session_id=answer.session_id,
                user_id=answer.user_id,
                question_id=answer.question_id,
                topic_id=answer.topic_id,
                user_answer=answer.user_answer,
                is_correct=answer.is_correct,
                confidence=answer.confidence,
                time_spent=answer.time_spent,
                difficulty_before=answer.difficulty_before,
                difficulty_after=answer.difficulty_after,
                reward=answer.reward,
            ))
            session.commit()

    def answers_for_session(self, session_id: str) -> list[AnswerEvent]:
        with self._session("answers_for_session") as session:
            rows = session.scalars(
                select(AnswerRow).where(AnswerRow.session_id == session_id).order_by(AnswerRow.id)
            ).all()
            return [_answer_from_row(r) for r in rows]
