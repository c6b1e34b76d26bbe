"""Per-user, per-topic mastery and next-topic recommendations."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..config import MASTERY_THRESHOLD, RECOMMENDATION_LIMIT
from ..content.catalog import TopicCatalog
from ..database import QuizStore
from ..records import MasteryRecord, Topic

logger = logging.getLogger("quizforge.adaptive")


def observe(record: MasteryRecord, is_correct: bool, confidence: float, now: datetime) -> MasteryRecord:
    """Fold one answer into a mastery record.

    `mastery_level` is the exact running ratio correct/attempted. The first
    observation is the same fold applied to an all-zero record.
    """
    attempted = record.attempted + 1
    correct = record.correct + (1 if is_correct else 0)
    return replace(
        record,
        attempted=attempted,
        correct=correct,
        mastery_level=correct / attempted,
        consecutive_correct=record.consecutive_correct + 1 if is_correct else 0,
        confidence=max(0.0, min(1.0, float(confidence))),
        last_practiced=now,
    )


@dataclass(frozen=True)
class Recommendation:
    topic: Topic
    mastery_level: float

    def to_dict(self) -> dict:
        return {
            "topic_id": self.topic.id,
            "slug": self.topic.slug,
            "name": self.topic.name,
            "difficulty_level": self.topic.difficulty_level,
            "mastery_level": self.mastery_level,
        }


@dataclass(frozen=True)
class TopicProgress:
    topic: Topic
    mastery_level: float
    attempted: int
    correct: int


@dataclass(frozen=True)
class SubjectProgress:
    subject: str
    topics: list[TopicProgress]
    mastered: int
    total: int

    @property
    def progress_percent(self) -> int:
        if not self.total:
            return 0
        return round(100 * self.mastered / self.total)


class MasteryTracker:
    """Maintain running accuracy per (user, topic) and recommend what to study next."""

    def __init__(self, store: QuizStore, catalog: TopicCatalog, threshold: float = MASTERY_THRESHOLD):
        self.store = store
        self.catalog = catalog
        self.threshold = threshold

    def record_answer(
        self,
        user_id: str,
        topic_id: str,
        is_correct: bool,
        confidence: float,
        now: Optional[datetime] = None,
    ) -> MasteryRecord:
        """Apply one answer to the stored record in a single transaction.

        Raises:
            PersistenceError: If the store cannot be read or written.
        """
        now = now or datetime.now()
        updated = self.store.update_mastery(
            user_id, topic_id, lambda record: observe(record, is_correct, confidence, now)
        )
        logger.info(
            "Mastery for user %s on %s: %d/%d (%.2f), streak %d",
            user_id, topic_id, updated.correct, updated.attempted,
            updated.mastery_level, updated.consecutive_correct,
        )
        return updated

    def is_available(self, topic: Topic, mastery: dict[str, MasteryRecord]) -> bool:
        """True when every prerequisite is mastered (or there are none)."""
        for prerequisite_id in topic.prerequisites:
            record = mastery.get(prerequisite_id)
            if record is None or record.mastery_level < self.threshold:
                return False
        return True

    def recommend(self, user_id: str, subject: str, limit: int = RECOMMENDATION_LIMIT) -> list[Recommendation]:
        """Available, not-yet-mastered topics, easiest first.

        Ties on difficulty go to the topic the user is closest to mastering,
        then to the slug.
        """
        if limit <= 0:
            return []

        mastery = self.store.mastery_for_user(user_id)
        recommendations = []
        for topic in self.catalog.for_subject(subject):
            record = mastery.get(topic.id)
            level = record.mastery_level if record else 0.0
            if level >= self.threshold or not self.is_available(topic, mastery):
                continue
            recommendations.append(Recommendation(topic, level))

        recommendations.sort(key=lambda r: (r.topic.difficulty_level, -r.mastery_level, r.topic.slug))
        return recommendations[:limit]

    def subject_progress(self, user_id: str, subject: str) -> SubjectProgress:
        mastery = self.store.mastery_for_user(user_id)
        topics = []
        for topic in self.catalog.for_subject(subject):
            record = mastery.get(topic.id)
            topics.append(TopicProgress(
                topic=topic,
                mastery_level=record.mastery_level if record else 0.0,
                attempted=record.attempted if record else 0,
                correct=record.correct if record else 0,
            ))

        mastered = sum(1 for t in topics if t.mastery_level >= self.threshold)
        return SubjectProgress(subject=subject, topics=topics, mastered=mastered, total=len(topics))

    def prerequisites_of(self, topic_id: str) -> list[Topic]:
        topic = self.catalog.by_id(topic_id)
        if topic is None:
            return []
        prerequisites = [self.catalog.by_id(p) for p in topic.prerequisites]
        return sorted(
            (p for p in prerequisites if p is not None),
            key=lambda t: (t.difficulty_level, t.slug),
        )
