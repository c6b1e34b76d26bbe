"""Score a submitted answer: reward, next difficulty, topic and mastery."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import MAX_DIFFICULTY, MIN_DIFFICULTY
from ..content.catalog import TopicCatalog
from ..database import QuestionNotFoundError, QuizStore
from ..records import AnswerEvent, MasteryRecord, Question
from .mastery import MasteryTracker
from .reward import DifficultyRewardEngine, RewardBreakdown, clamp_input
from .topics import TopicResolver

logger = logging.getLogger("quizforge.adaptive")


@dataclass(frozen=True)
class AnswerOutcome:
    question_id: str
    is_correct: bool
    correct_answer: str
    reward: float
    new_difficulty: float
    breakdown: RewardBreakdown
    calibration: str
    topic_id: str
    mastery: MasteryRecord

    def to_dict(self) -> dict:
        return {
            "question_id": self.question_id,
            "is_correct": self.is_correct,
            "correct_answer": self.correct_answer,
            "reward": round(self.reward, 3),
            "new_difficulty": self.new_difficulty,
            "breakdown": {
                "knowledge": round(self.breakdown.knowledge, 3),
                "efficiency": round(self.breakdown.efficiency, 3),
                "metacognition": round(self.breakdown.metacognition, 3),
            },
            "calibration": self.calibration,
            "topic_id": self.topic_id,
            "mastery_level": self.mastery.mastery_level,
            "consecutive_correct": self.mastery.consecutive_correct,
        }


class AnswerScorer:
    """Wire the reward engine, topic resolver and mastery tracker around the store."""

    def __init__(
        self,
        store: QuizStore,
        catalog: Optional[TopicCatalog] = None,
        engine: Optional[DifficultyRewardEngine] = None,
        resolver: Optional[TopicResolver] = None,
        tracker: Optional[MasteryTracker] = None,
    ):
        self.store = store
        self.catalog = catalog or TopicCatalog.from_store(store)
        self.engine = engine or DifficultyRewardEngine()
        self.resolver = resolver or TopicResolver(self.catalog)
        self.tracker = tracker or MasteryTracker(store, self.catalog)

    def topic_id_for(self, question: Question) -> str:
        """Cached topic id, or resolve and cache it when it names a catalog topic."""
        if question.topic_id:
            return question.topic_id

        topic = self.resolver.resolve(question.subject, question.text, question.difficulty)
        if not topic.ephemeral and self.store.set_question_topic(question.id, topic.id):
            logger.debug("Cached topic %s on question %s", topic.slug, question.id)
        return topic.id

    def submit_answer(
        self,
        user_id: str,
        question_id: str,
        user_answer: str,
        confidence: Optional[float],
        time_spent: Optional[float],
        current_difficulty: float,
        streak: int = 0,
        session_id: Optional[str] = None,
    ) -> AnswerOutcome:
        """Score one answer and record its effects.

        Raises:
            QuestionNotFoundError: If `question_id` is not stored.
            PersistenceError: If the store fails at any step.
        """
        question = self.store.get_question(question_id)
        if question is None:
            raise QuestionNotFoundError(question_id)

        is_correct = user_answer == question.correct_answer
        confidence = clamp_input(confidence, 0.0, 1.0, self.engine.config.default_confidence)
        time_spent = clamp_input(time_spent, 0.0, float("inf"), 0.0)
        current_difficulty = clamp_input(current_difficulty, MIN_DIFFICULTY, MAX_DIFFICULTY, MIN_DIFFICULTY)

        result = self.engine.evaluate(is_correct, confidence, time_spent, current_difficulty, streak)
        topic_id = self.topic_id_for(question)
        mastery = self.tracker.record_answer(user_id, topic_id, is_correct, confidence)

        self.store.put_answer(AnswerEvent(
            session_id=session_id,
            user_id=user_id,
            question_id=question.id,
            topic_id=topic_id,
            user_answer=user_answer,
            is_correct=is_correct,
            confidence=confidence,
            time_spent=time_spent,
            difficulty_before=current_difficulty,
            difficulty_after=result.new_difficulty,
            reward=result.reward,
        ))

        logger.info(
            "User %s answered %s %s (reward %.3f, difficulty -> %.1f)",
            user_id, question.id, "correctly" if is_correct else "incorrectly",
            result.reward, result.new_difficulty,
        )
        return AnswerOutcome(
            question_id=question.id,
            is_correct=is_correct,
            correct_answer=question.correct_answer,
            reward=result.reward,
            new_difficulty=result.new_difficulty,
            breakdown=result.breakdown,
            calibration=result.calibration,
            topic_id=topic_id,
            mastery=mastery,
        )
