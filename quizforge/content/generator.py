"""Completion-driven question generation with verified fallback."""

import logging
import random
from typing import Optional

from ..config import ANTHROPIC_API_KEY, DEFAULT_USER_LEVEL, MAX_DIFFICULTY, MIN_DIFFICULTY
from ..database import QuizStore
from ..records import Question, SourceEvent
from .completion import CompletionClient, CompletionError
from .extractor import ContentExtractor
from .fallback import FallbackGenerator
from .math_verifier import MathVerifier
from .prompts import build_question_prompt
from .shuffler import ChoiceShuffler
from .validator import validate_question

logger = logging.getLogger("quizforge.content")


class ContentGenerator:
    """Generate quiz questions from the completion endpoint.

    Pipeline: raw text -> extract -> validate -> (math) verify -> shuffle.
    Any rejection along the way substitutes a fallback question, so
    `build_question` always returns something valid.
    """

    def __init__(
        self,
        store: Optional[QuizStore] = None,
        completion: Optional[CompletionClient] = None,
        rng: Optional[random.Random] = None,
        extractor: Optional[ContentExtractor] = None,
        verifier: Optional[MathVerifier] = None,
        fallback: Optional[FallbackGenerator] = None,
        shuffler: Optional[ChoiceShuffler] = None,
    ):
        self.rng = rng or random.Random()
        self.store = store
        if completion is None and ANTHROPIC_API_KEY:
            completion = CompletionClient()
        self.completion = completion
        self.extractor = extractor or ContentExtractor()
        self.verifier = verifier or MathVerifier()
        self.fallback = fallback or FallbackGenerator(rng=self.rng)
        self.shuffler = shuffler or ChoiceShuffler(rng=self.rng)

    def request_completion(self, subject: str, difficulty: float, user_level: str = DEFAULT_USER_LEVEL) -> Optional[str]:
        """Ask the endpoint for a question; None stands for any failure."""
        if self.completion is None:
            logger.info("No completion client configured, skipping AI generation")
            return None

        prompt = build_question_prompt(subject, difficulty, user_level, self.rng)
        try:
            return self.completion.complete(prompt)
        except CompletionError as e:
            logger.warning("Completion failed for %s at %.1f: %s", subject, difficulty, e)
            return None

    def build_question(self, raw_text: Optional[str], subject: str, difficulty: float) -> Question:
        """Run the side-effect-free pipeline over one completion."""
        difficulty = max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, float(difficulty)))

        candidate = self.extractor.extract(raw_text, subject, difficulty)
        issues = validate_question(candidate)
        if issues:
            logger.warning("Rejected %s candidate: %s", subject, "; ".join(issues))
            return self._fallback(subject, difficulty)

        if subject == "math":
            candidate = self.verifier.verify(candidate, difficulty)
            if candidate is None:
                return self._fallback(subject, difficulty)
            issues = validate_question(candidate)
            if issues:
                logger.warning("Corrected candidate failed validation: %s", "; ".join(issues))
                return self._fallback(subject, difficulty)
        else:
            candidate = candidate.with_source(SourceEvent.VERIFIED)

        return self.shuffler.shuffle(candidate)

    def generate_question(
        self,
        subject: str,
        difficulty: float,
        user_level: str = DEFAULT_USER_LEVEL,
    ) -> Question:
        """Generate, verify and persist one question.

        Raises:
            PersistenceError: If the store cannot save the question.
        """
        raw_text = self.request_completion(subject, difficulty, user_level)
        question = self.build_question(raw_text, subject, difficulty)

        store = self.store or QuizStore()
        store.put_question(question)
        logger.info(
            "Generated %s question %s (source=%s, difficulty=%.1f)",
            subject, question.id, question.source.value, question.difficulty,
        )
        return question

    def _fallback(self, subject: str, difficulty: float) -> Question:
        return self.fallback.generate(subject, difficulty)
