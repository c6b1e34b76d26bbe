"""Remove positional bias from AI-sourced questions."""

import random
from typing import Optional

from ..records import Question, QuestionSource


class ChoiceShuffler:
    """Permute options uniformly; correctness travels by value, never by index."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def shuffle(self, question: Question) -> Question:
        # Fallback output is shuffled by its generator
        if question.source is QuestionSource.FALLBACK:
            return question
        options = list(question.options)
        self.rng.shuffle(options)
        return question.with_options(options)
