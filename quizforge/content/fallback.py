"""Deterministic-shape fallback questions that are correct by construction.

Math questions are built from a difficulty tier; each tier has its own
generator and the tier table decides which one runs. Other subjects draw
from a curated bank. The random source is injected so tests can fix it.
"""

import enum
import logging
import random
from dataclasses import dataclass
from typing import Optional

from ..config import LINEAR_MAX_ATTEMPTS, MAX_DIFFICULTY, MIN_DIFFICULTY
from ..records import Question, QuestionSource
from .prompts import clamp_level

logger = logging.getLogger("quizforge.content")


class MathTier(enum.Enum):
    SINGLE_DIGIT = "single_digit"
    MULTIPLICATION = "multiplication"
    PERCENT = "percent"
    LINEAR = "linear"


# (highest whole difficulty level, tier)
TIER_TABLE = (
    (2, MathTier.SINGLE_DIGIT),
    (4, MathTier.MULTIPLICATION),
    (6, MathTier.PERCENT),
    (10, MathTier.LINEAR),
)

PERCENTAGES = (10, 20, 25, 50, 75)
PERCENT_BASES = (20, 40, 60, 80, 100, 120, 160, 200)

LINEAR_COEFFICIENTS = (2, 3, 4, 5, 6)
LINEAR_OFFSETS = (1, 2, 3, 4, 5, 6, 7, 8, 9)
LINEAR_RESULTS = (13, 15, 17, 19, 21, 23, 25, 27, 29, 31, 33, 35)

QUESTION_BANK = {
    "science": [
        ("What is the chemical symbol for water?", ["H2O", "CO2", "NaCl", "O2"], "H2O"),
        ("How many planets are in our solar system?", ["8", "9", "7", "10"], "8"),
        ("What gas do plants need for photosynthesis?", ["Carbon dioxide", "Oxygen", "Nitrogen", "Hydrogen"], "Carbon dioxide"),
        ("Which part of the cell contains its genetic material?", ["Nucleus", "Cell membrane", "Cytoplasm", "Ribosome"], "Nucleus"),
        ("What force pulls objects toward the Earth?", ["Gravity", "Friction", "Magnetism", "Tension"], "Gravity"),
    ],
    "history": [
        ("In which year did World War II end?", ["1945", "1944", "1946", "1943"], "1945"),
        ("Who was the first U.S. President?", ["George Washington", "John Adams", "Thomas Jefferson", "Benjamin Franklin"], "George Washington"),
        ("In which year did the Titanic sink?", ["1912", "1911", "1913", "1910"], "1912"),
        ("Which civilization built the pyramids of Giza?", ["Ancient Egyptians", "Romans", "Mayans", "Greeks"], "Ancient Egyptians"),
        ("In which year did the Berlin Wall fall?", ["1989", "1991", "1985", "1961"], "1989"),
    ],
    "english": [
        ("What is a synonym for 'happy'?", ["Joyful", "Sad", "Angry", "Tired"], "Joyful"),
        ("Which word is a noun?", ["Cat", "Run", "Quickly", "Beautiful"], "Cat"),
        ("What is the opposite of 'hot'?", ["Cold", "Warm", "Cool", "Freezing"], "Cold"),
        ("Which punctuation mark ends a question?", ["Question mark", "Comma", "Period", "Semicolon"], "Question mark"),
        ("Which sentence uses a simile?", ["She ran like the wind.", "She ran fast.", "The wind ran.", "She is the wind."], "She ran like the wind."),
    ],
}
DEFAULT_BANK = "science"


@dataclass(frozen=True)
class MathProblem:
    text: str
    answer: int
    variance: int


def tier_for(difficulty: float) -> MathTier:
    level = clamp_level(difficulty)
    for ceiling, tier in TIER_TABLE:
        if level <= ceiling:
            return tier
    return TIER_TABLE[-1][1]


class FallbackGenerator:
    """Always produce a valid, correct question."""

    def __init__(self, rng: Optional[random.Random] = None, linear_attempts: int = LINEAR_MAX_ATTEMPTS):
        self.rng = rng or random.Random()
        self.linear_attempts = max(1, linear_attempts)
        self._tier_generators = {
            MathTier.SINGLE_DIGIT: self.single_digit_problem,
            MathTier.MULTIPLICATION: self.multiplication_problem,
            MathTier.PERCENT: self.percent_problem,
            MathTier.LINEAR: self.linear_problem,
        }

    def generate(self, subject: str, difficulty: float) -> Question:
        difficulty = max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, float(difficulty)))
        if subject == "math":
            question = self.math_question(tier_for(difficulty), difficulty)
        else:
            question = self.bank_question(subject, difficulty)
        logger.info("Fallback %s question at difficulty %.1f: %s", subject, difficulty, question.text)
        return question

    # --- Math tiers ---

    def math_question(self, tier: MathTier, difficulty: float) -> Question:
        problem = self._tier_generators[tier]()
        options = self.numeric_options(problem.answer, problem.variance)
        return Question(
            text=problem.text,
            options=tuple(str(o) for o in options),
            correct_answer=str(problem.answer),
            difficulty=difficulty,
            subject="math",
            source=QuestionSource.FALLBACK,
        )

    def single_digit_problem(self) -> MathProblem:
        a, b = self.rng.randint(2, 7), self.rng.randint(2, 7)
        return MathProblem(f"What is {a} × {b}?", a * b, self.rng.randint(1, 3))

    def multiplication_problem(self) -> MathProblem:
        a, b = self.rng.randint(2, 9), self.rng.randint(2, 9)
        return MathProblem(f"What is {a} × {b}?", a * b, self.rng.randint(2, 6))

    def percent_problem(self) -> MathProblem:
        while True:
            percentage = self.rng.choice(PERCENTAGES)
            base = self.rng.choice(PERCENT_BASES)
            if (percentage * base) % 100 == 0:
                break
        answer = percentage * base // 100
        return MathProblem(f"What is {percentage}% of {base}?", answer, self.rng.randint(2, 10))

    def linear_problem(self) -> MathProblem:
        for _ in range(self.linear_attempts):
            a = self.rng.choice(LINEAR_COEFFICIENTS)
            b = self.rng.choice(LINEAR_OFFSETS)
            result = self.rng.choice(LINEAR_RESULTS)
            x, remainder = divmod(result - b, a)
            if remainder == 0 and x > 0 and a * x + b == result:
                return MathProblem(f"Solve for x: {a}x + {b} = {result}", x, self.rng.randint(1, 3))
        logger.info("No integral equation in %d draws, using a percent problem", self.linear_attempts)
        return self.percent_problem()

    def numeric_options(self, correct: int, variance: int) -> list[int]:
        """The correct value plus three unique positive distractors, shuffled."""
        variance = max(1, variance)
        options = [correct]
        for candidate in (correct + variance, correct - variance, int(correct * 1.2 + 0.5)):
            if candidate > 0 and candidate not in options:
                options.append(candidate)

        spread = max(3, variance * 2)
        while len(options) < 4:
            candidate = correct + self.rng.choice((-1, 1)) * self.rng.randint(1, spread)
            if candidate > 0 and candidate not in options:
                options.append(candidate)

        options = options[:4]
        self.rng.shuffle(options)
        return options

    # --- Other subjects ---

    def bank_question(self, subject: str, difficulty: float) -> Question:
        bank = QUESTION_BANK.get(subject, QUESTION_BANK[DEFAULT_BANK])
        text, options, correct = self.rng.choice(bank)
        options = list(options)
        self.rng.shuffle(options)
        return Question(
            text=text,
            options=tuple(options),
            correct_answer=correct,
            difficulty=difficulty,
            subject=subject,
            source=QuestionSource.FALLBACK,
        )
