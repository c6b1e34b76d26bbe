"""Per-interaction reward and the next difficulty level.

Stateless: nothing is remembered between calls. Out-of-range inputs are
clamped (or defaulted when missing) so noisy client data never breaks the
adaptive loop.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from ..config import (
    DEFAULT_CONFIDENCE,
    EFFICIENCY_WEIGHT,
    KNOWLEDGE_WEIGHT,
    MAX_DIFFICULTY,
    METACOGNITION_WEIGHT,
    MIN_DIFFICULTY,
)

logger = logging.getLogger("quizforge.adaptive")


@dataclass(frozen=True)
class RewardConfig:
    knowledge_weight: float = KNOWLEDGE_WEIGHT
    efficiency_weight: float = EFFICIENCY_WEIGHT
    metacognition_weight: float = METACOGNITION_WEIGHT
    default_confidence: float = DEFAULT_CONFIDENCE

    # Knowledge term
    incorrect_penalty: float = -0.2
    streak_threshold: int = 2       # Bonus applies when streak exceeds this
    streak_step: float = 0.05
    streak_cap: float = 0.2

    # Efficiency term
    efficiency_window: float = 60.0  # Seconds; slower answers earn nothing
    base_time: float = 15.0
    time_per_level: float = 4.0
    efficiency_scale: float = 0.3

    # Metacognition term
    calibrated_high: float = 0.7     # Correct answers need confidence above this
    calibrated_low: float = 0.4      # Wrong answers need confidence below this
    calibrated_reward: float = 0.3
    miscalibrated_penalty: float = -0.1

    # Difficulty step
    correct_step: float = 0.5
    confident_correct_step: float = 0.7
    unsure_correct_step: float = 0.3
    incorrect_step: float = -0.3
    overconfident_incorrect_step: float = -0.5
    confident_threshold: float = 0.8
    reward_influence: float = 0.2


@dataclass(frozen=True)
class RewardBreakdown:
    knowledge: float
    efficiency: float
    metacognition: float
    total: float


@dataclass(frozen=True)
class RewardResult:
    reward: float
    new_difficulty: float
    breakdown: RewardBreakdown
    calibrated: bool

    @property
    def calibration(self) -> str:
        return "good" if self.calibrated else "needs_work"


def clamp_input(value, low: float, high: float, default: float) -> float:
    """Clamp a caller-supplied number; missing or unparseable values take `default`."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(value):
        return default
    return max(low, min(high, value))


def round_to_tenth(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


class DifficultyRewardEngine:
    """Multi-objective reward: knowledge, efficiency and confidence calibration."""

    def __init__(self, config: Optional[RewardConfig] = None):
        self.config = config or RewardConfig()

    def evaluate(
        self,
        is_correct: bool,
        confidence: Optional[float],
        time_spent: Optional[float],
        current_difficulty: float,
        streak: int = 0,
    ) -> RewardResult:
        confidence = clamp_input(confidence, 0.0, 1.0, self.config.default_confidence)
        time_spent = clamp_input(time_spent, 0.0, math.inf, 0.0)
        current_difficulty = clamp_input(current_difficulty, MIN_DIFFICULTY, MAX_DIFFICULTY, MIN_DIFFICULTY)
        streak = int(clamp_input(streak, 0, 10**6, 0))

        breakdown = self.calculate_reward(is_correct, confidence, time_spent, current_difficulty, streak)
        reward = max(-1.0, min(1.0, breakdown.total))
        new_difficulty = self.calculate_new_difficulty(current_difficulty, reward, is_correct, confidence)

        logger.debug(
            "Reward %.3f (k=%.3f e=%.3f m=%.3f), difficulty %.1f -> %.1f",
            reward, breakdown.knowledge, breakdown.efficiency, breakdown.metacognition,
            current_difficulty, new_difficulty,
        )
        return RewardResult(
            reward=reward,
            new_difficulty=new_difficulty,
            breakdown=breakdown,
            calibrated=self.is_calibrated(is_correct, confidence),
        )

    def calculate_reward(
        self,
        is_correct: bool,
        confidence: float,
        time_spent: float,
        difficulty: float,
        streak: int,
    ) -> RewardBreakdown:
        cfg = self.config

        if is_correct:
            knowledge = 0.5 + 0.5 * (difficulty / 10)
            if streak > cfg.streak_threshold:
                knowledge += min(cfg.streak_cap, cfg.streak_step * streak)
        else:
            knowledge = cfg.incorrect_penalty

        efficiency = 0.0
        if is_correct and time_spent < cfg.efficiency_window:
            optimal_time = cfg.base_time + cfg.time_per_level * difficulty
            ratio = time_spent / optimal_time
            efficiency = max(0.0, cfg.efficiency_scale * (1 - abs(1 - ratio)))

        if self.is_calibrated(is_correct, confidence):
            metacognition = cfg.calibrated_reward
        else:
            metacognition = cfg.miscalibrated_penalty

        total = (
            cfg.knowledge_weight * knowledge
            + cfg.efficiency_weight * efficiency
            + cfg.metacognition_weight * metacognition
        )
        return RewardBreakdown(knowledge, efficiency, metacognition, total)

    def is_calibrated(self, is_correct: bool, confidence: float) -> bool:
        cfg = self.config
        return (is_correct and confidence > cfg.calibrated_high) or (
            not is_correct and confidence < cfg.calibrated_low
        )

    def calculate_new_difficulty(
        self,
        current_difficulty: float,
        reward: float,
        is_correct: bool,
        confidence: float,
    ) -> float:
        cfg = self.config
        if is_correct:
            step = cfg.correct_step
            if confidence > cfg.confident_threshold:
                step = cfg.confident_correct_step
            elif confidence < cfg.calibrated_low:
                # Correct but unsure: possibly a guess
                step = cfg.unsure_correct_step
        else:
            step = cfg.incorrect_step
            if confidence > cfg.calibrated_high:
                step = cfg.overconfident_incorrect_step

        step += reward * cfg.reward_influence
        new_difficulty = max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, current_difficulty + step))
        return round_to_tenth(new_difficulty)
