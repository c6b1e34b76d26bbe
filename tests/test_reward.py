import itertools

import pytest

from quizforge.adaptive.reward import DifficultyRewardEngine, RewardConfig, round_to_tenth


@pytest.fixture
def engine():
    return DifficultyRewardEngine()


def test_scenario_c(engine):
    result = engine.evaluate(True, 0.9, 20, 5, streak=3)

    assert result.breakdown.knowledge == pytest.approx(0.9)
    ratio = 20 / 35
    assert result.breakdown.efficiency == pytest.approx(0.3 * (1 - abs(1 - ratio)))
    assert result.breakdown.metacognition == pytest.approx(0.3)

    expected = 0.6 * 0.9 + 0.25 * 0.3 * (1 - abs(1 - ratio)) + 0.15 * 0.3
    assert result.reward == pytest.approx(expected)
    assert result.new_difficulty == 5.8
    assert result.calibration == "good"


def test_incorrect_overconfident_steps_down(engine):
    result = engine.evaluate(False, 0.9, 10, 5)
    assert result.breakdown.knowledge == pytest.approx(-0.2)
    assert result.breakdown.efficiency == 0.0
    assert result.breakdown.metacognition == pytest.approx(-0.1)
    # -0.5 + reward * 0.2
    assert result.new_difficulty == round_to_tenth(5 - 0.5 + result.reward * 0.2)
    assert result.calibration == "needs_work"


def test_streak_bonus_needs_more_than_two(engine):
    base = engine.evaluate(True, 0.9, 70, 5, streak=2).breakdown.knowledge
    assert base == pytest.approx(0.75)
    assert engine.evaluate(True, 0.9, 70, 5, streak=3).breakdown.knowledge == pytest.approx(0.9)
    assert engine.evaluate(True, 0.9, 70, 5, streak=50).breakdown.knowledge == pytest.approx(0.95)


def test_slow_answers_earn_no_efficiency(engine):
    assert engine.evaluate(True, 0.9, 60, 5).breakdown.efficiency == 0.0


CONFIDENCES = [0.0, 0.3, 0.5, 0.75, 0.9, 1.0]
TIMES = [0, 5, 35, 59, 120]
DIFFICULTIES = [1, 2.5, 5, 7.3, 10]
STREAKS = [0, 3, 10]


@pytest.mark.parametrize("confidence,time_spent,difficulty", itertools.product(CONFIDENCES, TIMES, DIFFICULTIES))
def test_outputs_stay_in_range(engine, confidence, time_spent, difficulty):
    for is_correct, streak in itertools.product((True, False), STREAKS):
        result = engine.evaluate(is_correct, confidence, time_spent, difficulty, streak)
        assert -1.0 <= result.reward <= 1.0
        assert 1.0 <= result.new_difficulty <= 10.0
        assert result.new_difficulty == round(result.new_difficulty, 1)


@pytest.mark.parametrize("confidence,time_spent,difficulty", itertools.product(CONFIDENCES, TIMES, DIFFICULTIES))
def test_correct_never_lowers_difficulty_below_incorrect(engine, confidence, time_spent, difficulty):
    correct = engine.evaluate(True, confidence, time_spent, difficulty)
    incorrect = engine.evaluate(False, confidence, time_spent, difficulty)
    assert correct.new_difficulty >= incorrect.new_difficulty


def test_noisy_inputs_are_clamped(engine):
    assert engine.evaluate(True, 5.0, 20, 5) == engine.evaluate(True, 1.0, 20, 5)
    assert engine.evaluate(True, -3, 20, 5) == engine.evaluate(True, 0.0, 20, 5)
    assert engine.evaluate(True, 0.9, -10, 5) == engine.evaluate(True, 0.9, 0, 5)
    assert engine.evaluate(True, 0.9, 20, 99) == engine.evaluate(True, 0.9, 20, 10)
    assert engine.evaluate(True, 0.9, 20, 5, streak=-4) == engine.evaluate(True, 0.9, 20, 5, streak=0)


def test_missing_confidence_uses_default(engine):
    assert engine.evaluate(False, None, 20, 5) == engine.evaluate(False, 0.5, 20, 5)
    assert engine.evaluate(False, float("nan"), 20, 5) == engine.evaluate(False, 0.5, 20, 5)


def test_difficulty_is_bounded_at_the_edges(engine):
    assert engine.evaluate(True, 0.9, 20, 10).new_difficulty == 10.0
    assert engine.evaluate(False, 0.9, 20, 1).new_difficulty == 1.0


def test_config_is_injectable():
    engine = DifficultyRewardEngine(RewardConfig(knowledge_weight=1.0, efficiency_weight=0.0, metacognition_weight=0.0))
    result = engine.evaluate(False, 0.2, 10, 5)
    assert result.reward == pytest.approx(-0.2)


def test_round_to_tenth_rounds_half_up():
    assert round_to_tenth(5.25) == 5.3
    assert round_to_tenth(5.24) == 5.2
