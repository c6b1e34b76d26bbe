import random

import pytest

from quizforge.content.shuffler import ChoiceShuffler
from quizforge.records import Question, QuestionSource


def _question(source=QuestionSource.AI):
    return Question(
        text="Which planet is largest?",
        options=("Jupiter", "Mars", "Venus", "Earth"),
        correct_answer="Jupiter",
        difficulty=3.0,
        subject="science",
        source=source,
    )


@pytest.mark.parametrize("seed", range(20))
@pytest.mark.parametrize("source", [QuestionSource.AI, QuestionSource.AI_CORRECTED])
def test_shuffle_preserves_correctness_and_multiset(seed, source):
    q = _question(source)
    shuffled = ChoiceShuffler(random.Random(seed)).shuffle(q)
    assert shuffled.correct_answer == q.correct_answer
    assert sorted(shuffled.options) == sorted(q.options)
    assert shuffled.source is source
    assert shuffled.id == q.id


def test_shuffle_moves_the_answer_around():
    shuffler = ChoiceShuffler(random.Random(99))
    positions = {
        shuffler.shuffle(_question()).options.index("Jupiter")
        for _ in range(200)
    }
    assert positions == {0, 1, 2, 3}


def test_fallback_output_is_left_alone():
    q = _question(QuestionSource.FALLBACK)
    assert ChoiceShuffler(random.Random(1)).shuffle(q) is q
