from datetime import datetime

import pytest

from quizforge.adaptive.mastery import MasteryTracker, observe
from quizforge.content.catalog import topic_id_for
from quizforge.records import MasteryRecord


@pytest.fixture
def tracker(seeded_store, catalog):
    return MasteryTracker(seeded_store, catalog)


def _master(tracker, user_id, slug, n=5):
    for _ in range(n):
        tracker.record_answer(user_id, topic_id_for(slug), True, 0.9)


def test_scenario_d_first_incorrect_then_correct(tracker):
    topic_id = topic_id_for("math-percentages")

    first = tracker.record_answer("u1", topic_id, False, 0.6)
    assert (first.attempted, first.correct) == (1, 0)
    assert first.mastery_level == 0.0
    assert first.consecutive_correct == 0
    assert first.confidence == 0.6

    second = tracker.record_answer("u1", topic_id, True, 0.8)
    assert (second.attempted, second.correct) == (2, 1)
    assert second.mastery_level == 0.5
    assert second.consecutive_correct == 1
    assert second.confidence == 0.8
    assert second.last_practiced is not None


def test_mastery_is_the_exact_running_ratio(tracker, seeded_store):
    topic_id = topic_id_for("math-fractions")
    answers = [True, True, False, True, False, False, True]
    for n, is_correct in enumerate(answers, start=1):
        record = tracker.record_answer("u2", topic_id, is_correct, 0.5)
        assert record.attempted == n
        assert record.mastery_level == sum(answers[:n]) / n

    stored = seeded_store.get_mastery("u2", topic_id)
    assert stored.attempted == len(answers)
    assert stored.correct == 4
    assert stored.consecutive_correct == 1


def test_records_are_per_user_and_topic(tracker, seeded_store):
    tracker.record_answer("u1", topic_id_for("math-fractions"), True, 0.5)
    tracker.record_answer("u2", topic_id_for("math-fractions"), False, 0.5)
    tracker.record_answer("u1", "ephemeral:art-basic-topic", True, 0.5)

    assert seeded_store.get_mastery("u1", topic_id_for("math-fractions")).mastery_level == 1.0
    assert seeded_store.get_mastery("u2", topic_id_for("math-fractions")).mastery_level == 0.0
    assert seeded_store.get_mastery("u1", "ephemeral:art-basic-topic").attempted == 1
    assert set(seeded_store.mastery_for_user("u1")) == {
        topic_id_for("math-fractions"),
        "ephemeral:art-basic-topic",
    }


def test_observe_is_pure():
    record = MasteryRecord(user_id="u", topic_id="t", attempted=3, correct=2, mastery_level=2 / 3, consecutive_correct=2)
    now = datetime(2024, 1, 1, 12, 0)
    updated = observe(record, True, 1.4, now)
    assert record.attempted == 3
    assert (updated.attempted, updated.correct, updated.consecutive_correct) == (4, 3, 3)
    assert updated.mastery_level == 0.75
    assert updated.confidence == 1.0
    assert updated.last_practiced == now


def test_new_user_is_recommended_only_root_topics(tracker):
    recommendations = tracker.recommend("new-user", "math")
    assert [r.topic.slug for r in recommendations] == ["math-basic-arithmetic"]
    assert recommendations[0].mastery_level == 0.0


def test_mastering_a_prerequisite_unlocks_dependents(tracker):
    _master(tracker, "u3", "math-basic-arithmetic")
    slugs = [r.topic.slug for r in tracker.recommend("u3", "math")]
    # Mastered topics drop out; ties on difficulty sort by mastery then slug
    assert slugs == ["math-fractions", "math-basic-algebra", "math-basic-geometry"]


def test_partial_mastery_breaks_difficulty_ties(tracker):
    _master(tracker, "u4", "math-basic-arithmetic")
    tracker.record_answer("u4", topic_id_for("math-basic-geometry"), True, 0.5)
    tracker.record_answer("u4", topic_id_for("math-basic-geometry"), False, 0.5)
    slugs = [r.topic.slug for r in tracker.recommend("u4", "math")]
    assert slugs.index("math-basic-geometry") < slugs.index("math-basic-algebra")


def test_below_threshold_prerequisite_keeps_topic_locked(tracker):
    topic_id = topic_id_for("math-basic-arithmetic")
    for is_correct in (True, True, True, False):
        tracker.record_answer("u5", topic_id, is_correct, 0.5)
    slugs = [r.topic.slug for r in tracker.recommend("u5", "math")]
    assert slugs == ["math-basic-arithmetic"]


def test_recommend_respects_limit(tracker):
    _master(tracker, "u6", "math-basic-arithmetic")
    assert len(tracker.recommend("u6", "math", limit=2)) == 2
    assert tracker.recommend("u6", "math", limit=0) == []


def test_subject_progress(tracker):
    _master(tracker, "u7", "science-atoms-elements")
    tracker.record_answer("u7", topic_id_for("science-cell-structure"), False, 0.5)

    progress = tracker.subject_progress("u7", "science")
    by_slug = {t.topic.slug: t for t in progress.topics}
    assert progress.total == 8
    assert progress.mastered == 1
    assert progress.progress_percent == round(100 / 8)
    assert by_slug["science-atoms-elements"].mastery_level == 1.0
    assert by_slug["science-cell-structure"].attempted == 1
    assert by_slug["science-energy"].attempted == 0


def test_prerequisites_of(tracker):
    prerequisites = tracker.prerequisites_of(topic_id_for("math-trigonometry"))
    assert [t.slug for t in prerequisites] == ["math-basic-geometry", "math-quadratic-equations"]
    assert tracker.prerequisites_of("ephemeral:art-basic-topic") == []
