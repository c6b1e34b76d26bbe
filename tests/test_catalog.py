import logging

from quizforge.config import TOPIC_CATALOG_PATH
from quizforge.content.catalog import (
    TopicCatalog,
    load_catalog_from_yaml,
    parse_catalog,
    seed_catalog,
    topic_id_for,
)


def test_topic_ids_are_stable():
    assert topic_id_for("math-fractions") == topic_id_for("math-fractions")
    assert topic_id_for("math-fractions") != topic_id_for("math-percentages")


def test_shipped_catalog_covers_every_subject():
    topics = parse_catalog(load_catalog_from_yaml(TOPIC_CATALOG_PATH))
    assert {t.subject for t in topics} == {"math", "science", "history", "english"}
    assert all(0.0 <= t.difficulty_level <= 1.0 for t in topics)
    ids = {t.id for t in topics}
    assert all(p in ids for t in topics for p in t.prerequisites)


def test_parse_catalog_resolves_and_filters_prerequisites(caplog):
    data = {
        "subjects": {
            "math": [
                {"slug": "math-a", "name": "A", "difficulty": 0.1},
                {"slug": "math-b", "name": "B", "difficulty": 1.7, "prerequisites": ["math-a", "math-missing"]},
                {"name": "No slug"},
            ],
        },
    }
    with caplog.at_level(logging.WARNING, logger="quizforge.content"):
        topics = parse_catalog(data)

    by_slug = {t.slug: t for t in topics}
    assert set(by_slug) == {"math-a", "math-b"}
    assert by_slug["math-b"].prerequisites == frozenset({topic_id_for("math-a")})
    assert by_slug["math-b"].difficulty_level == 1.0
    assert "math-missing" in caplog.text


def test_missing_file_loads_nothing(tmp_path, store):
    assert load_catalog_from_yaml(tmp_path / "nope.yaml") is None
    assert seed_catalog(store, tmp_path / "nope.yaml") == []


def test_seeding_twice_is_idempotent(store):
    first = seed_catalog(store)
    seed_catalog(store)
    stored = store.all_topics()
    assert len(stored) == len(first)
    trig = next(t for t in stored if t.slug == "math-trigonometry")
    assert trig.prerequisites == frozenset({
        topic_id_for("math-basic-geometry"),
        topic_id_for("math-quadratic-equations"),
    })


def test_catalog_snapshot_lookups(catalog):
    topic = catalog.by_slug("history-renaissance")
    assert catalog.by_id(topic.id) == topic
    assert catalog.by_slug("nope") is None
    slugs = [t.slug for t in catalog.for_subject("english")]
    assert slugs == sorted(slugs)
    assert all(s.startswith("english-") for s in slugs)
    assert len(catalog) == len(list(catalog))


def test_subject_snapshot_holds_only_that_subject(seeded_store):
    math = TopicCatalog.from_store(seeded_store, "math")
    assert len(math) > 0
    assert {t.subject for t in math} == {"math"}
    assert math.for_subject("history") == []
    assert math.by_slug("math-basic-arithmetic") is not None
