"""Load the static topic catalog from YAML and seed it into the store."""

import logging
import uuid
from pathlib import Path
from typing import Iterable, Iterator, Optional

import yaml

from ..config import TOPIC_CATALOG_PATH
from ..records import Topic

logger = logging.getLogger("quizforge.content")

CATALOG_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "quizforge/topics")


def topic_id_for(slug: str) -> str:
    """Stable topic id derived from the slug."""
    return str(uuid.uuid5(CATALOG_NAMESPACE, slug))


def load_catalog_from_yaml(yaml_path: Path = TOPIC_CATALOG_PATH) -> Optional[dict]:
    """
    Load catalog data from a YAML file.

    Expected YAML structure:
    ```yaml
    subjects:
      math:
        - slug: math-basic-arithmetic
          name: Basic Arithmetic
          difficulty: 0.1
          description: Adding, subtracting, multiplying and dividing whole numbers
          prerequisites: []
        - slug: math-percentages
          name: Percentages
          difficulty: 0.4
          prerequisites:
            - math-basic-arithmetic
    ```
    """
    yaml_path = Path(yaml_path)
    if not yaml_path.exists():
        return None

    with open(yaml_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def parse_catalog(data: dict) -> list[Topic]:
    """Turn loaded YAML into Topic records, resolving prerequisite slugs to ids."""
    subjects = (data or {}).get("subjects", {}) or {}

    known_slugs = {
        entry["slug"]
        for entries in subjects.values()
        for entry in (entries or [])
        if entry.get("slug")
    }

    topics = []
    for subject, entries in subjects.items():
        for entry in entries or []:
            slug = entry.get("slug")
            if not slug:
                logger.warning("Skipping %s catalog entry without a slug: %r", subject, entry)
                continue

            prerequisites = set()
            for prerequisite in entry.get("prerequisites", []) or []:
                if prerequisite not in known_slugs:
                    logger.warning("Topic %s lists unknown prerequisite %s", slug, prerequisite)
                    continue
                prerequisites.add(topic_id_for(prerequisite))

            difficulty = float(entry.get("difficulty", 0.5))
            topics.append(Topic(
                id=topic_id_for(slug),
                slug=slug,
                subject=subject,
                name=entry.get("name", slug),
                difficulty_level=max(0.0, min(1.0, difficulty)),
                prerequisites=frozenset(prerequisites),
                description=entry.get("description", ""),
            ))
    return topics


def seed_catalog(store, yaml_path: Path = TOPIC_CATALOG_PATH) -> list[Topic]:
    """Upsert every catalog topic into the store."""
    data = load_catalog_from_yaml(yaml_path)
    if data is None:
        logger.warning("Topic catalog not found at %s", yaml_path)
        return []

    topics = parse_catalog(data)
    store.put_topics(topics)
    logger.info("Seeded %d catalog topics from %s", len(topics), yaml_path)
    return topics


class TopicCatalog:
    """Immutable in-memory snapshot of the topic catalog."""

    def __init__(self, topics: Iterable[Topic]):
        self._by_id = {t.id: t for t in topics}
        self._by_slug = {t.slug: t for t in self._by_id.values()}

    @classmethod
    def from_store(cls, store, subject: Optional[str] = None) -> "TopicCatalog":
        """Snapshot the whole catalog, or only one subject's topics."""
        if subject is not None:
            return cls(store.topics_for_subject(subject))
        return cls(store.all_topics())

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Topic]:
        return iter(sorted(self._by_id.values(), key=lambda t: t.slug))

    def by_id(self, topic_id: str) -> Optional[Topic]:
        return self._by_id.get(topic_id)

    def by_slug(self, slug: str) -> Optional[Topic]:
        return self._by_slug.get(slug)

    def for_subject(self, subject: str) -> list[Topic]:
        return [t for t in self if t.subject == subject]
