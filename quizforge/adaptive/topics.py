"""Map a question to a catalog topic with ordered keyword heuristics.

Resolution is a pure function of (subject, text, difficulty) and the catalog
snapshot. Rules are evaluated top to bottom and the first hit wins, so the
order of each table is part of the behaviour.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..content.catalog import TopicCatalog
from ..records import Topic

logger = logging.getLogger("quizforge.adaptive")

EPHEMERAL_PREFIX = "ephemeral:"


@dataclass(frozen=True)
class KeywordRule:
    keywords: tuple[str, ...]
    slug: str
    # Optional harder slug once the normalized difficulty exceeds `hard_above`
    hard_slug: Optional[str] = None
    hard_above: float = 1.0

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)

    def slug_for(self, level: float) -> str:
        if self.hard_slug and level > self.hard_above:
            return self.hard_slug
        return self.slug


KEYWORD_RULES = {
    "math": (
        KeywordRule(("×", "*", "multiply", "times"), "math-basic-arithmetic"),
        KeywordRule(("÷", "divide"), "math-basic-arithmetic"),
        KeywordRule(("%", "percent"), "math-percentages"),
        KeywordRule(("fraction", "/"), "math-fractions"),
        KeywordRule(("decimal",), "math-decimals"),
        KeywordRule(("x =", "solve", "equation"), "math-linear-equations",
                    hard_slug="math-quadratic-equations", hard_above=0.6),
        KeywordRule(("area", "perimeter", "triangle"), "math-basic-geometry"),
        KeywordRule(("sin", "cos", "tan"), "math-trigonometry"),
    ),
    "science": (
        KeywordRule(("atom", "element", "periodic"), "science-atoms-elements"),
        KeywordRule(("bond", "ionic", "covalent"), "science-chemical-bonds"),
        KeywordRule(("reaction", "equation", "balance"), "science-chemical-reactions"),
        KeywordRule(("cell", "mitosis", "membrane"), "science-cell-structure"),
        KeywordRule(("photosynthesis", "chlorophyll"), "science-photosynthesis"),
        KeywordRule(("force", "motion", "newton"), "science-forces-motion"),
        KeywordRule(("energy", "kinetic", "potential"), "science-energy"),
    ),
    "history": (
        KeywordRule(("ancient", "egypt", "mesopotamia"), "history-ancient-civilizations"),
        KeywordRule(("rome", "greece", "classical"), "history-classical-antiquity"),
        KeywordRule(("medieval", "middle age"), "history-medieval-period"),
        KeywordRule(("renaissance", "leonardo"), "history-renaissance"),
        KeywordRule(("world war", "wwi", "ww1"), "history-world-war-1"),
        KeywordRule(("world war", "wwii", "ww2"), "history-world-war-2"),
        KeywordRule(("cold war", "soviet"), "history-cold-war"),
    ),
    "english": (
        KeywordRule(("noun", "verb", "adjective"), "english-parts-speech"),
        KeywordRule(("sentence", "subject", "predicate"), "english-sentence-structure"),
        KeywordRule(("comma", "period", "punctuat"), "english-punctuation"),
        KeywordRule(("synonym", "antonym", "meaning"), "english-vocabulary-building"),
        KeywordRule(("metaphor", "simile", "symbol"), "english-literary-devices"),
        KeywordRule(("essay", "paragraph", "thesis"), "english-essay-writing"),
    ),
}

# (upper bound on normalized difficulty, slug); the last entry catches the rest
DEFAULT_SLUGS = {
    "math": ((0.3, "math-basic-arithmetic"), (0.6, "math-basic-algebra"), (1.0, "math-quadratic-equations")),
    "science": ((0.4, "science-atoms-elements"), (0.6, "science-chemical-reactions"), (1.0, "science-genetics-basics")),
    "history": ((0.4, "history-ancient-civilizations"), (0.7, "history-medieval-period"), (1.0, "history-cold-war")),
    "english": ((0.4, "english-parts-speech"), (0.7, "english-writing-basics"), (1.0, "english-literature-analysis")),
}

GENERIC_TERMS = {"basic", "basics", "topic"}


def normalize_difficulty(difficulty: float) -> float:
    """Question difficulty (1-10) onto the catalog's 0-1 scale."""
    try:
        difficulty = float(difficulty)
    except (TypeError, ValueError):
        return 0.5
    return max(0.0, min(1.0, difficulty / 10))


def slug_terms(slug: str, subject: str) -> tuple[str, ...]:
    tail = slug[len(subject) + 1:] if slug.startswith(f"{subject}-") else slug
    return tuple(
        word for word in tail.split("-")
        if len(word) >= 4 and word not in GENERIC_TERMS
    )


class TopicResolver:
    """Resolve questions to topics against a fixed catalog snapshot."""

    def __init__(self, catalog: TopicCatalog):
        self.catalog = catalog

    def detect(self, subject: str, question_text: str, level: float) -> tuple[str, tuple[str, ...]]:
        """Return the heuristic slug and the keywords of the rule that produced it."""
        text = (question_text or "").lower()
        for rule in KEYWORD_RULES.get(subject, ()):
            if rule.matches(text):
                return rule.slug_for(level), rule.keywords

        for ceiling, slug in DEFAULT_SLUGS.get(subject, ()):
            if level < ceiling:
                return slug, ()
        if subject in DEFAULT_SLUGS:
            return DEFAULT_SLUGS[subject][-1][1], ()
        return f"{subject}-basic-topic", ()

    def resolve(self, subject: str, question_text: str, difficulty: float) -> Topic:
        level = normalize_difficulty(difficulty)
        slug, keywords = self.detect(subject, question_text, level)

        topic = self.catalog.by_slug(slug)
        if topic is not None and topic.subject == subject:
            return topic

        terms = tuple(k.lower() for k in keywords) or slug_terms(slug, subject)
        candidates = [
            t for t in self.catalog.for_subject(subject)
            if any(term in t.slug.lower() or term in t.name.lower() for term in terms)
        ]
        if candidates:
            topic = min(candidates, key=lambda t: (abs(t.difficulty_level - level), t.slug))
            logger.debug("Slug %s not in catalog, matched %s by keyword", slug, topic.slug)
            return topic

        logger.info("No catalog topic for %s/%s, using ephemeral topic", subject, slug)
        return Topic(
            id=f"{EPHEMERAL_PREFIX}{slug}",
            slug=slug,
            subject=subject,
            name=slug.replace("-", " ").title(),
            difficulty_level=level,
            ephemeral=True,
        )
