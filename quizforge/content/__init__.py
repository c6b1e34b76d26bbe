"""Question extraction, verification, fallback generation and the topic catalog."""

from .catalog import TopicCatalog, load_catalog_from_yaml, parse_catalog, seed_catalog, topic_id_for
from .completion import CompletionClient, CompletionError
from .extractor import ContentExtractor
from .fallback import FallbackGenerator, MathTier, tier_for
from .generator import ContentGenerator
from .math_verifier import MathVerifier
from .shuffler import ChoiceShuffler
from .validator import is_valid, validate_question

__all__ = [
    "TopicCatalog",
    "load_catalog_from_yaml",
    "parse_catalog",
    "seed_catalog",
    "topic_id_for",
    "CompletionClient",
    "CompletionError",
    "ContentExtractor",
    "FallbackGenerator",
    "MathTier",
    "tier_for",
    "ContentGenerator",
    "MathVerifier",
    "ChoiceShuffler",
    "is_valid",
    "validate_question",
]
