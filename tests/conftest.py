import random

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quizforge.content.catalog import TopicCatalog, seed_catalog
from quizforge.database import Base, QuizStore


SCENARIO_A = "Question: What is 3 × 4?\nA) 12\nB) 10\nC) 14\nD) 15\nCorrect Answer: A) 12"

SCENARIO_B = "Question: What is 5 × 6?\nA) 25\nB) 11\nC) 35\nD) 40\nCorrect Answer: B) 11"


class StubCompletion:
    """Stands in for CompletionClient: replays canned responses or raises."""

    def __init__(self, responses=(), error=None):
        self.responses = list(responses)
        self.error = error
        self.prompts = []

    def complete(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return QuizStore(sessionmaker(bind=engine, autoflush=False))


@pytest.fixture
def seeded_store(store):
    seed_catalog(store)
    return store


@pytest.fixture
def catalog(seeded_store):
    return TopicCatalog.from_store(seeded_store)


@pytest.fixture
def rng():
    return random.Random(1234)
