import random

import pytest

from memory_match.engine import GameEngine
from memory_match.scheduler import ManualScheduler
from memory_match.server import create_app


class TestConfig:
    __test__ = False

    TESTING = True
    HOST = "127.0.0.1"
    PORT = 5000
    DEBUG = False
    PEEK_DELAY_SEC = 1.0
    TICK_INTERVAL_SEC = 1.0
    LOG_LEVEL = "DEBUG"


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def engine(scheduler):
    return GameEngine(scheduler, rng=random.Random(1234))


@pytest.fixture()
def notifications(engine):
    """List that grows by one entry per engine notification."""
    seen = []
    engine.subscribe(lambda: seen.append(engine.round))
    return seen


@pytest.fixture()
def flask_app(engine):
    return create_app(TestConfig, engine=engine)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def positions_by_content(engine):
    by_content = {}
    for pos, card in enumerate(engine.cards):
        by_content.setdefault(card.content, []).append(pos)
    return by_content
