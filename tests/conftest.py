import random
import pytest
from colormatch.services.countdown import ManualCountdown
from colormatch.services.persistence import InMemoryStore
from colormatch.state import GameEngine

@pytest.fixture
def store():
    return InMemoryStore()

@pytest.fixture
def make_engine(store):
    engines = []

    def factory(**kwargs):
        kwargs.setdefault("base_time", 30.0)
        kwargs.setdefault("tick_interval", 0.1)
        kwargs.setdefault("low_time_warning", 5.0)
        kwargs.setdefault("rng", random.Random(1234))
        kwargs.setdefault("countdown_factory", ManualCountdown)
        engine = GameEngine(kwargs.pop("store", store), **kwargs)
        engines.append(engine)
        return engine

    yield factory
    for engine in engines:
        engine.close()

@pytest.fixture
def engine(make_engine):
    return make_engine()