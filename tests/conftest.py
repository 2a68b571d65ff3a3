"""
Pytest fixtures for Trade Winds tests.

Provides seeded and scripted random sources, an engine over the shipped
reference data, and in-memory stores for isolated testing.
"""

import pytest
from pathlib import Path

# Add repo root to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from tradewinds.data import get_reference_data
from tradewinds.engine import TradeEngine
from tradewinds.state import GameManager, MemoryGameStore, reset_event_bus
from tradewinds.state.schema import MarketQuote
from tradewinds.tools import GameRandom


class ScriptedRandom:
    """
    RandomSource that replays fixed values.

    random() pops scripted floats, then returns `default` forever.
    With the default of 0.5 the price spread is exactly 1.0, no event
    or festival fires and no flavor news is rolled. randint() returns
    the low bound; choice() the first element.
    """

    def __init__(self, values=None, default: float = 0.5):
        self.values = list(values or [])
        self.default = default

    def random(self) -> float:
        if self.values:
            return self.values.pop(0)
        return self.default

    def randint(self, a: int, b: int) -> int:
        return a

    def choice(self, seq):
        if not seq:
            raise ValueError("Cannot choose from an empty sequence.")
        return seq[0]


@pytest.fixture(autouse=True)
def fresh_event_bus():
    """Isolate event bus listeners and history per test."""
    reset_event_bus()
    yield
    reset_event_bus()


@pytest.fixture
def reference():
    """Shipped reference tables."""
    return get_reference_data()


@pytest.fixture
def rng():
    """Seeded random source."""
    return GameRandom(seed=1234)


@pytest.fixture
def scripted():
    """Factory for scripted random sources."""
    return ScriptedRandom


@pytest.fixture
def engine(reference):
    """Engine with a quiet scripted random source (no events, no spread)."""
    return TradeEngine(reference=reference, rng=ScriptedRandom())


@pytest.fixture
def seeded_engine(reference, rng):
    """Engine with a seeded random source, for longer simulations."""
    return TradeEngine(reference=reference, rng=rng)


@pytest.fixture
def state(engine):
    """Fresh game state in the starting town."""
    return engine.create_new_game_state()


@pytest.fixture
def memory_store():
    """In-memory save store for testing."""
    return MemoryGameStore()


@pytest.fixture
def manager(memory_store, engine):
    """Game manager with in-memory store."""
    return GameManager(memory_store, engine)


@pytest.fixture
def set_quote():
    """Overwrite one market entry: set_quote(state, good_id, buy, sell, available, town_id=None)."""
    def _set(state, good_id, buy, sell, available=50, town_id=None):
        quote = MarketQuote(buy=buy, sell=sell, available=available)
        state.market_prices[town_id or state.current_town_id][good_id] = quote
        return quote
    return _set


@pytest.fixture
def flat_prices():
    """Give every town and good the same quote."""
    def _flat(state, buy=100, sell=90, available=50):
        for town_id, goods in state.market_prices.items():
            for good_id in goods:
                goods[good_id] = MarketQuote(buy=buy, sell=sell, available=available)
    return _flat
