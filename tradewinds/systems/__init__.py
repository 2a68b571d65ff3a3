"""
Game systems for Trade Winds.

Each system owns one concern and operates on a GameState passed in by
the caller. TradeEngine wires them together around one reference data
set and one random source.
"""

from .analytics import AnalyticsSystem
from .market_intel import MarketIntelSystem
from .pricing import PriceGenerator, spread_prices
from .reputation import ReputationSystem, STATUS_DESCRIPTIONS
from .scheduler import EventScheduler
from .trading import TradingSystem, EXCLUSIVE_GOODS
from .turns import TurnOrchestrator, TurnError, GameOverError, score_rating

__all__ = [
    "AnalyticsSystem",
    "MarketIntelSystem",
    "PriceGenerator",
    "spread_prices",
    "ReputationSystem",
    "STATUS_DESCRIPTIONS",
    "EventScheduler",
    "TradingSystem",
    "EXCLUSIVE_GOODS",
    # Turn pipeline
    "TurnOrchestrator",
    "TurnError",
    "GameOverError",
    "score_rating",
]
