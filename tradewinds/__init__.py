"""Trade Winds: a turn-based merchant trading game engine."""

from .engine import TradeEngine
from .state import GameManager, GameState, JsonGameStore, MemoryGameStore

__version__ = "0.3.0"

__all__ = [
    "TradeEngine",
    "GameManager",
    "GameState",
    "JsonGameStore",
    "MemoryGameStore",
]
