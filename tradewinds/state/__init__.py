"""State management for Trade Winds games."""

from .schema import (
    CURRENT_SCHEMA_VERSION,
    ActiveAlerts,
    ActiveEvent,
    AlertDirection,
    CostBasis,
    GameState,
    GameStatus,
    MarketQuote,
    NewsItem,
    PriceAlert,
    ReputationStatus,
    ReputationSystemState,
    RouteAnalysis,
    TownReputation,
    TradeOpportunity,
    TradeRecord,
    TradeType,
    TradingStats,
    TransactionResult,
)
from .manager import GameManager
from .store import GameStore, JsonGameStore, MemoryGameStore
from .event_bus import (
    EngineEvent,
    EventBus,
    EventType,
    get_event_bus,
    reset_event_bus,
)

__all__ = [
    # Schema
    "CURRENT_SCHEMA_VERSION",
    "ActiveAlerts",
    "ActiveEvent",
    "AlertDirection",
    "CostBasis",
    "GameState",
    "GameStatus",
    "MarketQuote",
    "NewsItem",
    "PriceAlert",
    "ReputationStatus",
    "ReputationSystemState",
    "RouteAnalysis",
    "TownReputation",
    "TradeOpportunity",
    "TradeRecord",
    "TradeType",
    "TradingStats",
    "TransactionResult",
    # Manager
    "GameManager",
    # Store
    "GameStore",
    "JsonGameStore",
    "MemoryGameStore",
    # Event Bus
    "EngineEvent",
    "EventBus",
    "EventType",
    "get_event_bus",
    "reset_event_bus",
]
