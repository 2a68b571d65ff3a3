"""
Pydantic models for Trade Winds game state.

GameState is the single mutable aggregate the systems operate on.
It serializes to JSON with camelCase keys (the save format) and is
versioned for migration support; Python code uses snake_case names.
"""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..data.reference import EventDefinition, EventKind


CURRENT_SCHEMA_VERSION = "1.2.0"  # Added reputation block

# Bounded collections
EVENT_LOG_LIMIT = 12
JOURNAL_LIMIT = 100
REPUTATION_EVENT_LIMIT = 50
NEWS_LIMIT = 10
OPPORTUNITY_LIMIT = 5


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class GameStatus(str, Enum):
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"      # Reserved; no rule currently produces it
    ENDED = "ended"    # Ran out of turns


class TradeType(str, Enum):
    BUY = "buy"
    SELL = "sell"


class AlertDirection(str, Enum):
    ABOVE = "above"    # Watches the sell price
    BELOW = "below"    # Watches the buy price


class NewsType(str, Enum):
    EVENT = "event"
    PRICE_CHANGE = "price_change"
    OPPORTUNITY = "opportunity"
    WEATHER = "weather"


class Severity(str, Enum):
    """Shared low/medium/high scale for news severity and opportunity urgency."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class OpportunityType(str, Enum):
    PRICE_GAP = "price_gap"
    SHORTAGE = "shortage"
    SURPLUS = "surplus"
    SEASONAL = "seasonal"


class ReputationStatus(str, Enum):
    BLACKLISTED = "blacklisted"
    POOR = "poor"
    NEUTRAL = "neutral"
    GOOD = "good"
    EXCELLENT = "excellent"
    VIP = "vip"


# Reputation tiers: (upper bound inclusive, status, price modifier, exclusive goods)
# The last tier has no upper bound.
REPUTATION_TIERS: list[tuple[int | None, ReputationStatus, float, tuple[str, ...]]] = [
    (-80, ReputationStatus.BLACKLISTED, 1.5, ()),
    (-40, ReputationStatus.POOR, 1.2, ()),
    (20, ReputationStatus.NEUTRAL, 1.0, ()),
    (60, ReputationStatus.GOOD, 0.9, ()),
    (85, ReputationStatus.EXCELLENT, 0.8, ("gems",)),
    (None, ReputationStatus.VIP, 0.7, ("gems", "exotic_spices", "rare_books")),
]

REPUTATION_MIN = -100
REPUTATION_MAX = 100


def reputation_tier(points: int) -> tuple[ReputationStatus, float, list[str]]:
    """Map reputation points to (status, price modifier, exclusive goods)."""
    for upper, status, modifier, access in REPUTATION_TIERS:
        if upper is None or points <= upper:
            return status, modifier, list(access)
    raise AssertionError("unreachable: last reputation tier is unbounded")


def generate_id() -> str:
    return str(uuid4())[:8]


class TradeModel(BaseModel):
    """Base for all state models: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------------------------------------------------------------
# Market
# -----------------------------------------------------------------------------

class MarketQuote(TradeModel):
    """Current prices and stock for one good in one town."""
    buy: int
    sell: int
    available: int


class ActiveEvent(TradeModel):
    """
    A live world event or festival.

    Copied from the catalog when drawn; only `duration` changes afterwards.
    """
    id: str
    type: EventKind
    title: str
    description: str
    effects: dict[str, float] = Field(default_factory=dict)
    duration: int
    weight: float = 0
    town_id: str | None = None  # Context for local events
    season: str | None = None

    @classmethod
    def from_definition(cls, definition: EventDefinition, town_id: str | None = None) -> "ActiveEvent":
        return cls(
            id=definition.id,
            type=definition.type,
            title=definition.title,
            description=definition.description,
            effects=dict(definition.effects),
            duration=definition.duration,
            weight=definition.weight,
            town_id=town_id if town_id is not None else definition.town_id,
            season=definition.season,
        )

    def applies_to(self, town_id: str, current_town_id: str) -> bool:
        """Whether this event's effects reach prices in town_id."""
        if self.type == EventKind.LOCAL:
            return self.town_id == current_town_id and town_id == current_town_id
        return True


# -----------------------------------------------------------------------------
# Trading journal
# -----------------------------------------------------------------------------

class TradeRecord(TradeModel):
    """One executed buy or sell."""
    id: str = Field(default_factory=generate_id)
    timestamp: datetime = Field(default_factory=datetime.now)
    type: TradeType
    good_id: str
    good_name: str
    quantity: int
    price_per_unit: int
    total_value: int
    town_id: str
    town_name: str
    turn: int
    season: str


class CostBasis(TradeModel):
    """Weighted-average purchase price of the units currently held."""
    price: float
    town: str
    turn: int
    season: str


# -----------------------------------------------------------------------------
# Market intelligence
# -----------------------------------------------------------------------------

class PriceAlert(TradeModel):
    """User-defined price watch. Fires once, then stays inactive."""
    id: str = Field(default_factory=generate_id)
    good_id: str
    good_name: str
    target_price: float
    alert_type: AlertDirection
    is_active: bool = True
    created_turn: int
    triggered_turn: int | None = None


class NewsItem(TradeModel):
    id: str = Field(default_factory=generate_id)
    type: NewsType
    title: str
    content: str
    impact: str = ""
    severity: Severity = Severity.LOW
    turn: int
    expires_at: int
    town_id: str | None = None
    good_ids: list[str] = Field(default_factory=list)
    event_id: str | None = None  # Source event for event news


class TradeOpportunity(TradeModel):
    """Buy here, sell there: a price gap worth hauling cargo for."""
    id: str = Field(default_factory=generate_id)
    type: OpportunityType = OpportunityType.PRICE_GAP
    title: str
    description: str
    source_town_id: str
    target_town_id: str
    good_id: str
    good_name: str
    source_town_name: str
    target_town_name: str
    source_price: int
    target_price: int
    potential_profit: int  # Per unit
    profit_margin: float
    urgency: Severity
    valid_until: int


class MarketAlerts(TradeModel):
    price_alerts: list[PriceAlert] = Field(default_factory=list)
    news: list[NewsItem] = Field(default_factory=list)
    opportunities: list[TradeOpportunity] = Field(default_factory=list)
    last_checked_turn: int = 0


# -----------------------------------------------------------------------------
# Reputation
# -----------------------------------------------------------------------------

class TownReputation(TradeModel):
    """Standing in one town. Status, modifier and access derive from points."""
    town_id: str
    points: int = 0
    status: ReputationStatus = ReputationStatus.NEUTRAL
    price_modifier: float = 1.0
    exclusive_goods_access: list[str] = Field(default_factory=list)

    @classmethod
    def from_points(cls, town_id: str, points: int) -> "TownReputation":
        rep = cls(town_id=town_id)
        rep.set_points(points)
        return rep

    def set_points(self, points: int) -> None:
        """Clamp points and recompute the derived tier fields."""
        self.points = max(REPUTATION_MIN, min(REPUTATION_MAX, points))
        self.status, self.price_modifier, self.exclusive_goods_access = reputation_tier(self.points)


class ReputationEvent(TradeModel):
    """Audit record of a reputation change."""
    id: str = Field(default_factory=generate_id)
    town_id: str
    action: str
    points_changed: int
    turn: int = 0
    timestamp: datetime = Field(default_factory=datetime.now)
    description: str = ""


class ReputationSystemState(TradeModel):
    global_reputation: int = 0
    town_reputations: dict[str, TownReputation] = Field(default_factory=dict)
    reputation_events: list[ReputationEvent] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Game state
# -----------------------------------------------------------------------------

class GameState(TradeModel):
    """
    Complete game state.

    This is the root model that gets serialized to JSON.
    Owned by one caller at a time; every system mutates it in place.
    """
    schema_version: str = CURRENT_SCHEMA_VERSION

    # Progression
    current_town_id: str
    turn: int = 1
    max_turns: int = 20
    current_season: str = "spring"
    season_turn: int = 1
    target_gold: int = 5000
    game_status: GameStatus = GameStatus.PLAYING

    # Purse and hold
    gold: int = 1000
    inventory: dict[str, int] = Field(default_factory=dict)
    current_cargo: int = 0
    cargo_limit: int = 100

    # World
    market_prices: dict[str, dict[str, MarketQuote]] = Field(default_factory=dict)
    active_events: list[ActiveEvent] = Field(default_factory=list)
    event_log: list[str] = Field(default_factory=list)  # Most recent first

    # Records (added in 1.1.0)
    trading_journal: list[TradeRecord] = Field(default_factory=list)  # Oldest first
    pending_purchases: dict[str, CostBasis] = Field(default_factory=dict)
    market_alerts: MarketAlerts = Field(default_factory=MarketAlerts)

    # Reputation (added in 1.2.0)
    reputation: ReputationSystemState = Field(default_factory=ReputationSystemState)

    @property
    def is_playing(self) -> bool:
        return self.game_status == GameStatus.PLAYING

    @property
    def cargo_space(self) -> int:
        return self.cargo_limit - self.current_cargo

    def quote(self, good_id: str, town_id: str | None = None) -> MarketQuote:
        """Market entry for a good, in the current town unless told otherwise."""
        return self.market_prices[town_id or self.current_town_id][good_id]

    def log(self, message: str) -> None:
        """Prepend a line to the event log, keeping it bounded."""
        self.event_log.insert(0, message)
        del self.event_log[EVENT_LOG_LIMIT:]

    def record_trade(self, record: TradeRecord) -> None:
        """Append to the trading journal, dropping the oldest past the limit."""
        self.trading_journal.append(record)
        overflow = len(self.trading_journal) - JOURNAL_LIMIT
        if overflow > 0:
            del self.trading_journal[:overflow]


# -----------------------------------------------------------------------------
# Operation results
# -----------------------------------------------------------------------------

class TransactionResult(TradeModel):
    """Outcome of a buy or sell. The only failure channel for trades."""
    success: bool
    message: str
    gold_change: int | None = None
    cargo_change: int | None = None


class RouteAnalysis(TradeModel):
    """A matched buy-then-sell of the same good."""
    from_town: str
    to_town: str
    good_id: str
    good_name: str
    buy_price: int
    sell_price: int
    quantity: int
    profit: int
    profit_margin: float
    turn: int
    season: str


class TradeBucket(TradeModel):
    trades: int = 0
    profit: int = 0
    volume: int = 0


class RouteTotal(TradeModel):
    from_town: str = Field(alias="from")
    to_town: str = Field(alias="to")
    profit: int


class TradingStats(TradeModel):
    total_trades: int = 0
    total_profit: int = 0
    total_loss: int = 0
    net_profit: int = 0
    best_trade: RouteAnalysis | None = None
    worst_trade: RouteAnalysis | None = None
    favorite_good: str | None = None
    most_profitable_route: RouteTotal | None = None
    average_profit_per_trade: float = 0.0
    successful_trades: int = 0
    lossful_trades: int = 0
    trades_by_good: dict[str, TradeBucket] = Field(default_factory=dict)
    trades_by_town: dict[str, TradeBucket] = Field(default_factory=dict)
    trades_by_season: dict[str, TradeBucket] = Field(default_factory=dict)


class ActiveAlerts(TradeModel):
    alerts: list[PriceAlert] = Field(default_factory=list)
    opportunities: list[TradeOpportunity] = Field(default_factory=list)
    news: list[NewsItem] = Field(default_factory=list)
