"""
Trade Winds engine facade.

TradeEngine owns one reference data set, one random source and one
instance of every system, and exposes the game operations callers use.
It holds no game state itself: every operation takes the GameState to
act on.

Usage:
    engine = TradeEngine(seed=42)
    state = engine.create_new_game_state()
    engine.buy_good(state, "grain", 10)
    engine.travel_to_town(state, "emberfall")
"""

from __future__ import annotations

import logging

from .config import DEFAULT_CONFIG, Config
from .data.reference import ReferenceData, get_reference_data
from .state.event_bus import EventType, get_event_bus
from .state.schema import (
    ActiveAlerts,
    AlertDirection,
    GameState,
    PriceAlert,
    ReputationSystemState,
    RouteAnalysis,
    TownReputation,
    TradingStats,
    TransactionResult,
)
from .systems import (
    AnalyticsSystem,
    EventScheduler,
    MarketIntelSystem,
    PriceGenerator,
    ReputationSystem,
    TradingSystem,
    TurnOrchestrator,
)
from .tools.rng import GameRandom, RandomSource


logger = logging.getLogger(__name__)


class TradeEngine:
    """
    Entry point for every game operation.

    Systems are built once and share the reference data and random
    source, so a seeded engine replays a game exactly.
    """

    def __init__(
        self,
        config: Config | None = None,
        reference: ReferenceData | None = None,
        rng: RandomSource | None = None,
        seed: int | None = None,
    ):
        """
        Args:
            config: Game constants; missing keys use DEFAULT_CONFIG
            reference: Reference tables (defaults to the shipped data)
            rng: Random source; overrides seed when given
            seed: Seed for the default GameRandom
        """
        self.config: Config = {**DEFAULT_CONFIG, **(config or {})}
        self.reference = reference or get_reference_data()
        self.rng = rng if rng is not None else GameRandom(seed)

        self.pricing = PriceGenerator(self.reference, self.rng)
        self.scheduler = EventScheduler(
            self.reference, self.rng, event_chance=self.config["random_event_chance"]
        )
        self.reputation = ReputationSystem(self.reference)
        self.trading = TradingSystem(
            self.reference, self.reputation, strict_luxury_gate=self.config["strict_luxury_gate"]
        )
        self.analytics = AnalyticsSystem()
        self.intel = MarketIntelSystem(self.reference, self.rng)
        self.turns = TurnOrchestrator(self.reference, self.pricing, self.scheduler, self.intel)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def create_new_game_state(self) -> GameState:
        """Fresh game in the first town on turn 1, with prices and market intel ready."""
        town = self.reference.start_town
        state = GameState(
            current_town_id=town.id,
            turn=1,
            max_turns=self.config["max_turns"],
            current_season=self.reference.first_season.id,
            season_turn=1,
            target_gold=self.config["target_gold"],
            gold=self.config["starting_gold"],
            inventory={good.id: 0 for good in self.reference.goods},
            current_cargo=0,
            cargo_limit=self.config["cargo_limit"],
            event_log=[f"Welcome to {town.name}! Your trading journey begins."],
            reputation=self.initialize_reputation_system(),
        )

        self.generate_market_prices(state)
        self.intel.refresh_market_intel(state)

        logger.info("New game in %s with %d gold", town.id, state.gold)
        get_event_bus().emit(EventType.GAME_CREATED, turn=state.turn, town_id=town.id, gold=state.gold)
        return state

    def generate_market_prices(self, state: GameState) -> None:
        self.pricing.generate_market_prices(state)

    # -------------------------------------------------------------------------
    # Trading
    # -------------------------------------------------------------------------

    def buy_good(self, state: GameState, good_id: str, quantity: int) -> TransactionResult:
        return self.trading.buy_good(state, good_id, quantity)

    def sell_good(self, state: GameState, good_id: str, quantity: int) -> TransactionResult:
        return self.trading.sell_good(state, good_id, quantity)

    def effective_prices(self, state: GameState, good_id: str) -> tuple[int, int]:
        """(buy, sell) unit prices in the current town after reputation."""
        return self.trading.effective_prices(state, good_id)

    # -------------------------------------------------------------------------
    # Turns and scoring
    # -------------------------------------------------------------------------

    def travel_to_town(self, state: GameState, town_id: str) -> None:
        self.turns.travel_to_town(state, town_id)

    def calculate_score(self, state: GameState) -> int:
        return self.turns.calculate_score(state)

    # -------------------------------------------------------------------------
    # Reputation
    # -------------------------------------------------------------------------

    def initialize_reputation_system(self) -> ReputationSystemState:
        return self.reputation.initialize_reputation_system()

    def get_town_reputation(self, state: GameState, town_id: str) -> TownReputation:
        return self.reputation.get_town_reputation(state, town_id)

    def update_reputation(
        self,
        state: GameState,
        town_id: str,
        points_change: int,
        action: str,
        description: str = "",
    ) -> TownReputation:
        return self.reputation.update_reputation(state, town_id, points_change, action, description)

    def get_reputation_summary(self, state: GameState) -> list[dict]:
        return self.reputation.get_reputation_summary(state)

    # -------------------------------------------------------------------------
    # Market intelligence
    # -------------------------------------------------------------------------

    def get_active_alerts(self, state: GameState) -> ActiveAlerts:
        return self.intel.get_active_alerts(state)

    def create_price_alert(
        self,
        state: GameState,
        good_id: str,
        target_price: float,
        direction: AlertDirection | str,
    ) -> PriceAlert:
        return self.intel.create_price_alert(state, good_id, target_price, direction)

    def remove_price_alert(self, state: GameState, alert_id: str) -> bool:
        return self.intel.remove_price_alert(state, alert_id)

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    def calculate_route_analysis(self, state: GameState) -> list[RouteAnalysis]:
        return self.analytics.calculate_route_analysis(state)

    def calculate_trading_stats(self, state: GameState) -> TradingStats:
        return self.analytics.calculate_trading_stats(state)
