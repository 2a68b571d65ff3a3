"""
Turn orchestrator for Trade Winds.

Traveling is the only action that consumes a turn. travel_to_town()
sequences the whole turn advance:

    set town → turn+1 → season → expire events → random event
    → festival → prices → market intel → win/end check → travel log

The orchestrator sequences and delegates; each step belongs to a system.
No step can be retried on its own, and a caller never sees a partial turn.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..state.event_bus import EventType, get_event_bus
from ..state.schema import GameStatus
from ..tools.rng import round_half_up

if TYPE_CHECKING:
    from ..data.reference import ReferenceData
    from ..state.schema import GameState
    from .market_intel import MarketIntelSystem
    from .pricing import PriceGenerator
    from .scheduler import EventScheduler


logger = logging.getLogger(__name__)

EARLY_FINISH_BONUS = 50     # Per unused turn, only when the target was reached
INVENTORY_SCORE_RATE = 0.8  # Held goods count at 80% of base price

SCORE_RATINGS: list[tuple[int, str, int]] = [
    (6000, "Legendary Merchant", 5),
    (5000, "Master Trader", 4),
    (3000, "Skilled Merchant", 3),
    (2000, "Apprentice Trader", 2),
    (0, "Novice Merchant", 1),
]


class TurnError(Exception):
    """Error during turn processing."""
    pass


class GameOverError(TurnError):
    """Attempted to advance a game that already finished."""
    def __init__(self, status: GameStatus):
        self.status = status
        super().__init__(f"Cannot travel: the game is over ({status.value}).")


class TurnOrchestrator:
    """
    Sequences the travel turn pipeline. Delegates, never resolves.

    NOT responsible for:
    - Pricing (PriceGenerator)
    - Seasons and events (EventScheduler)
    - Alerts, opportunities and news (MarketIntelSystem)
    """

    def __init__(
        self,
        reference: "ReferenceData",
        pricing: "PriceGenerator",
        scheduler: "EventScheduler",
        intel: "MarketIntelSystem",
    ):
        self.reference = reference
        self.pricing = pricing
        self.scheduler = scheduler
        self.intel = intel

    def travel_to_town(self, state: "GameState", town_id: str) -> None:
        """
        Move to a town and advance the world by one turn.

        Args:
            state: Game state, mutated in place
            town_id: Destination (may be the current town; the turn still passes)

        Raises:
            GameOverError: The game already reached a terminal status
            ReferenceLookupError: Unknown town
        """
        if not state.is_playing:
            raise GameOverError(state.game_status)
        town = self.reference.town(town_id)
        origin = state.current_town_id

        state.current_town_id = town.id
        state.turn += 1

        self.scheduler.update_seasons(state)
        self.scheduler.expire_events(state)

        event = self.scheduler.generate_random_event(state)
        if event is not None:
            self.scheduler.activate(state, event)
        festival = self.scheduler.generate_seasonal_event(state)
        if festival is not None:
            self.scheduler.activate(state, festival)

        self.pricing.generate_market_prices(state)
        self.intel.refresh_market_intel(state)
        self.evaluate_termination(state)

        state.log(f"Traveled to {town.name} (Turn {state.turn})")

        logger.info("Turn %d: %s -> %s", state.turn, origin, town.id)
        get_event_bus().emit(
            EventType.TRAVELED,
            turn=state.turn,
            origin=origin,
            destination=town.id,
        )

    def evaluate_termination(self, state: "GameState") -> GameStatus:
        """Win on reaching the gold target, otherwise end once turns run out."""
        if state.gold >= state.target_gold:
            state.game_status = GameStatus.WON
        elif state.turn > state.max_turns:
            state.game_status = GameStatus.ENDED

        if not state.is_playing:
            logger.info("Game over on turn %d: %s with %d gold", state.turn, state.game_status.value, state.gold)
            get_event_bus().emit(
                EventType.GAME_ENDED,
                turn=state.turn,
                status=state.game_status.value,
                gold=state.gold,
                score=self.calculate_score(state),
            )
        return state.game_status

    def calculate_score(self, state: "GameState") -> int:
        """Gold, plus an early-finish bonus on a win, plus held goods at a discount."""
        score = state.gold

        if state.game_status == GameStatus.WON:
            score += (state.max_turns - state.turn) * EARLY_FINISH_BONUS

        inventory_value = sum(
            quantity * self.reference.good(good_id).base_price * INVENTORY_SCORE_RATE
            for good_id, quantity in state.inventory.items()
        )
        return score + round_half_up(inventory_value)


def score_rating(score: int) -> tuple[str, int]:
    """Title and star count for a final score."""
    for threshold, label, stars in SCORE_RATINGS:
        if score >= threshold:
            return label, stars
    return SCORE_RATINGS[-1][1], SCORE_RATINGS[-1][2]
