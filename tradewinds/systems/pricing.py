"""
Price generation for Trade Winds.

Every (town, good) pair is re-priced from scratch on each call:

    final = round(base × town × season × events × random[0.85, 1.15])
    buy   = round(final × 1.1)
    sell  = round(final × 0.9)

Stock is redrawn at the same time and never reaches zero.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..state.schema import MarketQuote
from ..tools.rng import RandomSource, round_half_up, uniform

if TYPE_CHECKING:
    from ..data.reference import Good, ReferenceData, Season, Town
    from ..state.schema import GameState


logger = logging.getLogger(__name__)

RANDOM_SPREAD = (0.85, 1.15)
BUY_MARKUP = 1.1
SELL_MARKDOWN = 0.9
STOCK_RANGE = (10, 50)  # Half-open: 10..49 before the season modifier
MIN_STOCK = 1


def spread_prices(final_price: int) -> tuple[int, int]:
    """Split a market price into the (buy, sell) pair the player trades against."""
    return round_half_up(final_price * BUY_MARKUP), round_half_up(final_price * SELL_MARKDOWN)


class PriceGenerator:
    """Recomputes state.market_prices for every town and good."""

    def __init__(self, reference: "ReferenceData", rng: RandomSource):
        self.reference = reference
        self.rng = rng

    def generate_market_prices(self, state: "GameState") -> None:
        """Overwrite all market prices and stock for the current conditions."""
        season = self.reference.season(state.current_season)
        prices: dict[str, dict[str, MarketQuote]] = {}

        for town in self.reference.towns:
            prices[town.id] = {
                good.id: self._quote(state, town, good, season)
                for good in self.reference.goods
            }

        state.market_prices = prices
        logger.debug(
            "Regenerated prices for %d towns (turn %d, %s, %d active events)",
            len(prices), state.turn, season.id, len(state.active_events),
        )

    def event_modifier(self, state: "GameState", town_id: str, good_id: str) -> float:
        """Product of every live event's multiplier that reaches this town and good."""
        modifier = 1.0
        for event in state.active_events:
            effect = event.effects.get(good_id)
            if effect and event.applies_to(town_id, state.current_town_id):
                modifier *= effect
        return modifier

    def _quote(self, state: "GameState", town: "Town", good: "Good", season: "Season") -> MarketQuote:
        final_price = round_half_up(
            good.base_price
            * town.price_modifier(good.id)
            * season.price_modifier(good.id)
            * self.event_modifier(state, town.id, good.id)
            * uniform(self.rng, *RANDOM_SPREAD)
        )
        buy, sell = spread_prices(final_price)

        low, high = STOCK_RANGE
        stock = self.rng.randint(low, high - 1)
        available = max(MIN_STOCK, round_half_up(stock * season.availability_modifier(good.id)))

        return MarketQuote(buy=buy, sell=sell, available=available)
