"""
Transaction engine for Trade Winds.

Buy and sell at the current town's market. Preconditions are checked in
a fixed order and the first failure wins; nothing is mutated until every
check has passed. Results, not exceptions, carry success and failure.

Buy checks, in order:
1. Reputation gate for luxury goods
2. Stock on hand at the market
3. Gold for the reputation-adjusted price
4. Cargo space

Sell checks only the quantity held. Good standing discounts purchases
(price × modifier) and sweetens sales (price ÷ modifier).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..state.event_bus import EventType, get_event_bus
from ..state.schema import (
    REPUTATION_TIERS,
    CostBasis,
    TradeRecord,
    TradeType,
    TransactionResult,
)
from ..tools.rng import round_half_up

if TYPE_CHECKING:
    from ..data.reference import Good, ReferenceData, Town
    from ..state.schema import GameState, TownReputation
    from .reputation import ReputationSystem


logger = logging.getLogger(__name__)

# Reputation granted per completed trade at the town where it happens
TRADE_REPUTATION_GAIN = 1

# Every good id that some reputation tier unlocks
EXCLUSIVE_GOODS: frozenset[str] = frozenset(
    good_id for _, _, _, access in REPUTATION_TIERS for good_id in access
)


def _failure(message: str) -> TransactionResult:
    return TransactionResult(success=False, message=message)


class TradingSystem:
    """
    Validates and executes trades against gold, cargo and market stock.

    strict_luxury_gate=True blocks every luxury-category good until the
    merchant holds exclusive access (excellent or vip) in the town.
    With False, only goods on a tier's exclusive list are gated, and only
    for merchants whose tier lacks them.
    """

    def __init__(
        self,
        reference: "ReferenceData",
        reputation: "ReputationSystem",
        strict_luxury_gate: bool = True,
    ):
        self.reference = reference
        self.reputation = reputation
        self.strict_luxury_gate = strict_luxury_gate

    # ─── Buy ─────────────────────────────────────────────────────

    def buy_good(self, state: "GameState", good_id: str, quantity: int) -> TransactionResult:
        """Buy quantity units of a good at the current town."""
        town = self.reference.town(state.current_town_id)
        good = self.reference.good(good_id)

        if quantity <= 0:
            return _failure("Quantity must be positive.")

        rep = self.reputation.get_town_reputation(state, town.id)
        if not self._may_buy(good, rep):
            return _failure(
                f"Your reputation in {town.name} is too low to trade {good.name}!"
            )

        quote = state.quote(good_id)
        if quantity > quote.available:
            return _failure(f"Only {quote.available} {good.name} available!")

        unit_price = round_half_up(quote.buy * rep.price_modifier)
        total_cost = unit_price * quantity
        if total_cost > state.gold:
            return _failure("Not enough gold!")

        if state.current_cargo + quantity > state.cargo_limit:
            return _failure("Not enough cargo space!")

        # All checks passed: apply every effect
        held_before = state.inventory.get(good_id, 0)
        state.gold -= total_cost
        state.inventory[good_id] = held_before + quantity
        state.current_cargo += quantity
        quote.available -= quantity

        self._update_cost_basis(state, good_id, held_before, unit_price, quantity)
        state.record_trade(self._record(state, TradeType.BUY, town, good, quantity, unit_price))
        self.reputation.update_reputation(
            state,
            town.id,
            TRADE_REPUTATION_GAIN,
            action="buy",
            description=f"Bought {quantity} {good.name}",
        )

        logger.info("Bought %d %s at %s for %d", quantity, good_id, town.id, total_cost)
        get_event_bus().emit(
            EventType.GOOD_BOUGHT,
            turn=state.turn,
            good_id=good_id,
            town_id=town.id,
            quantity=quantity,
            total=total_cost,
        )
        return TransactionResult(
            success=True,
            message=f"Bought {quantity} {good.name} for {total_cost} gold",
            gold_change=-total_cost,
            cargo_change=quantity,
        )

    # ─── Sell ────────────────────────────────────────────────────

    def sell_good(self, state: "GameState", good_id: str, quantity: int) -> TransactionResult:
        """Sell quantity units of a held good at the current town."""
        town = self.reference.town(state.current_town_id)
        good = self.reference.good(good_id)

        if quantity <= 0:
            return _failure("Quantity must be positive.")

        held = state.inventory.get(good_id, 0)
        if quantity > held:
            return _failure(f"You only have {held} {good.name}!")

        rep = self.reputation.get_town_reputation(state, town.id)
        quote = state.quote(good_id)
        unit_price = round_half_up(quote.sell / rep.price_modifier)
        total_earnings = unit_price * quantity

        state.gold += total_earnings
        state.inventory[good_id] = held - quantity
        state.current_cargo -= quantity
        if state.inventory[good_id] == 0:
            state.pending_purchases.pop(good_id, None)

        state.record_trade(self._record(state, TradeType.SELL, town, good, quantity, unit_price))
        self.reputation.update_reputation(
            state,
            town.id,
            TRADE_REPUTATION_GAIN,
            action="sell",
            description=f"Sold {quantity} {good.name}",
        )

        logger.info("Sold %d %s at %s for %d", quantity, good_id, town.id, total_earnings)
        get_event_bus().emit(
            EventType.GOOD_SOLD,
            turn=state.turn,
            good_id=good_id,
            town_id=town.id,
            quantity=quantity,
            total=total_earnings,
        )
        return TransactionResult(
            success=True,
            message=f"Sold {quantity} {good.name} for {total_earnings} gold",
            gold_change=total_earnings,
            cargo_change=-quantity,
        )

    # ─── Helpers ─────────────────────────────────────────────────

    def effective_prices(self, state: "GameState", good_id: str) -> tuple[int, int]:
        """(buy, sell) unit prices at the current town after reputation."""
        rep = self.reputation.get_town_reputation(state, state.current_town_id)
        quote = state.quote(good_id)
        return (
            round_half_up(quote.buy * rep.price_modifier),
            round_half_up(quote.sell / rep.price_modifier),
        )

    def _may_buy(self, good: "Good", rep: "TownReputation") -> bool:
        if self.strict_luxury_gate:
            return not good.is_luxury or self.reputation.has_luxury_access(rep)
        return good.id not in EXCLUSIVE_GOODS or good.id in rep.exclusive_goods_access

    @staticmethod
    def _update_cost_basis(
        state: "GameState",
        good_id: str,
        held_before: int,
        unit_price: int,
        quantity: int,
    ) -> None:
        """Fold a purchase into the weighted-average cost of the units held."""
        existing = state.pending_purchases.get(good_id)
        if existing is not None and held_before > 0:
            price = (existing.price * held_before + unit_price * quantity) / (held_before + quantity)
        else:
            price = float(unit_price)
        state.pending_purchases[good_id] = CostBasis(
            price=price,
            town=state.current_town_id,
            turn=state.turn,
            season=state.current_season,
        )

    @staticmethod
    def _record(
        state: "GameState",
        trade_type: TradeType,
        town: "Town",
        good: "Good",
        quantity: int,
        unit_price: int,
    ) -> TradeRecord:
        return TradeRecord(
            type=trade_type,
            good_id=good.id,
            good_name=good.name,
            quantity=quantity,
            price_per_unit=unit_price,
            total_value=unit_price * quantity,
            town_id=town.id,
            town_name=town.name,
            turn=state.turn,
            season=state.current_season,
        )
