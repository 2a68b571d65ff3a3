"""
Market intelligence for Trade Winds: price alerts, trade opportunities
and the news feed.

refresh_market_intel() runs at most once per turn. It fires any price
alert whose threshold was crossed, recomputes the opportunity board for
the current town, and updates the news feed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..state.event_bus import EventType, get_event_bus
from ..state.schema import (
    NEWS_LIMIT,
    OPPORTUNITY_LIMIT,
    ActiveAlerts,
    AlertDirection,
    NewsItem,
    NewsType,
    OpportunityType,
    PriceAlert,
    Severity,
    TradeOpportunity,
)
from ..tools.rng import RandomSource, roll_chance

if TYPE_CHECKING:
    from ..data.reference import ReferenceData
    from ..state.schema import ActiveEvent, GameState


logger = logging.getLogger(__name__)

# Opportunity thresholds
MIN_PROFIT = 10
MIN_MARGIN = 0.15
HIGH_URGENCY_MARGIN = 0.5
MEDIUM_URGENCY_MARGIN = 0.3
OPPORTUNITY_TTL = 3

# News feed
WEATHER_CHANCE = 0.3
VOLATILITY_CHANCE = 0.4
FLAVOR_NEWS_TTL = 2

WEATHER_REPORTS: list[dict] = [
    {
        "title": "Storm Clouds Gather",
        "content": "Sailors near {town} expect rough seas in the coming days.",
        "impact": "Fish and salt shipments may be delayed.",
        "goods": ["fish", "salt"],
        "severity": Severity.MEDIUM,
    },
    {
        "title": "Fair Winds",
        "content": "Clear skies over {town} keep the roads busy with caravans.",
        "impact": "Steady supply expected across the board.",
        "goods": [],
        "severity": Severity.LOW,
    },
    {
        "title": "Early Frost",
        "content": "An early frost has settled over the fields around {town}.",
        "impact": "Grain harvests could come in short.",
        "goods": ["grain"],
        "severity": Severity.MEDIUM,
    },
    {
        "title": "Heavy Rains",
        "content": "Flooded roads slow the mountain passes near {town}.",
        "impact": "Iron and gem deliveries are running late.",
        "goods": ["iron", "gems"],
        "severity": Severity.HIGH,
    },
]


def urgency_for(margin: float) -> Severity:
    if margin > HIGH_URGENCY_MARGIN:
        return Severity.HIGH
    if margin > MEDIUM_URGENCY_MARGIN:
        return Severity.MEDIUM
    return Severity.LOW


def severity_for(event: "ActiveEvent") -> Severity:
    """News severity from the strongest price swing an event causes."""
    swing = max((abs(effect - 1.0) for effect in event.effects.values()), default=0.0)
    if swing >= 0.5:
        return Severity.HIGH
    if swing >= 0.3:
        return Severity.MEDIUM
    return Severity.LOW


class MarketIntelSystem:
    """Price alerts, opportunity detection and news for the current turn."""

    def __init__(self, reference: "ReferenceData", rng: RandomSource):
        self.reference = reference
        self.rng = rng

    # ─── Price alerts ────────────────────────────────────────────

    def create_price_alert(
        self,
        state: "GameState",
        good_id: str,
        target_price: float,
        direction: AlertDirection | str,
    ) -> PriceAlert:
        """
        Register a price watch for a good at whichever town the player is in.

        Raises:
            ReferenceLookupError: Unknown good
            ValueError: Non-positive target or unknown direction
        """
        good = self.reference.good(good_id)
        if target_price <= 0:
            raise ValueError(f"Alert target must be positive, got {target_price}")

        alert = PriceAlert(
            good_id=good.id,
            good_name=good.name,
            target_price=target_price,
            alert_type=AlertDirection(direction),
            created_turn=state.turn,
        )
        state.market_alerts.price_alerts.append(alert)
        logger.debug("Price alert %s: %s %s %s", alert.id, good_id, alert.alert_type.value, target_price)
        return alert

    def remove_price_alert(self, state: "GameState", alert_id: str) -> bool:
        """Delete a price alert. Returns True if it existed."""
        alerts = state.market_alerts.price_alerts
        for i, alert in enumerate(alerts):
            if alert.id == alert_id:
                del alerts[i]
                return True
        return False

    def check_price_alerts(self, state: "GameState") -> list[PriceAlert]:
        """
        Fire every active alert whose threshold the current town's price crossed.

        Above-alerts watch the sell price, below-alerts the buy price.
        A fired alert is deactivated for good.
        """
        triggered = []
        for alert in state.market_alerts.price_alerts:
            if not alert.is_active:
                continue

            quote = state.quote(alert.good_id)
            if alert.alert_type == AlertDirection.ABOVE:
                price, label, hit = quote.sell, "sell", quote.sell >= alert.target_price
            else:
                price, label, hit = quote.buy, "buy", quote.buy <= alert.target_price
            if not hit:
                continue

            alert.is_active = False
            alert.triggered_turn = state.turn
            town = self.reference.town(state.current_town_id)
            state.log(
                f"[Alert] {alert.good_name} {label} price in {town.name} is {price} "
                f"(target: {alert.alert_type.value} {alert.target_price:g})"
            )
            get_event_bus().emit(
                EventType.PRICE_ALERT_TRIGGERED,
                turn=state.turn,
                alert_id=alert.id,
                good_id=alert.good_id,
                price=price,
            )
            triggered.append(alert)
        return triggered

    # ─── Opportunities ───────────────────────────────────────────

    def find_trade_opportunities(self, state: "GameState") -> list[TradeOpportunity]:
        """Best buy-here/sell-there gaps from the current town, top five by margin."""
        source_town = self.reference.town(state.current_town_id)
        found: list[TradeOpportunity] = []

        for good in self.reference.goods:
            source_price = state.quote(good.id).buy
            if source_price <= 0:
                continue
            for town in self.reference.towns:
                if town.id == source_town.id:
                    continue
                target_price = state.quote(good.id, town.id).sell
                profit = target_price - source_price
                margin = profit / source_price
                if abs(profit) <= MIN_PROFIT or margin <= MIN_MARGIN:
                    continue

                found.append(TradeOpportunity(
                    type=OpportunityType.PRICE_GAP,
                    title=f"{good.name}: {source_town.name} to {town.name}",
                    description=(
                        f"Buy at {source_price} in {source_town.name}, "
                        f"sell for {target_price} in {town.name} ({margin:.0%} margin)"
                    ),
                    source_town_id=source_town.id,
                    target_town_id=town.id,
                    good_id=good.id,
                    good_name=good.name,
                    source_town_name=source_town.name,
                    target_town_name=town.name,
                    source_price=source_price,
                    target_price=target_price,
                    potential_profit=profit,
                    profit_margin=margin,
                    urgency=urgency_for(margin),
                    valid_until=state.turn + OPPORTUNITY_TTL,
                ))

        found.sort(key=lambda o: o.profit_margin, reverse=True)
        return found[:OPPORTUNITY_LIMIT]

    # ─── News ────────────────────────────────────────────────────

    def generate_news(self, state: "GameState") -> list[NewsItem]:
        """Roll flavor news and report each live event once. Returns the new items."""
        fresh: list[NewsItem] = []

        if roll_chance(self.rng, WEATHER_CHANCE):
            report = self.rng.choice(WEATHER_REPORTS)
            town = self.rng.choice(self.reference.towns)
            fresh.append(NewsItem(
                type=NewsType.WEATHER,
                title=report["title"],
                content=report["content"].format(town=town.name),
                impact=report["impact"],
                severity=report["severity"],
                turn=state.turn,
                expires_at=state.turn + FLAVOR_NEWS_TTL,
                town_id=town.id,
                good_ids=list(report["goods"]),
            ))

        if roll_chance(self.rng, VOLATILITY_CHANCE):
            good = self.rng.choice(self.reference.goods)
            town = self.rng.choice(self.reference.towns)
            fresh.append(NewsItem(
                type=NewsType.PRICE_CHANGE,
                title=f"{good.name} Prices Unsettled",
                content=f"Traders in {town.name} report wild swings in the price of {good.name.lower()}.",
                impact="Expect prices to move sharply between visits.",
                severity=Severity.MEDIUM,
                turn=state.turn,
                expires_at=state.turn + FLAVOR_NEWS_TTL,
                town_id=town.id,
                good_ids=[good.id],
            ))

        reported = {
            item.event_id for item in state.market_alerts.news
            if item.event_id and item.expires_at >= state.turn
        }
        for event in state.active_events:
            if event.id in reported:
                continue
            fresh.append(NewsItem(
                type=NewsType.EVENT,
                title=event.title,
                content=event.description,
                impact=self._describe_effects(event),
                severity=severity_for(event),
                turn=state.turn,
                expires_at=state.turn + event.duration,
                town_id=event.town_id,
                good_ids=list(event.effects),
                event_id=event.id,
            ))

        current = [item for item in state.market_alerts.news if item.expires_at >= state.turn]
        state.market_alerts.news = (fresh + current)[:NEWS_LIMIT]
        return fresh

    # ─── Refresh gate ────────────────────────────────────────────

    def refresh_market_intel(self, state: "GameState") -> bool:
        """
        Recompute alerts, opportunities and news for a new turn.

        Returns:
            False if this turn was already processed
        """
        intel = state.market_alerts
        if intel.last_checked_turn >= state.turn:
            return False

        self.check_price_alerts(state)
        intel.opportunities = self.find_trade_opportunities(state)
        self.generate_news(state)
        intel.last_checked_turn = state.turn
        return True

    def get_active_alerts(self, state: "GameState") -> ActiveAlerts:
        """Live price alerts, unexpired opportunities and unexpired news."""
        intel = state.market_alerts
        return ActiveAlerts(
            alerts=[a for a in intel.price_alerts if a.is_active],
            opportunities=[o for o in intel.opportunities if o.valid_until >= state.turn],
            news=[n for n in intel.news if n.expires_at >= state.turn],
        )

    def _describe_effects(self, event: "ActiveEvent") -> str:
        parts = []
        for good_id, effect in event.effects.items():
            name = self.reference.good(good_id).name
            change = round((effect - 1.0) * 100)
            parts.append(f"{name} {'+' if change >= 0 else ''}{change}%")
        return ", ".join(parts)
