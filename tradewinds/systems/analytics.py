"""
Trading analytics for Trade Winds.

Derived entirely from the trading journal; nothing here mutates state.

A route is a sell matched with the most recent earlier buy of the same
good. Sells with no earlier buy (for instance once the buy has scrolled
out of the bounded journal) produce no route.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..state.schema import (
    RouteAnalysis,
    RouteTotal,
    TradeBucket,
    TradeRecord,
    TradeType,
    TradingStats,
)

if TYPE_CHECKING:
    from ..state.schema import GameState


class AnalyticsSystem:
    """Route profitability and aggregate trading statistics."""

    def calculate_route_analysis(self, state: "GameState") -> list[RouteAnalysis]:
        """All matched buy→sell routes, most profitable first."""
        last_buy: dict[str, TradeRecord] = {}
        routes: list[RouteAnalysis] = []

        # Journal is chronological, so the last buy seen is the most recent prior one
        for record in state.trading_journal:
            if record.type == TradeType.BUY:
                last_buy[record.good_id] = record
                continue

            buy = last_buy.get(record.good_id)
            if buy is None:
                continue

            profit = (record.price_per_unit - buy.price_per_unit) * record.quantity
            routes.append(RouteAnalysis(
                from_town=buy.town_id,
                to_town=record.town_id,
                good_id=record.good_id,
                good_name=record.good_name,
                buy_price=buy.price_per_unit,
                sell_price=record.price_per_unit,
                quantity=record.quantity,
                profit=profit,
                profit_margin=profit / buy.total_value if buy.total_value else 0.0,
                turn=record.turn,
                season=record.season,
            ))

        routes.sort(key=lambda r: r.profit, reverse=True)
        return routes

    def calculate_trading_stats(self, state: "GameState") -> TradingStats:
        """Aggregate the route analysis into totals and per-good/town/season buckets."""
        routes = self.calculate_route_analysis(state)
        stats = TradingStats(total_trades=len(routes))
        if not routes:
            return stats

        route_totals: dict[tuple[str, str], int] = {}
        for route in routes:
            if route.profit > 0:
                stats.total_profit += route.profit
                stats.successful_trades += 1
            elif route.profit < 0:
                stats.total_loss += abs(route.profit)
                stats.lossful_trades += 1

            _add(stats.trades_by_good, route.good_id, route)
            _add(stats.trades_by_town, route.from_town, route)
            _add(stats.trades_by_season, route.season, route)

            key = (route.from_town, route.to_town)
            route_totals[key] = route_totals.get(key, 0) + route.profit

        stats.net_profit = stats.total_profit - stats.total_loss
        stats.average_profit_per_trade = stats.net_profit / stats.total_trades
        stats.best_trade = routes[0]
        stats.worst_trade = routes[-1]

        stats.favorite_good = max(
            stats.trades_by_good, key=lambda good_id: stats.trades_by_good[good_id].volume
        )
        (from_town, to_town), profit = max(route_totals.items(), key=lambda item: item[1])
        stats.most_profitable_route = RouteTotal(from_town=from_town, to_town=to_town, profit=profit)
        return stats


def _add(buckets: dict[str, TradeBucket], key: str, route: RouteAnalysis) -> None:
    bucket = buckets.setdefault(key, TradeBucket())
    bucket.trades += 1
    bucket.profit += route.profit
    bucket.volume += route.quantity
