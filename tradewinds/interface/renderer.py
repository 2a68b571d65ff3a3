"""
Display and rendering helpers for the Trade Winds CLI.

Every builder returns a rich renderable instead of printing, so command
output can be captured in tests. Only show_banner() writes directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prompt_toolkit.styles import Style as PTStyle
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..state.schema import AlertDirection, GameStatus, ReputationStatus, TradeType
from ..systems import score_rating

if TYPE_CHECKING:
    from ..engine import TradeEngine
    from ..state.schema import ActiveAlerts, GameState, RouteAnalysis, TradingStats


# Shared console instance
console = Console()

# -----------------------------------------------------------------------------
# Theme
# -----------------------------------------------------------------------------

THEME = {
    "primary": "steel_blue",
    "secondary": "grey70",
    "gold": "gold3",
    "profit": "green3",
    "loss": "dark_red",
    "warning": "dark_goldenrod",
    "accent": "cyan",
    "dim": "dim",
}

# Prompt toolkit style to match theme
pt_style = PTStyle.from_dict({
    "completion-menu.completion": "bg:#1e3a5f #c0c0c0",
    "completion-menu.completion.current": "bg:#3a6a9f #ffffff bold",
    "completion-menu.meta.completion": "bg:#1e3a5f #808080",
    "completion-menu.meta.completion.current": "bg:#3a6a9f #c0c0c0",
})

REPUTATION_COLORS = {
    ReputationStatus.BLACKLISTED: "dark_red",
    ReputationStatus.POOR: "orange3",
    ReputationStatus.NEUTRAL: "grey70",
    ReputationStatus.GOOD: "green3",
    ReputationStatus.EXCELLENT: "steel_blue",
    ReputationStatus.VIP: "gold3",
}


def _signed(value: int) -> Text:
    if value > 0:
        return Text(f"+{value}", style=THEME["profit"])
    if value < 0:
        return Text(str(value), style=THEME["loss"])
    return Text("0", style=THEME["dim"])


def show_banner():
    console.print(Panel(
        Text("TRADE WINDS", style=f"bold {THEME['gold']}", justify="center"),
        subtitle="buy low, sail far, sell high",
        border_style=THEME["primary"],
    ))


# -----------------------------------------------------------------------------
# Status
# -----------------------------------------------------------------------------

def render_status(engine: "TradeEngine", state: "GameState") -> Text:
    """One-line summary of where the merchant stands."""
    town = engine.reference.town(state.current_town_id)
    season = engine.reference.season(state.current_season)
    line = Text()
    line.append(f"{town.name}", style=f"bold {THEME['accent']}")
    line.append(f"  Turn {state.turn}/{state.max_turns}", style=THEME["secondary"])
    line.append(f"  {season.name} ({state.season_turn}/{season.duration})", style=THEME["secondary"])
    line.append(f"  {state.gold} gold", style=f"bold {THEME['gold']}")
    line.append(f" / {state.target_gold}", style=THEME["dim"])
    line.append(f"  Cargo {state.current_cargo}/{state.cargo_limit}", style=THEME["secondary"])
    return line


def render_event_log(state: "GameState", limit: int = 6) -> Panel:
    lines = state.event_log[:limit] or ["Nothing to report."]
    return Panel("\n".join(lines), title="Recent Events", border_style=THEME["dim"])


# -----------------------------------------------------------------------------
# Market and hold
# -----------------------------------------------------------------------------

def render_market(engine: "TradeEngine", state: "GameState") -> Table:
    """Prices in the current town, after reputation."""
    town = engine.reference.town(state.current_town_id)
    table = Table(title=f"{town.name} Market", border_style=THEME["primary"])
    table.add_column("Good")
    table.add_column("Category", style=THEME["dim"])
    table.add_column("Buy", justify="right")
    table.add_column("Sell", justify="right")
    table.add_column("Stock", justify="right")
    table.add_column("Held", justify="right")

    for good in engine.reference.goods:
        buy, sell = engine.effective_prices(state, good.id)
        quote = state.quote(good.id)
        name = Text(good.name)
        if good.id in town.specialties:
            name.append(" *", style=THEME["gold"])
        table.add_row(
            name,
            good.category.value.replace("_", " "),
            str(buy),
            str(sell),
            str(quote.available),
            str(state.inventory.get(good.id, 0)),
        )
    return table


def render_inventory(engine: "TradeEngine", state: "GameState") -> Table:
    table = Table(title="Cargo Hold", border_style=THEME["primary"])
    table.add_column("Good")
    table.add_column("Qty", justify="right")
    table.add_column("Avg Cost", justify="right")
    table.add_column("Bought In", style=THEME["dim"])

    for good in engine.reference.goods:
        quantity = state.inventory.get(good.id, 0)
        if quantity <= 0:
            continue
        basis = state.pending_purchases.get(good.id)
        table.add_row(
            good.name,
            str(quantity),
            f"{basis.price:.1f}" if basis else "-",
            engine.reference.town(basis.town).name if basis else "-",
        )

    table.caption = f"{state.current_cargo}/{state.cargo_limit} cargo used"
    return table


# -----------------------------------------------------------------------------
# Reputation
# -----------------------------------------------------------------------------

def render_reputation(engine: "TradeEngine", state: "GameState") -> Table:
    table = Table(
        title=f"Reputation (global {state.reputation.global_reputation})",
        border_style=THEME["primary"],
    )
    table.add_column("Town")
    table.add_column("Points", justify="right")
    table.add_column("Status")
    table.add_column("Prices", justify="right")
    table.add_column("Benefit", style=THEME["dim"])

    for row in engine.get_reputation_summary(state):
        status: ReputationStatus = row["status"]
        table.add_row(
            row["town_name"],
            str(row["points"]),
            Text(status.value, style=REPUTATION_COLORS[status]),
            f"x{row['price_modifier']:.1f}",
            row["description"],
        )
    return table


# -----------------------------------------------------------------------------
# Market intelligence
# -----------------------------------------------------------------------------

def render_alerts(active: "ActiveAlerts") -> Group:
    """Price alerts, opportunities and news as three stacked tables."""
    alerts = Table(title="Price Alerts", border_style=THEME["primary"])
    alerts.add_column("ID", style=THEME["dim"])
    alerts.add_column("Good")
    alerts.add_column("Watch")
    alerts.add_column("Target", justify="right")
    for alert in active.alerts:
        watch = "sell >=" if alert.alert_type == AlertDirection.ABOVE else "buy <="
        alerts.add_row(alert.id, alert.good_name, watch, f"{alert.target_price:g}")

    opportunities = Table(title="Opportunities", border_style=THEME["primary"])
    opportunities.add_column("Good")
    opportunities.add_column("Route")
    opportunities.add_column("Buy", justify="right")
    opportunities.add_column("Sell", justify="right")
    opportunities.add_column("Margin", justify="right")
    opportunities.add_column("Urgency")
    for opp in active.opportunities:
        opportunities.add_row(
            opp.good_name,
            f"{opp.source_town_name} -> {opp.target_town_name}",
            str(opp.source_price),
            str(opp.target_price),
            f"{opp.profit_margin:.0%}",
            opp.urgency.value,
        )

    news = Table(title="News", border_style=THEME["primary"], show_lines=True)
    news.add_column("Headline")
    news.add_column("Impact", style=THEME["dim"])
    for item in active.news:
        news.add_row(f"[bold]{item.title}[/bold]\n{item.content}", item.impact)

    return Group(alerts, opportunities, news)


# -----------------------------------------------------------------------------
# Journal and analytics
# -----------------------------------------------------------------------------

def render_journal(state: "GameState", limit: int = 15) -> Table:
    table = Table(title="Trading Journal", border_style=THEME["primary"])
    table.add_column("Turn", justify="right", style=THEME["dim"])
    table.add_column("Type")
    table.add_column("Good")
    table.add_column("Qty", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Town", style=THEME["dim"])

    for record in reversed(state.trading_journal[-limit:]):
        is_buy = record.type == TradeType.BUY
        table.add_row(
            str(record.turn),
            Text(record.type.value, style=THEME["loss"] if is_buy else THEME["profit"]),
            record.good_name,
            str(record.quantity),
            str(record.price_per_unit),
            str(record.total_value),
            record.town_name,
        )
    return table


def render_routes(engine: "TradeEngine", routes: list["RouteAnalysis"], limit: int = 10) -> Table:
    table = Table(title="Routes", border_style=THEME["primary"])
    table.add_column("Good")
    table.add_column("From")
    table.add_column("To")
    table.add_column("Qty", justify="right")
    table.add_column("Profit", justify="right")
    table.add_column("Margin", justify="right")

    for route in routes[:limit]:
        table.add_row(
            route.good_name,
            engine.reference.town(route.from_town).name,
            engine.reference.town(route.to_town).name,
            str(route.quantity),
            _signed(route.profit),
            f"{route.profit_margin:.0%}",
        )
    return table


def render_stats(engine: "TradeEngine", stats: "TradingStats") -> Table:
    table = Table(title="Trading Statistics", show_header=False, border_style=THEME["primary"])
    table.add_column("Metric", style=THEME["secondary"])
    table.add_column("Value", justify="right")

    table.add_row("Completed routes", str(stats.total_trades))
    table.add_row("Profitable / losing", f"{stats.successful_trades} / {stats.lossful_trades}")
    table.add_row("Total profit", _signed(stats.total_profit))
    table.add_row("Total loss", _signed(-stats.total_loss))
    table.add_row("Net profit", _signed(stats.net_profit))
    table.add_row("Average per route", f"{stats.average_profit_per_trade:.1f}")
    if stats.favorite_good:
        table.add_row("Favorite good", engine.reference.good(stats.favorite_good).name)
    if stats.most_profitable_route:
        best = stats.most_profitable_route
        table.add_row(
            "Best route",
            f"{engine.reference.town(best.from_town).name} -> "
            f"{engine.reference.town(best.to_town).name} ({best.profit:+d})",
        )
    return table


# -----------------------------------------------------------------------------
# Game over
# -----------------------------------------------------------------------------

def render_summary(engine: "TradeEngine", state: "GameState") -> Panel:
    """Final score card."""
    score = engine.calculate_score(state)
    label, stars = score_rating(score)
    won = state.game_status == GameStatus.WON

    body = Text(justify="center")
    body.append("Target reached!\n" if won else "The trading season is over.\n", style="bold")
    body.append(f"Final gold: {state.gold}\n", style=THEME["gold"])
    body.append(f"Score: {score}\n", style="bold")
    body.append(f"{label}  " + "*" * stars, style=THEME["accent"])
    return Panel(body, title="Game Over", border_style=THEME["gold"] if won else THEME["secondary"])
