"""
Command handlers for the Trade Winds CLI.

CommandHandler turns one line of player input into a CommandResult
holding rich renderables. It never prints, so the whole command set can
be driven from tests without a terminal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from rich.table import Table
from rich.text import Text

from ..data.reference import ReferenceLookupError
from ..state.event_bus import EngineEvent, EventType, get_event_bus
from ..state.schema import AlertDirection
from ..systems import GameOverError
from .renderer import (
    THEME,
    render_alerts,
    render_event_log,
    render_inventory,
    render_journal,
    render_market,
    render_reputation,
    render_routes,
    render_stats,
    render_status,
    render_summary,
)

if TYPE_CHECKING:
    from ..engine import TradeEngine
    from ..state.manager import GameManager
    from ..state.schema import GameState


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Output of one command."""
    output: list[Any] = field(default_factory=list)
    quit: bool = False

    def say(self, message: str, style: str | None = None) -> "CommandResult":
        self.output.append(Text(message, style=style) if style else message)
        return self


@dataclass
class Command:
    name: str
    description: str
    usage: str
    handler: Callable[[list[str]], CommandResult]
    saves: bool = False  # Persist the game after a successful run


class CommandHandler:
    """
    Dispatches slash commands against the manager's current game.

    Trading and travel commands save the game after they run. Triggered
    price alerts and the end of the game arrive over the event bus and are
    appended to the output of the command that caused them.
    """

    def __init__(self, engine: "TradeEngine", manager: "GameManager"):
        self.engine = engine
        self.manager = manager
        self.commands: dict[str, Command] = {}
        self._notices: list[Text] = []
        self._game_ended = False
        self._register_all()

        bus = get_event_bus()
        bus.on(EventType.PRICE_ALERT_TRIGGERED, self._on_alert_triggered)
        bus.on(EventType.GAME_ENDED, self._on_game_ended)

    def close(self) -> None:
        """Stop listening to the event bus."""
        bus = get_event_bus()
        bus.off(EventType.PRICE_ALERT_TRIGGERED, self._on_alert_triggered)
        bus.off(EventType.GAME_ENDED, self._on_game_ended)

    @property
    def state(self) -> "GameState":
        if self.manager.current is None:
            self.manager.load_or_new()
        return self.manager.current

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def handle(self, line: str) -> CommandResult:
        """Run one line of input."""
        parts = line.strip().split()
        if not parts:
            return CommandResult()

        name = parts[0].lower()
        if not name.startswith("/"):
            name = f"/{name}"

        command = self.commands.get(name)
        if command is None:
            return CommandResult().say(f"Unknown command: {parts[0]} (try /help)", THEME["warning"])

        result = command.handler(parts[1:])
        result.output.extend(self._notices)
        self._notices.clear()
        if self._game_ended:
            self._game_ended = False
            result.output.append(render_summary(self.engine, self.state))

        if command.saves and not self.manager.save():
            result.say("Warning: the game could not be saved.", THEME["warning"])
        return result

    def completion_words(self) -> dict[str, str]:
        """Words for the prompt completer, mapped to a short description."""
        words = {c.name: c.description for c in self.commands.values()}
        words.update({g.id: g.name for g in self.engine.reference.goods})
        words.update({t.id: t.name for t in self.engine.reference.towns})
        words.update({"above": "sell price rises to", "below": "buy price falls to", "all": "everything held"})
        return words

    # -------------------------------------------------------------------------
    # Event bus
    # -------------------------------------------------------------------------

    def _on_alert_triggered(self, event: EngineEvent):
        good = self.engine.reference.good(event.data["good_id"])
        self._notices.append(Text(
            f"Price alert {event.data['alert_id']}: {good.name} at {event.data['price']}",
            style=f"bold {THEME['accent']}",
        ))

    def _on_game_ended(self, event: EngineEvent):
        self._game_ended = True

    # -------------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------------

    def _register(self, name: str, description: str, usage: str, handler, saves: bool = False):
        self.commands[name] = Command(name, description, usage, handler, saves)

    def _register_all(self):
        self._register("/status", "Show gold, cargo and recent events", "/status", self.cmd_status)
        self._register("/market", "Show prices in this town", "/market", self.cmd_market)
        self._register("/buy", "Buy goods here", "/buy <good> <qty>", self.cmd_buy, saves=True)
        self._register("/sell", "Sell goods here", "/sell <good> <qty|all>", self.cmd_sell, saves=True)
        self._register("/travel", "Travel to a town (ends the turn)", "/travel <town>", self.cmd_travel, saves=True)
        self._register("/towns", "List towns", "/towns", self.cmd_towns)
        self._register("/inventory", "Show the cargo hold", "/inventory", self.cmd_inventory)
        self._register("/reputation", "Show standing in each town", "/reputation", self.cmd_reputation)
        self._register("/alerts", "Show alerts, opportunities and news", "/alerts", self.cmd_alerts)
        self._register(
            "/alert", "Watch a price", "/alert <good> <above|below> <price>", self.cmd_alert, saves=True
        )
        self._register("/unalert", "Remove a price alert", "/unalert <id>", self.cmd_unalert, saves=True)
        self._register("/journal", "Show recent trades", "/journal", self.cmd_journal)
        self._register("/routes", "Show completed buy/sell routes", "/routes", self.cmd_routes)
        self._register("/stats", "Show trading statistics", "/stats", self.cmd_stats)
        self._register("/score", "Show the current score", "/score", self.cmd_score)
        self._register("/save", "Save the game", "/save", self.cmd_save)
        self._register("/new", "Abandon this game and start over", "/new", self.cmd_new)
        self._register("/help", "List commands", "/help", self.cmd_help)
        self._register("/quit", "Save and exit", "/quit", self.cmd_quit)

    # -------------------------------------------------------------------------
    # Information
    # -------------------------------------------------------------------------

    def cmd_status(self, args: list[str]) -> CommandResult:
        return CommandResult([render_status(self.engine, self.state), render_event_log(self.state)])

    def cmd_market(self, args: list[str]) -> CommandResult:
        return CommandResult([render_market(self.engine, self.state)])

    def cmd_towns(self, args: list[str]) -> CommandResult:
        table = Table(title="Towns", border_style=THEME["primary"])
        table.add_column("ID", style=THEME["dim"])
        table.add_column("Town")
        table.add_column("Specialties")
        for town in self.engine.reference.towns:
            name = town.name + (" (here)" if town.id == self.state.current_town_id else "")
            specialties = ", ".join(self.engine.reference.specialty_name(s) for s in town.specialties)
            table.add_row(town.id, name, specialties)
        return CommandResult([table])

    def cmd_inventory(self, args: list[str]) -> CommandResult:
        return CommandResult([render_inventory(self.engine, self.state)])

    def cmd_reputation(self, args: list[str]) -> CommandResult:
        return CommandResult([render_reputation(self.engine, self.state)])

    def cmd_alerts(self, args: list[str]) -> CommandResult:
        return CommandResult([render_alerts(self.engine.get_active_alerts(self.state))])

    def cmd_journal(self, args: list[str]) -> CommandResult:
        if not self.state.trading_journal:
            return CommandResult().say("No trades yet.", THEME["dim"])
        return CommandResult([render_journal(self.state)])

    def cmd_routes(self, args: list[str]) -> CommandResult:
        routes = self.engine.calculate_route_analysis(self.state)
        if not routes:
            return CommandResult().say("No completed routes yet. Buy somewhere, sell somewhere else.", THEME["dim"])
        return CommandResult([render_routes(self.engine, routes)])

    def cmd_stats(self, args: list[str]) -> CommandResult:
        return CommandResult([render_stats(self.engine, self.engine.calculate_trading_stats(self.state))])

    def cmd_score(self, args: list[str]) -> CommandResult:
        if not self.state.is_playing:
            return CommandResult([render_summary(self.engine, self.state)])
        return CommandResult().say(f"Current score: {self.engine.calculate_score(self.state)}")

    def cmd_help(self, args: list[str]) -> CommandResult:
        table = Table(title="Commands", border_style=THEME["primary"])
        table.add_column("Usage", style=THEME["accent"])
        table.add_column("Description")
        for command in self.commands.values():
            table.add_row(command.usage, command.description)
        return CommandResult([table])

    # -------------------------------------------------------------------------
    # Trading
    # -------------------------------------------------------------------------

    def cmd_buy(self, args: list[str]) -> CommandResult:
        return self._trade(args, self.engine.buy_good, "/buy <good> <qty>")

    def cmd_sell(self, args: list[str]) -> CommandResult:
        if len(args) == 2 and args[1].lower() == "all":
            args = [args[0], str(self.state.inventory.get(args[0].lower(), 0))]
        return self._trade(args, self.engine.sell_good, "/sell <good> <qty|all>")

    def _trade(self, args: list[str], operation, usage: str) -> CommandResult:
        result = CommandResult()
        if len(args) != 2:
            return result.say(f"Usage: {usage}", THEME["warning"])

        good_id = args[0].lower()
        try:
            quantity = int(args[1])
        except ValueError:
            return result.say(f"Not a quantity: {args[1]}", THEME["warning"])

        if not self.state.is_playing:
            return result.say("The game is over. Use /new to play again.", THEME["warning"])

        try:
            outcome = operation(self.state, good_id, quantity)
        except ReferenceLookupError:
            return result.say(f"Unknown good: {good_id}", THEME["warning"])

        return result.say(outcome.message, THEME["profit"] if outcome.success else THEME["loss"])

    # -------------------------------------------------------------------------
    # Travel
    # -------------------------------------------------------------------------

    def cmd_travel(self, args: list[str]) -> CommandResult:
        result = CommandResult()
        if len(args) != 1:
            return result.say("Usage: /travel <town>", THEME["warning"])

        town_id = args[0].lower()
        log_before = list(self.state.event_log)
        try:
            self.engine.travel_to_town(self.state, town_id)
        except ReferenceLookupError:
            return result.say(f"Unknown town: {town_id}", THEME["warning"])
        except GameOverError as e:
            return result.say(str(e), THEME["warning"])

        # New log lines, oldest first
        fresh = [line for line in self.state.event_log if line not in log_before]
        for line in reversed(fresh):
            result.say(line)
        result.output.append(render_status(self.engine, self.state))
        return result

    # -------------------------------------------------------------------------
    # Alerts
    # -------------------------------------------------------------------------

    def cmd_alert(self, args: list[str]) -> CommandResult:
        result = CommandResult()
        if len(args) != 3:
            return result.say("Usage: /alert <good> <above|below> <price>", THEME["warning"])

        good_id, direction, raw_price = args[0].lower(), args[1].lower(), args[2]
        try:
            target = float(raw_price)
            alert = self.engine.create_price_alert(self.state, good_id, target, AlertDirection(direction))
        except ReferenceLookupError:
            return result.say(f"Unknown good: {good_id}", THEME["warning"])
        except ValueError as e:
            return result.say(f"Invalid alert: {e}", THEME["warning"])

        return result.say(f"Alert {alert.id} set: {alert.good_name} {direction} {target:g}")

    def cmd_unalert(self, args: list[str]) -> CommandResult:
        result = CommandResult()
        if len(args) != 1:
            return result.say("Usage: /unalert <id>", THEME["warning"])
        if self.engine.remove_price_alert(self.state, args[0]):
            return result.say(f"Alert {args[0]} removed.")
        return result.say(f"No alert with id {args[0]}", THEME["warning"])

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def cmd_save(self, args: list[str]) -> CommandResult:
        if self.manager.save():
            return CommandResult().say("Game saved.", THEME["dim"])
        return CommandResult().say("The game could not be saved.", THEME["warning"])

    def cmd_new(self, args: list[str]) -> CommandResult:
        state = self.manager.restart()
        logger.info("Player restarted the game")
        return CommandResult([state.event_log[0], render_status(self.engine, state)])

    def cmd_quit(self, args: list[str]) -> CommandResult:
        self.manager.save()
        return CommandResult(quit=True).say("Fair winds, merchant.", THEME["dim"])
