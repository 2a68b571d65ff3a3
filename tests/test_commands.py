"""
Tests for the CLI command handler.

Commands return renderables; these tests print them to an in-memory
console and check the text.
"""

import io

import pytest
from rich.console import Console

from tradewinds.interface import CommandHandler, CommandResult
from tradewinds.state import EventType, get_event_bus


@pytest.fixture
def handler(engine, manager):
    return CommandHandler(engine, manager)


def render(result: CommandResult) -> str:
    """Print a command's output to a string."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=120, color_system=None)
    for item in result.output:
        console.print(item)
    return buffer.getvalue()


class TestDispatch:
    """Test command lookup."""

    def test_unknown_command(self, handler):
        """Unknown commands point at /help."""
        assert "Unknown command: /dance (try /help)" in render(handler.handle("/dance"))

    def test_slash_is_optional(self, handler):
        """Bare command names work too."""
        assert "Northport Market" in render(handler.handle("market"))

    def test_blank_line(self, handler):
        """Empty input does nothing."""
        assert handler.handle("   ").output == []

    def test_state_loaded_lazily(self, handler, manager):
        """The first command starts or resumes a game."""
        assert manager.current is None
        handler.handle("/status")
        assert manager.current is not None

    def test_help_lists_commands(self, handler):
        """Help shows every command's usage."""
        text = render(handler.handle("/help"))
        for usage in ("/buy <good> <qty>", "/travel <town>", "/alert <good> <above|below> <price>"):
            assert usage in text

    def test_completion_words(self, handler):
        """Completion covers commands, goods and towns."""
        words = handler.completion_words()
        assert "/buy" in words
        assert words["grain"] == "Grain"
        assert words["emberfall"] == "Emberfall"


class TestTradeCommands:
    """Test /buy and /sell."""

    def test_buy_and_save(self, handler, memory_store):
        """A purchase is reported and the game is saved."""
        text = render(handler.handle("/buy grain 5"))

        assert "Bought 5 Grain for 105 gold" in text
        assert handler.state.gold == 895
        assert memory_store.save_count == 1

    def test_sell_all(self, handler):
        """'all' sells everything held."""
        handler.handle("/buy grain 5")
        text = render(handler.handle("/sell grain all"))
        assert "Sold 5 Grain for 85 gold" in text
        assert handler.state.inventory["grain"] == 0

    def test_failed_trade_message(self, handler):
        """Failures are reported, not raised."""
        text = render(handler.handle("/buy silk 1"))
        assert "too low to trade Fine Silk" in text

    def test_unknown_good(self, handler):
        """Unknown goods are reported."""
        assert "Unknown good: tea" in render(handler.handle("/buy tea 1"))

    @pytest.mark.parametrize("line", ["/buy grain", "/buy grain lots"])
    def test_bad_arguments(self, handler, line):
        """Malformed trades print usage or a quantity complaint."""
        text = render(handler.handle(line))
        assert "Usage" in text or "Not a quantity" in text

    def test_trading_blocked_after_game_over(self, handler):
        """No trades once the game has ended."""
        handler.state.gold = 9999
        handler.handle("/travel emberfall")
        assert "The game is over" in render(handler.handle("/buy grain 1"))


class TestTravelCommand:
    """Test /travel."""

    def test_travel_reports_new_log_lines(self, handler):
        """Travel prints what happened and the new status."""
        text = render(handler.handle("/travel emberfall"))

        assert "Traveled to Emberfall (Turn 2)" in text
        assert handler.state.current_town_id == "emberfall"

    def test_unknown_town(self, handler):
        """Unknown towns are reported and nothing changes."""
        text = render(handler.handle("/travel nowhere"))
        assert "Unknown town: nowhere" in text
        assert handler.state.turn == 1

    def test_winning_travel_shows_summary(self, handler):
        """Reaching the target prints the score card."""
        handler.state.gold = 6000
        text = render(handler.handle("/travel emberfall"))
        assert "Game Over" in text
        assert "Target reached!" in text

    def test_travel_after_game_over(self, handler):
        """A finished game refuses to travel."""
        handler.state.gold = 6000
        handler.handle("/travel emberfall")
        text = render(handler.handle("/travel northport"))
        assert handler.state.current_town_id == "emberfall"
        assert "Cannot travel: the game is over (won)." in text


class TestAlertCommands:
    """Test /alert and /unalert."""

    def test_set_and_remove_alert(self, handler):
        """Alerts are created with an id and can be removed."""
        text = render(handler.handle("/alert grain below 15"))
        assert "Alert" in text and "Grain below 15" in text

        alert_id = handler.state.market_alerts.price_alerts[0].id
        assert f"Alert {alert_id} removed." in render(handler.handle(f"/unalert {alert_id}"))
        assert handler.state.market_alerts.price_alerts == []

    def test_invalid_direction(self, handler):
        """Directions other than above/below are rejected."""
        assert "Invalid alert" in render(handler.handle("/alert grain sideways 15"))

    def test_remove_unknown_alert(self, handler):
        """Removing a missing alert is reported."""
        assert "No alert with id abc" in render(handler.handle("/unalert abc"))

    def test_alerts_view(self, handler):
        """The alerts view shows all three sections."""
        text = render(handler.handle("/alerts"))
        for title in ("Price Alerts", "Opportunities", "News"):
            assert title in text


class TestViews:
    """Test the read-only views."""

    @pytest.mark.parametrize("line, expected", [
        ("/status", "Turn 1/20"),
        ("/market", "Grain"),
        ("/towns", "Stonehold"),
        ("/inventory", "0/100 cargo used"),
        ("/reputation", "neutral"),
        ("/stats", "Trading Statistics"),
        ("/journal", "No trades yet."),
        ("/routes", "No completed routes yet."),
        ("/score", "Current score: 1000"),
    ])
    def test_view(self, handler, line, expected):
        """Each view renders its headline content."""
        assert expected in render(handler.handle(line))

    def test_views_do_not_save(self, handler, memory_store):
        """Read-only commands leave the save alone."""
        handler.handle("/market")
        handler.handle("/stats")
        assert memory_store.save_count == 0

    def test_journal_and_routes_after_trading(self, handler):
        """A buy in one town and a sale in another shows up as a route."""
        handler.handle("/buy grain 5")
        handler.handle("/travel emberfall")
        handler.handle("/sell grain 5")

        assert "Grain" in render(handler.handle("/journal"))
        assert "Routes" in render(handler.handle("/routes"))


class TestLifecycleCommands:
    """Test /save, /new and /quit."""

    def test_save(self, handler, memory_store):
        """/save writes the game."""
        assert "Game saved." in render(handler.handle("/save"))
        assert memory_store.exists()

    def test_new_game(self, handler):
        """/new starts over."""
        handler.handle("/buy grain 5")
        handler.handle("/new")
        assert handler.state.gold == 1000
        assert handler.state.inventory["grain"] == 0

    def test_quit(self, handler, memory_store):
        """/quit saves and signals the loop to stop."""
        result = handler.handle("/quit")
        assert result.quit
        assert memory_store.exists()
        assert "Fair winds, merchant." in render(result)


class TestTownsCommand:
    """Test /towns."""

    def test_lists_every_town_with_specialties(self, handler):
        """Specialties that are not goods are shown by name."""
        text = render(handler.handle("/towns"))

        assert "Northport (here)" in text
        assert "Fresh Fish" in text
        for trade in ("Tools", "Luxuries", "Rarities"):
            assert trade in text


class TestBusNotices:
    """Alerts and game end reach the player through the event bus."""

    def test_triggered_alert_is_highlighted(self, handler):
        """A price alert firing during travel is reported with its id."""
        handler.handle("/alert grain below 100")
        alert_id = handler.state.market_alerts.price_alerts[0].id

        text = render(handler.handle("/travel emberfall"))

        assert f"Price alert {alert_id}: Grain at" in text

    def test_game_end_shows_summary_once(self, handler):
        """The score card follows the command that ended the game, not later ones."""
        handler.state.gold = 6000
        assert "Game Over" in render(handler.handle("/travel emberfall"))
        assert "Game Over" not in render(handler.handle("/market"))

    def test_close_unsubscribes(self, handler):
        """A closed handler no longer listens."""
        bus = get_event_bus()
        assert bus.listener_count(EventType.GAME_ENDED) == 1
        handler.close()
        assert bus.listener_count(EventType.GAME_ENDED) == 0
        assert bus.listener_count(EventType.PRICE_ALERT_TRIGGERED) == 0
