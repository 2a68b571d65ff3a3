"""
Tests for market price generation.
"""

import pytest

from tradewinds.state.schema import ActiveEvent
from tradewinds.systems import PriceGenerator, spread_prices
from tradewinds.tools import GameRandom


def _event(reference, event_id, town_id=None):
    definition = next(e for e in (*reference.events, *reference.festivals) if e.id == event_id)
    return ActiveEvent.from_definition(definition, town_id=town_id)


class TestPriceBounds:
    """Generated prices always respect the spread and stock floor."""

    @pytest.mark.parametrize("seed", [1, 2, 3, 42, 777])
    def test_every_pair_priced_within_bounds(self, reference, state, seed):
        """buy >= sell >= 0 and stock >= 1 for every town and good."""
        pricing = PriceGenerator(reference, GameRandom(seed))
        for _ in range(5):
            pricing.generate_market_prices(state)

            assert set(state.market_prices) == {t.id for t in reference.towns}
            for town in reference.towns:
                quotes = state.market_prices[town.id]
                assert set(quotes) == {g.id for g in reference.goods}
                for quote in quotes.values():
                    assert quote.buy >= quote.sell >= 0
                    assert quote.available >= 1

    def test_spread_prices(self):
        """Buy is +10%, sell is -10%, both rounded half up."""
        assert spread_prices(100) == (110, 90)
        assert spread_prices(19) == (21, 17)
        assert spread_prices(84) == (92, 76)

    def test_neutral_draw_gives_exact_prices(self, reference, state, scripted):
        """With a centered random draw, price is base x town x season."""
        PriceGenerator(reference, scripted()).generate_market_prices(state)

        # grain: 20 x 0.8 (Northport) x 1.2 (spring) = 19.2 -> 19
        grain = state.quote("grain", "northport")
        assert (grain.buy, grain.sell) == (21, 17)
        # stock: 10 x 0.8 spring availability
        assert grain.available == 8

        # spices: 120 x 0.7 (Stonehold) x 1.0 = 84
        spices = state.quote("spices", "stonehold")
        assert (spices.buy, spices.sell) == (92, 76)

    def test_regeneration_overwrites(self, reference, state):
        """Every call replaces the whole price table."""
        pricing = PriceGenerator(reference, GameRandom(5))
        before = state.market_prices
        pricing.generate_market_prices(state)
        assert state.market_prices is not before


class TestEventModifier:
    """Events scale prices according to their scope."""

    def test_global_event_applies_everywhere(self, engine, state, reference):
        """A global event reaches every town."""
        state.active_events.append(_event(reference, "war_outbreak"))
        for town in reference.towns:
            assert engine.pricing.event_modifier(state, town.id, "iron") == pytest.approx(1.5)

    def test_local_event_applies_in_its_town_while_present(self, engine, state, reference):
        """A local event only touches its own town, and only while the merchant is there."""
        state.active_events.append(_event(reference, "festival_northport"))

        assert engine.pricing.event_modifier(state, "northport", "fish") == pytest.approx(1.3)
        assert engine.pricing.event_modifier(state, "emberfall", "fish") == 1.0

        state.current_town_id = "emberfall"
        assert engine.pricing.event_modifier(state, "northport", "fish") == 1.0

    def test_festival_applies_everywhere(self, engine, state, reference):
        """Seasonal festivals are not town-scoped."""
        state.active_events.append(_event(reference, "spring_renewal"))
        assert engine.pricing.event_modifier(state, "greymoor", "silk") == pytest.approx(1.2)

    def test_events_multiply(self, engine, state, reference):
        """Overlapping events stack multiplicatively."""
        state.active_events.append(_event(reference, "war_outbreak"))
        state.active_events.append(_event(reference, "royal_wedding"))
        assert engine.pricing.event_modifier(state, "stonehold", "gems") == pytest.approx(0.8 * 1.6)

    def test_unaffected_good_is_neutral(self, engine, state, reference):
        """Goods an event does not mention keep a 1.0 multiplier."""
        state.active_events.append(_event(reference, "war_outbreak"))
        assert engine.pricing.event_modifier(state, "northport", "grain") == 1.0

    def test_event_raises_generated_price(self, reference, state, scripted):
        """A local festival pushes the current town's fish price up."""
        pricing = PriceGenerator(reference, scripted())
        pricing.generate_market_prices(state)
        calm = state.quote("fish").buy

        state.active_events.append(_event(reference, "festival_northport"))
        pricing.generate_market_prices(state)

        assert state.quote("fish").buy > calm
