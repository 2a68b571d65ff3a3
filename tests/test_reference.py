"""
Tests for the static reference tables.

The systems assume the tables are internally consistent, so these
checks guard the shipped JSON.
"""

import pytest

from tradewinds.data import (
    EventKind,
    GoodCategory,
    ReferenceLookupError,
    load_reference_data,
)


class TestReferenceTables:
    """Test the shipped towns, goods, seasons and events."""

    def test_towns_in_order(self, reference):
        """Northport is the first town and the starting point."""
        assert [t.id for t in reference.towns] == ["northport", "emberfall", "stonehold", "greymoor"]
        assert reference.start_town.id == "northport"

    def test_goods_and_categories(self, reference):
        """Seven goods with their base prices and categories."""
        grain = reference.good("grain")
        assert grain.base_price == 20
        assert grain.category == GoodCategory.FOOD
        assert reference.good("gems").base_price == 200
        luxuries = {g.id for g in reference.goods if g.is_luxury}
        assert luxuries == {"silk", "spices", "gems"}

    def test_seasons_cycle(self, reference):
        """Seasons roll spring -> summer -> autumn -> winter -> spring."""
        assert reference.first_season.id == "spring"
        assert reference.next_season("spring").id == "summer"
        assert reference.next_season("autumn").id == "winter"
        assert reference.next_season("winter").id == "spring"
        assert all(s.duration == 5 for s in reference.seasons)

    def test_every_season_has_a_festival(self, reference):
        """Each season has at least one festival tagged for it."""
        for season in reference.seasons:
            festivals = reference.festivals_for(season.id)
            assert festivals
            assert all(f.type == EventKind.SEASONAL for f in festivals)

    def test_local_events_name_a_known_town(self, reference):
        """Catalog local events refer to real towns."""
        local = [e for e in reference.events if e.type == EventKind.LOCAL]
        assert len(local) == 5
        for event in local:
            assert reference.has_town(event.town_id)

    def test_event_effects_reference_known_goods(self, reference):
        """Every event effect names a good in the goods table."""
        for event in (*reference.events, *reference.festivals):
            for good_id in event.effects:
                assert reference.has_good(good_id), f"{event.id} affects unknown {good_id}"

    def test_missing_modifier_defaults_to_one(self, reference):
        """Unlisted goods use a neutral multiplier."""
        assert reference.town("northport").price_modifier("tea") == 1.0
        assert reference.season("spring").availability_modifier("tea") == 1.0

    def test_specialties_may_name_trades_that_are_not_goods(self, reference):
        """Some specialties are broad trades with no Good entry."""
        assert "tools" in reference.town("emberfall").specialties
        assert not reference.has_good("tools")
        assert reference.specialty_name("tools") == "Tools"
        assert reference.specialty_name("rarities") == "Rarities"
        assert reference.specialty_name("fish") == "Fresh Fish"


class TestLookupFailures:
    """Unknown ids fail loudly instead of defaulting."""

    def test_unknown_town_raises(self, reference):
        """Unknown town id raises ReferenceLookupError."""
        with pytest.raises(ReferenceLookupError) as exc:
            reference.town("atlantis")
        assert exc.value.table == "town"
        assert exc.value.key == "atlantis"

    def test_lookup_error_is_lookup_error(self, reference):
        """ReferenceLookupError can be caught as a LookupError."""
        with pytest.raises(LookupError):
            reference.good("unobtainium")

    def test_reference_is_immutable(self, reference):
        """Reference models are frozen."""
        with pytest.raises(Exception):
            reference.good("grain").base_price = 1

    def test_load_from_custom_directory(self, tmp_path):
        """Tables can be loaded from another directory."""
        (tmp_path / "towns.json").write_text('{"towns": [{"id": "a", "name": "A"}]}')
        (tmp_path / "goods.json").write_text(
            '{"goods": [{"id": "g", "name": "G", "base_price": 10, "category": "food"}]}'
        )
        (tmp_path / "seasons.json").write_text('{"seasons": [{"id": "s", "name": "S"}]}')
        (tmp_path / "events.json").write_text('{"events": []}')

        data = load_reference_data(tmp_path)

        assert data.start_town.id == "a"
        assert data.festivals == ()
        assert data.next_season("s").id == "s"
