"""
Static reference tables for Trade Winds.

Towns, goods, seasons, seasonal festivals and the random event catalog.
Loaded once from the JSON files shipped next to this module, validated
into frozen pydantic models, and never mutated by the core.

Usage:
    from tradewinds.data import get_reference_data

    ref = get_reference_data()
    town = ref.town("northport")
    good = ref.good("silk")
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent


class ReferenceLookupError(LookupError):
    """Unknown id requested from a reference table.

    Reference data is assumed internally consistent, so this always
    indicates a programming error in the caller.
    """

    def __init__(self, table: str, key: str):
        self.table = table
        self.key = key
        super().__init__(f"Unknown {table} id: {key!r}")


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class EventKind(str, Enum):
    """Scope of a world event's price effects."""
    GLOBAL = "global"      # Applies in every town
    LOCAL = "local"        # Applies only while the player is in the event's town
    SEASONAL = "seasonal"  # Festivals, apply everywhere


class GoodCategory(str, Enum):
    FOOD = "food"
    PRESERVATIVE = "preservative"
    LUXURY = "luxury"
    RAW_MATERIAL = "raw_material"


# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------

class ReferenceModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class Town(ReferenceModel):
    """A market the merchant can travel to."""
    id: str
    name: str
    description: str = ""
    specialties: tuple[str, ...] = ()
    price_modifiers: dict[str, float] = Field(default_factory=dict)

    def price_modifier(self, good_id: str) -> float:
        """Static local multiplier for a good (1.0 when unspecified)."""
        return self.price_modifiers.get(good_id) or 1.0


class Good(ReferenceModel):
    """A tradeable commodity."""
    id: str
    name: str
    base_price: int
    category: GoodCategory
    description: str = ""

    @property
    def is_luxury(self) -> bool:
        return self.category == GoodCategory.LUXURY


class Season(ReferenceModel):
    """One step of the fixed seasonal cycle."""
    id: str
    name: str
    description: str = ""
    goods_availability: dict[str, float] = Field(default_factory=dict)
    price_modifiers: dict[str, float] = Field(default_factory=dict)
    festival_chance: float = 0.0
    duration: int = 5

    def price_modifier(self, good_id: str) -> float:
        return self.price_modifiers.get(good_id) or 1.0

    def availability_modifier(self, good_id: str) -> float:
        return self.goods_availability.get(good_id) or 1.0


class EventDefinition(ReferenceModel):
    """
    Catalog entry for a world event or seasonal festival.

    Local events may name the town they concern; festivals name the
    season they belong to.
    """
    id: str
    type: EventKind
    title: str
    description: str
    effects: dict[str, float] = Field(default_factory=dict)
    duration: int
    weight: float
    town_id: str | None = None
    season: str | None = None


class ReferenceData(ReferenceModel):
    """All static lookup tables, keyed by id."""
    towns: tuple[Town, ...]
    goods: tuple[Good, ...]
    seasons: tuple[Season, ...]
    festivals: tuple[EventDefinition, ...] = ()
    events: tuple[EventDefinition, ...] = ()

    def town(self, town_id: str) -> Town:
        for town in self.towns:
            if town.id == town_id:
                return town
        raise ReferenceLookupError("town", town_id)

    def good(self, good_id: str) -> Good:
        for good in self.goods:
            if good.id == good_id:
                return good
        raise ReferenceLookupError("good", good_id)

    def season(self, season_id: str) -> Season:
        for season in self.seasons:
            if season.id == season_id:
                return season
        raise ReferenceLookupError("season", season_id)

    def next_season(self, season_id: str) -> Season:
        """Season following season_id in the fixed cyclic order."""
        current = self.season(season_id)
        index = self.seasons.index(current)
        return self.seasons[(index + 1) % len(self.seasons)]

    def festivals_for(self, season_id: str) -> list[EventDefinition]:
        return [f for f in self.festivals if f.season == season_id]

    @property
    def start_town(self) -> Town:
        return self.towns[0]

    @property
    def first_season(self) -> Season:
        return self.seasons[0]

    def has_town(self, town_id: str) -> bool:
        return any(t.id == town_id for t in self.towns)

    def has_good(self, good_id: str) -> bool:
        return any(g.id == good_id for g in self.goods)

    def specialty_name(self, specialty: str) -> str:
        """
        Display name for a town specialty.

        Specialties may name a tradeable good or a broader trade the town
        is known for (e.g. "tools"); the latter has no Good entry.
        """
        for good in self.goods:
            if good.id == specialty:
                return good.name
        return specialty.replace("_", " ").title()


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------

def _read_table(path: Path, key: str) -> list[dict]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f).get(key, [])


def load_reference_data(data_dir: Path | str | None = None) -> ReferenceData:
    """
    Load and validate the reference tables from a directory of JSON files.

    Args:
        data_dir: Directory holding towns.json, goods.json, seasons.json
            and events.json. Defaults to the tables shipped with the package.

    Returns:
        Validated, immutable ReferenceData
    """
    base = Path(data_dir) if data_dir is not None else DATA_DIR

    data = ReferenceData.model_validate({
        "towns": _read_table(base / "towns.json", "towns"),
        "goods": _read_table(base / "goods.json", "goods"),
        "seasons": _read_table(base / "seasons.json", "seasons"),
        "festivals": _read_table(base / "seasons.json", "festivals"),
        "events": _read_table(base / "events.json", "events"),
    })
    logger.debug(
        "Loaded reference data: %d towns, %d goods, %d seasons, %d events",
        len(data.towns), len(data.goods), len(data.seasons), len(data.events),
    )
    return data


# Global singleton instance
_reference_data: ReferenceData | None = None


def get_reference_data() -> ReferenceData:
    """Get the shipped reference tables (loaded on first use)."""
    global _reference_data
    if _reference_data is None:
        _reference_data = load_reference_data()
    return _reference_data
