"""
Game lifecycle management.

Handles new game, resume, save and restart. Saves written by older
versions are migrated on load so the systems can rely on every
collection being present.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .event_bus import EventType, get_event_bus
from .schema import CURRENT_SCHEMA_VERSION, GameState
from .store import GameStore, JsonGameStore

if TYPE_CHECKING:
    from ..engine import TradeEngine


logger = logging.getLogger(__name__)


def _version_tuple(version: str) -> tuple[int, ...]:
    """Convert version string to tuple for proper numeric comparison."""
    try:
        return tuple(int(x) for x in version.split("."))
    except ValueError:
        # Fallback for malformed versions
        return (0, 0, 0)


class GameManager:
    """
    Owns the current game and its save slot.

    Storage is delegated to a GameStore implementation:
    - JsonGameStore for production (file-based)
    - MemoryGameStore for testing (in-memory)
    """

    def __init__(self, store: GameStore | Path | str, engine: "TradeEngine"):
        """
        Args:
            store: GameStore instance, or path for JsonGameStore
            engine: Engine used to build fresh games and reprice loaded ones
        """
        if isinstance(store, (Path, str)):
            self.store = JsonGameStore(store)
        else:
            self.store = store
        self.engine = engine
        self.current: GameState | None = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def new_game(self) -> GameState:
        """Start a fresh game. The previous save is left alone until save()."""
        self.current = self.engine.create_new_game_state()
        return self.current

    def load_or_new(self) -> GameState:
        """
        Resume the saved game, or start a fresh one if there is nothing usable.

        A missing, corrupt or inconsistent save never raises; the problem
        is logged and a new game takes its place.
        """
        state = self.store.load()
        if state is None:
            if self.store.exists():
                logger.warning("Saved game could not be read; starting a new game")
            return self.new_game()

        if not self._is_consistent(state):
            logger.warning("Saved game refers to unknown towns or seasons; starting a new game")
            return self.new_game()

        migrated = self._migrate_state(state)

        # Prices are not trusted across a save boundary
        self.engine.generate_market_prices(state)

        self.current = state
        if migrated:
            self.save()

        logger.info("Resumed game on turn %d in %s", state.turn, state.current_town_id)
        get_event_bus().emit(
            EventType.GAME_LOADED,
            turn=state.turn,
            town_id=state.current_town_id,
            migrated=migrated,
        )
        return state

    def save(self) -> bool:
        """Persist the current game. Returns False if there is none or the write failed."""
        if self.current is None:
            return False

        saved = self.store.save(self.current)
        if saved:
            get_event_bus().emit(EventType.GAME_SAVED, turn=self.current.turn)
        else:
            logger.warning("Game could not be saved on turn %d", self.current.turn)
        return saved

    def restart(self) -> GameState:
        """Discard the save and the current game, then start over."""
        self.store.clear()
        return self.new_game()

    # -------------------------------------------------------------------------
    # Migration
    # -------------------------------------------------------------------------

    def _is_consistent(self, state: GameState) -> bool:
        reference = self.engine.reference
        try:
            reference.season(state.current_season)
        except LookupError:
            return False
        return reference.has_town(state.current_town_id)

    def _migrate_state(self, state: GameState) -> bool:
        """
        Bring a loaded game up to the current schema.

        The fill-ins run on every load; a save that omits a field looks
        current to pydantic because the version has a default. Entries
        naming goods or towns that are no longer in the reference tables
        are dropped so later lookups always succeed.

        Returns True if anything changed.
        """
        reference = self.engine.reference
        migrated = self._drop_unknown_ids(state)

        # v1.2.0: reputation block
        reputations = state.reputation.town_reputations
        if not reputations:
            state.reputation = self.engine.initialize_reputation_system()
            migrated = True
        else:
            for town in reference.towns:
                if town.id not in reputations:
                    self.engine.get_town_reputation(state, town.id)
                    migrated = True

        global_before = state.reputation.global_reputation
        self.engine.reputation.recompute_global(state)
        if state.reputation.global_reputation != global_before:
            migrated = True

        for good in reference.goods:
            if good.id not in state.inventory:
                state.inventory[good.id] = 0
                migrated = True

        cargo = sum(state.inventory.values())
        if cargo != state.current_cargo:
            logger.warning("Save cargo %d disagrees with inventory %d; using inventory", state.current_cargo, cargo)
            state.current_cargo = cargo
            migrated = True

        if _version_tuple(state.schema_version) < _version_tuple(CURRENT_SCHEMA_VERSION):
            logger.warning("Migrating save from schema %s to %s", state.schema_version, CURRENT_SCHEMA_VERSION)
            state.schema_version = CURRENT_SCHEMA_VERSION
            migrated = True

        return migrated

    def _drop_unknown_ids(self, state: GameState) -> bool:
        """Remove holdings, records and watches for goods or towns that no longer exist."""
        reference = self.engine.reference
        known_good = reference.has_good
        known_town = reference.has_town
        dropped = 0

        for good_id in [g for g in state.inventory if not known_good(g)]:
            del state.inventory[good_id]
            dropped += 1

        for good_id, basis in list(state.pending_purchases.items()):
            if not (known_good(good_id) and known_town(basis.town)):
                del state.pending_purchases[good_id]
                dropped += 1

        for town_id in [t for t in state.reputation.town_reputations if not known_town(t)]:
            del state.reputation.town_reputations[town_id]
            dropped += 1

        events = [e for e in state.active_events if e.town_id is None or known_town(e.town_id)]
        dropped += len(state.active_events) - len(events)
        state.active_events = events
        for event in events:
            for good_id in [g for g in event.effects if not known_good(g)]:
                del event.effects[good_id]
                dropped += 1

        journal = [r for r in state.trading_journal if known_good(r.good_id) and known_town(r.town_id)]
        dropped += len(state.trading_journal) - len(journal)
        state.trading_journal = journal

        intel = state.market_alerts
        alerts = [a for a in intel.price_alerts if known_good(a.good_id)]
        dropped += len(intel.price_alerts) - len(alerts)
        intel.price_alerts = alerts

        opportunities = [
            o for o in intel.opportunities
            if known_good(o.good_id) and known_town(o.source_town_id) and known_town(o.target_town_id)
        ]
        dropped += len(intel.opportunities) - len(opportunities)
        intel.opportunities = opportunities

        if dropped:
            logger.warning("Dropped %d save entries naming unknown goods or towns", dropped)
        return dropped > 0
