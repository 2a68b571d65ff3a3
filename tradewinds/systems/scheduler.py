"""
Season and event scheduling for Trade Winds.

Runs once per travel, in this order:
1. update_seasons    - advance the season counter, roll to the next season
2. expire_events     - tick every live event down, drop the finished ones
3. generate_random_event / generate_seasonal_event - independent draws

Both draws can fire on the same turn.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..data.reference import EventKind
from ..state.event_bus import EventType, get_event_bus
from ..state.schema import ActiveEvent
from ..tools.rng import RandomSource, roll_chance, weighted_choice

if TYPE_CHECKING:
    from ..data.reference import ReferenceData
    from ..state.schema import GameState


logger = logging.getLogger(__name__)

DEFAULT_EVENT_CHANCE = 0.3  # 70% of turns draw no random event
FESTIVAL_PREFIX = "[Festival]"


class EventScheduler:
    """Advances seasons and draws, ages and expires world events."""

    def __init__(
        self,
        reference: "ReferenceData",
        rng: RandomSource,
        event_chance: float = DEFAULT_EVENT_CHANCE,
    ):
        self.reference = reference
        self.rng = rng
        self.event_chance = event_chance

    # ─── Seasons ─────────────────────────────────────────────────

    def update_seasons(self, state: "GameState") -> bool:
        """
        Advance one turn of the season cycle.

        Returns:
            True if the season changed
        """
        state.season_turn += 1
        season = self.reference.season(state.current_season)
        if state.season_turn <= season.duration:
            return False

        new_season = self.reference.next_season(season.id)
        state.current_season = new_season.id
        state.season_turn = 1
        state.log(f"The season turns to {new_season.name}. {new_season.description}")

        logger.info("Season changed: %s -> %s (turn %d)", season.id, new_season.id, state.turn)
        get_event_bus().emit(
            EventType.SEASON_CHANGED,
            turn=state.turn,
            before=season.id,
            after=new_season.id,
        )
        return True

    # ─── Expiry ──────────────────────────────────────────────────

    def expire_events(self, state: "GameState") -> list[ActiveEvent]:
        """
        Decrement every live event and remove those that ran out.

        Returns:
            The events that expired this turn
        """
        still_active: list[ActiveEvent] = []
        expired: list[ActiveEvent] = []
        for event in state.active_events:
            event.duration -= 1
            if event.duration > 0:
                still_active.append(event)
            else:
                expired.append(event)
        state.active_events = still_active

        bus = get_event_bus()
        for event in expired:
            logger.debug("Event expired: %s", event.id)
            bus.emit(EventType.WORLD_EVENT_EXPIRED, turn=state.turn, event_id=event.id)
        return expired

    # ─── Draws ───────────────────────────────────────────────────

    def generate_random_event(self, state: "GameState") -> ActiveEvent | None:
        """
        Maybe draw one event from the catalog, weighted by its weight.

        Local events without a town of their own are set in the current town.
        """
        if not roll_chance(self.rng, self.event_chance):
            return None

        definition = weighted_choice(self.reference.events, lambda e: e.weight, self.rng)
        if definition is None:
            return None

        town_id = None
        if definition.type == EventKind.LOCAL and definition.town_id is None:
            town_id = state.current_town_id
        return ActiveEvent.from_definition(definition, town_id=town_id)

    def generate_seasonal_event(self, state: "GameState") -> ActiveEvent | None:
        """Maybe start one of the current season's festivals."""
        season = self.reference.season(state.current_season)
        if not roll_chance(self.rng, season.festival_chance):
            return None

        festivals = self.reference.festivals_for(season.id)
        if not festivals:
            return None
        return ActiveEvent.from_definition(self.rng.choice(festivals))

    def activate(self, state: "GameState", event: ActiveEvent) -> None:
        """Push a freshly drawn event onto the live list and announce it."""
        state.active_events.append(event)
        state.log(self.describe(event))

        logger.debug("Event started: %s (%s, %d turns)", event.id, event.type.value, event.duration)
        get_event_bus().emit(
            EventType.WORLD_EVENT_STARTED,
            turn=state.turn,
            event_id=event.id,
            kind=event.type.value,
            town_id=event.town_id,
        )

    def describe(self, event: ActiveEvent) -> str:
        """Event log line for a new event."""
        if event.type == EventKind.GLOBAL:
            prefix = "[Global]"
        elif event.type == EventKind.SEASONAL:
            prefix = FESTIVAL_PREFIX
        else:
            prefix = f"[{self.reference.town(event.town_id).name}]"
        return f"{prefix} {event.title}: {event.description}"
