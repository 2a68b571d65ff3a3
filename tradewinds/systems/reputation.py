"""
Reputation system for Trade Winds.

Each town tracks a standing score in [-100, 100]. Status, price modifier
and exclusive goods access are pure functions of the score (see
REPUTATION_TIERS in the schema). All changes go through
update_reputation(), which clamps, re-derives the tier, refreshes the
global average and writes the audit trail.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..state.event_bus import EventType, get_event_bus
from ..state.schema import (
    REPUTATION_EVENT_LIMIT,
    ReputationEvent,
    ReputationStatus,
    ReputationSystemState,
    TownReputation,
)
from ..tools.rng import round_half_up

if TYPE_CHECKING:
    from ..data.reference import ReferenceData
    from ..state.schema import GameState


logger = logging.getLogger(__name__)

# Changes at least this large get a line in the player's event log
LOG_THRESHOLD = 5

STATUS_DESCRIPTIONS: dict[ReputationStatus, str] = {
    ReputationStatus.BLACKLISTED: "Banned from trading premium goods",
    ReputationStatus.POOR: "Higher prices, limited access",
    ReputationStatus.NEUTRAL: "Standard trading conditions",
    ReputationStatus.GOOD: "10% discount on all goods",
    ReputationStatus.EXCELLENT: "20% discount + rare gems access",
    ReputationStatus.VIP: "30% discount + all exclusive goods",
}


class ReputationSystem:
    """Maintains per-town standing and the derived global reputation."""

    def __init__(self, reference: "ReferenceData"):
        self.reference = reference

    def initialize_reputation_system(self) -> ReputationSystemState:
        """Fresh reputation block: every town neutral at 0 points."""
        return ReputationSystemState(
            global_reputation=0,
            town_reputations={
                town.id: TownReputation.from_points(town.id, 0)
                for town in self.reference.towns
            },
            reputation_events=[],
        )

    def get_town_reputation(self, state: "GameState", town_id: str) -> TownReputation:
        """Standing in a town; towns never seen before start neutral."""
        reputations = state.reputation.town_reputations
        if town_id not in reputations:
            self.reference.town(town_id)
            reputations[town_id] = TownReputation.from_points(town_id, 0)
        return reputations[town_id]

    def update_reputation(
        self,
        state: "GameState",
        town_id: str,
        points_change: int,
        action: str,
        description: str = "",
    ) -> TownReputation:
        """
        Apply a reputation change in one town.

        Args:
            state: Game state to mutate
            town_id: Town whose standing changes
            points_change: Signed delta; the result is clamped to [-100, 100]
            action: Short machine-readable cause ("buy", "sell", ...)
            description: Human-readable cause for the audit trail

        Returns:
            The updated TownReputation
        """
        rep = self.get_town_reputation(state, town_id)
        before_status = rep.status
        rep.set_points(rep.points + points_change)
        self.recompute_global(state)

        if points_change != 0:
            events = state.reputation.reputation_events
            events.insert(0, ReputationEvent(
                town_id=town_id,
                action=action,
                points_changed=points_change,
                turn=state.turn,
                description=description or action,
            ))
            del events[REPUTATION_EVENT_LIMIT:]

        if abs(points_change) >= LOG_THRESHOLD:
            town = self.reference.town(town_id)
            verb = "rose" if points_change > 0 else "fell"
            state.log(
                f"Your reputation in {town.name} {verb} by {abs(points_change)} "
                f"({rep.status.value})"
            )

        if rep.status != before_status:
            logger.info(
                "Reputation in %s: %s -> %s (%d points)",
                town_id, before_status.value, rep.status.value, rep.points,
            )

        if points_change != 0:
            get_event_bus().emit(
                EventType.REPUTATION_CHANGED,
                turn=state.turn,
                town_id=town_id,
                delta=points_change,
                points=rep.points,
                before=before_status.value,
                after=rep.status.value,
            )
        return rep

    def has_luxury_access(self, rep: TownReputation) -> bool:
        """Whether a merchant with this standing may buy luxury goods."""
        return bool(rep.exclusive_goods_access) or rep.status == ReputationStatus.VIP

    def get_reputation_summary(self, state: "GameState") -> list[dict]:
        """Per-town standing with a description of what the tier grants."""
        summary = []
        for town in self.reference.towns:
            rep = self.get_town_reputation(state, town.id)
            summary.append({
                "town_id": town.id,
                "town_name": town.name,
                "points": rep.points,
                "status": rep.status,
                "price_modifier": rep.price_modifier,
                "exclusive_goods_access": list(rep.exclusive_goods_access),
                "description": STATUS_DESCRIPTIONS[rep.status],
            })
        return summary

    def recompute_global(self, state: "GameState") -> None:
        """Set the global reputation to the rounded mean of town points."""
        reputations = state.reputation.town_reputations.values()
        if not reputations:
            state.reputation.global_reputation = 0
            return
        total = sum(rep.points for rep in reputations)
        state.reputation.global_reputation = round_half_up(total / len(reputations))
