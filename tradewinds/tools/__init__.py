"""Shared helpers for the Trade Winds systems."""

from .rng import (
    GameRandom,
    RandomSource,
    roll_chance,
    round_half_up,
    uniform,
    weighted_choice,
)

__all__ = [
    "GameRandom",
    "RandomSource",
    "roll_chance",
    "round_half_up",
    "uniform",
    "weighted_choice",
]
