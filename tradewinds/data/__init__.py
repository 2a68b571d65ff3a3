"""Static reference data for Trade Winds."""

from .reference import (
    DATA_DIR,
    EventDefinition,
    EventKind,
    Good,
    GoodCategory,
    ReferenceData,
    ReferenceLookupError,
    Season,
    Town,
    get_reference_data,
    load_reference_data,
)

__all__ = [
    "DATA_DIR",
    "EventDefinition",
    "EventKind",
    "Good",
    "GoodCategory",
    "ReferenceData",
    "ReferenceLookupError",
    "Season",
    "Town",
    "get_reference_data",
    "load_reference_data",
]
