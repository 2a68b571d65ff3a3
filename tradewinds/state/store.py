"""
Save-game storage abstraction.

Separates persistence from game logic for testability. A store holds
exactly one save slot.
"""

import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from .schema import GameState


logger = logging.getLogger(__name__)


@runtime_checkable
class GameStore(Protocol):
    """
    Abstract storage interface for the save game.

    Implementations:
    - JsonGameStore: File-based persistence (production)
    - MemoryGameStore: In-memory storage (testing)
    """

    def load(self) -> GameState | None:
        """Load the saved game. Returns None if there is none or it is unreadable."""
        ...

    def save(self, state: GameState) -> bool:
        """Persist the game. Returns True on success."""
        ...

    def clear(self) -> None:
        """Remove the saved game."""
        ...

    def exists(self) -> bool:
        """Check if a save is present."""
        ...


class JsonGameStore:
    """
    File-based save storage using JSON.

    Features:
    - Automatic backup of the previous save on write
    - camelCase keys, compatible with existing save files
    """

    def __init__(self, path: Path | str = "tradewinds_save.json"):
        self.path = Path(path)

    @property
    def backup_path(self) -> Path:
        return self.path.with_suffix(self.path.suffix + ".bak")

    def load(self) -> GameState | None:
        """Load and validate the save file."""
        if not self.path.exists():
            return None

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return GameState.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Could not read save %s: %s", self.path, e)
            return None

    def save(self, state: GameState) -> bool:
        """Save state to JSON file with backup."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)

            # Backup previous save
            if self.path.exists():
                self.backup_path.write_text(self.path.read_text(encoding="utf-8"), encoding="utf-8")

            self.path.write_text(state.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
            return True
        except OSError as e:
            logger.warning("Could not write save %s: %s", self.path, e)
            return False

    def clear(self) -> None:
        """Delete the save file. The backup is kept."""
        if self.path.exists():
            self.path.unlink()

    def exists(self) -> bool:
        return self.path.exists()


class MemoryGameStore:
    """
    In-memory save storage for testing.

    No file I/O. Saves round-trip through the JSON wire format so a
    loaded game never aliases the live one.
    """

    def __init__(self, payload: str | None = None):
        self.payload = payload
        self.save_count = 0

    def load(self) -> GameState | None:
        if self.payload is None:
            return None
        try:
            return GameState.model_validate_json(self.payload)
        except ValidationError as e:
            logger.warning("Could not read in-memory save: %s", e)
            return None

    def save(self, state: GameState) -> bool:
        self.payload = state.model_dump_json(by_alias=True)
        self.save_count += 1
        return True

    def clear(self) -> None:
        self.payload = None

    def exists(self) -> bool:
        return self.payload is not None
