"""
Game configuration persistence.

Stores the game constants (starting purse, turn limit, cargo hold,
target) and front-end settings in a JSON file. Missing keys fall back
to the defaults.
"""

import json
import logging
from pathlib import Path
from typing import TypedDict


logger = logging.getLogger(__name__)


class Config(TypedDict, total=False):
    """Game configuration."""
    starting_gold: int
    max_turns: int
    cargo_limit: int
    target_gold: int
    random_event_chance: float  # Chance a turn draws a catalog event
    strict_luxury_gate: bool  # Luxury goods need excellent/vip standing
    save_path: str  # Where the terminal front end keeps its save


DEFAULT_CONFIG: Config = {
    "starting_gold": 1000,
    "max_turns": 20,
    "cargo_limit": 100,
    "target_gold": 5000,
    "random_event_chance": 0.3,
    "strict_luxury_gate": True,
    "save_path": "tradewinds_save.json",
}

CONFIG_FILENAME = ".tradewinds_config.json"


def get_config_path(config_dir: Path | str = ".") -> Path:
    """Get path to config file."""
    return Path(config_dir) / CONFIG_FILENAME


def load_config(path: Path | str | None = None) -> Config:
    """Load config from file, or return defaults if not found or unreadable."""
    path = Path(path) if path is not None else get_config_path()

    if not path.exists():
        return DEFAULT_CONFIG.copy()

    try:
        with open(path, "r", encoding="utf-8") as f:
            saved = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return DEFAULT_CONFIG.copy()

    if not isinstance(saved, dict):
        logger.warning("Ignoring malformed config %s", path)
        return DEFAULT_CONFIG.copy()

    # Merge with defaults to handle missing keys
    config = DEFAULT_CONFIG.copy()
    config.update({k: v for k, v in saved.items() if k in DEFAULT_CONFIG})
    return config


def save_config(config: Config, path: Path | str | None = None) -> bool:
    """Save config to file. Returns True on success."""
    path = Path(path) if path is not None else get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        return True
    except OSError as e:
        logger.warning("Could not write config %s: %s", path, e)
        return False
