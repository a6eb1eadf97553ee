"""Engine configuration: defaults, YAML loading, difficulty levels."""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Optional, Union

import yaml

logger = logging.getLogger("wizardchess.config")

# (name, search_depth, time_limit seconds, label)
_LEVELS = [
    ("level1", 1, 0.5, "Novice"),
    ("level2", 1, 0.7, "Beginner"),
    ("level3", 2, 0.9, "Apprentice"),
    ("level4", 2, 1.1, "Student"),
    ("level5", 2, 1.3, "Amateur"),
    ("level6", 3, 1.5, "Competitor"),
    ("level7", 3, 1.7, "Challenger"),
    ("level8", 3, 1.9, "Tactician"),
    ("level9", 4, 2.1, "Strategist"),
    ("level10", 4, 2.3, "Skilled"),
    ("level11", 4, 2.5, "Advanced"),
    ("level12", 5, 2.7, "Veteran"),
    ("level13", 5, 2.9, "Elite"),
    ("level14", 5, 3.1, "Expert"),
    ("level15", 6, 3.3, "Master"),
    ("level16", 6, 3.5, "Grandmaster"),
    ("level17", 7, 3.7, "Champion"),
    ("level18", 7, 3.9, "Legend"),
    ("level19", 8, 4.1, "Mythical"),
    ("level20", 9, 4.5, "Wizard Master"),
    ("easy", 2, 0.8, "Easy"),
    ("medium", 3, 1.5, "Medium"),
    ("hard", 4, 2.5, "Hard"),
    ("advanced", 5, 3.0, "Advanced"),
    ("expert", 6, 3.5, "Expert"),
    ("master", 8, 4.0, "Master"),
]

DEFAULT_DIFFICULTY = "medium"

DEFAULT_CONFIG: dict = {
    "search": {
        "depth": 4,
        "hint_depth": 2,
        "time_limit": None,
    },
    "evaluation": {
        "material": 1.0,
        "center": 1.0,
        "advancement": 1.0,
        "king_safety": 1.0,
    },
    "game": {
        "max_moves": 400,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8000,
    },
    "difficulty": {
        name: {"search_depth": depth, "time_limit": limit, "label": label}
        for name, depth, limit, label in _LEVELS
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge ``override`` into a copy of ``base``; nested dicts merge key by key."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(path: Optional[Union[str, Path]] = None) -> dict:
    """Load a YAML config file over the defaults.

    With no path, returns a copy of ``DEFAULT_CONFIG``.
    """
    if path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, "
                         f"got {type(data).__name__}")
    logger.info("Loaded config from %s", path)
    return _deep_merge(DEFAULT_CONFIG, data)


def get_difficulty(config: Optional[dict], name: str) -> dict:
    """Settings for a named difficulty level.

    Unknown names fall back to ``medium``. ``level_7`` is accepted as an
    alias of ``level7``.
    """
    levels = (config or DEFAULT_CONFIG).get("difficulty", {})
    key = str(name).lower().replace("_", "")
    if key not in levels:
        logger.warning("Unknown difficulty %r, using %r", name, DEFAULT_DIFFICULTY)
        key = DEFAULT_DIFFICULTY
    level = dict(levels.get(key) or DEFAULT_CONFIG["difficulty"][DEFAULT_DIFFICULTY])
    level["name"] = key
    return level
