"""FastAPI dependency setup."""

from __future__ import annotations

import logging
from typing import Optional

from wizardchess.config import DEFAULT_CONFIG, get_difficulty
from wizardchess.engine.evaluate import Evaluator

logger = logging.getLogger("wizardchess.api")


def init_app(app, config: Optional[dict] = None) -> None:
    """Initialize the FastAPI app from a config dict.

    Stores the config and a shared evaluator on ``app.state``.

    Args:
        app: FastAPI application instance.
        config: Configuration dict (see ``wizardchess.config``) with keys:
            - search.depth, search.hint_depth, search.time_limit
            - evaluation.material, .center, .advancement, .king_safety
            - difficulty.<name>.search_depth, .time_limit
    """
    config = config if config is not None else DEFAULT_CONFIG
    search_cfg = config.get("search", {})

    app.state.config = config
    app.state.evaluator = Evaluator.from_config(config)
    app.state.search_depth = search_cfg.get("depth", 4)
    app.state.hint_depth = search_cfg.get("hint_depth", 2)
    app.state.time_limit = search_cfg.get("time_limit")

    logger.info("Engine API initialized (depth=%d, hint_depth=%d)",
                app.state.search_depth, app.state.hint_depth)


def _ensure_initialized(app) -> None:
    if not hasattr(app.state, "config"):
        init_app(app)


def get_evaluator(app) -> Evaluator:
    _ensure_initialized(app)
    return app.state.evaluator


def search_settings(app, depth: Optional[int] = None, difficulty: Optional[str] = None,
                    time_limit: Optional[float] = None) -> tuple[int, Optional[float]]:
    """Resolve (depth, time_limit) for a request.

    An explicit depth or time limit wins over a named difficulty, which
    wins over the configured defaults.
    """
    _ensure_initialized(app)
    resolved_depth = app.state.search_depth
    resolved_limit = app.state.time_limit
    if difficulty is not None:
        level = get_difficulty(app.state.config, difficulty)
        resolved_depth = level.get("search_depth", resolved_depth)
        resolved_limit = level.get("time_limit", resolved_limit)
    if depth is not None:
        resolved_depth = depth
    if time_limit is not None:
        resolved_limit = time_limit
    return resolved_depth, resolved_limit


def hint_depth(app) -> int:
    _ensure_initialized(app)
    return app.state.hint_depth
