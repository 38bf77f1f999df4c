"""
Environment-driven settings for the rack engine and HTTP layer.
Read at call time so a changed environment takes effect without a reload.
"""
from __future__ import annotations

import logging
import os

from backend.apa.schemas import OneAwayScope, parse_one_away_scope

logger = logging.getLogger(__name__)

DEFAULT_ONE_AWAY_SCOPE = OneAwayScope.PLAYER
DEFAULT_CORS_ORIGINS = ("http://localhost:5173", "http://127.0.0.1:5173")

_TRUTHY = {"1", "true", "yes", "on"}


def one_away_scope() -> OneAwayScope:
    raw = os.environ.get("APA_ONE_AWAY_SCOPE", "").strip()
    if not raw:
        return DEFAULT_ONE_AWAY_SCOPE
    try:
        return parse_one_away_scope(raw)
    except ValueError:
        logger.warning(
            "Unknown APA_ONE_AWAY_SCOPE %r, using %s", raw, DEFAULT_ONE_AWAY_SCOPE.value
        )
        return DEFAULT_ONE_AWAY_SCOPE


def trace_enabled() -> bool:
    return os.environ.get("APA_TRACE", "").strip().lower() in _TRUTHY


def cors_origins() -> list[str]:
    raw = os.environ.get("APA_CORS_ORIGINS", "")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or list(DEFAULT_CORS_ORIGINS)
