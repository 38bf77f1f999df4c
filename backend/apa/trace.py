"""
Trace sinks: structured observer events for rack play.
A session calls its sink with one TraceEvent per transition; sinks never print.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

# Event kinds
BALL_CLICK = "ball_click"
BALL_VETOED = "ball_vetoed"
NINE_VALUE = "nine_value"
AUTO_DEAD = "auto_dead"
NINE_REVERT = "nine_revert"
DEAD_TOGGLE = "dead_toggle"
TURN_OVER = "turn_over"
DEFENSIVE_SHOTS = "defensive_shots"
RACK_RESET = "rack_reset"
END_RACK = "end_rack"
SCORE_CAPPED = "score_capped"


@dataclass(frozen=True)
class TraceEvent:
    kind: str
    rack_number: int
    payload: dict[str, Any] = field(default_factory=dict)


TraceSink = Callable[[TraceEvent], None]


class LoggingTraceSink:
    """Writes each event as a DEBUG record."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def __call__(self, event: TraceEvent) -> None:
        self.log.debug("rack %d %s %s", event.rack_number, event.kind, event.payload)


class RecordingTraceSink:
    """Keeps events in memory, for tests and replay."""

    def __init__(self) -> None:
        self.events: list[TraceEvent] = []

    def __call__(self, event: TraceEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [e.kind for e in self.events]

    def of_kind(self, kind: str) -> list[TraceEvent]:
        return [e for e in self.events if e.kind == kind]

    def clear(self) -> None:
        self.events.clear()
