"""
Ball-State Store: the nine balls of one rack plus per-rack counters.
Immutable; every transition returns a new Rack.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping

from .schemas import (
    ALL_BALLS,
    NINE_BALL,
    REGULAR_BALLS,
    BallState,
    Player,
    validate_ball_number,
)


def _fresh_balls() -> tuple[BallState, ...]:
    return tuple(BallState.unscored() for _ in ALL_BALLS)


@dataclass(frozen=True)
class Rack:
    """
    balls[i] holds ball i + 1.
    auto_dead: balls the 9-ball marked dead, kept for an exact revert.
    inning_balls: balls scored since the last turn over.
    """
    balls: tuple[BallState, ...] = field(default_factory=_fresh_balls)
    defensive_shots_a: int = 0
    defensive_shots_b: int = 0
    auto_dead: frozenset[int] = frozenset()
    inning_balls: frozenset[int] = frozenset()
    dead_ball_mode: bool = False

    def __post_init__(self) -> None:
        if len(self.balls) != len(ALL_BALLS):
            raise ValueError(f"A rack holds {len(ALL_BALLS)} balls, got {len(self.balls)}")

    def ball(self, ball_number: int) -> BallState:
        return self.balls[validate_ball_number(ball_number) - 1]

    @property
    def nine_ball(self) -> BallState:
        return self.ball(NINE_BALL)

    def items(self) -> Iterable[tuple[int, BallState]]:
        return zip(ALL_BALLS, self.balls)

    def with_balls(self, updates: Mapping[int, BallState]) -> Rack:
        balls = list(self.balls)
        for ball_number, state in updates.items():
            balls[validate_ball_number(ball_number) - 1] = state
        return replace(self, balls=tuple(balls))

    def with_ball(self, ball_number: int, state: BallState) -> Rack:
        return self.with_balls({ball_number: state})

    def non_nine_count(self, player: Player) -> int:
        """Balls 1-8 scored by player in this rack."""
        return sum(1 for n in REGULAR_BALLS if self.ball(n).is_scored_by(player))

    def accounted_regular_count(self) -> int:
        """Balls 1-8 scored by anyone or dead."""
        return sum(1 for n in REGULAR_BALLS if not self.ball(n).is_unscored)

    def unscored_regular_balls(self) -> tuple[int, ...]:
        return tuple(n for n in REGULAR_BALLS if self.ball(n).is_unscored)

    def defensive_shots(self, player: Player) -> int:
        return self.defensive_shots_a if player is Player.A else self.defensive_shots_b

    def with_defensive_shots(self, player: Player, count: int) -> Rack:
        count = max(0, count)
        if player is Player.A:
            return replace(self, defensive_shots_a=count)
        return replace(self, defensive_shots_b=count)

    def lock_accounted(self) -> tuple[Rack, tuple[int, ...]]:
        """Lock every non-unscored, unlocked ball. Returns (rack, newly locked)."""
        newly_locked = tuple(n for n, b in self.items() if not b.is_unscored and not b.locked)
        locked = self.with_balls({n: self.ball(n).as_locked() for n in newly_locked})
        return replace(locked, inning_balls=frozenset()), newly_locked

    def snapshot(self) -> dict[int, str]:
        """Ball number -> display label, for tracing."""
        return {n: b.label() + ("*" if b.locked else "") for n, b in self.items()}


def new_rack() -> Rack:
    return Rack()
