"""
Shared types for the APA 9-Ball rack engine.
Ball states, rack totals, match context snapshots and rack results.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


# ---------- Rack constants ----------
POINTS_PER_RACK = 10
NINE_BALL = 9
NINE_BALL_VALUE = 2
REGULAR_BALL_VALUE = 1
REGULAR_BALLS = tuple(range(1, 9))  # 1-8
ALL_BALLS = tuple(range(1, 10))  # 1-9


class Player(str, Enum):
    """Seat at the table. A is player 1, B is player 2."""
    A = "A"
    B = "B"

    def opponent(self) -> Player:
        return Player.B if self is Player.A else Player.A


class BallStatus(str, Enum):
    UNSCORED = "unscored"
    SCORED = "scored"
    DEAD = "dead"


class OneAwayScope(str, Enum):
    """
    What "points remaining" means when valuing the 9-ball.
    PLAYER: 10 minus the scoring player's balls 1-8 (never one away in a 9-ball rack).
    RACK: 10 minus every ball 1-8 already accounted for (also never one away).
    TARGET: the scoring player's distance to their match target.
    """
    PLAYER = "player"
    RACK = "rack"
    TARGET = "target"


def parse_one_away_scope(value: str | OneAwayScope) -> OneAwayScope:
    if isinstance(value, OneAwayScope):
        return value
    try:
        return OneAwayScope((value or "").strip().lower())
    except ValueError:
        raise ValueError(f"Unknown one-away scope: {value!r}") from None


@dataclass(frozen=True)
class BallState:
    """
    One ball: Unscored, ScoredBy(player) or Dead, plus the turn-over lock.
    player is set exactly when status is SCORED.
    """
    status: BallStatus = BallStatus.UNSCORED
    player: Player | None = None
    locked: bool = False

    def __post_init__(self) -> None:
        if (self.status is BallStatus.SCORED) != (self.player is not None):
            raise ValueError(f"Inconsistent ball state: {self.status.value} with player {self.player}")

    @classmethod
    def unscored(cls) -> BallState:
        return cls()

    @classmethod
    def scored_by(cls, player: Player, locked: bool = False) -> BallState:
        return cls(BallStatus.SCORED, player, locked)

    @classmethod
    def dead(cls, locked: bool = False) -> BallState:
        return cls(BallStatus.DEAD, None, locked)

    @property
    def is_unscored(self) -> bool:
        return self.status is BallStatus.UNSCORED

    @property
    def is_dead(self) -> bool:
        return self.status is BallStatus.DEAD

    def is_scored_by(self, player: Player) -> bool:
        return self.status is BallStatus.SCORED and self.player is player

    def as_locked(self) -> BallState:
        return BallState(self.status, self.player, True)

    def label(self) -> str:
        """Display key: unscored / playerA / playerB / dead."""
        if self.status is BallStatus.SCORED:
            return f"player{self.player.value}"
        return self.status.value


def validate_ball_number(ball_number: int) -> int:
    if ball_number not in ALL_BALLS:
        raise ValueError(f"Ball number must be 1-9, got {ball_number}")
    return ball_number


@dataclass(frozen=True)
class RackTotals:
    """Points derived from the current ball states of one rack."""
    player_a_points: int
    player_b_points: int
    dead_points: int
    nine_ball_value: int | None = None  # value credited for a pocketed 9-ball
    one_away_adjustment: int = 0  # point moved to dead_points when the 9 is worth 1

    @property
    def total(self) -> int:
        return self.player_a_points + self.player_b_points + self.dead_points

    def points_for(self, player: Player) -> int:
        return self.player_a_points if player is Player.A else self.player_b_points


@dataclass(frozen=True)
class MatchContext:
    """
    Snapshot supplied by the match session for each operation.
    player1 sits in seat A, player2 in seat B.
    """
    player1_current_points: int
    player2_current_points: int
    player1_target: int
    player2_target: int
    match_complete: bool = False
    active_player: Player = Player.A
    bottom_player: Player = Player.B
    shared_innings: int = 0

    def current_points(self, player: Player) -> int:
        return self.player1_current_points if player is Player.A else self.player2_current_points

    def target(self, player: Player) -> int:
        return self.player1_target if player is Player.A else self.player2_target

    def room_to_target(self, player: Player) -> int:
        return max(0, self.target(player) - self.current_points(player))


@dataclass
class RackResult:
    """Emitted once per completed rack."""
    player1_points: int
    player2_points: int
    dead_balls: int
    player1_innings: int
    player2_innings: int
    player1_defensive_shots: int
    player2_defensive_shots: int
    active_player: Player
    shared_innings: int
    implicit_dead_balls: int = 0  # already included in dead_balls

    def points_for(self, player: Player) -> int:
        return self.player1_points if player is Player.A else self.player2_points

    def defensive_shots_for(self, player: Player) -> int:
        return self.player1_defensive_shots if player is Player.A else self.player2_defensive_shots

    def to_dict(self) -> dict[str, Any]:
        return {
            "player1_points": self.player1_points,
            "player2_points": self.player2_points,
            "dead_balls": self.dead_balls,
            "player1_innings": self.player1_innings,
            "player2_innings": self.player2_innings,
            "player1_defensive_shots": self.player1_defensive_shots,
            "player2_defensive_shots": self.player2_defensive_shots,
            "active_player": self.active_player.value,
            "shared_innings": self.shared_innings,
            "implicit_dead_balls": self.implicit_dead_balls,
        }


@dataclass(frozen=True)
class LiveRackUpdate:
    """Partial rack totals for live display, capped at each player's room to target."""
    player1_points: int
    player2_points: int
