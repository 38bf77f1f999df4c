"""
Rack Scoring Engine: point totals from ball states.
Balls 1-8 are worth 1. The 9-ball is worth 2, or 1 when its scorer is "one away"
under the configured OneAwayScope; the lost point goes to dead points so a
complete rack still accounts for 10.
"""
from __future__ import annotations

from .rack_state import Rack
from .schemas import (
    NINE_BALL,
    NINE_BALL_VALUE,
    POINTS_PER_RACK,
    REGULAR_BALL_VALUE,
    REGULAR_BALLS,
    MatchContext,
    OneAwayScope,
    Player,
    RackTotals,
)

DEAD_NINE_BALL_VALUE = 1


def points_remaining(
    rack: Rack,
    player: Player,
    scope: OneAwayScope = OneAwayScope.PLAYER,
    context: MatchContext | None = None,
) -> int | None:
    """
    Points remaining for player before the 9-ball is counted.
    None when TARGET scope has no context to measure against.
    """
    if scope is OneAwayScope.PLAYER:
        return POINTS_PER_RACK - rack.non_nine_count(player)
    if scope is OneAwayScope.RACK:
        return POINTS_PER_RACK - rack.accounted_regular_count()
    if context is None:
        return None
    rack_points = rack.non_nine_count(player) * REGULAR_BALL_VALUE
    return context.target(player) - (context.current_points(player) + rack_points)


def nine_ball_value(
    rack: Rack,
    player: Player,
    scope: OneAwayScope = OneAwayScope.PLAYER,
    context: MatchContext | None = None,
) -> int:
    """Value of the 9-ball if pocketed by player. Pure in (rack, player, scope, context)."""
    remaining = points_remaining(rack, player, scope, context)
    return 1 if remaining == 1 else NINE_BALL_VALUE


def ball_value(
    rack: Rack,
    ball_number: int,
    player: Player,
    scope: OneAwayScope = OneAwayScope.PLAYER,
    context: MatchContext | None = None,
) -> int:
    if ball_number == NINE_BALL:
        return nine_ball_value(rack, player, scope, context)
    return REGULAR_BALL_VALUE


def compute_rack_totals(
    rack: Rack,
    scope: OneAwayScope = OneAwayScope.PLAYER,
    context: MatchContext | None = None,
) -> RackTotals:
    a_points = 0
    b_points = 0
    dead_points = 0
    for n in REGULAR_BALLS:
        ball = rack.ball(n)
        if ball.is_scored_by(Player.A):
            a_points += REGULAR_BALL_VALUE
        elif ball.is_scored_by(Player.B):
            b_points += REGULAR_BALL_VALUE
        elif ball.is_dead:
            dead_points += REGULAR_BALL_VALUE

    nine = rack.nine_ball
    nine_value = None
    adjustment = 0
    if nine.is_dead:
        dead_points += DEAD_NINE_BALL_VALUE
    elif nine.player is not None:
        nine_value = nine_ball_value(rack, nine.player, scope, context)
        adjustment = NINE_BALL_VALUE - nine_value
        if nine.player is Player.A:
            a_points += nine_value
        else:
            b_points += nine_value
        dead_points += adjustment

    return RackTotals(
        player_a_points=a_points,
        player_b_points=b_points,
        dead_points=dead_points,
        nine_ball_value=nine_value,
        one_away_adjustment=adjustment,
    )


def validate_rack_total(player_a_points: int, player_b_points: int, dead_points: int) -> bool:
    return player_a_points + player_b_points + dead_points == POINTS_PER_RACK


def rack_error(total: int) -> str | None:
    """Human-readable shortfall/excess, or None when the rack accounts for 10."""
    if total < POINTS_PER_RACK:
        return f"Rack total is {total}. Need {POINTS_PER_RACK - total} more points."
    if total > POINTS_PER_RACK:
        return f"Rack total is {total}. Remove {total - POINTS_PER_RACK} points."
    return None
