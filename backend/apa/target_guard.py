"""
Target-Capping Guard: no ball 1-8 may push a player past their skill-level target.
The 9-ball is exempt; a rack may end at or above target.
"""
from __future__ import annotations

from .schemas import (
    NINE_BALL,
    REGULAR_BALL_VALUE,
    LiveRackUpdate,
    MatchContext,
    Player,
    RackTotals,
)


def projected_total(context: MatchContext, totals: RackTotals, player: Player, value: int) -> int:
    return context.current_points(player) + totals.points_for(player) + value


def allows_score(
    context: MatchContext,
    totals: RackTotals,
    player: Player,
    ball_number: int,
    value: int = REGULAR_BALL_VALUE,
) -> bool:
    """False when scoring ball_number would take player past their target."""
    if ball_number == NINE_BALL:
        return True
    return projected_total(context, totals, player, value) <= context.target(player)


def reached_target(context: MatchContext, totals: RackTotals) -> Player | None:
    """First player (A before B) whose match + rack points reach their target."""
    for player in (Player.A, Player.B):
        if projected_total(context, totals, player, 0) >= context.target(player):
            return player
    return None


def cap_live_points(context: MatchContext, totals: RackTotals) -> LiveRackUpdate:
    return LiveRackUpdate(
        player1_points=min(totals.player_a_points, context.room_to_target(Player.A)),
        player2_points=min(totals.player_b_points, context.room_to_target(Player.B)),
    )
