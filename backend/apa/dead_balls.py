"""
Auto-Dead-Ball Rule Engine.

Pocketing the 9-ball kills every unscored ball 1-8 and records them on the rack
so unpocketing it reverts exactly those balls. A rack that ends the match may
fall short of 10; the shortfall is reported as implicitly dead rather than
waiting on the table to be cleared. The 9-ball is blocked once either player
can reach their target on balls 1-8 alone.
"""
from __future__ import annotations

from dataclasses import replace

from .rack_state import Rack
from .schemas import (
    NINE_BALL,
    POINTS_PER_RACK,
    REGULAR_BALL_VALUE,
    BallState,
    MatchContext,
    Player,
    RackTotals,
)
from .target_guard import reached_target


def pocket_nine_ball(rack: Rack, player: Player) -> tuple[Rack, tuple[int, ...]]:
    """Score the 9 for player and mark unscored 1-8 dead. Returns (rack, auto-marked balls)."""
    auto_marked = rack.unscored_regular_balls()
    updates = {n: BallState.dead() for n in auto_marked}
    updates[NINE_BALL] = BallState.scored_by(player)
    updated = rack.with_balls(updates)
    return (
        replace(
            updated,
            auto_dead=frozenset(auto_marked),
            inning_balls=rack.inning_balls | {NINE_BALL},
        ),
        auto_marked,
    )


def revert_nine_ball(rack: Rack) -> tuple[Rack, tuple[int, ...]]:
    """
    Unscore the 9 and restore auto-marked balls to unscored.
    Only balls still dead are touched; anything scored since keeps its state.
    Returns (rack, reverted balls).
    """
    reverted = tuple(sorted(n for n in rack.auto_dead if rack.ball(n).is_dead))
    updates = {n: BallState.unscored() for n in reverted}
    updates[NINE_BALL] = BallState.unscored()
    updated = rack.with_balls(updates)
    return (
        replace(
            updated,
            auto_dead=frozenset(),
            inning_balls=rack.inning_balls - {NINE_BALL},
        ),
        reverted,
    )


def match_ending_player(context: MatchContext, totals: RackTotals) -> Player | None:
    return reached_target(context, totals)


def implicit_dead_points(context: MatchContext, totals: RackTotals) -> int:
    """Shortfall below 10 treated as dead when this rack ends the match; 0 otherwise."""
    if match_ending_player(context, totals) is None:
        return 0
    return max(0, POINTS_PER_RACK - totals.total)


def is_nine_ball_blocked(rack: Rack, context: MatchContext) -> bool:
    """True when an unscored 9 cannot matter: someone reaches target on balls 1-8."""
    if not rack.nine_ball.is_unscored:
        return False
    for player in (Player.A, Player.B):
        regular_points = rack.non_nine_count(player) * REGULAR_BALL_VALUE
        if context.current_points(player) + regular_points >= context.target(player):
            return True
    return False


def can_end_rack(context: MatchContext, totals: RackTotals) -> bool:
    return match_ending_player(context, totals) is not None or totals.total == POINTS_PER_RACK
