"""
Tests for the inning/turn flow and the target-capping guard.
"""
from __future__ import annotations

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from backend.apa.inning_flow import InningFlowState
from backend.apa.schemas import MatchContext, Player, RackTotals
from backend.apa.target_guard import allows_score, cap_live_points, projected_total, reached_target


class TestInningFlow:
    def test_bottom_player_closes_inning(self):
        state = InningFlowState(Player.A, 0)
        state = state.turn_over(bottom_player=Player.B)
        assert state == InningFlowState(Player.B, 0)
        state = state.turn_over(bottom_player=Player.B)
        assert state == InningFlowState(Player.A, 1)

    def test_bottom_player_a(self):
        state = InningFlowState(Player.B, 3).turn_over(bottom_player=Player.A)
        assert state == InningFlowState(Player.A, 3)
        assert state.turn_over(bottom_player=Player.A).shared_innings == 4

    @pytest.mark.parametrize("start", [Player.A, Player.B])
    @pytest.mark.parametrize("bottom", [Player.A, Player.B])
    def test_innings_never_decrease(self, start, bottom):
        state = InningFlowState(start, 0)
        seen = [state.shared_innings]
        for _ in range(20):
            state = state.turn_over(bottom)
            seen.append(state.shared_innings)
        assert seen == sorted(seen)
        assert state.shared_innings == 10

    def test_turn_over_returns_new_snapshot(self):
        state = InningFlowState(Player.A, 2)
        state.turn_over(Player.A)
        assert state == InningFlowState(Player.A, 2)

    def test_reset_rack_overwrites(self):
        assert InningFlowState(Player.A, 0).reset_rack(Player.B, 5) == InningFlowState(Player.B, 5)

    def test_negative_innings_rejected(self):
        with pytest.raises(ValueError):
            InningFlowState(Player.A, -1)


def ctx(p1=36, p2=0, t1=38, t2=31) -> MatchContext:
    return MatchContext(player1_current_points=p1, player2_current_points=p2, player1_target=t1, player2_target=t2)


class TestTargetGuard:
    def test_ball_within_target_allowed(self):
        totals = RackTotals(player_a_points=1, player_b_points=0, dead_points=0)
        assert projected_total(ctx(), totals, Player.A, 1) == 38
        assert allows_score(ctx(), totals, Player.A, 4)

    def test_ball_past_target_vetoed(self):
        totals = RackTotals(player_a_points=2, player_b_points=0, dead_points=0)
        assert projected_total(ctx(), totals, Player.A, 1) == 39
        assert not allows_score(ctx(), totals, Player.A, 4)

    def test_nine_ball_exempt(self):
        totals = RackTotals(player_a_points=2, player_b_points=0, dead_points=0)
        assert allows_score(ctx(), totals, Player.A, 9, value=2)

    def test_other_player_unaffected(self):
        totals = RackTotals(player_a_points=2, player_b_points=3, dead_points=0)
        assert allows_score(ctx(), totals, Player.B, 4)

    def test_reached_target(self):
        assert reached_target(ctx(), RackTotals(2, 0, 0)) is Player.A
        assert reached_target(ctx(), RackTotals(1, 0, 0)) is None
        assert reached_target(ctx(p2=30), RackTotals(0, 1, 0)) is Player.B

    def test_live_points_capped(self):
        update = cap_live_points(ctx(p2=29), RackTotals(5, 4, 1))
        assert update.player1_points == 2
        assert update.player2_points == 2

    def test_live_points_uncapped(self):
        update = cap_live_points(ctx(p1=0, p2=0), RackTotals(3, 4, 3))
        assert (update.player1_points, update.player2_points) == (3, 4)
