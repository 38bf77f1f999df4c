"""
Tests for match orchestration: status transitions, capping, outcome, save validation.
"""
from __future__ import annotations

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from backend.apa.match import (
    ApaMatch,
    MatchStateError,
    MatchStatus,
    MatchValidationError,
    compute_match_outcome,
    derive_official_outcome,
)
from backend.apa.schemas import LiveRackUpdate, OneAwayScope, Player, RackResult
from backend.apa.trace import RecordingTraceSink


def rack_result(p1=0, p2=0, dead=0, innings=1, d1=0, d2=0, active=Player.A) -> RackResult:
    return RackResult(
        player1_points=p1,
        player2_points=p2,
        dead_balls=dead,
        player1_innings=innings,
        player2_innings=innings,
        player1_defensive_shots=d1,
        player2_defensive_shots=d2,
        active_player=active,
        shared_innings=innings,
    )


def play_full_rack(match: ApaMatch) -> None:
    """Active player runs balls 1-8 and the 9."""
    for n in range(1, 10):
        match.session.click_ball(n)
    match.end_rack()


@pytest.fixture
def match():
    return ApaMatch(2, 3, Player.A, match_id="m1", one_away_scope=OneAwayScope.PLAYER, trace=RecordingTraceSink())


class TestApaMatchSetup:
    def test_targets_from_skill_levels(self, match):
        assert match.players[Player.A].target == 19
        assert match.players[Player.B].target == 25
        assert match.status is MatchStatus.IN_PROGRESS

    def test_lag_loser_is_bottom(self):
        m = ApaMatch(4, 4, Player.B)
        assert m.bottom_player is Player.A
        assert m.session.active_player is Player.B

    def test_invalid_skill_level(self):
        with pytest.raises(ValueError):
            ApaMatch(0, 3)


class TestApplyRack:
    def test_accumulates(self, match):
        match.apply_rack(rack_result(p1=6, p2=4, innings=2, d1=1))
        match.apply_rack(rack_result(p1=3, p2=5, dead=2, innings=4, active=Player.B))
        assert match.players[Player.A].points == 9
        assert match.players[Player.B].points == 9
        assert match.players[Player.A].defensive_shots == 1
        assert match.innings == 4
        assert len(match.racks) == 2
        assert match.session.context.player1_current_points == 9
        assert match.session.context.active_player is Player.B

    def test_caps_at_target_and_completes(self, match):
        match.apply_rack(rack_result(p1=10))
        match.apply_rack(rack_result(p1=10, innings=3))
        assert match.players[Player.A].points == 19
        assert match.status is MatchStatus.COMPLETED
        assert match.winner() is Player.A
        assert match.session.context.match_complete

    def test_completed_match_rejects_racks(self, match):
        match.apply_rack(rack_result(p1=19))
        with pytest.raises(MatchStateError):
            match.apply_rack(rack_result(p2=2))
        with pytest.raises(MatchStateError):
            match.end_rack()

    def test_completed_cannot_transition_again(self, match):
        match.apply_rack(rack_result(p1=19))
        with pytest.raises(MatchStateError):
            match._transition(MatchStatus.COMPLETED)


class TestPlayedThroughSession:
    def test_rack_by_rack(self, match):
        play_full_rack(match)
        assert match.players[Player.A].points == 10
        assert match.session.rack_number == 2
        play_full_rack(match)
        assert match.players[Player.A].points == 19
        assert match.is_complete
        assert match.session.click_ball(1) is False

    def test_outcome(self, match):
        play_full_rack(match)
        play_full_rack(match)
        outcome = match.outcome()
        assert outcome.player1_won
        assert outcome.outcome == "20-0"
        assert (outcome.player1_match_points, outcome.player2_match_points) == (20, 0)

    def test_outcome_none_in_progress(self, match):
        assert match.outcome() is None

    def test_end_rack_live_updates_show_empty_rack(self):
        live = []
        m = ApaMatch(2, 3, Player.A, one_away_scope=OneAwayScope.PLAYER, on_live_rack_update=live.append)
        for n in range(1, 10):
            m.session.click_ball(n)
        assert live[-1] == LiveRackUpdate(10, 0)
        live.clear()
        m.end_rack()
        assert live
        assert all(update == LiveRackUpdate(0, 0) for update in live)
        assert m.players[Player.A].points == 10


class TestSummary:
    def test_summary_fields(self, match):
        match.apply_rack(rack_result(p1=6, p2=4, innings=4, d1=2))
        summary = match.summary()
        assert summary["status"] == "in_progress"
        assert summary["racks"] == 1
        assert summary["players"]["A"]["points"] == 6
        assert summary["players"]["A"]["ppi"] == pytest.approx(3.0)
        assert summary["players"]["B"]["ppi_display"] == "1.00"
        assert summary["outcome"] is None

    def test_summary_invalid_ppi(self, match):
        assert match.summary()["players"]["A"]["ppi_display"] == "—"


class TestValidateForSave:
    def test_defensive_shots_over_innings(self, match):
        match.apply_rack(rack_result(p1=19, innings=2, d2=3))
        with pytest.raises(MatchValidationError):
            match.validate_for_save()

    def test_valid(self, match):
        match.apply_rack(rack_result(p1=19, innings=3, d2=3))
        match.validate_for_save()

    def test_no_winner_skips_check(self, match):
        match.apply_rack(rack_result(p1=5, innings=1, d1=4))
        match.validate_for_save()


class TestOutcomeHelpers:
    def test_compute_match_outcome_player2_wins(self):
        outcome = compute_match_outcome(8, 25, 3, 3)
        assert not outcome.player1_won
        assert outcome.outcome == "18-2"
        assert (outcome.player1_match_points, outcome.player2_match_points) == (2, 18)

    def test_compute_match_outcome_player1_wins(self):
        outcome = compute_match_outcome(31, 12, 4, 2)
        assert outcome.player1_won
        assert outcome.outcome == "15-5"
        assert outcome.player1_match_points == 15

    def test_derive_official_outcome(self):
        assert derive_official_outcome(3, 3, 25, 10) == "win"
        assert derive_official_outcome(3, 3, "10", "25") == "loss"
        assert derive_official_outcome(3, 3, 25, 25) == "unknown"
        assert derive_official_outcome(3, 3, 5, 5) == "unknown"
        assert derive_official_outcome(None, 3, 25, 10) == "unknown"
        assert derive_official_outcome(3, 3, "", 10) == "unknown"
        assert derive_official_outcome(3, 3, -1, 10) == "unknown"
