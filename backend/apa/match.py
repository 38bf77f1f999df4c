"""
APA 9-Ball match: status machine, cumulative scoring across racks, final outcome.
Status: in_progress -> completed. Rack results are capped at each player's target;
the first player to reach target wins and the loser's points set the 20-point split.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .equalizer import get_points_to_win, is_valid_skill_level
from .match_points import calculate_match_points, parse_match_point_outcome
from .ppi import compute_ppi, format_ppi, parse_non_negative_int
from .rack_session import LiveUpdateCallback, RackScoringSession
from .schemas import MatchContext, OneAwayScope, Player, RackResult
from .trace import TraceSink

logger = logging.getLogger(__name__)

# ---------- Exceptions ----------


class MatchStateError(ValueError):
    """Invalid match status transition (e.g. scoring a completed match)."""


class MatchValidationError(ValueError):
    """Match data fails save-time checks (e.g. more defensive shots than innings)."""


class MatchStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


_VALID_TRANSITIONS: dict[MatchStatus, set[MatchStatus]] = {
    MatchStatus.IN_PROGRESS: {MatchStatus.COMPLETED},
    MatchStatus.COMPLETED: set(),
}


# ---------- Outcome helpers ----------


@dataclass(frozen=True)
class MatchOutcome:
    outcome: str
    player1_won: bool
    player1_match_points: int
    player2_match_points: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome,
            "player1_won": self.player1_won,
            "player1_match_points": self.player1_match_points,
            "player2_match_points": self.player2_match_points,
        }


def compute_match_outcome(
    player1_points: int,
    player2_points: int,
    player1_skill_level: int,
    player2_skill_level: int,
    player1_target: int | None = None,
    player2_target: int | None = None,
) -> MatchOutcome:
    """
    Player 1 wins iff they reached their target and player 2 did not.
    The loser's skill level and points pick the outcome from the match-point chart.
    """
    t1 = player1_target if player1_target is not None else get_points_to_win(player1_skill_level)
    t2 = player2_target if player2_target is not None else get_points_to_win(player2_skill_level)
    player1_won = player1_points >= t1 and player2_points < t2
    loser_sl = player2_skill_level if player1_won else player1_skill_level
    loser_points = player2_points if player1_won else player1_points
    outcome = calculate_match_points(loser_sl, loser_points)
    split = parse_match_point_outcome(outcome)
    return MatchOutcome(
        outcome=outcome,
        player1_won=player1_won,
        player1_match_points=split.winner if player1_won else split.loser,
        player2_match_points=split.loser if player1_won else split.winner,
    )


def derive_official_outcome(
    player1_skill_level: int | None,
    player2_skill_level: int | None,
    my_score: int | str | None,
    their_score: int | str | None,
) -> str:
    """'win' / 'loss' when exactly one side met their target, else 'unknown'."""
    mine = parse_non_negative_int(my_score)
    theirs = parse_non_negative_int(their_score)
    if mine is None or theirs is None:
        return "unknown"
    if not is_valid_skill_level(player1_skill_level) or not is_valid_skill_level(player2_skill_level):
        return "unknown"
    i_met = mine >= get_points_to_win(player1_skill_level)
    they_met = theirs >= get_points_to_win(player2_skill_level)
    if i_met and not they_met:
        return "win"
    if they_met and not i_met:
        return "loss"
    return "unknown"


# ---------- Match ----------


@dataclass
class PlayerLine:
    skill_level: int
    target: int
    points: int = 0
    defensive_shots: int = 0


class ApaMatch:
    """
    One match between seat A (player 1) and seat B (player 2).
    The lag winner breaks first; the lag loser is the bottom player whose
    turn-over closes each inning.
    """

    def __init__(
        self,
        player1_skill_level: int,
        player2_skill_level: int,
        lag_winner: Player = Player.A,
        *,
        match_id: str | None = None,
        one_away_scope: OneAwayScope | None = None,
        trace: TraceSink | None = None,
        on_live_rack_update: LiveUpdateCallback | None = None,
    ) -> None:
        for sl in (player1_skill_level, player2_skill_level):
            if not is_valid_skill_level(sl):
                raise ValueError(f"Skill level must be 1-9, got {sl}")
        self.match_id = match_id or str(uuid.uuid4())
        self.status = MatchStatus.IN_PROGRESS
        self.lag_winner = lag_winner
        self.bottom_player = lag_winner.opponent()
        self.players: dict[Player, PlayerLine] = {
            Player.A: PlayerLine(player1_skill_level, get_points_to_win(player1_skill_level)),
            Player.B: PlayerLine(player2_skill_level, get_points_to_win(player2_skill_level)),
        }
        self.racks: list[RackResult] = []
        self.innings = 0
        self.session = RackScoringSession(
            self.context(),
            self.apply_rack,
            on_live_rack_update,
            one_away_scope=one_away_scope,
            trace=trace,
        )

    def context(self, active_player: Player | None = None) -> MatchContext:
        a, b = self.players[Player.A], self.players[Player.B]
        return MatchContext(
            player1_current_points=a.points,
            player2_current_points=b.points,
            player1_target=a.target,
            player2_target=b.target,
            match_complete=self.status is MatchStatus.COMPLETED,
            active_player=active_player or self.lag_winner,
            bottom_player=self.bottom_player,
            shared_innings=self.innings,
        )

    @property
    def is_complete(self) -> bool:
        return self.status is MatchStatus.COMPLETED

    def _transition(self, new_status: MatchStatus) -> None:
        if new_status not in _VALID_TRANSITIONS[self.status]:
            raise MatchStateError(
                f"Invalid match transition: {self.status.value} -> {new_status.value}"
            )
        self.status = new_status

    def apply_rack(self, result: RackResult) -> None:
        """Fold a completed rack into the match totals, capping each player at target."""
        if self.is_complete:
            raise MatchStateError(f"Match {self.match_id} is already completed")
        for player in (Player.A, Player.B):
            line = self.players[player]
            raw = line.points + result.points_for(player)
            if raw > line.target:
                logger.debug("Capping %s at target %d (raw %d)", player.value, line.target, raw)
            line.points = min(raw, line.target)
            line.defensive_shots += result.defensive_shots_for(player)
        self.innings = result.shared_innings
        self.racks.append(result)
        if self.winner() is not None:
            self._transition(MatchStatus.COMPLETED)
            logger.info("Match %s completed after %d racks", self.match_id, len(self.racks))
        self.session.update_context(self.context(result.active_player))

    def end_rack(self) -> RackResult | None:
        if self.is_complete:
            raise MatchStateError(f"Match {self.match_id} is already completed")
        return self.session.end_rack()

    def winner(self) -> Player | None:
        for player in (Player.A, Player.B):
            line = self.players[player]
            if line.points >= line.target:
                return player
        return None

    def outcome(self) -> MatchOutcome | None:
        if not self.is_complete:
            return None
        a, b = self.players[Player.A], self.players[Player.B]
        return compute_match_outcome(a.points, b.points, a.skill_level, b.skill_level, a.target, b.target)

    def validate_for_save(self) -> None:
        """Defensive shots cannot exceed innings once a winner exists."""
        if self.winner() is None:
            return
        for player in (Player.A, Player.B):
            shots = self.players[player].defensive_shots
            if shots > self.innings:
                raise MatchValidationError(
                    f"Player {player.value} has {shots} defensive shots but only {self.innings} innings"
                )

    def summary(self) -> dict[str, Any]:
        outcome = self.outcome()
        players = {}
        for player, line in self.players.items():
            ppi = compute_ppi(line.points, self.innings, line.defensive_shots)
            players[player.value] = {
                "skill_level": line.skill_level,
                "target": line.target,
                "points": line.points,
                "innings": self.innings,
                "defensive_shots": line.defensive_shots,
                "ppi": ppi.value,
                "ppi_display": format_ppi(ppi),
            }
        return {
            "match_id": self.match_id,
            "status": self.status.value,
            "racks": len(self.racks),
            "innings": self.innings,
            "players": players,
            "outcome": outcome.to_dict() if outcome else None,
        }
