"""
Inning/Turn Flow: active player and shared innings for a whole match.

An inning closes once both seats have shot, so the counter only moves when the
bottom player (lag loser) turns the table over. Ball scoring never touches it.
"""
from __future__ import annotations

from dataclasses import dataclass

from .schemas import Player


@dataclass(frozen=True)
class InningFlowState:
    active_player: Player
    shared_innings: int = 0

    def __post_init__(self) -> None:
        if self.shared_innings < 0:
            raise ValueError(f"shared_innings cannot be negative, got {self.shared_innings}")

    def turn_over(self, bottom_player: Player) -> InningFlowState:
        """Flip the active player; close an inning if the outgoing player is the bottom player."""
        innings = self.shared_innings + 1 if self.active_player is bottom_player else self.shared_innings
        return InningFlowState(active_player=self.active_player.opponent(), shared_innings=innings)

    def reset_rack(self, new_active_player: Player, new_innings: int) -> InningFlowState:
        """Carry a finished rack's turn state into the next rack."""
        return InningFlowState(active_player=new_active_player, shared_innings=new_innings)
