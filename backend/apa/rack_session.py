"""
Rack session: ball clicks, turn-overs and rack completion for one table.
Holds the current Rack and InningFlowState snapshots, recomputes totals after every
transition, and reports through on_rack_complete / on_live_rack_update.
Disallowed clicks are no-ops that return False.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

from . import trace as tr
from .dead_balls import (
    can_end_rack,
    implicit_dead_points,
    is_nine_ball_blocked,
    pocket_nine_ball,
    revert_nine_ball,
)
from .inning_flow import InningFlowState
from .rack_scoring import compute_rack_totals, rack_error
from .rack_state import Rack, new_rack
from .schemas import (
    NINE_BALL,
    BallState,
    LiveRackUpdate,
    MatchContext,
    OneAwayScope,
    Player,
    RackResult,
    RackTotals,
    validate_ball_number,
)
from .target_guard import allows_score, cap_live_points, reached_target

RackCompleteCallback = Callable[[RackResult], None]
LiveUpdateCallback = Callable[[LiveRackUpdate], None]


@dataclass(frozen=True)
class BallView:
    """Display state for one ball; a blocked 9 shows as dead and locked."""
    number: int
    state: str
    locked: bool

    def to_dict(self) -> dict:
        return {"number": self.number, "state": self.state, "locked": self.locked}


def _default_scope() -> OneAwayScope:
    from backend.config import one_away_scope
    return one_away_scope()


def _default_trace() -> tr.TraceSink | None:
    from backend.config import trace_enabled
    return tr.LoggingTraceSink() if trace_enabled() else None


class RackScoringSession:
    """
    One rack at a time, many racks per match. The caller owns the MatchContext
    and hands a fresh one in via update_context between racks.
    """

    def __init__(
        self,
        context: MatchContext,
        on_rack_complete: RackCompleteCallback,
        on_live_rack_update: LiveUpdateCallback | None = None,
        *,
        rack_number: int = 1,
        one_away_scope: OneAwayScope | None = None,
        trace: tr.TraceSink | None = None,
    ) -> None:
        self.context = context
        self.on_rack_complete = on_rack_complete
        self.on_live_rack_update = on_live_rack_update
        self.rack_number = rack_number
        self.one_away_scope = one_away_scope or _default_scope()
        self.trace = trace if trace is not None else _default_trace()
        self._rack = new_rack()
        self._flow = InningFlowState(context.active_player, context.shared_innings)

    # ---------- Read-only views ----------

    @property
    def rack(self) -> Rack:
        return self._rack

    @property
    def flow(self) -> InningFlowState:
        return self._flow

    @property
    def active_player(self) -> Player:
        return self._flow.active_player

    @property
    def shared_innings(self) -> int:
        return self._flow.shared_innings

    @property
    def dead_ball_mode(self) -> bool:
        return self._rack.dead_ball_mode

    @property
    def totals(self) -> RackTotals:
        return compute_rack_totals(self._rack, self.one_away_scope, self.context)

    @property
    def target_reached_player(self) -> Player | None:
        return reached_target(self.context, self.totals)

    @property
    def nine_ball_blocked(self) -> bool:
        return is_nine_ball_blocked(self._rack, self.context)

    @property
    def can_end_rack(self) -> bool:
        return can_end_rack(self.context, self.totals)

    @property
    def can_turn_over(self) -> bool:
        # A pocketed 9 must be ended or unselected first.
        return (
            not self.context.match_complete
            and self._rack.nine_ball.is_unscored
            and not self._rack.dead_ball_mode
        )

    @property
    def rack_error(self) -> str | None:
        if self.target_reached_player is not None:
            return None
        return rack_error(self.totals.total)

    @property
    def ball_views(self) -> list[BallView]:
        blocked = self.nine_ball_blocked
        views = []
        for n, ball in self._rack.items():
            if n == NINE_BALL and blocked:
                views.append(BallView(n, "dead", True))
            else:
                views.append(BallView(n, ball.label(), ball.locked))
        return views

    def live_update(self) -> LiveRackUpdate:
        return cap_live_points(self.context, self.totals)

    # ---------- Transitions ----------

    def click_ball(self, ball_number: int) -> bool:
        """Apply a click on ball_number. Returns True if the rack changed."""
        validate_ball_number(ball_number)
        if self.context.match_complete:
            return self._veto(ball_number, "match_complete")
        ball = self._rack.ball(ball_number)
        self._emit(tr.BALL_CLICK, ball=ball_number, state=ball.label(), player=self.active_player.value,
                   dead_ball_mode=self._rack.dead_ball_mode)

        if self.target_reached_player is not None:
            return self._click_frozen(ball_number, ball)
        if ball.locked:
            return self._veto(ball_number, "locked")
        if self._rack.dead_ball_mode:
            return self._click_dead_mode(ball_number, ball)
        if ball_number == NINE_BALL:
            return self._click_nine(ball)
        return self._click_regular(ball_number, ball)

    def _click_frozen(self, ball_number: int, ball: BallState) -> bool:
        # Target reached: only this inning's balls may be taken back.
        if ball.is_unscored or ball_number not in self._rack.inning_balls:
            return self._veto(ball_number, "target_reached")
        if ball_number == NINE_BALL:
            return self._unpocket_nine()
        self._commit(self._unscore(ball_number))
        return True

    def _click_dead_mode(self, ball_number: int, ball: BallState) -> bool:
        if ball_number == NINE_BALL:
            return self._veto(ball_number, "dead_ball_mode")
        if ball.is_dead:
            updated = self._rack.with_ball(ball_number, BallState.unscored())
            updated = replace(updated, auto_dead=updated.auto_dead - {ball_number})
            to_state = "unscored"
        elif ball.is_unscored or ball.is_scored_by(self.active_player):
            updated = self._rack.with_ball(ball_number, BallState.dead())
            updated = replace(updated, inning_balls=updated.inning_balls - {ball_number})
            to_state = "dead"
        else:
            return self._veto(ball_number, "opponent_ball")
        self._emit(tr.DEAD_TOGGLE, ball=ball_number, frm=ball.label(), to=to_state)
        self._commit(updated)
        return True

    def _click_nine(self, ball: BallState) -> bool:
        if ball.is_unscored:
            if self.nine_ball_blocked:
                return self._veto(NINE_BALL, "nine_blocked")
            updated, auto_marked = pocket_nine_ball(self._rack, self.active_player)
            self._emit(tr.AUTO_DEAD, player=self.active_player.value, balls=list(auto_marked))
            self._commit(updated)
            totals = self.totals
            self._emit(tr.NINE_VALUE, player=self.active_player.value, value=totals.nine_ball_value,
                       scope=self.one_away_scope.value, adjustment=totals.one_away_adjustment)
            return True
        if ball.is_scored_by(self.active_player) or ball.is_dead:
            return self._unpocket_nine()
        return self._veto(NINE_BALL, "opponent_ball")

    def _unpocket_nine(self) -> bool:
        updated, reverted = revert_nine_ball(self._rack)
        self._emit(tr.NINE_REVERT, balls=list(reverted))
        self._commit(updated)
        return True

    def _click_regular(self, ball_number: int, ball: BallState) -> bool:
        player = self.active_player
        if ball.is_unscored:
            if not allows_score(self.context, self.totals, player, ball_number):
                return self._veto(ball_number, "target_cap")
            updated = self._rack.with_ball(ball_number, BallState.scored_by(player))
            self._commit(replace(updated, inning_balls=updated.inning_balls | {ball_number}))
            return True
        if ball.is_scored_by(player):
            self._commit(self._unscore(ball_number))
            return True
        # Opponent's ball, or a dead ball outside dead-ball mode
        return self._veto(ball_number, "not_selectable")

    def _unscore(self, ball_number: int) -> Rack:
        """Take back a scored ball. With the 9 pocketed it goes dead and joins the revert set."""
        rack = self._rack
        if rack.nine_ball.player is not None:
            updated = rack.with_ball(ball_number, BallState.dead())
            updated = replace(updated, auto_dead=updated.auto_dead | {ball_number})
        else:
            updated = rack.with_ball(ball_number, BallState.unscored())
        return replace(updated, inning_balls=updated.inning_balls - {ball_number})

    def toggle_dead_ball_mode(self) -> bool:
        self._rack = replace(self._rack, dead_ball_mode=not self._rack.dead_ball_mode)
        return self._rack.dead_ball_mode

    def turn_over(self) -> bool:
        if not self.can_turn_over:
            return False
        before = self._flow
        self._rack, newly_locked = self._rack.lock_accounted()
        self._flow = self._flow.turn_over(self.context.bottom_player)
        self._emit(tr.TURN_OVER, frm=before.active_player.value, to=self._flow.active_player.value,
                   innings=self._flow.shared_innings, locked=list(newly_locked))
        return True

    def adjust_defensive_shots(self, player: Player, delta: int) -> int:
        """Move player's defensive-shot count by delta, floored at 0. Returns the new count."""
        count = max(0, self._rack.defensive_shots(player) + delta)
        self._rack = self._rack.with_defensive_shots(player, count)
        self._emit(tr.DEFENSIVE_SHOTS, player=player.value, delta=delta, count=count)
        return count

    def reset_rack(self) -> None:
        """Fresh rack; the active player and innings carry over."""
        self._rack = new_rack()
        self._flow = self._flow.reset_rack(self._flow.active_player, self._flow.shared_innings)
        self._emit(tr.RACK_RESET, active_player=self.active_player.value, innings=self.shared_innings)
        self._notify_live()

    def end_rack(self) -> RackResult | None:
        """Emit the rack result and start the next rack. None when the rack cannot end yet."""
        if self.context.match_complete or not self.can_end_rack:
            return None
        totals = self.totals
        implicit = implicit_dead_points(self.context, totals)
        result = RackResult(
            player1_points=totals.player_a_points,
            player2_points=totals.player_b_points,
            dead_balls=totals.dead_points + implicit,
            player1_innings=self.shared_innings,
            player2_innings=self.shared_innings,
            player1_defensive_shots=self._rack.defensive_shots(Player.A),
            player2_defensive_shots=self._rack.defensive_shots(Player.B),
            active_player=self.active_player,
            shared_innings=self.shared_innings,
            implicit_dead_balls=implicit,
        )
        self._emit(tr.END_RACK, **result.to_dict(), snapshot=self._rack.snapshot())
        for player in (Player.A, Player.B):
            projected = self.context.current_points(player) + totals.points_for(player)
            if projected > self.context.target(player):
                self._emit(tr.SCORE_CAPPED, player=player.value, projected=projected,
                           target=self.context.target(player))
        # Reset first so the context update from the callback sees an empty rack.
        self.rack_number += 1
        self.reset_rack()
        self.on_rack_complete(result)
        return result

    def update_context(self, context: MatchContext) -> None:
        """New cumulative points / completion flag from the match. Turn state is kept."""
        self.context = context
        self._notify_live()

    # ---------- Internals ----------

    def _commit(self, rack: Rack) -> None:
        self._rack = rack
        self._notify_live()

    def _notify_live(self) -> None:
        if self.on_live_rack_update:
            self.on_live_rack_update(self.live_update())

    def _veto(self, ball_number: int, reason: str) -> bool:
        self._emit(tr.BALL_VETOED, ball=ball_number, reason=reason)
        return False

    def _emit(self, kind: str, **payload) -> None:
        if self.trace:
            self.trace(tr.TraceEvent(kind=kind, rack_number=self.rack_number, payload=payload))
