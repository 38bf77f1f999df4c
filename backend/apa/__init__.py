"""
APA 9-Ball rack engine: per-ball rack scoring with the one-away 9-ball rule,
auto-dead balls, inning flow, target capping and 20-point match conversion.
"""
from .schemas import (
    NINE_BALL,
    POINTS_PER_RACK,
    Player,
    BallStatus,
    BallState,
    OneAwayScope,
    parse_one_away_scope,
    RackTotals,
    MatchContext,
    RackResult,
    LiveRackUpdate,
)
from .equalizer import get_points_to_win, is_valid_skill_level
from .match_points import (
    MatchPointThreshold,
    MatchPointSplit,
    calculate_match_points,
    parse_match_point_outcome,
)
from .ppi import PpiResult, compute_ppi, compute_appi, format_ppi, lookup_expected_ppi
from .rack_state import Rack, new_rack
from .rack_scoring import compute_rack_totals, nine_ball_value, rack_error, validate_rack_total
from .dead_balls import pocket_nine_ball, revert_nine_ball, implicit_dead_points, is_nine_ball_blocked
from .inning_flow import InningFlowState
from .target_guard import allows_score, cap_live_points
from .trace import TraceEvent, TraceSink, LoggingTraceSink, RecordingTraceSink
from .rack_session import RackScoringSession, BallView
from .match import (
    ApaMatch,
    MatchStatus,
    MatchStateError,
    MatchValidationError,
    MatchOutcome,
    compute_match_outcome,
    derive_official_outcome,
)

__all__ = [
    "NINE_BALL",
    "POINTS_PER_RACK",
    "Player",
    "BallStatus",
    "BallState",
    "OneAwayScope",
    "parse_one_away_scope",
    "RackTotals",
    "MatchContext",
    "RackResult",
    "LiveRackUpdate",
    "get_points_to_win",
    "is_valid_skill_level",
    "MatchPointThreshold",
    "MatchPointSplit",
    "calculate_match_points",
    "parse_match_point_outcome",
    "PpiResult",
    "compute_ppi",
    "compute_appi",
    "format_ppi",
    "lookup_expected_ppi",
    "Rack",
    "new_rack",
    "compute_rack_totals",
    "nine_ball_value",
    "rack_error",
    "validate_rack_total",
    "pocket_nine_ball",
    "revert_nine_ball",
    "implicit_dead_points",
    "is_nine_ball_blocked",
    "InningFlowState",
    "allows_score",
    "cap_live_points",
    "TraceEvent",
    "TraceSink",
    "LoggingTraceSink",
    "RecordingTraceSink",
    "RackScoringSession",
    "BallView",
    "ApaMatch",
    "MatchStatus",
    "MatchStateError",
    "MatchValidationError",
    "MatchOutcome",
    "compute_match_outcome",
    "derive_official_outcome",
]
