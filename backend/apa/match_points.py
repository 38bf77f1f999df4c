"""
APA 9-Ball match-point conversion (20-point system).
The loser's skill level picks a row; the loser's pocketed points pick a bucket.
"""
from __future__ import annotations

from dataclasses import dataclass

# Outcomes from most lopsided to most competitive
MATCH_POINT_OUTCOMES = ("20-0", "19-1", "18-2", "17-3", "16-4", "15-5", "14-6", "13-7", "12-8")

UNKNOWN_SKILL_LEVEL_OUTCOME = "20-0"
OUT_OF_RANGE_OUTCOME = "12-8"


@dataclass(frozen=True)
class MatchPointThreshold:
    outcome: str
    min_points: int
    max_points: int

    def contains(self, points: int) -> bool:
        return self.min_points <= points <= self.max_points


def _row(*ranges: tuple[int, int]) -> tuple[MatchPointThreshold, ...]:
    return tuple(
        MatchPointThreshold(outcome, lo, hi)
        for outcome, (lo, hi) in zip(MATCH_POINT_OUTCOMES, ranges)
    )


# Loser's SL -> ordered, non-overlapping ranges of loser's points
DEFAULT_MATCH_POINT_CHART: dict[int, tuple[MatchPointThreshold, ...]] = {
    1: _row((0, 2), (3, 3), (4, 4), (5, 6), (7, 7), (8, 8), (9, 10), (11, 11), (12, 13)),
    2: _row((0, 3), (4, 5), (6, 7), (8, 8), (9, 10), (11, 12), (13, 14), (15, 16), (17, 18)),
    3: _row((0, 4), (5, 6), (7, 9), (10, 11), (12, 14), (15, 16), (17, 19), (20, 21), (22, 24)),
    4: _row((0, 5), (6, 8), (9, 11), (12, 14), (15, 18), (19, 21), (22, 24), (25, 27), (28, 30)),
    5: _row((0, 6), (7, 10), (11, 14), (15, 18), (19, 22), (23, 26), (27, 29), (30, 33), (34, 37)),
    6: _row((0, 8), (9, 12), (13, 17), (18, 22), (23, 27), (28, 31), (32, 36), (37, 40), (41, 45)),
    7: _row((0, 10), (11, 15), (16, 21), (22, 26), (27, 32), (33, 37), (38, 43), (44, 49), (50, 54)),
    8: _row((0, 13), (14, 19), (20, 26), (27, 32), (33, 39), (40, 45), (46, 52), (53, 58), (59, 64)),
    9: _row((0, 17), (18, 24), (25, 31), (32, 38), (39, 46), (47, 53), (54, 60), (61, 67), (68, 74)),
}


def calculate_match_points(
    loser_skill_level: int,
    loser_points: int,
    chart: dict[int, tuple[MatchPointThreshold, ...]] | None = None,
) -> str:
    """
    Outcome string (e.g. "18-2") for the loser's skill level and points.
    Unknown skill level -> "20-0"; points past the last bucket -> "12-8".
    """
    thresholds = (chart or DEFAULT_MATCH_POINT_CHART).get(loser_skill_level)
    if not thresholds:
        return UNKNOWN_SKILL_LEVEL_OUTCOME
    for threshold in thresholds:
        if threshold.contains(loser_points):
            return threshold.outcome
    return OUT_OF_RANGE_OUTCOME


@dataclass(frozen=True)
class MatchPointSplit:
    """Winner and loser match points; they sum to 20."""
    winner: int
    loser: int


def parse_match_point_outcome(outcome: str) -> MatchPointSplit:
    winner, loser = outcome.split("-")
    return MatchPointSplit(winner=int(winner), loser=int(loser))
