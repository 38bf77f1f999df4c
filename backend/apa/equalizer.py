"""
APA 9-Ball equalizer: skill level to points-to-win.
"""
from __future__ import annotations

APA_SKILL_LEVELS = (1, 2, 3, 4, 5, 6, 7, 8, 9)

POINTS_TO_WIN: dict[int, int] = {
    1: 14,
    2: 19,
    3: 25,
    4: 31,
    5: 38,
    6: 46,
    7: 55,
    8: 65,
    9: 75,
}


def is_valid_skill_level(skill_level: int) -> bool:
    return skill_level in POINTS_TO_WIN


def get_points_to_win(skill_level: int) -> int:
    """Target for a skill level; unknown levels fall back to the SL1 target."""
    return POINTS_TO_WIN.get(skill_level, POINTS_TO_WIN[1])
