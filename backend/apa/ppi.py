"""
Official APA PPI / aPPI helpers.
PPI = score / (innings - defensive shots); invalid when any input is not a
non-negative integer or the denominator is not positive.
"""
from __future__ import annotations

from dataclasses import dataclass

INVALID_DISPLAY = "—"


@dataclass(frozen=True)
class PpiResult:
    value: float | None
    is_valid: bool

    @classmethod
    def invalid(cls) -> PpiResult:
        return cls(value=None, is_valid=False)


def parse_non_negative_int(value: int | str | None) -> int | None:
    """Accepts ints or numeric text; anything else (blank, negative, fractional, bool) is None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        return int(value) if value >= 0 and value.is_integer() else None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if number < 0 or not number.is_integer():
        return None
    return int(number)


def compute_ppi(
    score: int | str | None,
    innings: int | str | None,
    defensive_shots: int | str | None,
) -> PpiResult:
    s = parse_non_negative_int(score)
    inn = parse_non_negative_int(innings)
    defense = parse_non_negative_int(defensive_shots)
    if s is None or inn is None or defense is None:
        return PpiResult.invalid()
    denominator = inn - defense
    if denominator <= 0:
        return PpiResult.invalid()
    return PpiResult(value=s / denominator, is_valid=True)


def compute_appi(
    score: int | str | None,
    innings: int | str | None,
    defensive_shots: int | str | None,
) -> PpiResult:
    """
    aPPI over context-adjusted inputs supplied by the caller.
    The adjustment itself happens upstream; the formula is the PPI one.
    """
    return compute_ppi(score, innings, defensive_shots)


def format_ppi(result: PpiResult) -> str:
    if not result.is_valid or result.value is None:
        return INVALID_DISPLAY
    return f"{result.value:.2f}"


# ---------- Expected PPI table (SL2-SL7 by win % bucket) ----------


@dataclass(frozen=True)
class ExpectedPpiRow:
    win_percent_min: int
    win_percent_max: int
    by_skill_level: dict[int, float]


def _expected_row(lo: int, hi: int, *values: float) -> ExpectedPpiRow:
    return ExpectedPpiRow(lo, hi, dict(zip(range(2, 8), values)))


EXPECTED_PPI_TABLE: tuple[ExpectedPpiRow, ...] = (
    _expected_row(90, 100, 1.2, 1.5, 1.85, 2.25, 2.7, 3.2),
    _expected_row(80, 90, 1.15, 1.45, 1.8, 2.2, 2.65, 3.15),
    _expected_row(70, 80, 1.1, 1.4, 1.75, 2.15, 2.6, 3.1),
    _expected_row(60, 70, 1.05, 1.35, 1.7, 2.1, 2.55, 3.05),
    _expected_row(50, 60, 1.0, 1.3, 1.65, 2.05, 2.5, 3.0),
    _expected_row(40, 50, 0.95, 1.25, 1.6, 2.0, 2.45, 2.95),
    _expected_row(30, 40, 0.9, 1.2, 1.55, 1.95, 2.4, 2.9),
    _expected_row(20, 30, 0.85, 1.15, 1.5, 1.9, 2.35, 2.85),
    _expected_row(10, 20, 0.8, 1.1, 1.45, 1.85, 2.3, 2.8),
)


def bucket_win_percentage(win_percent: float) -> ExpectedPpiRow:
    """Clamp to 10-100 and return the first bucket containing it (bucket edges go to the higher row)."""
    clamped = max(10.0, min(100.0, win_percent))
    for row in EXPECTED_PPI_TABLE:
        if row.win_percent_min <= clamped <= row.win_percent_max:
            return row
    return EXPECTED_PPI_TABLE[-1]


def lookup_expected_ppi(skill_level: int, win_percent: float) -> float | None:
    """None outside SL2-SL7."""
    if skill_level < 2 or skill_level > 7:
        return None
    return bucket_win_percentage(win_percent).by_skill_level[skill_level]


# ---------- Skill level prediction ----------

# (min_ppi, max_ppi, skill_level)
PPI_SKILL_LEVEL_RANGES: tuple[tuple[float, float, int], ...] = (
    (0.0, 0.5, 1),
    (0.51, 1.0, 2),
    (1.01, 1.5, 3),
    (1.51, 2.0, 4),
    (2.01, 2.5, 5),
    (2.51, 3.0, 6),
    (3.01, 3.5, 7),
    (3.51, 4.0, 8),
    (4.01, 999.0, 9),
)

APPI_SKILL_LEVEL_RANGES: tuple[tuple[float, float, int], ...] = (
    (0.95, 1.24, 2),
    (1.25, 1.54, 3),
    (1.55, 1.89, 4),
    (1.9, 2.29, 5),
    (2.3, 2.74, 6),
    (2.75, 3.24, 7),
)


def _predict(value: float, ranges: tuple[tuple[float, float, int], ...]) -> int | None:
    if value < 0:
        return None
    for lo, hi, skill_level in ranges:
        if lo <= value <= hi:
            return skill_level
    return None


def predict_skill_level_from_ppi(ppi: float) -> int | None:
    return _predict(ppi, PPI_SKILL_LEVEL_RANGES)


def predict_skill_level_from_appi(appi: float) -> int | None:
    return _predict(appi, APPI_SKILL_LEVEL_RANGES)
