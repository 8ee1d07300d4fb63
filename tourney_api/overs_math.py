# tourney_api/overs_math.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Literal, Optional, Tuple, Union

from tourney_api.models import Innings, PointsConfig

BALLS_PER_OVER = 6
ALL_OUT_WICKETS = 10

# Format label that switches a tournament to the ball-count regime
BALL_COUNT_FORMAT = "100 Balls"
BALL_COUNT_LIMIT = 100
DEFAULT_OVERS_LIMIT = 20

OversRegime = Literal["TRADITIONAL", "BALL_COUNT"]
OversLike = Union[str, int, float]


@dataclass(frozen=True)
class RegimePolicy:
    """
    How one overs regime measures an innings.

    Volumes are counted in integer UNITS (balls for the traditional regime,
    raw counts for the ball-count regime) so sums are exact; `units_per_over`
    converts units back to the real overs figure shown in standings.
    """
    name: OversRegime
    units_per_over: int
    innings_units: Callable[[int, int], int]  # (overs, balls) -> units


def _traditional_units(overs: int, balls: int) -> int:
    return overs * BALLS_PER_OVER + balls


def _ball_count_units(overs: int, balls: int) -> int:
    # The "overs" field already denotes balls; there is no part-over field.
    return overs


REGIMES: Dict[str, RegimePolicy] = {
    "TRADITIONAL": RegimePolicy("TRADITIONAL", BALLS_PER_OVER, _traditional_units),
    "BALL_COUNT": RegimePolicy("BALL_COUNT", 1, _ball_count_units),
}

BALL_COUNT_POINTS = PointsConfig(win=4, draw=2, loss=0)


def regime_for_format(overs_per_match: Optional[str]) -> OversRegime:
    if (overs_per_match or "").strip().lower() == BALL_COUNT_FORMAT.lower():
        return "BALL_COUNT"
    return "TRADITIONAL"


def overs_limit_for_format(overs_per_match: Optional[str]) -> int:
    """
    Match allotment for a format label: 100 for "100 Balls", otherwise the
    integer part of the label ("20", "50", "12.5" -> 12). Falls back to 20.
    Fractional custom limits are truncated because all-out credit is counted
    in whole balls-per-over units.
    """
    if regime_for_format(overs_per_match) == "BALL_COUNT":
        return BALL_COUNT_LIMIT

    try:
        limit = int(float(str(overs_per_match).strip()))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_OVERS_LIMIT
    return limit if limit > 0 else DEFAULT_OVERS_LIMIT


def effective_points(points: PointsConfig, regime: OversRegime) -> PointsConfig:
    """Ball-count tournaments always score 4/2/0, whatever was configured."""
    if regime == "BALL_COUNT":
        return BALL_COUNT_POINTS
    return points


def _n(x: Optional[int]) -> int:
    return int(x) if x is not None else 0


def innings_units(innings: Optional[Innings], overs_limit: int, regime: OversRegime) -> int:
    """
    Exact volume of one innings in regime units.

    All-out rule: a side that lost 10 wickets is credited with the full
    allotment, whatever overs were recorded. Missing fields count as 0.
    """
    policy = REGIMES[regime]
    if innings is None:
        return 0
    if _n(innings.wickets) == ALL_OUT_WICKETS:
        return overs_limit * policy.units_per_over
    return policy.innings_units(_n(innings.overs), _n(innings.balls))


def innings_volume(innings: Optional[Innings], overs_limit: int, regime: OversRegime) -> float:
    """Overs faced by the batting side (equivalently, bowled by the fielding side)."""
    return units_to_overs(innings_units(innings, overs_limit, regime), regime)


def units_to_overs(units: int, regime: OversRegime) -> float:
    if units <= 0:
        return 0.0
    return units / REGIMES[regime].units_per_over


def run_rate(runs: int, overs: float) -> float:
    if overs <= 0:
        return 0.0
    return runs / overs


def parse_overs_notation(overs: OversLike) -> Tuple[int, int]:
    """
    Splits cricket overs notation into (whole overs, balls).

    Supported inputs:
    - "20.0", "18.3", "7" (string notation)
    - 20 (int overs)
    - 18.3 (float) -> treated as "18.3" (strings preferred)

    Rule: ".x" means x balls (0-5). Example: 18.3 = 18 overs and 3 balls.
    """
    if overs is None:
        raise ValueError("Overs cannot be None")

    s = str(overs).strip()
    if not s:
        raise ValueError("Overs cannot be empty")

    ov_part, _, ball_part = s.partition(".")
    try:
        ov_i = int(ov_part) if ov_part else 0
        balls_i = int(ball_part) if ball_part.strip() else 0
    except ValueError:
        raise ValueError(f"Invalid overs: {overs}") from None

    if ov_i < 0:
        raise ValueError(f"Invalid overs: {overs}")
    if balls_i < 0 or balls_i >= BALLS_PER_OVER:
        raise ValueError(f"Invalid overs format: {overs} (balls part must be 0-5)")

    return ov_i, balls_i


def format_overs(units: int, regime: OversRegime) -> str:
    # traditional units=111 => "18.3"; ball-count units=85 => "85"
    if regime == "BALL_COUNT":
        return str(max(0, units))
    if units <= 0:
        return "0.0"
    return f"{units // BALLS_PER_OVER}.{units % BALLS_PER_OVER}"
