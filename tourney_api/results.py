# tourney_api/results.py
from __future__ import annotations

import dataclasses
from typing import Optional, Tuple

from tourney_api.models import Innings, Match, MatchResultType
from tourney_api.overs_math import ALL_OUT_WICKETS, BALLS_PER_OVER, OversRegime

MAX_RUNS = 9999


class ResultEntryError(ValueError):
    """Raised when a result cannot be committed to a match."""
    pass


def classify_result(
    team1: str,
    team2: str,
    team1_runs: Optional[int],
    team2_runs: Optional[int],
) -> Tuple[MatchResultType, Optional[str]]:
    """
    Higher total wins; equal totals are a TIE with no winner.
    team1 batted first. Missing totals count as 0.
    """
    r1 = int(team1_runs or 0)
    r2 = int(team2_runs or 0)

    if r1 > r2:
        return "FIRST_BATTING_WIN", team1
    if r2 > r1:
        return "SECOND_BATTING_WIN", team2
    return "TIE", None


def _clamp(x: Optional[int], lo: int, hi: int) -> int:
    return max(lo, min(hi, int(x or 0)))


def clamp_innings(innings: Innings, overs_limit: int, regime: OversRegime) -> Innings:
    """
    Entry-form clamping: runs 0-9999, wickets 0-10, overs 0-limit, balls 0-5.
    The ball-count regime has no part-over field.
    """
    overs = _clamp(innings.overs, 0, overs_limit)
    if regime == "BALL_COUNT":
        balls = None
    elif overs >= overs_limit:
        # a full allotment leaves no room for a part-over
        balls = 0
    else:
        balls = _clamp(innings.balls, 0, BALLS_PER_OVER - 1)

    return Innings(
        runs=_clamp(innings.runs, 0, MAX_RUNS),
        wickets=_clamp(innings.wickets, 0, ALL_OUT_WICKETS),
        overs=overs,
        balls=balls,
    )


def record_result(
    match: Match,
    first: Innings,
    second: Innings,
    *,
    overs_limit: int,
    regime: OversRegime,
    locked: bool = False,
    overwrite: bool = False,
    notes: Optional[str] = None,
) -> Match:
    """
    Commits both innings to a match and returns the COMPLETED copy.

    `first` is team1's innings (batting first), `second` is team2's.
    The original match is not modified.
    """
    if locked:
        raise ResultEntryError("Tournament is locked; results cannot be entered")
    if match.team1 == match.team2:
        raise ResultEntryError(f"Match {match.id} has the same team on both sides")
    if match.status == "COMPLETED" and not overwrite:
        raise ResultEntryError(f"Match {match.id} already has a result (pass overwrite=True to replace it)")

    t1 = clamp_innings(first, overs_limit, regime)
    t2 = clamp_innings(second, overs_limit, regime)
    result_type, winner = classify_result(match.team1, match.team2, t1.runs, t2.runs)

    return dataclasses.replace(
        match,
        status="COMPLETED",
        result_type=result_type,
        winner=winner,
        team1_innings=t1,
        team2_innings=t2,
        notes=notes if notes is not None else match.notes,
    )
