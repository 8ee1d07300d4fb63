# tourney_api/points_table.py
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from functools import cmp_to_key
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Tuple

from tourney_api.models import Match, PointsConfig, Team, Tournament
from tourney_api.overs_math import (
    OversRegime,
    effective_points,
    format_overs,
    innings_units,
    overs_limit_for_format,
    regime_for_format,
    run_rate,
    units_to_overs,
)

logger = logging.getLogger(__name__)

FORM_LENGTH = 5

FormLetter = Literal["W", "L", "T", "N"]


# -----------------------------
# Aggregator
# -----------------------------
@dataclass(frozen=True)
class TeamTotals:
    """
    Raw cumulative counters for one team.
    Overs are kept as integer regime units (see overs_math.RegimePolicy).
    """
    team: str
    played: int = 0
    won: int = 0
    lost: int = 0
    tied: int = 0
    drawn: int = 0
    no_result: int = 0
    points: int = 0
    runs_scored: int = 0
    runs_conceded: int = 0
    units_faced: int = 0
    units_bowled: int = 0
    wickets_taken: int = 0
    form: Tuple[FormLetter, ...] = ()


def _n(x: Optional[int]) -> int:
    return int(x) if x is not None else 0


def _outcome(match: Match, points: PointsConfig) -> Tuple[Tuple[str, int, FormLetter], Tuple[str, int, FormLetter]]:
    """
    (counter, points, form letter) for team1 and team2.
    Any result that is not a win for either side is scored as a draw.
    """
    rt = match.result_type
    if rt == "FIRST_BATTING_WIN":
        return ("won", points.win, "W"), ("lost", points.loss, "L")
    if rt == "SECOND_BATTING_WIN":
        return ("lost", points.loss, "L"), ("won", points.win, "W")
    if rt == "DRAW":
        return ("drawn", points.draw, "N"), ("drawn", points.draw, "N")
    if rt in ("NO_RESULT", "ABANDONED"):
        return ("no_result", points.draw, "N"), ("no_result", points.draw, "N")
    # TIE, or a completed match whose result type was never set
    return ("tied", points.draw, "T"), ("tied", points.draw, "T")


def _apply_side(
    totals: TeamTotals,
    *,
    counter: str,
    points: int,
    letter: FormLetter,
    runs_for: int,
    units_for: int,
    runs_against: int,
    units_against: int,
    wickets_taken: int,
) -> TeamTotals:
    return dataclasses.replace(
        totals,
        played=totals.played + 1,
        points=totals.points + points,
        runs_scored=totals.runs_scored + runs_for,
        units_faced=totals.units_faced + units_for,
        runs_conceded=totals.runs_conceded + runs_against,
        units_bowled=totals.units_bowled + units_against,
        wickets_taken=totals.wickets_taken + wickets_taken,
        form=(totals.form + (letter,))[-FORM_LENGTH:],
        **{counter: getattr(totals, counter) + 1},
    )


def aggregate_matches(
    team_ids: Iterable[str],
    matches: Iterable[Match],
    points: PointsConfig,
    *,
    regime: OversRegime,
    overs_limit: int,
) -> Mapping[str, TeamTotals]:
    """
    Folds every COMPLETED match into per-team totals.

    - One entry per team id, even for teams that never played.
    - Matches referencing an unknown team (or the same team twice) are skipped.
    - Counters are integer sums, so the match order never changes the totals;
      matches are still visited in (round, id) order so `form` reads chronologically.
    """
    acc: Dict[str, TeamTotals] = {t: TeamTotals(team=t) for t in team_ids}

    completed = sorted(
        (m for m in matches if m.status == "COMPLETED"),
        key=lambda m: (m.round, m.id),
    )

    for m in completed:
        if m.team1 not in acc or m.team2 not in acc:
            logger.debug("Skipping match %s: unknown team reference (%s vs %s)", m.id, m.team1, m.team2)
            continue
        if m.team1 == m.team2:
            logger.debug("Skipping match %s: same team on both sides (%s)", m.id, m.team1)
            continue

        i1 = m.team1_innings
        i2 = m.team2_innings
        runs1 = _n(i1.runs) if i1 else 0
        runs2 = _n(i2.runs) if i2 else 0
        wkts1 = _n(i1.wickets) if i1 else 0
        wkts2 = _n(i2.wickets) if i2 else 0
        units1 = innings_units(i1, overs_limit, regime)
        units2 = innings_units(i2, overs_limit, regime)

        (c1, p1, f1), (c2, p2, f2) = _outcome(m, points)

        acc[m.team1] = _apply_side(
            acc[m.team1],
            counter=c1, points=p1, letter=f1,
            runs_for=runs1, units_for=units1,
            runs_against=runs2, units_against=units2,
            wickets_taken=wkts2,
        )
        acc[m.team2] = _apply_side(
            acc[m.team2],
            counter=c2, points=p2, letter=f2,
            runs_for=runs2, units_for=units2,
            runs_against=runs1, units_against=units1,
            wickets_taken=wkts1,
        )

    return MappingProxyType(acc)


# -----------------------------
# Rate Calculator
# -----------------------------
@dataclass(frozen=True)
class TeamStanding:
    team_id: str
    name: str

    played: int
    won: int
    lost: int
    tied: int
    drawn: int
    no_result: int
    points: int

    runs_scored: int
    runs_conceded: int
    overs_faced: float
    overs_bowled: float
    wickets_taken: int

    scoring_rate: float
    economy_rate: float
    net_run_rate: float

    form: Tuple[FormLetter, ...] = ()

    # Filled in by rank_standings()
    position: int = 0
    is_tied: bool = False

    # Exact volumes, for "runs/overs" display
    units_faced: int = 0
    units_bowled: int = 0
    regime: OversRegime = "TRADITIONAL"


def team_rates(totals: TeamTotals, regime: OversRegime) -> Tuple[float, float, float]:
    """
    (scoring_rate, economy_rate, net_run_rate).
    A zero overs denominator yields a rate of 0, never an error or NaN.
    """
    scoring = run_rate(totals.runs_scored, units_to_overs(totals.units_faced, regime))
    economy = run_rate(totals.runs_conceded, units_to_overs(totals.units_bowled, regime))
    return scoring, economy, scoring - economy


def build_standing(totals: TeamTotals, name: str, regime: OversRegime) -> TeamStanding:
    scoring, economy, nrr = team_rates(totals, regime)
    return TeamStanding(
        team_id=totals.team,
        name=name,
        played=totals.played,
        won=totals.won,
        lost=totals.lost,
        tied=totals.tied,
        drawn=totals.drawn,
        no_result=totals.no_result,
        points=totals.points,
        runs_scored=totals.runs_scored,
        runs_conceded=totals.runs_conceded,
        overs_faced=units_to_overs(totals.units_faced, regime),
        overs_bowled=units_to_overs(totals.units_bowled, regime),
        wickets_taken=totals.wickets_taken,
        scoring_rate=scoring,
        economy_rate=economy,
        net_run_rate=nrr,
        form=totals.form,
        units_faced=totals.units_faced,
        units_bowled=totals.units_bowled,
        regime=regime,
    )


# -----------------------------
# Ranker
# -----------------------------
Direction = Literal["desc", "asc"]

# Evaluated in order; the first level that differs decides.
RANKING_CHAIN: Sequence[Tuple[str, Callable[[TeamStanding], float], Direction]] = (
    ("points", lambda s: s.points, "desc"),
    ("net_run_rate", lambda s: s.net_run_rate, "desc"),
    ("scoring_rate", lambda s: s.scoring_rate, "desc"),
)


def compare_standings(a: TeamStanding, b: TeamStanding) -> int:
    """Negative when `a` ranks above `b`, 0 when the whole chain is level."""
    for _, extract, direction in RANKING_CHAIN:
        va, vb = extract(a), extract(b)
        if va == vb:
            continue
        above = va > vb if direction == "desc" else va < vb
        return -1 if above else 1
    return 0


def rank_standings(standings: Sequence[TeamStanding]) -> List[TeamStanding]:
    """
    Stable sort by RANKING_CHAIN; teams level on every level keep input order.

    `is_tied` marks any team sharing its points total with another team,
    even when NRR has already separated them in the order.
    """
    ordered = sorted(standings, key=cmp_to_key(compare_standings))

    points_count: Dict[int, int] = {}
    for s in ordered:
        points_count[s.points] = points_count.get(s.points, 0) + 1

    return [
        dataclasses.replace(s, position=idx, is_tied=points_count[s.points] > 1)
        for idx, s in enumerate(ordered, start=1)
    ]


# -----------------------------
# Pipeline
# -----------------------------
def compute_standings(
    teams: Sequence[Team],
    matches: Iterable[Match],
    points: PointsConfig,
    *,
    regime: OversRegime = "TRADITIONAL",
    overs_limit: int = 20,
) -> List[TeamStanding]:
    """
    teams + matches + points configuration -> ranked standings.

    Pure: recomputed from scratch on every call, nothing is cached or mutated.
    """
    pts = effective_points(points, regime)
    totals = aggregate_matches(
        [t.id for t in teams],
        matches,
        pts,
        regime=regime,
        overs_limit=overs_limit,
    )

    standings: List[TeamStanding] = []
    seen = set()
    for t in teams:
        # a duplicated team id keeps its first position in the list
        if t.id in seen:
            continue
        seen.add(t.id)
        standings.append(build_standing(totals[t.id], t.name, regime))

    return rank_standings(standings)


def standings_for_tournament(tournament: Tournament) -> List[TeamStanding]:
    cfg = tournament.config
    return compute_standings(
        tournament.teams,
        tournament.matches,
        cfg.points,
        regime=regime_for_format(cfg.overs_per_match),
        overs_limit=overs_limit_for_format(cfg.overs_per_match),
    )


def format_nrr(value: float) -> str:
    # +1.500 / -0.375 / 0.000
    if value == 0:
        return "0.000"
    return f"{value:+.3f}"


def compute_sorted_table(standings: Sequence[TeamStanding]) -> List[dict]:
    """
    Display rows for an already ranked standings list:
    position, name, played, won, lost, points, NRR to 3 places, and the raw aggregates.
    """
    out: List[dict] = []
    for s in standings:
        out.append({
            "pos": s.position,
            "team_id": s.team_id,
            "team": s.name,
            "played": s.played,
            "won": s.won,
            "lost": s.lost,
            "tied": s.tied,
            "drawn": s.drawn,
            "nr": s.no_result,
            "points": s.points,
            "nrr": round(s.net_run_rate, 3),
            "nrr_display": format_nrr(s.net_run_rate),
            "is_tied": s.is_tied,
            "runs_for": s.runs_scored,
            "overs_for": format_overs(s.units_faced, s.regime),
            "runs_against": s.runs_conceded,
            "overs_against": format_overs(s.units_bowled, s.regime),
            "wickets_taken": s.wickets_taken,
            "scoring_rate": round(s.scoring_rate, 3),
            "economy_rate": round(s.economy_rate, 3),
            "form": list(s.form),
        })
    return out
