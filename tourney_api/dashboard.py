# tourney_api/dashboard.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Literal, Optional, Sequence

from tourney_api.models import Match
from tourney_api.points_table import TeamStanding

TournamentStatus = Literal["UPCOMING", "ONGOING", "COMPLETED"]


@dataclass(frozen=True)
class RoundProgress:
    round: int
    completed: int
    total: int


@dataclass(frozen=True)
class DashboardMetrics:
    most_runs: Optional[TeamStanding]
    most_wickets: Optional[TeamStanding]
    best_scoring_rate: Optional[TeamStanding]
    best_economy: Optional[TeamStanding]
    round_progress: List[RoundProgress]


# Each superlative scans the ranked list and keeps the first team on a draw,
# so the higher-ranked team wins ties.
def most_runs_team(standings: Sequence[TeamStanding]) -> Optional[TeamStanding]:
    if not standings:
        return None
    return max(standings, key=lambda s: s.runs_scored)


def most_wickets_team(standings: Sequence[TeamStanding]) -> Optional[TeamStanding]:
    """Most wickets taken; equal wickets go to the lower economy rate."""
    if not standings:
        return None
    return max(standings, key=lambda s: (s.wickets_taken, -s.economy_rate))


def best_scoring_rate_team(standings: Sequence[TeamStanding]) -> Optional[TeamStanding]:
    if not standings:
        return None
    return max(standings, key=lambda s: s.scoring_rate)


def best_economy_team(standings: Sequence[TeamStanding]) -> Optional[TeamStanding]:
    """
    Lowest economy among teams that have actually bowled.
    A team with zero overs bowled has an economy of 0 by definition and must not win this.
    """
    bowled = [s for s in standings if s.overs_bowled > 0]
    if not bowled:
        return None
    return min(bowled, key=lambda s: s.economy_rate)


def round_progress(matches: Iterable[Match]) -> List[RoundProgress]:
    """Completed vs total matches for every round from 1 to the highest round present."""
    matches = list(matches)
    total_rounds = max([0] + [m.round for m in matches])

    done: Dict[int, int] = {}
    total: Dict[int, int] = {}
    for m in matches:
        total[m.round] = total.get(m.round, 0) + 1
        if m.status == "COMPLETED":
            done[m.round] = done.get(m.round, 0) + 1

    return [
        RoundProgress(round=r, completed=done.get(r, 0), total=total.get(r, 0))
        for r in range(1, total_rounds + 1)
    ]


def match_status_counts(matches: Iterable[Match]) -> Dict[str, int]:
    counts = {"completed": 0, "in_progress": 0, "not_started": 0}
    for m in matches:
        if m.status == "COMPLETED":
            counts["completed"] += 1
        elif m.status == "IN_PROGRESS":
            counts["in_progress"] += 1
        else:
            counts["not_started"] += 1
    return counts


def tournament_status(matches: Iterable[Match]) -> TournamentStatus:
    counts = match_status_counts(matches)
    total = sum(counts.values())
    if counts["completed"] == 0:
        return "UPCOMING"
    if counts["completed"] == total:
        return "COMPLETED"
    return "ONGOING"


def compute_dashboard(standings: Sequence[TeamStanding], matches: Iterable[Match]) -> DashboardMetrics:
    return DashboardMetrics(
        most_runs=most_runs_team(standings),
        most_wickets=most_wickets_team(standings),
        best_scoring_rate=best_scoring_rate_team(standings),
        best_economy=best_economy_team(standings),
        round_progress=round_progress(matches),
    )
