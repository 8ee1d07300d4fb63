from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Literal, Tuple


# -----------------------------
# Lifecycle + result semantics
# -----------------------------
MatchStatus = Literal["NOT_STARTED", "IN_PROGRESS", "COMPLETED"]

# FIRST_BATTING_WIN / SECOND_BATTING_WIN / TIE are produced by the classifier.
# DRAW / NO_RESULT / ABANDONED can only arrive from stored records or manual entry.
MatchResultType = Literal[
    "FIRST_BATTING_WIN",
    "SECOND_BATTING_WIN",
    "TIE",
    "DRAW",
    "NO_RESULT",
    "ABANDONED",
]


# -----------------------------
# Canonical Team
# -----------------------------
@dataclass(frozen=True)
class Team:
    id: str
    name: str

    # Display metadata, never read by the standings engine
    logo_url: Optional[str] = None
    owner: Optional[str] = None


# -----------------------------
# Canonical Innings
# -----------------------------
@dataclass(frozen=True)
class Innings:
    """
    One side's final score.

    `overs` is the whole-overs count in the traditional regime and the raw
    ball count in the ball-count regime. `balls` is the part-over (0-5) and
    is ignored by the ball-count regime. Missing numbers are None and count as 0.
    """
    runs: Optional[int] = None
    wickets: Optional[int] = None
    overs: Optional[int] = None
    balls: Optional[int] = None


# -----------------------------
# Canonical Match
# -----------------------------
@dataclass(frozen=True)
class Match:
    id: str
    round: int
    team1: str
    team2: str
    venue: Optional[str] = None
    status: MatchStatus = "NOT_STARTED"

    # Populated only when status == "COMPLETED"; team1 bats first
    result_type: Optional[MatchResultType] = None
    winner: Optional[str] = None
    team1_innings: Optional[Innings] = None
    team2_innings: Optional[Innings] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class PointsConfig:
    win: int = 2
    draw: int = 1
    loss: int = 0


@dataclass(frozen=True)
class TournamentConfig:
    overs_per_match: str = "20"
    points: PointsConfig = field(default_factory=PointsConfig)
    schedule_format: str = "SINGLE ROUND ROBIN (SRR)"
    playoff_system: str = "SEMI-FINAL SYSTEM (TOP 4)"
    group_count: int = 2


@dataclass(frozen=True)
class Tournament:
    id: str
    name: str
    teams: Tuple[Team, ...] = ()
    matches: Tuple[Match, ...] = ()
    config: TournamentConfig = field(default_factory=TournamentConfig)
    is_locked: bool = False
