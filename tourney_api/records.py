# tourney_api/records.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from tourney_api.config import (
    DEFAULT_OVERS_PER_MATCH,
    DEFAULT_POINTS_FOR_WIN,
    DEFAULT_POINTS_FOR_DRAW,
    DEFAULT_POINTS_FOR_LOSS,
)
from tourney_api.models import (
    Innings,
    Match,
    MatchResultType,
    MatchStatus,
    PointsConfig,
    Team,
    Tournament,
    TournamentConfig,
)

logger = logging.getLogger(__name__)

# Stored records use the browser tool's result codes
_RESULT_CODES: Dict[str, MatchResultType] = {
    "T1_WIN": "FIRST_BATTING_WIN",
    "T2_WIN": "SECOND_BATTING_WIN",
    "TIE": "TIE",
    "DRAW": "DRAW",
    "NO_RESULT": "NO_RESULT",
    "ABANDONED": "ABANDONED",
    # already-canonical values pass through
    "FIRST_BATTING_WIN": "FIRST_BATTING_WIN",
    "SECOND_BATTING_WIN": "SECOND_BATTING_WIN",
}

_STATUSES = ("NOT_STARTED", "IN_PROGRESS", "COMPLETED")


def _safe_int(x: object, default: int = 0) -> int:
    if x is None:
        return default
    sx = str(x).strip()
    if not sx or sx.lower() in ("nan", "none", "null", "undefined"):
        return default
    try:
        return int(float(sx))
    except (ValueError, OverflowError):
        logger.debug("Unparsable number %r in tournament record; using %s", x, default)
        return default


def _opt_int(x: object) -> Optional[int]:
    # Keeps "absent" distinct from 0 so the engine's own missing-as-zero policy applies
    if x is None or str(x).strip() == "":
        return None
    return _safe_int(x, 0)


def _innings(m: Dict[str, Any], side: str) -> Optional[Innings]:
    keys = (f"{side}Runs", f"{side}Wickets", f"{side}OversWhole", f"{side}Balls")
    if all(m.get(k) is None for k in keys):
        return None
    return Innings(
        runs=_opt_int(m.get(keys[0])),
        wickets=_opt_int(m.get(keys[1])),
        overs=_opt_int(m.get(keys[2])),
        balls=_opt_int(m.get(keys[3])),
    )


def match_from_record(m: Dict[str, Any]) -> Match:
    status_raw = str(m.get("status") or "").strip().upper()
    status: MatchStatus = status_raw if status_raw in _STATUSES else "NOT_STARTED"  # type: ignore[assignment]

    if status != "COMPLETED":
        # result fields only mean something on completed matches
        return Match(
            id=str(m.get("id") or ""),
            round=_safe_int(m.get("round"), 0),
            team1=str(m.get("team1Id") or ""),
            team2=str(m.get("team2Id") or ""),
            venue=m.get("venueId"),
            status=status,
            notes=m.get("notes"),
        )

    result_raw = str(m.get("resultType") or "").strip().upper()
    return Match(
        id=str(m.get("id") or ""),
        round=_safe_int(m.get("round"), 0),
        team1=str(m.get("team1Id") or ""),
        team2=str(m.get("team2Id") or ""),
        venue=m.get("venueId"),
        status="COMPLETED",
        result_type=_RESULT_CODES.get(result_raw),
        winner=m.get("winnerId") or None,
        team1_innings=_innings(m, "t1"),
        team2_innings=_innings(m, "t2"),
        notes=m.get("notes"),
    )


def team_from_record(t: Dict[str, Any]) -> Team:
    return Team(
        id=str(t.get("id") or ""),
        name=str(t.get("name") or "").strip(),
        logo_url=t.get("logoUrl") or None,
        owner=t.get("owner") or None,
    )


def config_from_record(cfg: Dict[str, Any]) -> TournamentConfig:
    """
    Points fall back to the configured defaults only when the field is absent;
    an explicit 0 (or a negative value) is kept.
    """
    def _pts(key: str, default: int) -> int:
        return default if cfg.get(key) is None else _safe_int(cfg.get(key), default)

    return TournamentConfig(
        overs_per_match=str(cfg.get("oversPerMatch") or DEFAULT_OVERS_PER_MATCH),
        points=PointsConfig(
            win=_pts("pointsForWin", DEFAULT_POINTS_FOR_WIN),
            draw=_pts("pointsForDraw", DEFAULT_POINTS_FOR_DRAW),
            loss=_pts("pointsForLoss", DEFAULT_POINTS_FOR_LOSS),
        ),
        schedule_format=str(cfg.get("scheduleFormat") or "SINGLE ROUND ROBIN (SRR)"),
        playoff_system=str(cfg.get("playoffSystem") or "SEMI-FINAL SYSTEM (TOP 4)"),
        group_count=_safe_int(cfg.get("groupCount"), 2) or 2,
    )


def tournament_from_record(record: Dict[str, Any]) -> Tournament:
    """
    Convert a stored tournament record (camelCase JSON) -> internal Tournament.

    Rules:
      - Teams without an id are dropped.
      - Missing/unparsable numbers become 0; nothing here raises on bad numbers.
      - Unknown match statuses are treated as NOT_STARTED.
    """
    teams: List[Team] = []
    for t in record.get("teams", []) or []:
        team = team_from_record(t)
        if not team.id:
            continue
        teams.append(team)

    matches = [match_from_record(m) for m in (record.get("matches", []) or [])]

    return Tournament(
        id=str(record.get("id") or ""),
        name=str(record.get("name") or ""),
        teams=tuple(teams),
        matches=tuple(matches),
        config=config_from_record(record.get("config") or {}),
        is_locked=bool(record.get("isLocked", False)),
    )
