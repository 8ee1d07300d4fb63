# main.py
from __future__ import annotations

import logging
import random
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from tourney_api.cache import get as cache_get, set as cache_set, make_key as cache_key
from tourney_api.config import (
    validate_config,
    CORS_ORIGINS,
    DEFAULT_OVERS_PER_MATCH,
    DEFAULT_POINTS_FOR_WIN,
    DEFAULT_POINTS_FOR_DRAW,
    DEFAULT_POINTS_FOR_LOSS,
    LOG_LEVEL,
    STANDINGS_CACHE_MAX_ENTRIES,
    STANDINGS_CACHE_TTL_SECONDS,
)
from tourney_api.dashboard import compute_dashboard, match_status_counts, tournament_status
from tourney_api.estimator import estimate_match_count, league_matches, playoff_matches
from tourney_api.export import standings_csv
from tourney_api.fixtures import FixtureError, generate_round_robin
from tourney_api.models import Innings, Match, PointsConfig, Team, Tournament, TournamentConfig
from tourney_api.overs_math import (
    effective_points,
    overs_limit_for_format,
    parse_overs_notation,
    regime_for_format,
)
from tourney_api.points_table import TeamStanding, compute_sorted_table, standings_for_tournament
from tourney_api.records import tournament_from_record
from tourney_api.results import ResultEntryError, record_result

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("tourney_api")

# -----------------------
# App
# -----------------------
app = FastAPI(
    title="Limited-Overs Tournament Standings API",
    version="0.1.0",
    description="Standings, NRR, dashboard metrics, fixtures and result entry for limited-overs cricket tournaments",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    validate_config()


@app.get("/health")
def health_check():
    return {"status": "ok", "time": datetime.utcnow().isoformat() + "Z"}


# -----------------------
# Request models
# -----------------------
MatchStatusIn = Literal["NOT_STARTED", "IN_PROGRESS", "COMPLETED"]
ResultTypeIn = Literal["FIRST_BATTING_WIN", "SECOND_BATTING_WIN", "TIE", "DRAW", "NO_RESULT", "ABANDONED"]


class TeamIn(BaseModel):
    id: str
    name: str
    logo_url: Optional[str] = None
    owner: Optional[str] = None


class InningsIn(BaseModel):
    runs: Optional[int] = None
    wickets: Optional[int] = None
    overs: Optional[int] = Field(None, description="Whole overs, or balls in the '100 Balls' format")
    balls: Optional[int] = Field(None, description="Balls in the current over (0-5)")


class MatchIn(BaseModel):
    id: str
    round: int = 1
    team1: str = Field(..., description="Team batting first")
    team2: str = Field(..., description="Team batting second")
    venue: Optional[str] = None
    status: MatchStatusIn = "NOT_STARTED"
    result_type: Optional[ResultTypeIn] = None
    winner: Optional[str] = None
    team1_innings: Optional[InningsIn] = None
    team2_innings: Optional[InningsIn] = None
    notes: Optional[str] = None


class ConfigIn(BaseModel):
    overs_per_match: str = Field(DEFAULT_OVERS_PER_MATCH, description="e.g. 20, 50 or '100 Balls'")
    points_for_win: int = DEFAULT_POINTS_FOR_WIN
    points_for_draw: int = DEFAULT_POINTS_FOR_DRAW
    points_for_loss: int = DEFAULT_POINTS_FOR_LOSS


class TournamentIn(BaseModel):
    teams: list[TeamIn] = Field(default_factory=list)
    matches: list[MatchIn] = Field(default_factory=list)
    config: ConfigIn = Field(default_factory=ConfigIn)


# -----------------------
# Helpers
# -----------------------
def _innings(i: Optional[InningsIn]) -> Optional[Innings]:
    if i is None:
        return None
    return Innings(runs=i.runs, wickets=i.wickets, overs=i.overs, balls=i.balls)


def _match(m: MatchIn) -> Match:
    return Match(
        id=m.id,
        round=m.round,
        team1=m.team1,
        team2=m.team2,
        venue=m.venue,
        status=m.status,
        result_type=m.result_type,
        winner=m.winner,
        team1_innings=_innings(m.team1_innings),
        team2_innings=_innings(m.team2_innings),
        notes=m.notes,
    )


def _tournament(req: TournamentIn) -> Tournament:
    return Tournament(
        id="",
        name="",
        teams=tuple(Team(id=t.id, name=t.name, logo_url=t.logo_url, owner=t.owner) for t in req.teams),
        matches=tuple(_match(m) for m in req.matches),
        config=TournamentConfig(
            overs_per_match=req.config.overs_per_match,
            points=PointsConfig(
                win=req.config.points_for_win,
                draw=req.config.points_for_draw,
                loss=req.config.points_for_loss,
            ),
        ),
    )


def _format_meta(overs_per_match: str, points: PointsConfig) -> Dict[str, Any]:
    regime = regime_for_format(overs_per_match)
    pts = effective_points(points, regime)
    return {
        "regime": regime,
        "overs_limit": overs_limit_for_format(overs_per_match),
        "points": {"win": pts.win, "draw": pts.draw, "loss": pts.loss},
        "rate_unit": "RPB" if regime == "BALL_COUNT" else "RPO",
    }


def _standings_cached(req: TournamentIn) -> List[TeamStanding]:
    """
    Standings are a pure function of the payload, so they are memoized on its hash.
    """
    key = cache_key("standings", req.model_dump())
    cached = cache_get(key)
    if cached is not None:
        logger.debug("standings cache hit %s", key)
        return cached

    logger.debug("standings cache miss %s", key)
    standings = standings_for_tournament(_tournament(req))
    cache_set(
        key, standings,
        ttl_seconds=STANDINGS_CACHE_TTL_SECONDS,
        max_entries=STANDINGS_CACHE_MAX_ENTRIES,
    )
    return standings


def _row(s: Optional[TeamStanding]) -> Optional[dict]:
    if s is None:
        return None
    return compute_sorted_table([s])[0]


# -----------------------
# Standings endpoints
# -----------------------
@app.post("/api/standings")
def get_standings(req: TournamentIn):
    t = _tournament(req)
    standings = _standings_cached(req)
    return {
        **_format_meta(t.config.overs_per_match, t.config.points),
        "teams_count": len(standings),
        "completed_matches": match_status_counts(t.matches)["completed"],
        "table": compute_sorted_table(standings),
    }


@app.post("/api/standings/csv", response_class=PlainTextResponse)
def get_standings_csv(req: TournamentIn):
    return PlainTextResponse(standings_csv(_standings_cached(req)), media_type="text/csv")


@app.post("/api/records/standings")
def get_record_standings(record: Dict[str, Any]):
    """Standings straight from a stored tournament record (camelCase JSON)."""
    t = tournament_from_record(record)
    standings = standings_for_tournament(t)
    return {
        "tournament_id": t.id,
        "name": t.name,
        **_format_meta(t.config.overs_per_match, t.config.points),
        "status": tournament_status(t.matches),
        "table": compute_sorted_table(standings),
    }


# -----------------------
# Dashboard endpoint
# -----------------------
@app.post("/api/dashboard")
def get_dashboard(req: TournamentIn):
    t = _tournament(req)
    standings = _standings_cached(req)
    metrics = compute_dashboard(standings, t.matches)
    return {
        **_format_meta(t.config.overs_per_match, t.config.points),
        "status": tournament_status(t.matches),
        "match_counts": match_status_counts(t.matches),
        "most_runs": _row(metrics.most_runs),
        "most_wickets": _row(metrics.most_wickets),
        "best_scoring_rate": _row(metrics.best_scoring_rate),
        "best_economy": _row(metrics.best_economy),
        "round_progress": [
            {"round": rp.round, "completed": rp.completed, "total": rp.total}
            for rp in metrics.round_progress
        ],
        "leaderboard": compute_sorted_table(standings[:5]),
    }


# -----------------------
# Result entry endpoint
# -----------------------
class InningsEntryIn(BaseModel):
    runs: int = 0
    wickets: int = 0
    overs: Optional[str] = Field(None, description="Overs notation, e.g. 18.3 (overrides overs_whole/balls)")
    overs_whole: int = 0
    balls: int = 0


class ResultEntryRequest(BaseModel):
    match: MatchIn
    team1: InningsEntryIn = Field(..., description="Innings of the team batting first")
    team2: InningsEntryIn = Field(..., description="Innings of the team batting second")
    overs_per_match: str = DEFAULT_OVERS_PER_MATCH
    locked: bool = False
    overwrite: bool = False
    notes: Optional[str] = None


def _entry_innings(e: InningsEntryIn, regime: str) -> Innings:
    whole, balls = e.overs_whole, e.balls
    if e.overs is not None:
        if regime == "BALL_COUNT":
            whole, balls = int(float(e.overs)), 0
        else:
            whole, balls = parse_overs_notation(e.overs)
    return Innings(runs=e.runs, wickets=e.wickets, overs=whole, balls=balls)


@app.post("/api/matches/result")
def enter_result(req: ResultEntryRequest):
    regime = regime_for_format(req.overs_per_match)
    limit = overs_limit_for_format(req.overs_per_match)

    try:
        first = _entry_innings(req.team1, regime)
        second = _entry_innings(req.team2, regime)
        updated = record_result(
            _match(req.match),
            first,
            second,
            overs_limit=limit,
            regime=regime,
            locked=req.locked,
            overwrite=req.overwrite,
            notes=req.notes,
        )
    except ResultEntryError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (ValueError, OverflowError) as e:
        # bad overs notation, including "inf" in the ball-count format
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("Result entered: match %s -> %s", updated.id, updated.result_type)
    return {
        "match": {
            "id": updated.id,
            "round": updated.round,
            "team1": updated.team1,
            "team2": updated.team2,
            "venue": updated.venue,
            "status": updated.status,
            "result_type": updated.result_type,
            "winner": updated.winner,
            "team1_innings": asdict(updated.team1_innings),
            "team2_innings": asdict(updated.team2_innings),
            "notes": updated.notes,
        },
    }


# -----------------------
# Fixtures + estimator endpoints
# -----------------------
class FixtureRequest(BaseModel):
    team_ids: list[str] = Field(default_factory=list)
    venue_ids: list[str] = Field(default_factory=list)
    seed: int | None = Field(None)


@app.post("/api/fixtures/generate")
def generate_fixtures(req: FixtureRequest):
    rng = random.Random(req.seed) if req.seed is not None else None
    try:
        matches = generate_round_robin(req.team_ids, req.venue_ids, rng=rng)
    except FixtureError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("Schedule generated: %d matches for %d teams", len(matches), len(req.team_ids))
    return {
        "fixtures_count": len(matches),
        "rounds": max([0] + [m.round for m in matches]),
        "fixtures": [
            {"id": m.id, "round": m.round, "team1": m.team1, "team2": m.team2, "venue": m.venue, "status": m.status}
            for m in matches
        ],
    }


class EstimateRequest(BaseModel):
    num_teams: int = Field(..., ge=0, le=1000)
    schedule_format: str = Field(
        "SINGLE ROUND ROBIN (SRR)",
        description=(
            "Schedule label. For '1.5 ROUND ROBIN' the extra half-round is floor(N/2) matches, "
            "so odd team counts round down to a whole number of matches."
        ),
    )
    playoff_system: str = "SEMI-FINAL SYSTEM (TOP 4)"
    group_count: int = Field(2, ge=1, le=10)


@app.post("/api/estimate")
def estimate(req: EstimateRequest):
    return {
        "input": req.model_dump(),
        "league_matches": league_matches(req.num_teams, req.schedule_format, req.group_count),
        "playoff_matches": playoff_matches(req.playoff_system),
        "total_matches": estimate_match_count(
            req.num_teams, req.schedule_format, req.playoff_system, req.group_count
        ),
    }
