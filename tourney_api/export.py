# tourney_api/export.py
from __future__ import annotations

from typing import Sequence

import pandas as pd

from tourney_api.overs_math import format_overs
from tourney_api.points_table import TeamStanding, format_nrr

COLUMNS = ["Pos", "Team", "P", "W", "L", "T", "NR", "Pts", "NRR", "For", "Against"]


def standings_frame(standings: Sequence[TeamStanding]) -> pd.DataFrame:
    """
    Points table as a DataFrame, one row per team in ranked order.
    "For"/"Against" use the runs/overs notation of published tables ("831/90.3").
    """
    rows = [
        {
            "Pos": s.position,
            "Team": s.name,
            "P": s.played,
            "W": s.won,
            "L": s.lost,
            "T": s.tied,
            "NR": s.no_result + s.drawn,
            "Pts": s.points,
            "NRR": format_nrr(s.net_run_rate),
            "For": f"{s.runs_scored}/{format_overs(s.units_faced, s.regime)}",
            "Against": f"{s.runs_conceded}/{format_overs(s.units_bowled, s.regime)}",
        }
        for s in standings
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def standings_csv(standings: Sequence[TeamStanding]) -> str:
    return standings_frame(standings).to_csv(index=False)
