# tourney_api/estimator.py
from __future__ import annotations

import math
from typing import Tuple

# (label fragment, extra matches) checked in order
PLAYOFF_MATCHES: Tuple[Tuple[str, int], ...] = (
    ("SEMI-FINAL", 3),
    ("PAGE PLAYOFF", 4),
    ("FINAL ONLY", 1),
    ("TOP 8", 7),
    ("STEPLADDER", 3),
)


def _pairs(n: int) -> int:
    return n * (n - 1) // 2


def league_matches(num_teams: int, schedule_format: str, group_count: int = 2) -> int:
    """
    Matches in the league phase for a schedule label such as
    "SINGLE ROUND ROBIN (SRR)" or "GROUP STAGE". Unknown labels give 0.
    The 1.5 round-robin half-round is floor(N/2) matches.
    """
    n = max(0, int(num_teams))
    fmt = (schedule_format or "").upper()

    if "SINGLE ROUND ROBIN" in fmt:
        return _pairs(n)
    if "DOUBLE ROUND ROBIN" in fmt:
        return n * (n - 1)
    if "1.5 ROUND ROBIN" in fmt:
        return _pairs(n) + n // 2
    if "GROUP STAGE" in fmt:
        groups = max(1, int(group_count))
        per_group = math.ceil(n / groups)
        return groups * _pairs(per_group)
    if "KNOCKOUT" in fmt:
        return max(0, n - 1)
    if "DOUBLE ELIMINATION" in fmt:
        return max(0, 2 * n - 2)
    return 0


def playoff_matches(playoff_system: str) -> int:
    label = (playoff_system or "").upper()
    for fragment, count in PLAYOFF_MATCHES:
        if fragment in label:
            return count
    return 0


def estimate_match_count(
    num_teams: int,
    schedule_format: str,
    playoff_system: str,
    group_count: int = 2,
) -> int:
    return league_matches(num_teams, schedule_format, group_count) + playoff_matches(playoff_system)
