# tourney_api/fixtures.py
from __future__ import annotations

import random
from typing import List, Optional, Sequence

from tourney_api.models import Match


class FixtureError(ValueError):
    """Raised when fixtures cannot be generated from the given teams/venues."""
    pass


def generate_round_robin(
    team_ids: Sequence[str],
    venue_ids: Sequence[str],
    *,
    rng: Optional[random.Random] = None,
) -> List[Match]:
    """
    Single round-robin by the circle method.

    The first team stays fixed and the others rotate one place per round.
    Even N: N-1 rounds of N/2 matches. Odd N: a bye is added, so N rounds
    of (N-1)/2 matches and each team sits out once.

    Venues are drawn at random from `venue_ids`; pass a seeded `rng` for
    reproducible schedules.
    """
    teams: List[Optional[str]] = list(dict.fromkeys(team_ids))
    if len(teams) < 2:
        raise FixtureError("At least 2 teams are required to generate fixtures")
    if not venue_ids:
        raise FixtureError("At least 1 venue is required to generate fixtures")

    rng = rng or random.Random()

    if len(teams) % 2 == 1:
        teams.append(None)  # bye

    n = len(teams)
    matches: List[Match] = []
    match_no = 1

    for r in range(n - 1):
        for m in range(n // 2):
            home, away = teams[m], teams[n - 1 - m]
            if home is None or away is None:
                continue
            matches.append(Match(
                id=f"M-{match_no}",
                round=r + 1,
                team1=home,
                team2=away,
                venue=rng.choice(list(venue_ids)),
                status="NOT_STARTED",
            ))
            match_no += 1

        teams.insert(1, teams.pop())

    return matches
