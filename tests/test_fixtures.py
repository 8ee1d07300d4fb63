"""
Tests for round-robin fixture generation and the match-count estimator.
"""
import random
from itertools import combinations

import pytest

from tourney_api.estimator import estimate_match_count, league_matches, playoff_matches
from tourney_api.fixtures import FixtureError, generate_round_robin


def _pairs(matches):
    return {frozenset((m.team1, m.team2)) for m in matches}


class TestRoundRobin:
    @pytest.mark.parametrize("n", [2, 4, 6, 8])
    def test_even_team_count(self, n):
        teams = [f"T{i}" for i in range(n)]
        matches = generate_round_robin(teams, ["V1"], rng=random.Random(1))

        assert len(matches) == n * (n - 1) // 2
        assert max(m.round for m in matches) == n - 1
        assert _pairs(matches) == {frozenset(p) for p in combinations(teams, 2)}

        for r in range(1, n):
            in_round = [m for m in matches if m.round == r]
            assert len(in_round) == n // 2
            seen = [t for m in in_round for t in (m.team1, m.team2)]
            assert len(seen) == len(set(seen))

    @pytest.mark.parametrize("n", [3, 5, 7])
    def test_odd_team_count_uses_bye(self, n):
        teams = [f"T{i}" for i in range(n)]
        matches = generate_round_robin(teams, ["V1"], rng=random.Random(1))

        assert len(matches) == n * (n - 1) // 2
        assert max(m.round for m in matches) == n
        assert _pairs(matches) == {frozenset(p) for p in combinations(teams, 2)}
        for r in range(1, n + 1):
            assert len([m for m in matches if m.round == r]) == n // 2

    def test_ids_status_and_first_round(self):
        matches = generate_round_robin(["A", "B", "C", "D"], ["V1"], rng=random.Random(1))
        assert [m.id for m in matches] == [f"M-{i}" for i in range(1, 7)]
        assert all(m.status == "NOT_STARTED" for m in matches)
        assert all(m.result_type is None and m.team1_innings is None for m in matches)
        assert [(m.team1, m.team2) for m in matches if m.round == 1] == [("A", "D"), ("B", "C")]

    def test_seeded_venues_are_reproducible(self):
        teams = [f"T{i}" for i in range(6)]
        venues = ["V1", "V2", "V3"]
        first = generate_round_robin(teams, venues, rng=random.Random(42))
        second = generate_round_robin(teams, venues, rng=random.Random(42))
        assert [m.venue for m in first] == [m.venue for m in second]
        assert {m.venue for m in first} <= set(venues)

    def test_insufficient_data(self):
        with pytest.raises(FixtureError):
            generate_round_robin(["A"], ["V1"])
        with pytest.raises(FixtureError):
            generate_round_robin(["A", "B"], [])

    def test_duplicate_team_ids_collapse(self):
        matches = generate_round_robin(["A", "B", "A"], ["V1"], rng=random.Random(1))
        assert _pairs(matches) == {frozenset(("A", "B"))}


class TestEstimator:
    @pytest.mark.parametrize("fmt, expected", [
        ("SINGLE ROUND ROBIN (SRR)", 28),
        ("DOUBLE ROUND ROBIN (DRR)", 56),
        ("1.5 ROUND ROBIN", 32),
        ("GROUP STAGE + KNOCKOUTS", 12),
        ("KNOCKOUT", 7),
        ("DOUBLE ELIMINATION", 14),
        ("SOMETHING ELSE", 0),
    ])
    def test_league_matches_for_eight_teams(self, fmt, expected):
        assert league_matches(8, fmt, group_count=2) == expected

    def test_group_stage_rounds_group_size_up(self):
        # 10 teams in 3 groups -> groups of 4 -> 3 * 6
        assert league_matches(10, "GROUP STAGE", group_count=3) == 18

    @pytest.mark.parametrize("system, expected", [
        ("SEMI-FINAL SYSTEM (TOP 4)", 3),
        ("PAGE PLAYOFF (IPL STYLE)", 4),
        ("FINAL ONLY (TOP 2)", 1),
        ("TOP 8 KNOCKOUT", 7),
        ("STEPLADDER", 3),
        ("NONE", 0),
    ])
    def test_playoff_matches(self, system, expected):
        assert playoff_matches(system) == expected

    def test_total(self):
        assert estimate_match_count(8, "SINGLE ROUND ROBIN (SRR)", "SEMI-FINAL SYSTEM (TOP 4)") == 31
        assert estimate_match_count(5, "1.5 ROUND ROBIN", "FINAL ONLY") == 13
