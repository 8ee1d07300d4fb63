"""
API integration tests.
Uses TestClient to avoid starting a server.
"""
import pytest
from fastapi.testclient import TestClient

from main import app
from tourney_api import cache


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def payload():
    return {
        "teams": [{"id": "A", "name": "Alpha"}, {"id": "B", "name": "Bravo"}, {"id": "C", "name": "Charlie"}],
        "matches": [
            {
                "id": "M-1", "round": 1, "team1": "A", "team2": "B", "status": "COMPLETED",
                "result_type": "FIRST_BATTING_WIN", "winner": "A",
                "team1_innings": {"runs": 180, "wickets": 6, "overs": 20, "balls": 0},
                "team2_innings": {"runs": 150, "wickets": 10, "overs": 18, "balls": 3},
            },
            {"id": "M-2", "round": 2, "team1": "B", "team2": "C"},
        ],
        "config": {"overs_per_match": "20", "points_for_win": 2, "points_for_draw": 1, "points_for_loss": 0},
    }


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


class TestStandingsEndpoints:
    def test_standings(self, client, payload):
        resp = client.post("/api/standings", json=payload)
        assert resp.status_code == 200
        data = resp.json()

        assert data["regime"] == "TRADITIONAL"
        assert data["overs_limit"] == 20
        assert data["completed_matches"] == 1
        table = data["table"]
        assert [r["team_id"] for r in table] == ["A", "C", "B"]
        assert table[0]["points"] == 2
        assert table[0]["nrr_display"] == "+1.500"
        assert table[1]["played"] == 0
        assert table[1]["nrr"] == 0.0

    def test_cache_does_not_keep_expired_payloads(self, client, payload, monkeypatch):
        now = {"t": 1_000_000.0}
        monkeypatch.setattr(cache.time, "time", lambda: now["t"])

        for i in range(20):
            payload["teams"][0]["name"] = f"Alpha {i}"
            assert client.post("/api/standings", json=payload).status_code == 200
        assert cache.size() == 20

        now["t"] += 3600
        payload["teams"][0]["name"] = "Alpha final"
        client.post("/api/standings", json=payload)
        assert cache.size() == 1

    def test_standings_repeat_call_is_identical(self, client, payload):
        first = client.post("/api/standings", json=payload).json()
        second = client.post("/api/standings", json=payload).json()
        assert first == second

    def test_hundred_ball_points_override(self, client, payload):
        payload["config"]["overs_per_match"] = "100 Balls"
        payload["matches"][0]["team1_innings"] = {"runs": 140, "wickets": 4, "overs": 100}
        payload["matches"][0]["team2_innings"] = {"runs": 130, "wickets": 6, "overs": 85}

        data = client.post("/api/standings", json=payload).json()
        assert data["regime"] == "BALL_COUNT"
        assert data["points"] == {"win": 4, "draw": 2, "loss": 0}
        assert data["rate_unit"] == "RPB"
        assert data["table"][0]["points"] == 4
        bravo = next(r for r in data["table"] if r["team_id"] == "B")
        assert bravo["overs_for"] == "85"

    def test_csv(self, client, payload):
        resp = client.post("/api/standings/csv", json=payload)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert resp.text.splitlines()[0].startswith("Pos,Team,P,W,L")

    def test_record_standings(self, client):
        record = {
            "id": "T-1",
            "name": "CUP",
            "teams": [{"id": "a", "name": "A"}, {"id": "b", "name": "B"}],
            "matches": [{
                "id": "M-1", "round": 1, "team1Id": "a", "team2Id": "b", "status": "COMPLETED",
                "resultType": "T2_WIN", "t1Runs": 99, "t1Wickets": 10, "t1OversWhole": 15,
                "t2Runs": 100, "t2Wickets": 1, "t2OversWhole": 10, "t2Balls": 0,
            }],
            "config": {"oversPerMatch": "20"},
        }
        data = client.post("/api/records/standings", json=record).json()
        assert data["status"] == "COMPLETED"
        assert data["table"][0]["team_id"] == "b"
        assert data["table"][0]["nrr"] == pytest.approx(round(100 / 10 - 99 / 20, 3))


class TestDashboardEndpoint:
    def test_dashboard(self, client, payload):
        data = client.post("/api/dashboard", json=payload).json()
        assert data["status"] == "ONGOING"
        assert data["match_counts"] == {"completed": 1, "in_progress": 0, "not_started": 1}
        assert data["most_runs"]["team_id"] == "A"
        assert data["most_wickets"]["team_id"] == "A"
        assert data["best_economy"]["team_id"] == "A"
        assert data["round_progress"] == [
            {"round": 1, "completed": 1, "total": 1},
            {"round": 2, "completed": 0, "total": 1},
        ]

    def test_dashboard_without_matches(self, client):
        data = client.post("/api/dashboard", json={"teams": [{"id": "A", "name": "A"}]}).json()
        assert data["best_economy"] is None
        assert data["most_runs"]["team_id"] == "A"
        assert data["round_progress"] == []
        assert data["status"] == "UPCOMING"


class TestResultEntryEndpoint:
    def _body(self, **overrides):
        body = {
            "match": {"id": "M-7", "round": 2, "team1": "A", "team2": "B"},
            "team1": {"runs": 150, "wickets": 10, "overs": "18.3"},
            "team2": {"runs": 151, "wickets": 3, "overs_whole": 17, "balls": 2},
            "overs_per_match": "20",
        }
        body.update(overrides)
        return body

    def test_enter_result(self, client):
        resp = client.post("/api/matches/result", json=self._body())
        assert resp.status_code == 200
        m = resp.json()["match"]
        assert m["status"] == "COMPLETED"
        assert m["result_type"] == "SECOND_BATTING_WIN"
        assert m["winner"] == "B"
        assert m["team1_innings"] == {"runs": 150, "wickets": 10, "overs": 18, "balls": 3}

    def test_clamps_values(self, client):
        body = self._body(team2={"runs": 20000, "wickets": 14, "overs_whole": 31, "balls": 2})
        m = client.post("/api/matches/result", json=body).json()["match"]
        assert m["team2_innings"] == {"runs": 9999, "wickets": 10, "overs": 20, "balls": 0}

    def test_bad_overs_notation(self, client):
        body = self._body(team1={"runs": 150, "wickets": 2, "overs": "18.7"})
        resp = client.post("/api/matches/result", json=body)
        assert resp.status_code == 400

    def test_locked(self, client):
        resp = client.post("/api/matches/result", json=self._body(locked=True))
        assert resp.status_code == 400
        assert "locked" in resp.json()["detail"]

    @pytest.mark.parametrize("overs", ["inf", "1e400", "nan"])
    def test_non_finite_ball_count_overs(self, client, overs):
        body = self._body(
            team1={"runs": 120, "wickets": 4, "overs": overs},
            overs_per_match="100 Balls",
        )
        resp = client.post("/api/matches/result", json=body)
        assert resp.status_code == 400


class TestFixturesAndEstimate:
    def test_generate(self, client):
        resp = client.post("/api/fixtures/generate", json={
            "team_ids": ["A", "B", "C", "D"], "venue_ids": ["V1", "V2"], "seed": 3,
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["fixtures_count"] == 6
        assert data["rounds"] == 3

    def test_generate_insufficient(self, client):
        resp = client.post("/api/fixtures/generate", json={"team_ids": ["A"], "venue_ids": ["V1"]})
        assert resp.status_code == 400

    def test_estimate(self, client):
        resp = client.post("/api/estimate", json={
            "num_teams": 8,
            "schedule_format": "DOUBLE ROUND ROBIN (DRR)",
            "playoff_system": "PAGE PLAYOFF",
        })
        data = resp.json()
        assert data["league_matches"] == 56
        assert data["playoff_matches"] == 4
        assert data["total_matches"] == 60

    def test_estimate_one_and_a_half_round_robin_rounds_down(self, client):
        resp = client.post("/api/estimate", json={
            "num_teams": 5,
            "schedule_format": "1.5 ROUND ROBIN",
            "playoff_system": "FINAL ONLY",
        })
        data = resp.json()
        # 10 pairings plus floor(5/2) extra matches
        assert data["league_matches"] == 12
        assert data["total_matches"] == 13

    def test_estimate_schedule_format_documents_rounding(self, client):
        schema = client.get("/openapi.json").json()["components"]["schemas"]["EstimateRequest"]
        assert "floor(N/2)" in schema["properties"]["schedule_format"]["description"]
