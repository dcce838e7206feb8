"""
HTTP API tests through FastAPI's TestClient: capture, update, seed and
appendix recommendations, dismissals, stats, maintenance, and the disabled flag.

Run:
    pytest tests/test_api.py -v
"""

import pytest
from fastapi.testclient import TestClient

from playlist_recs import RecsEngine
from server.app import create_app
from server.config import ServerConfig
from server.state import AppState, reset_state, set_state


@pytest.fixture
def client(engine):
    set_state(AppState(ServerConfig(recs_enabled=True), engine=engine))
    with TestClient(create_app()) as c:
        yield c
    reset_state()


@pytest.fixture
def disabled_client():
    set_state(AppState(ServerConfig(recs_enabled=False), engine=RecsEngine(enabled=False)))
    with TestClient(create_app()) as c:
        yield c
    reset_state()


def _capture(client, playlist_id, tracks):
    r = client.post("/api/recs/capture", json={"playlist_id": playlist_id, "tracks": tracks})
    assert r.status_code == 200
    return r.json()


class TestRootAndHealth:
    def test_root(self, client):
        data = client.get("/").json()
        assert data["enabled"] is True
        assert "/api/recs/seed" in data["endpoints"]["recommendations"]

    def test_health_reports_migrations(self, client):
        data = client.get("/api/health").json()
        assert data["status"] == "healthy"
        assert data["migrations"]["available"] is True
        assert data["migrations"]["pending_count"] == 0


class TestCaptureAndUpdate:
    def test_capture_stats(self, client):
        data = _capture(client, "p1", [{"id": "A", "name": "Alpha"}, {"id": "B"}, None, "C"])
        assert data["success"] is True
        assert data["stats"] == {"tracks_captured": 3, "adjacency_edges": 2, "cooccurrence_edges": 3}

    def test_capture_requires_playlist_id(self, client):
        r = client.post("/api/recs/capture", json={"playlist_id": " ", "tracks": []})
        assert r.status_code == 400

    def test_capture_rejects_non_list_tracks(self, client):
        r = client.post("/api/recs/capture", json={"playlist_id": "p1", "tracks": "A,B"})
        assert r.status_code == 422

    def test_capture_rejects_out_of_range_popularity(self, client):
        r = client.post("/api/recs/capture", json={"playlist_id": "p1", "tracks": [{"id": "A", "popularity": 150}]})
        assert r.status_code == 422

    def test_capture_rejects_non_string_id(self, client):
        r = client.post("/api/recs/capture", json={"playlist_id": "p1", "tracks": [{"id": 123}]})
        assert r.status_code == 422

    def test_capture_accepts_host_shape(self, client):
        track = {"id": "A", "artistObjects": [{"id": "ar1", "name": "Band"}], "album": {"id": "al1"}, "durationMs": 1000}
        _capture(client, "p1", [track, "B"])

        data = client.post("/api/recs/seed", json={"seed_track_ids": ["B"]}).json()

        info = data["recommendations"][0]["track"]
        assert info["id"] == "A"
        assert info["artist_ids"] == ["ar1"]
        assert info["album_id"] == "al1"
        assert info["duration_ms"] == 1000

    def test_update_add(self, client):
        r = client.post(
            "/api/recs/update",
            json={"operation": "add", "track_ids": ["A", "X", "B"], "added_track_ids": ["X"], "add_positions": [1]},
        )
        assert r.status_code == 200
        assert r.json()["stats"]["adjacency"] == 2

    def test_update_rejects_unknown_operation(self, client):
        r = client.post("/api/recs/update", json={"operation": "shuffle", "track_ids": ["A"]})
        assert r.status_code == 400

    def test_reorder_requires_positions(self, client):
        r = client.post("/api/recs/update", json={"operation": "reorder", "track_ids": ["A", "B"]})
        assert r.status_code == 400


class TestRecommendations:
    def test_seed_with_metadata(self, client):
        _capture(client, "p1", [{"id": "A"}, {"id": "B", "name": "Beta", "artist_names": ["Band"]}, {"id": "C"}])

        r = client.post("/api/recs/seed", json={"seed_track_ids": ["A"]})

        assert r.status_code == 200
        data = r.json()
        assert data["enabled"] is True
        first = data["recommendations"][0]
        assert first["track_id"] == "B"
        assert first["rank"] == 1
        assert first["track"]["name"] == "Beta"
        assert first["track"]["artist_names"] == ["Band"]

    def test_seed_without_metadata(self, client):
        _capture(client, "p1", ["A", "B"])
        data = client.post("/api/recs/seed", json={"seed_track_ids": ["A"], "include_metadata": False}).json()
        assert "track" not in data["recommendations"][0]

    def test_seed_count_validated(self, client):
        assert client.post("/api/recs/seed", json={"seed_track_ids": []}).status_code == 400
        too_many = {"seed_track_ids": ["a", "b", "c", "d", "e", "f"]}
        assert client.post("/api/recs/seed", json=too_many).status_code == 400

    def test_top_n_clamped(self, client):
        _capture(client, "p1", ["A", "B", "C", "D"])
        data = client.post("/api/recs/seed", json={"seed_track_ids": ["A"], "top_n": 0}).json()
        assert len(data["recommendations"]) == 1

    def test_appendix_excludes_playlist_tracks(self, client):
        _capture(client, "p1", ["A", "B", "C"])
        _capture(client, "p2", ["B", "C", "D"])

        r = client.post("/api/recs/playlist-appendix", json={"playlist_id": "p1", "track_ids": ["A", "B", "C"]})

        ids = [rec["track_id"] for rec in r.json()["recommendations"]]
        assert ids == ["D"]

    def test_appendix_without_tracks(self, client):
        data = client.post("/api/recs/playlist-appendix", json={"playlist_id": "p1", "track_ids": []}).json()
        assert data["recommendations"] == []
        assert data["message"]


class TestDismissals:
    def test_dismiss_then_clear(self, client):
        _capture(client, "p1", ["A", "B", "C"])

        r = client.post("/api/recs/dismiss", json={"track_id": "B", "context_id": "p1"})
        assert r.json() == {"success": True, "enabled": True}

        seed = {"seed_track_ids": ["A"], "playlist_id": "p1", "include_metadata": False}
        ids = [rec["track_id"] for rec in client.post("/api/recs/seed", json=seed).json()["recommendations"]]
        assert "B" not in ids

        cleared = client.delete("/api/recs/dismiss", params={"context_id": "p1"}).json()
        assert cleared["cleared"] == 1
        ids = [rec["track_id"] for rec in client.post("/api/recs/seed", json=seed).json()["recommendations"]]
        assert "B" in ids

    def test_default_context_is_global(self, client):
        _capture(client, "p1", ["A", "B"])
        client.post("/api/recs/dismiss", json={"track_id": "B"})
        seed = {"seed_track_ids": ["A"], "playlist_id": "any-playlist"}
        assert client.post("/api/recs/seed", json=seed).json()["recommendations"] == []

    def test_clear_requires_context_id(self, client):
        _capture(client, "p1", ["A", "B"])
        client.post("/api/recs/dismiss", json={"track_id": "B"})

        assert client.delete("/api/recs/dismiss").status_code == 422
        assert client.delete("/api/recs/dismiss", params={"context_id": " "}).status_code == 400

        seed = {"seed_track_ids": ["A"], "include_metadata": False}
        assert client.post("/api/recs/seed", json=seed).json()["recommendations"] == []

        cleared = client.delete("/api/recs/dismiss", params={"context_id": "global"}).json()
        assert cleared["cleared"] == 1
        assert [r["track_id"] for r in client.post("/api/recs/seed", json=seed).json()["recommendations"]] == ["B"]


class TestStatsAndMaintenance:
    def test_stats(self, client):
        _capture(client, "p1", ["A", "B", "C"])
        data = client.get("/api/stats/recs").json()
        assert data["enabled"] is True
        assert data["tracks"] == 3
        assert data["total_edges"] == 5

    def test_maintenance_run(self, client):
        _capture(client, "p1", ["A", "B"])
        data = client.post("/api/recs/maintenance").json()
        assert data["success"] is True
        assert data["report"]["after"]["adjacency_edges"] == 1


class TestDisabled:
    def test_endpoints_report_disabled(self, disabled_client):
        c = disabled_client
        assert c.post("/api/recs/capture", json={"playlist_id": "p1", "tracks": ["A"]}).json()["enabled"] is False
        assert c.post("/api/recs/seed", json={"seed_track_ids": ["A"]}).json() == {
            "recommendations": [],
            "enabled": False,
            "message": "Recommendation system is not enabled",
        }
        r = c.post("/api/recs/playlist-appendix", json={"playlist_id": "p1", "track_ids": ["A"]})
        assert r.status_code == 200
        assert r.json()["enabled"] is False
        assert c.post("/api/recs/dismiss", json={"track_id": "A"}).json()["enabled"] is False
        assert c.get("/api/stats/recs").json()["enabled"] is False
        assert c.get("/api/health").json()["migrations"]["available"] is False
