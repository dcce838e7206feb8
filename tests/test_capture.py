"""
Capture tests: adjacency for consecutive pairs, windowed co-occurrence with
distance falloff, repeated captures summing, input edge cases, and the
collection snapshots written alongside.

Run:
    pytest tests/test_capture.py -v
"""

import pytest

from playlist_recs import RecsConfig, capture_collection, get_latest_collection_track_ids, is_snapshot_stale
from playlist_recs.stages.capture import cooccurrence_weight, dedupe_preserving_order
from playlist_recs.store import (
    get_adjacency_weight,
    get_cooccurrence_weight,
    get_tracks,
    latest_snapshot_at,
    prune_collection_snapshots,
)


class TestCaptureScenarios:
    def test_single_capture_builds_both_graphs(self, store):
        stats = capture_collection(store, "p1", ["A", "B", "C"])

        assert stats.tracks_captured == 3
        assert stats.adjacency_edges == 2
        assert stats.cooccurrence_edges == 3
        with store.read() as conn:
            assert get_adjacency_weight(conn, "A", "B") == pytest.approx(1.0)
            assert get_adjacency_weight(conn, "B", "C") == pytest.approx(1.0)
            assert get_adjacency_weight(conn, "A", "C") is None
            assert get_cooccurrence_weight(conn, "A", "B") == pytest.approx(1.0)
            assert get_cooccurrence_weight(conn, "B", "C") == pytest.approx(1.0)
            assert get_cooccurrence_weight(conn, "A", "C") == pytest.approx(0.9)

    def test_second_capture_sums(self, store):
        capture_collection(store, "p1", ["A", "B", "C"])
        capture_collection(store, "p1", ["A", "B", "C"])
        with store.read() as conn:
            assert get_adjacency_weight(conn, "A", "B") == pytest.approx(2.0)
            assert get_cooccurrence_weight(conn, "A", "C") == pytest.approx(1.8)


class TestCaptureInputs:
    def test_empty_collection_is_noop(self, store):
        stats = capture_collection(store, "p1", [])
        assert stats.tracks_captured == 0
        assert stats.adjacency_edges == 0

    def test_tracks_without_ids_are_skipped(self, store):
        stats = capture_collection(store, "p1", [{"id": "A"}, {"name": "local file"}, None, {"id": "B"}])
        assert stats.tracks_captured == 2
        with store.read() as conn:
            # A and B become neighbors once the ID-less entries are dropped
            assert get_adjacency_weight(conn, "A", "B") == pytest.approx(1.0)

    def test_cooccurrence_only_skips_adjacency(self, store):
        stats = capture_collection(store, "liked", ["A", "B", "C"], cooccurrence_only=True)
        assert stats.adjacency_edges == 0
        assert stats.cooccurrence_edges == 3
        with store.read() as conn:
            assert get_adjacency_weight(conn, "A", "B") is None

    def test_metadata_is_cached(self, store):
        capture_collection(
            store,
            "p1",
            [{"id": "A", "name": "First", "artist_ids": ["x"], "popularity": 70}, {"id": "B"}],
        )
        with store.read() as conn:
            records = get_tracks(conn, ["A", "B"])
        assert records["A"].name == "First"
        assert records["A"].popularity == 70
        assert "B" in records

    def test_host_camel_case_metadata(self, store):
        capture_collection(
            store,
            "p1",
            [
                {
                    "id": "A",
                    "artistObjects": [{"id": "ar1", "name": "Band"}, {"id": "ar2"}],
                    "album": {"id": "al1", "name": "Record"},
                    "durationMs": 1000,
                },
                "B",
            ],
        )
        with store.read() as conn:
            record = get_tracks(conn, ["A"])["A"]
        assert record.artist_ids == ["ar1", "ar2"]
        assert record.artist_names == ["Band"]
        assert record.album_id == "al1"
        assert record.duration_ms == 1000

    def test_window_limits_pairs(self, store):
        config = RecsConfig(cooccurrence_window=1)
        stats = capture_collection(store, "p1", ["A", "B", "C", "D"], config=config)
        assert stats.cooccurrence_edges == 3
        with store.read() as conn:
            assert get_cooccurrence_weight(conn, "A", "C") is None

    def test_duplicate_ids_merge_each_pair_once(self, store):
        capture_collection(store, "p1", ["A", "B", "A"])
        with store.read() as conn:
            assert get_cooccurrence_weight(conn, "A", "B") == pytest.approx(1.0)
            assert get_adjacency_weight(conn, "A", "B") == pytest.approx(1.0)
            assert get_adjacency_weight(conn, "B", "A") == pytest.approx(1.0)


class TestHelpers:
    def test_distance_falloff(self):
        assert cooccurrence_weight(1, 1.0, 0.1) == pytest.approx(1.0)
        assert cooccurrence_weight(2, 1.0, 0.1) == pytest.approx(0.9)
        assert cooccurrence_weight(5, 0.5, 0.1) == pytest.approx(0.3)
        assert cooccurrence_weight(50, 1.0, 0.1) == 0.0

    def test_dedupe_keeps_first_position(self):
        assert dedupe_preserving_order(["b", "a", "b", "", "c"]) == ["b", "a", "c"]


class TestSnapshots:
    def test_capture_records_ordering(self, store):
        capture_collection(store, "p1", ["A", None, {"name": "local file"}, "B", "C"])
        assert get_latest_collection_track_ids(store, "p1") == ["A", "B", "C"]

    def test_latest_snapshot_wins(self, store, clock):
        capture_collection(store, "p1", ["A", "B", "C"])
        clock.advance(seconds=10)
        capture_collection(store, "p1", ["C", "A"])

        assert get_latest_collection_track_ids(store, "p1") == ["C", "A"]
        assert get_latest_collection_track_ids(store, "other") == []

    def test_repeated_track_keeps_last_position(self, store):
        capture_collection(store, "p1", ["A", "B", "A"])
        assert get_latest_collection_track_ids(store, "p1") == ["B", "A"]

    def test_staleness(self, store, clock):
        assert is_snapshot_stale(store, "p1") is True

        capture_collection(store, "p1", ["A", "B"])
        assert is_snapshot_stale(store, "p1") is False

        clock.advance(seconds=3600)
        assert is_snapshot_stale(store, "p1") is False
        clock.advance(seconds=1)
        assert is_snapshot_stale(store, "p1") is True
        assert is_snapshot_stale(store, "p1", max_age_seconds=7200) is False

    def test_prune_keeps_most_recent(self, store, clock):
        for _ in range(4):
            capture_collection(store, "p1", ["A", "B"])
            clock.advance(seconds=60)
        capture_collection(store, "p2", ["A", "B"])

        with store.transaction() as conn:
            removed = prune_collection_snapshots(conn, "p1", keep=3)
            assert prune_collection_snapshots(conn, "p1", keep=3) == 0

        assert removed == 2
        with store.read() as conn:
            assert latest_snapshot_at(conn, "p1") == clock.now - 60
            assert latest_snapshot_at(conn, "p2") == clock.now
