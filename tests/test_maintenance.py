"""
Maintenance tests: decay cutoff, cap-top-K on both graphs, snapshot retention,
weak-edge pruning, compaction, stats, and the combined run.

Run:
    pytest tests/test_maintenance.py -v
"""

import pytest
from sqlalchemy import select

from playlist_recs import (
    cap_top_k,
    capture_collection,
    compact,
    decay,
    get_latest_collection_track_ids,
    get_stats,
    prune_snapshots,
    prune_weak,
    run_maintenance,
)
from playlist_recs.store import (
    get_adjacency_weight,
    get_cooccurrence_weight,
    merge_adjacency,
    merge_cooccurrence,
    top_adjacency_from,
)
from playlist_recs.store.schema import cooccurrence_edges


class TestDecay:
    def test_only_stale_edges_decay(self, store, clock):
        with store.transaction() as conn:
            merge_adjacency(conn, "old", "x", 2.0, store.now())
            merge_cooccurrence(conn, "old", "y", 1.0, store.now())
        clock.advance(days=10)
        with store.transaction() as conn:
            merge_adjacency(conn, "new", "x", 2.0, store.now())

        counts = decay(store, factor=0.5, older_than_days=7)

        assert counts.adjacency_edges == 1
        assert counts.cooccurrence_edges == 1
        with store.read() as conn:
            assert get_adjacency_weight(conn, "old", "x") == pytest.approx(1.0)
            assert get_cooccurrence_weight(conn, "old", "y") == pytest.approx(0.5)
            assert get_adjacency_weight(conn, "new", "x") == pytest.approx(2.0)

    def test_rerun_decays_again(self, store, clock):
        with store.transaction() as conn:
            merge_adjacency(conn, "a", "b", 1.0, store.now())
        clock.advance(days=8)
        decay(store, 0.9, 7)
        decay(store, 0.9, 7)
        with store.read() as conn:
            assert get_adjacency_weight(conn, "a", "b") == pytest.approx(0.81)

    def test_edge_at_cutoff_is_not_decayed(self, store, clock):
        with store.transaction() as conn:
            merge_adjacency(conn, "a", "b", 1.0, store.now())
        clock.advance(days=7)

        assert decay(store, factor=0.5, older_than_days=7).adjacency_edges == 0

        clock.advance(seconds=1)
        assert decay(store, factor=0.5, older_than_days=7).adjacency_edges == 1
        with store.read() as conn:
            assert get_adjacency_weight(conn, "a", "b") == pytest.approx(0.5)

    def test_invalid_factor(self, store):
        with pytest.raises(ValueError):
            decay(store, factor=1.5)


class TestCapTopK:
    def test_keeps_heaviest_outgoing_edges(self, store):
        with store.transaction() as conn:
            for i, w in enumerate([5.0, 1.0, 4.0, 2.0, 3.0]):
                merge_adjacency(conn, "src", f"t{i}", w, store.now())
            merge_adjacency(conn, "other", "t0", 1.0, store.now())

        counts = cap_top_k(store, k=3)

        assert counts.adjacency_edges == 2
        with store.read() as conn:
            kept = top_adjacency_from(conn, "src", limit=10)
            assert [e.track_id for e in kept] == ["t0", "t2", "t4"]
            assert get_adjacency_weight(conn, "other", "t0") == pytest.approx(1.0)

    def test_caps_both_sides_of_cooccurrence(self, store):
        with store.transaction() as conn:
            # "m" sits on side a for n1..n3 and on side b for a1..a3
            for i, w in enumerate([3.0, 2.0, 1.0], start=1):
                merge_cooccurrence(conn, "m", f"n{i}", w, store.now())
                merge_cooccurrence(conn, f"a{i}", "m", w + 0.5, store.now())

        counts = cap_top_k(store, k=2)

        assert counts.cooccurrence_edges == 2
        with store.read() as conn:
            a_side = conn.execute(
                select(cooccurrence_edges.c.track_id_b)
                .where(cooccurrence_edges.c.track_id_a == "m")
                .order_by(cooccurrence_edges.c.track_id_b)
            ).scalars().all()
            b_side = conn.execute(
                select(cooccurrence_edges.c.track_id_a)
                .where(cooccurrence_edges.c.track_id_b == "m")
                .order_by(cooccurrence_edges.c.track_id_a)
            ).scalars().all()
        assert a_side == ["n1", "n2"]
        assert b_side == ["a1", "a2"]

    def test_under_cap_is_untouched(self, store):
        with store.transaction() as conn:
            merge_adjacency(conn, "a", "b", 1.0, store.now())
        assert cap_top_k(store, k=5).total == 0


class TestSnapshotRetention:
    def test_old_snapshots_are_deleted(self, store, clock):
        capture_collection(store, "old", ["A", "B"])
        clock.advance(days=60)
        capture_collection(store, "recent", ["C", "D", "E"])
        clock.advance(days=31)

        removed = prune_snapshots(store, retention_days=90)

        assert removed == 2
        assert get_latest_collection_track_ids(store, "old") == []
        assert get_latest_collection_track_ids(store, "recent") == ["C", "D", "E"]
        # edges outlive the snapshots they came from
        with store.read() as conn:
            assert get_adjacency_weight(conn, "A", "B") == pytest.approx(1.0)

    def test_invalid_retention(self, store):
        with pytest.raises(ValueError):
            prune_snapshots(store, retention_days=-1)


class TestPruneAndCompact:
    def test_prune_removes_weak_edges(self, store):
        with store.transaction() as conn:
            merge_adjacency(conn, "a", "b", 0.005, store.now())
            merge_adjacency(conn, "a", "c", 0.5, store.now())
            merge_cooccurrence(conn, "a", "d", 0.001, store.now())

        counts = prune_weak(store, min_weight=0.01)

        assert counts.adjacency_edges == 1
        assert counts.cooccurrence_edges == 1
        with store.read() as conn:
            assert get_adjacency_weight(conn, "a", "b") is None
            assert get_adjacency_weight(conn, "a", "c") == pytest.approx(0.5)

    def test_prune_is_idempotent(self, store):
        with store.transaction() as conn:
            merge_adjacency(conn, "a", "b", 0.005, store.now())
        prune_weak(store)
        assert prune_weak(store).total == 0

    def test_compact_reports_sizes(self, store):
        with store.transaction() as conn:
            for i in range(200):
                merge_adjacency(conn, "a", f"t{i}", 0.001, store.now())
        prune_weak(store)

        result = compact(store)

        assert result.size_before_bytes > 0
        assert result.size_after_bytes > 0
        assert result.reclaimed_bytes >= 0


class TestStatsAndRun:
    def test_stats_counts(self, store):
        with store.transaction() as conn:
            merge_adjacency(conn, "a", "b", 1.0, store.now())
            merge_cooccurrence(conn, "a", "b", 1.0, store.now())

        stats = get_stats(store)

        assert stats.adjacency_edges == 1
        assert stats.cooccurrence_edges == 1
        assert stats.total_edges == 2
        assert stats.db_size_bytes > 0

    def test_run_maintenance_report(self, store, clock, config):
        with store.transaction() as conn:
            merge_adjacency(conn, "a", "b", 0.0101, store.now())
            merge_adjacency(conn, "a", "c", 1.0, store.now())
        clock.advance(days=30)

        report = run_maintenance(store, config)

        # 0.0101 * 0.98 falls below the 0.01 floor
        assert report.decayed.adjacency_edges == 2
        assert report.pruned.adjacency_edges == 1
        assert report.before.adjacency_edges == 2
        assert report.after.adjacency_edges == 1
        assert report.compacted is not None

    def test_run_without_compact(self, store, config):
        report = run_maintenance(store, config, include_compact=False)
        assert report.compacted is None

    def test_run_prunes_expired_snapshots(self, store, clock, config):
        capture_collection(store, "p1", ["A", "B", "C"])
        assert get_stats(store).snapshot_rows == 3
        clock.advance(days=config.snapshot_retention_days + 1)

        report = run_maintenance(store, config, include_compact=False)

        assert report.snapshots_pruned == 3
        assert report.before.snapshot_rows == 3
        assert report.after.snapshot_rows == 0
