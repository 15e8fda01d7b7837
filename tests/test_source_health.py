"""
Tests for source health tracking and status transitions.

Verifies OK -> DEGRADED -> DOWN transitions and persistence.
"""

from civic_data.ingest.health import (
    CONSECUTIVE_FAILURES_DEGRADED,
    CONSECUTIVE_FAILURES_DOWN,
    ROLLING_WINDOW_RUNS,
    HealthTracker,
    SourceHealth,
    load_health_tracker,
    save_health_tracker,
)

from conftest import failed, ok, skipped


class TestSourceHealthTransitions:
    """Tests for SourceHealth status transitions."""

    def test_initial_status_is_ok(self):
        health = SourceHealth(source_id="census")
        assert health.status == "OK"
        assert health.consecutive_failures == 0

    def test_two_failures_stays_ok(self):
        health = SourceHealth(source_id="census")
        health.record_failure("Error 1")
        health.record_failure("Error 2")

        assert health.status == "OK"
        assert health.last_error == "Error 2"

    def test_three_failures_triggers_degraded(self):
        health = SourceHealth(source_id="census")
        for i in range(CONSECUTIVE_FAILURES_DEGRADED):
            health.record_failure(f"Error {i+1}")

        assert health.status == "DEGRADED"

    def test_seven_failures_triggers_down(self):
        health = SourceHealth(source_id="census")
        for i in range(CONSECUTIVE_FAILURES_DOWN):
            health.record_failure(f"Error {i+1}")

        assert health.status == "DOWN"

    def test_success_resets_to_ok(self):
        health = SourceHealth(source_id="census")
        for i in range(CONSECUTIVE_FAILURES_DOWN):
            health.record_failure(f"Error {i+1}")

        health.record_success()

        assert health.status == "OK"
        assert health.consecutive_failures == 0
        assert health.last_error is None

    def test_history_window_bounded(self):
        health = SourceHealth(source_id="census")
        for _ in range(ROLLING_WINDOW_RUNS + 3):
            health.record_success()
        health.record_failure("boom")

        assert len(health.history) == ROLLING_WINDOW_RUNS
        assert health.success_rate_last_7 == (ROLLING_WINDOW_RUNS - 1) / ROLLING_WINDOW_RUNS


class TestHealthTracker:
    def test_record_outcomes_ignores_skipped(self):
        tracker = HealthTracker()
        tracker.record_outcomes([ok("a", 1), failed("b", "HTTP 500"), skipped("c")])

        assert set(tracker.sources) == {"a", "b"}
        assert tracker.sources["b"].last_error == "HTTP 500"

    def test_summary(self):
        tracker = HealthTracker()
        for _ in range(CONSECUTIVE_FAILURES_DEGRADED):
            tracker.record_outcomes([failed("b")])
        tracker.record_outcomes([ok("a", 1)])

        summary = tracker.get_summary()

        assert summary["degraded_sources"] == ["b"]
        assert summary["overall_status"] == "DEGRADED"

    def test_persistence_round_trip(self, tmp_path):
        path = tmp_path / "_meta" / "sources_health.json"
        tracker = HealthTracker()
        tracker.record_outcomes([failed("b", "timeout")])

        assert save_health_tracker(tracker, path) is True
        loaded = load_health_tracker(path)

        assert loaded.sources["b"].consecutive_failures == 1
        assert loaded.sources["b"].last_error == "timeout"
        assert loaded.last_updated_at is not None

    def test_corrupt_file_gives_empty_tracker(self, tmp_path):
        path = tmp_path / "sources_health.json"
        path.write_text("{nope")
        assert load_health_tracker(path).sources == {}
