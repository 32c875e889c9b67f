"""Tests for the Diagnostics object: timers, log capture and integrity reports."""

import logging

from diagnostics import Diagnostics
from enrichment import enrich


class TestTimers:
    def test_timed_records_duration(self):
        diag = Diagnostics()
        with diag.timed("work"):
            sum(range(1000))

        assert diag.durations["work"] >= 0.0
        assert diag.snapshot()["running"] == []

    def test_stop_without_start(self):
        assert Diagnostics().stop_timer("never") == 0.0

    def test_running_timer_in_snapshot(self):
        diag = Diagnostics()
        diag.start_timer("slow")

        assert diag.snapshot()["running"] == ["slow"]
        assert diag.stop_timer("slow") >= 0.0


class TestLogCapture:
    def test_captures_child_loggers(self):
        with Diagnostics() as diag:
            enrich({"relationships": []})

        errors = diag.records("error")
        assert len(errors) == 1
        assert errors[0]["logger"] == "genealogy.enrichment"
        assert "people" in errors[0]["message"]

    def test_detach_stops_capture(self):
        diag = Diagnostics().attach()
        diag.detach()
        logging.getLogger("genealogy.test").warning("after detach")

        assert diag.records() == []

    def test_detach_restores_level(self):
        logger = logging.getLogger("genealogy")
        before = logger.level
        with Diagnostics(level=logging.DEBUG):
            assert logger.level == logging.DEBUG

        assert logger.level == before

    def test_instances_are_independent(self):
        first = Diagnostics()
        second = Diagnostics()
        with first:
            logging.getLogger("genealogy.test").warning("only first")

        assert len(first.records()) == 1
        assert second.records() == []

    def test_history_is_bounded(self):
        with Diagnostics(max_history=3) as diag:
            for i in range(5):
                logging.getLogger("genealogy.test").warning("message %d", i)

        assert [r["message"] for r in diag.records()] == ["message 2", "message 3", "message 4"]

    def test_clear(self):
        with Diagnostics() as diag:
            logging.getLogger("genealogy.test").warning("x")
            with diag.timed("t"):
                pass
        diag.clear()

        assert diag.records() == []
        assert diag.durations == {}


class TestIntegrityReport:
    def test_valid(self, family):
        diag = Diagnostics()
        result = diag.integrity_report(family)

        assert result.valid is True
        assert "validate_dataset" in diag.durations

    def test_invalid_is_logged(self):
        with Diagnostics() as diag:
            result = diag.integrity_report({"people": [{"name": "No id"}], "relationships": []})

        assert result.valid is False
        assert any("validation failed" in r["message"] for r in diag.records("WARNING"))
