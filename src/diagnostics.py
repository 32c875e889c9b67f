"""
Diagnostics: named timers, captured log history and integrity reports.

A Diagnostics instance is created and attached explicitly and holds no
process-wide state.
"""

from collections import deque
from contextlib import contextmanager
from datetime import datetime, timezone
import logging
import time
from typing import Any, Iterator

from models import Dataset, ValidationResult
from validation import validate_dataset


class _HistoryHandler(logging.Handler):
    def __init__(self, history: deque):
        super().__init__()
        self._history = history

    def emit(self, record: logging.LogRecord):
        self._history.append(
            {
                "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }
        )


class Diagnostics:
    def __init__(self, logger_name: str = "genealogy", max_history: int = 1000, level: int = logging.DEBUG):
        self.logger_name = logger_name
        self.level = level
        self.history: deque[dict[str, Any]] = deque(maxlen=max_history)
        self.durations: dict[str, float] = {}  # label -> milliseconds
        self._started: dict[str, float] = {}
        self._handler: _HistoryHandler | None = None
        self._previous_level: int | None = None

    # -- lifecycle -----------------------------------------------------------

    def attach(self) -> "Diagnostics":
        """Start capturing records from the configured logger."""
        if self._handler is not None:
            return self
        logger = logging.getLogger(self.logger_name)
        self._handler = _HistoryHandler(self.history)
        self._handler.setLevel(self.level)
        logger.addHandler(self._handler)
        self._previous_level = logger.level
        if logger.level == logging.NOTSET or logger.level > self.level:
            logger.setLevel(self.level)
        return self

    def detach(self):
        if self._handler is None:
            return
        logger = logging.getLogger(self.logger_name)
        logger.removeHandler(self._handler)
        if self._previous_level is not None:
            logger.setLevel(self._previous_level)
        self._handler = None
        self._previous_level = None

    def __enter__(self) -> "Diagnostics":
        return self.attach()

    def __exit__(self, *exc):
        self.detach()

    # -- timers --------------------------------------------------------------

    def start_timer(self, label: str):
        self._started[label] = time.perf_counter()

    def stop_timer(self, label: str) -> float:
        """Stop a timer and return its duration in milliseconds (0.0 if never started)."""
        started = self._started.pop(label, None)
        if started is None:
            return 0.0
        elapsed = (time.perf_counter() - started) * 1000
        self.durations[label] = elapsed
        logging.getLogger(self.logger_name).debug("Performance: %s took %.2fms", label, elapsed)
        return elapsed

    @contextmanager
    def timed(self, label: str) -> Iterator[None]:
        self.start_timer(label)
        try:
            yield
        finally:
            self.stop_timer(label)

    # -- reports -------------------------------------------------------------

    def records(self, level: str | None = None) -> list[dict[str, Any]]:
        if level is None:
            return list(self.history)
        return [r for r in self.history if r["level"] == level.upper()]

    def clear(self):
        self.history.clear()
        self.durations.clear()
        self._started.clear()

    def integrity_report(self, data: dict[str, Any] | Dataset) -> ValidationResult:
        with self.timed("validate_dataset"):
            result = validate_dataset(data)
        log = logging.getLogger(self.logger_name)
        if result.valid:
            log.debug("Dataset validation passed with %d warnings", len(result.warnings))
        else:
            log.warning("Dataset validation failed with %d errors", len(result.errors))
        return result

    def snapshot(self) -> dict[str, Any]:
        """Export the captured state as plain data."""
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "timers": dict(self.durations),
            "running": sorted(self._started),
            "logs": list(self.history),
        }
