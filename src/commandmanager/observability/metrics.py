"""In-memory metrics for command runs."""

from collections import Counter, defaultdict
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class MetricsBackend:
    """Aggregates counters, gauges and timings in memory."""

    def __init__(self) -> None:
        self.counters: Counter[str] = Counter()
        self.gauges: dict[str, float] = {}
        self.timings: dict[str, list[float]] = defaultdict(list)

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        self.counters[self._format_key(name, tags)] += value

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        # Last value wins.
        self.gauges[self._format_key(name, tags)] = value

    def timing(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self.timings[self._format_key(name, tags)].append(value)

    def _format_key(self, name: str, tags: dict[str, str] | None) -> str:
        if not tags:
            return name
        tag_str = ",".join(f"{k}={v}" for k, v in sorted(tags.items()))
        return f"{name}[{tag_str}]"

    def get_summary(self) -> dict[str, Any]:
        """Return a summary of collected metrics."""
        summary: dict[str, Any] = {
            "counters": dict(self.counters),
            "gauges": dict(self.gauges),
            "timings": {},
        }

        for name, values in self.timings.items():
            if values:
                summary["timings"][name] = {
                    "count": len(values),
                    "total": sum(values),
                    "avg": sum(values) / len(values),
                    "min": min(values),
                    "max": max(values),
                }
        return summary


class MetricsCollector:
    """
    Collector for command run metrics.

    One collector belongs to one CommandManager; there is no process-wide
    instance.
    """

    def __init__(self, backend: MetricsBackend | None = None) -> None:
        self.backend = backend or MetricsBackend()

    def count_outcome(self, command: str, state: str) -> None:
        """Record a command outcome."""
        self.backend.increment("command_outcome_total", tags={"state": state})
        self.backend.increment("command_outcome_total", tags={"command": command, "state": state})

    def record_duration(self, command: str, duration_ms: float) -> None:
        """Record command duration."""
        self.backend.timing("command_duration_ms", duration_ms)
        self.backend.timing("command_duration_ms", duration_ms, tags={"command": command})

    def reset(self) -> None:
        """Discard everything collected so far."""
        logger.debug("Resetting command metrics", counters=len(self.backend.counters))
        self.backend = MetricsBackend()

    def record_ordering(self, command_count: int) -> None:
        """Record the size of the last computed order."""
        self.backend.gauge("ordered_commands", float(command_count))

    def get_summary(self) -> dict[str, Any]:
        return self.backend.get_summary()
