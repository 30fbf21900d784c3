from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from threading import Lock


@dataclass
class RouteStats:
    count: int = 0
    elapsed_ms: float = 0.0
    slowest_ms: float = 0.0
    client_errors: int = 0
    server_errors: int = 0

    def record(self, status_code: int, duration_ms: float) -> None:
        self.count += 1
        self.elapsed_ms += duration_ms
        self.slowest_ms = max(self.slowest_ms, duration_ms)
        if 400 <= status_code < 500:
            self.client_errors += 1
        elif status_code >= 500:
            self.server_errors += 1

    def as_dict(self) -> dict[str, float | int]:
        mean = self.elapsed_ms / self.count if self.count else 0.0
        return {
            "total_requests": self.count,
            "avg_duration_ms": round(mean, 2),
            "max_duration_ms": round(self.slowest_ms, 2),
            "client_errors": self.client_errors,
            "server_errors": self.server_errors,
        }


class InMemoryRequestMetrics:
    """Process-local counters for HTTP routes and order stage entries."""

    def __init__(self) -> None:
        self._routes: dict[str, RouteStats] = {}
        self._stages: Counter[str] = Counter()
        self._lock = Lock()

    def observe(self, endpoint: str, method: str, status_code: int, duration_ms: float) -> None:
        with self._lock:
            stats = self._routes.setdefault(f"{method} {endpoint}", RouteStats())
            stats.record(status_code, duration_ms)

    def observe_stage(self, stage: str) -> None:
        with self._lock:
            self._stages[stage] += 1

    def snapshot(self) -> dict[str, dict[str, float | int]]:
        with self._lock:
            return {route: stats.as_dict() for route, stats in self._routes.items()}

    def snapshot_stages(self) -> dict[str, int]:
        with self._lock:
            return dict(self._stages)


request_metrics = InMemoryRequestMetrics()
