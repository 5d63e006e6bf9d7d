"""Lightweight in-memory metrics collector."""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass
from typing import Dict


@dataclass
class MetricSnapshot:
    total_requests: int
    turn_outcomes: Dict[str, int]
    tool_calls: Dict[str, int]


class MetricsCollector:
    """Thread-safe counter storage for basic service metrics."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total_requests = 0
        self._outcomes: Counter[str] = Counter()
        self._tool_calls: Counter[str] = Counter()

    def record_request(self, engine: str, outcome: str) -> None:
        with self._lock:
            self._total_requests += 1
            self._outcomes[f"{engine}:{outcome}"] += 1

    def record_tool_call(self, tool_name: str) -> None:
        with self._lock:
            self._tool_calls[tool_name] += 1

    def snapshot(self) -> MetricSnapshot:
        with self._lock:
            return MetricSnapshot(
                total_requests=self._total_requests,
                turn_outcomes=dict(self._outcomes),
                tool_calls=dict(self._tool_calls),
            )
