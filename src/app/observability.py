"""Минимальные метрики и трейсинг для компиляции и сопоставления выражений."""
from __future__ import annotations

from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass
from threading import Lock
from time import perf_counter
from typing import Iterator


@dataclass
class MetricSnapshot:
    values: dict[str, int]


class InMemoryMetrics:
    def __init__(self) -> None:
        self._counter: Counter[str] = Counter()
        self._lock = Lock()

    def inc(self, name: str, value: int = 1) -> None:
        with self._lock:
            self._counter[name] += value

    def snapshot(self) -> MetricSnapshot:
        with self._lock:
            return MetricSnapshot(values=dict(self._counter))

    def reset(self) -> None:
        with self._lock:
            self._counter.clear()


metrics = InMemoryMetrics()


@contextmanager
def traced_span(name: str) -> Iterator[None]:
    started = perf_counter()
    try:
        yield
    finally:
        elapsed_us = int((perf_counter() - started) * 1_000_000)
        metrics.inc(f"trace.{name}.count")
        metrics.inc(f"trace.{name}.elapsed_us_total", elapsed_us)
