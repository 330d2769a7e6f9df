"""
DAOForge Metrics

Counters and gauges rendered in the Prometheus text exposition format
(version 0.0.4). Rendering is done here; no client library is required.

    Counter   only ever increases   (e.g. daoforge_votes_cast_total)
    Gauge     set to current value  (e.g. daoforge_members)
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, Iterator, Optional, Union

from ..constants import METRICS_DEFAULT_NAMESPACE

Number = Union[int, float]


def _render(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


class _Metric:
    kind = "untyped"

    def __init__(self, name: str, help: str = ""):
        self.name = name
        self.help = help
        self._value: Number = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> Number:
        return self._value

    def samples(self) -> Iterator[str]:
        if self.help:
            yield f"# HELP {self.name} {self.help}"
        yield f"# TYPE {self.name} {self.kind}"
        yield f"{self.name} {_render(self.value)}"

    def expose(self) -> str:
        return "\n".join(self.samples())

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}={_render(self.value)}>"


class Counter(_Metric):
    kind = "counter"

    def inc(self, amount: Number = 1) -> None:
        if amount < 0:
            raise ValueError(f"{self.name}: counters cannot decrease (got {amount})")
        with self._lock:
            self._value += amount


class Gauge(_Metric):
    kind = "gauge"

    def __init__(self, name: str, help: str = ""):
        super().__init__(name, help)
        self._source: Optional[Callable[[], Number]] = None

    def track(self, source: Callable[[], Number]) -> None:
        """Read the value from *source* on every access instead of storing it."""
        self._source = source

    @property
    def value(self) -> Number:
        if self._source is not None:
            return self._source()
        return self._value

    def set(self, value: Number) -> None:
        with self._lock:
            self._value = value

    def inc(self, amount: Number = 1) -> None:
        with self._lock:
            self._value += amount


class MetricsRegistry:
    """Named metrics, rendered together by ``expose()``."""

    def __init__(self):
        self._metrics: Dict[str, _Metric] = {}
        self._lock = threading.Lock()

    def register(self, metric: _Metric) -> _Metric:
        with self._lock:
            if metric.name in self._metrics:
                raise ValueError(f"Metric already registered: {metric.name}")
            self._metrics[metric.name] = metric
        return metric

    def get(self, name: str) -> Optional[_Metric]:
        return self._metrics.get(name)

    @property
    def metric_count(self) -> int:
        return len(self._metrics)

    def expose(self) -> str:
        with self._lock:
            blocks = [m.expose() for m in self._metrics.values()]
        return "\n\n".join(blocks) + "\n"


class GovernanceMetrics:
    """
    The metric set a GovernanceEngine updates.

    Usage::

        metrics = GovernanceMetrics()
        engine = GovernanceEngine(metrics=metrics)
        print(metrics.expose())
    """

    def __init__(self, namespace: str = METRICS_DEFAULT_NAMESPACE):
        self.namespace = namespace
        self.registry = MetricsRegistry()

        self.proposals_created = self._add(Counter, "proposals_created_total", "Proposals created")
        self.votes_cast = self._add(Counter, "votes_cast_total", "Votes counted on pending proposals")
        self.votes_rejected = self._add(
            Counter, "votes_rejected_total", "Vote attempts refused by a precondition"
        )
        self.proposals_accepted = self._add(
            Counter, "proposals_accepted_total", "Proposals finalized as Accepted"
        )
        self.proposals_rejected = self._add(
            Counter, "proposals_rejected_total", "Proposals finalized as Rejected"
        )
        self.execution_failures = self._add(
            Counter, "execution_failures_total", "Execution hooks that raised"
        )
        self.members = self._add(Gauge, "members", "Current roster size")

    def _add(self, kind, suffix: str, help_text: str):
        return self.registry.register(kind(f"{self.namespace}_{suffix}", help_text))

    def expose(self) -> str:
        return self.registry.expose()
