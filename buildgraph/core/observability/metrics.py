from __future__ import annotations

from collections import Counter
from typing import Dict

from prometheus_client import Counter as PromCounter
from prometheus_client import Histogram

# Named counters (in-process, resettable for tests)
_NAMED = Counter()

RESOLUTIONS_TOTAL = PromCounter(
    "buildgraph_resolutions_total",
    "Build graph resolutions by outcome",
    ["outcome"],
)

RESOLUTION_DURATION_SECONDS = Histogram(
    "buildgraph_resolution_duration_seconds",
    "Wall time of a full descriptor -> plan resolution",
)


def reset_metrics() -> None:
    """
    Test helper: clears in-process counters. Prometheus series are
    process-global and are left alone.
    """
    _NAMED.clear()


def inc_named(name: str, value: int = 1) -> None:
    if not name:
        return
    _NAMED[name] += int(value)


def record_resolution(outcome: str, seconds: float) -> None:
    RESOLUTIONS_TOTAL.labels(outcome=outcome).inc()
    RESOLUTION_DURATION_SECONDS.observe(seconds)
    inc_named(f"resolutions_{outcome}")


def snapshot_named() -> Dict[str, int]:
    return dict(_NAMED)
