"""
Environment-driven settings.

    BUILDGRAPH_MAX_MODULES        module-count guard (default 10000)
    BUILDGRAPH_MAX_EDGES          edge-count guard (default 200000)
    BUILDGRAPH_DISCOVERY_WORKERS  descriptor parse threads (default 4)
    BUILDGRAPH_ENV                dev | prod (default dev)
    BUILDGRAPH_HOST / _PORT       API bind address (default 0.0.0.0:8001)
"""
from __future__ import annotations

import logging
import os
from typing import Tuple

from pydantic import BaseModel, Field

_log = logging.getLogger("buildgraph.settings")

DEFAULT_MAX_MODULES = 10_000
DEFAULT_MAX_EDGES = 200_000
DEFAULT_DISCOVERY_WORKERS = 4
DEFAULT_PORT = 8001


class ResolutionLimits(BaseModel):
    max_modules: int = Field(default=DEFAULT_MAX_MODULES, gt=0)
    max_edges: int = Field(default=DEFAULT_MAX_EDGES, gt=0)


def _env_int(key: str, default: int) -> int:
    raw = (os.getenv(key) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        _log.warning("Ignoring %s=%r (not an integer); using %d", key, raw, default)
        return default
    if value <= 0:
        _log.warning("Ignoring %s=%r (must be positive); using %d", key, raw, default)
        return default
    return value


def load_limits() -> ResolutionLimits:
    return ResolutionLimits(
        max_modules=_env_int("BUILDGRAPH_MAX_MODULES", DEFAULT_MAX_MODULES),
        max_edges=_env_int("BUILDGRAPH_MAX_EDGES", DEFAULT_MAX_EDGES),
    )


def discovery_workers() -> int:
    return _env_int("BUILDGRAPH_DISCOVERY_WORKERS", DEFAULT_DISCOVERY_WORKERS)


def runtime_env() -> str:
    return (os.getenv("BUILDGRAPH_ENV") or "dev").strip().lower()


def server_bind() -> Tuple[str, int]:
    host = (os.getenv("BUILDGRAPH_HOST") or "0.0.0.0").strip()
    return host, _env_int("BUILDGRAPH_PORT", DEFAULT_PORT)
