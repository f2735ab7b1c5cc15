"""
End-to-end resolution: descriptors -> registry -> graph -> resolver -> plan.

Resolution is total. It either returns a complete BuildPlan or raises one
BuildGraphError (DescriptorErrors when several local defects were found).
Nothing is written anywhere; persistence is the caller's choice.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Iterable, Optional

from buildgraph.core.build_plan.emitter import BuildPlanEmitter
from buildgraph.core.build_plan.models import BuildPlan
from buildgraph.core.descriptors.loader import load_registry
from buildgraph.core.descriptors.models import ModuleDescriptor
from buildgraph.core.descriptors.registry import DescriptorRegistry
from buildgraph.core.errors import BuildGraphError
from buildgraph.core.graph.builder import DependencyGraphBuilder
from buildgraph.core.graph.resolver import GraphResolver
from buildgraph.core.observability.metrics import record_resolution
from buildgraph.core.settings import ResolutionLimits

log = logging.getLogger("buildgraph.pipeline")


def _ms(t0: float, t1: float) -> int:
    return int(round((t1 - t0) * 1000))


def resolve_registry(registry: DescriptorRegistry, *, limits: Optional[ResolutionLimits] = None) -> BuildPlan:
    t0_total = time.perf_counter()
    try:
        t0_graph = time.perf_counter()
        graph = DependencyGraphBuilder(limits).build(registry)
        t1_graph = time.perf_counter()

        t0_resolve = time.perf_counter()
        resolved = GraphResolver().resolve(graph)
        t1_resolve = time.perf_counter()

        t0_emit = time.perf_counter()
        plan = BuildPlanEmitter().emit(graph, resolved)
        t1_emit = time.perf_counter()
    except BuildGraphError as exc:
        record_resolution(exc.code.lower(), time.perf_counter() - t0_total)
        log.info("pipeline.resolve failed code=%s error=%s", exc.code, exc)
        raise

    total = time.perf_counter() - t0_total
    record_resolution("ok", total)
    log.debug(
        "pipeline.resolve graph_build_ms=%s resolve_ms=%s emit_ms=%s modules=%s edges=%s total_ms=%s",
        _ms(t0_graph, t1_graph),
        _ms(t0_resolve, t1_resolve),
        _ms(t0_emit, t1_emit),
        len(graph.nodes),
        len(graph.edges),
        int(round(total * 1000)),
    )
    return plan


def resolve_descriptors(
    descriptors: Iterable[ModuleDescriptor],
    *,
    limits: Optional[ResolutionLimits] = None,
) -> BuildPlan:
    try:
        registry = DescriptorRegistry.from_descriptors(descriptors)
    except BuildGraphError as exc:
        record_resolution(exc.code.lower(), 0.0)
        raise
    return resolve_registry(registry, limits=limits)


def resolve_project(
    root: Path,
    *,
    limits: Optional[ResolutionLimits] = None,
    workers: Optional[int] = None,
) -> BuildPlan:
    t0 = time.perf_counter()
    try:
        registry = load_registry(Path(root), workers=workers)
    except BuildGraphError as exc:
        record_resolution(exc.code.lower(), time.perf_counter() - t0)
        raise
    log.debug("pipeline.discover root=%s modules=%s discover_ms=%s", root, len(registry), _ms(t0, time.perf_counter()))
    return resolve_registry(registry, limits=limits)
