from __future__ import annotations

import logging
from typing import List, Optional

from buildgraph.core.descriptors.registry import DescriptorRegistry
from buildgraph.core.errors import GraphTooLarge, UnresolvedDependency
from buildgraph.core.graph.models import DependencyEdge, DependencyGraph, EdgeKind
from buildgraph.core.settings import ResolutionLimits, load_limits

_log = logging.getLogger("buildgraph.graph")

# descriptor attribute -> edge kind it produces
_EDGE_SOURCES = (
    ("public_dependencies", EdgeKind.PUBLIC_LINK),
    ("private_dependencies", EdgeKind.PRIVATE_LINK),
    ("dynamic_dependencies", EdgeKind.DYNAMIC_LOAD),
)


class DependencyGraphBuilder:
    def __init__(self, limits: Optional[ResolutionLimits] = None):
        self.limits = limits or load_limits()

    def build(self, registry: DescriptorRegistry) -> DependencyGraph:
        registry.seal()

        if len(registry) > self.limits.max_modules:
            raise GraphTooLarge(what="modules", count=len(registry), limit=self.limits.max_modules)

        edge_count = sum(len(getattr(d, attr)) for d in registry.all() for attr, _ in _EDGE_SOURCES)
        if edge_count > self.limits.max_edges:
            raise GraphTooLarge(what="edges", count=edge_count, limit=self.limits.max_edges)

        edges: List[DependencyEdge] = []
        for d in registry.all():
            for attr, kind in _EDGE_SOURCES:
                for target in sorted(getattr(d, attr)):
                    if target not in registry:
                        raise UnresolvedDependency(module=d.name, dependency=target, kind=kind.value)
                    edges.append(DependencyEdge(source=d.name, target=target, kind=kind))

        graph = DependencyGraph(
            registry=registry,
            nodes=tuple(registry.names()),
            edges=tuple(edges),
        )
        _log.debug("graph.build modules=%s edges=%s", len(graph.nodes), len(graph.edges))
        return graph


def build_graph(registry: DescriptorRegistry, *, limits: Optional[ResolutionLimits] = None) -> DependencyGraph:
    return DependencyGraphBuilder(limits).build(registry)
