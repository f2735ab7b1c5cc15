from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

from buildgraph.core.errors import CyclicDependency
from buildgraph.core.graph.models import STATIC_KINDS, DependencyGraph, EdgeKind

_log = logging.getLogger("buildgraph.resolver")

_VISITING = 1
_DONE = 2


@dataclass(frozen=True)
class ResolvedGraph:
    graph: DependencyGraph
    build_order: Tuple[str, ...]
    public_includes: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    order_index: Dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "order_index", {name: i for i, name in enumerate(self.build_order)})

    def position(self, name: str) -> int:
        return self.order_index[name]


class GraphResolver:
    """
    Validates a DependencyGraph and derives its static build order and
    transitive public include sets. DynamicLoad edges are ignored here:
    runtime loading may legitimately be circular.
    """

    def __init__(self):
        self._include_cache: Dict[str, Tuple[str, ...]] = {}
        self._cache_graph: Optional[DependencyGraph] = None

    def validate(self, graph: DependencyGraph) -> None:
        cycle = self.find_cycle(graph)
        if cycle is not None:
            raise CyclicDependency(cycle=cycle)

    def find_cycle(self, graph: DependencyGraph) -> Optional[List[str]]:
        """Depth-first search with on-stack marking over static edges."""
        state: Dict[str, int] = {}

        for root in sorted(graph.nodes):
            if root in state:
                continue
            state[root] = _VISITING
            path: List[str] = [root]
            stack: List[Tuple[str, Iterator[str]]] = [(root, iter(graph.dependencies(root, STATIC_KINDS)))]

            while stack:
                node, deps = stack[-1]
                nxt = next(deps, None)
                if nxt is None:
                    state[node] = _DONE
                    stack.pop()
                    path.pop()
                    continue

                seen = state.get(nxt)
                if seen == _VISITING:
                    return path[path.index(nxt):] + [nxt]
                if seen is None:
                    state[nxt] = _VISITING
                    path.append(nxt)
                    stack.append((nxt, iter(graph.dependencies(nxt, STATIC_KINDS))))

        return None

    def topological_order(self, graph: DependencyGraph) -> List[str]:
        """Kahn's algorithm; the ready set is a min-heap so ties break by name."""
        in_degree: Dict[str, int] = {}
        dependents: Dict[str, List[str]] = {name: [] for name in graph.nodes}

        for name in graph.nodes:
            deps = graph.dependencies(name, STATIC_KINDS)
            in_degree[name] = len(deps)
            for dep in deps:
                dependents[dep].append(name)

        ready = [name for name, d in in_degree.items() if d == 0]
        heapq.heapify(ready)

        order: List[str] = []
        while ready:
            current = heapq.heappop(ready)
            order.append(current)
            for dependent in dependents[current]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    heapq.heappush(ready, dependent)

        if len(order) != len(graph.nodes):
            cycle = self.find_cycle(graph) or sorted(n for n, d in in_degree.items() if d > 0)
            raise CyclicDependency(cycle=cycle)

        return order

    def transitive_public_includes(self, graph: DependencyGraph, module: str) -> Tuple[str, ...]:
        """
        Own public include paths followed by those reachable over PublicLink
        edges, first occurrence wins. PrivateLink edges are not followed.
        """
        if self._cache_graph is not graph:
            self._cache_graph = graph
            self._include_cache = {}

        cached = self._include_cache.get(module)
        if cached is not None:
            return cached

        graph.descriptor(module)  # UnknownModule for names outside the graph

        out: List[str] = []
        seen_paths: Set[str] = set()
        visited: Set[str] = set()
        stack = [module]
        while stack:
            name = stack.pop()
            if name in visited:
                continue
            visited.add(name)
            for p in graph.descriptor(name).public_include_paths:
                if p not in seen_paths:
                    seen_paths.add(p)
                    out.append(p)
            stack.extend(reversed(graph.dependencies(name, (EdgeKind.PUBLIC_LINK,))))

        result = tuple(out)
        self._include_cache[module] = result
        return result

    def resolve(self, graph: DependencyGraph) -> ResolvedGraph:
        self.validate(graph)
        order = self.topological_order(graph)
        includes = {name: self.transitive_public_includes(graph, name) for name in order}
        _log.debug("resolver.resolve modules=%s", len(order))
        return ResolvedGraph(graph=graph, build_order=tuple(order), public_includes=includes)
