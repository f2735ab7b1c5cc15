from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Set, Tuple

from buildgraph.core.build_plan.models import PLAN_VERSION, BuildPlan, ModulePlan, PCHPlan
from buildgraph.core.descriptors.models import ModuleDescriptor, PCHUsageMode
from buildgraph.core.graph.models import STATIC_KINDS, DependencyGraph, EdgeKind
from buildgraph.core.graph.resolver import ResolvedGraph


def _dedupe(paths: Iterable[str]) -> Tuple[str, ...]:
    seen: Set[str] = set()
    out: List[str] = []
    for p in paths:
        if p not in seen:
            seen.add(p)
            out.append(p)
    return tuple(out)


class BuildPlanEmitter:
    """Projects a validated, ordered graph into the plan a compiler driver consumes."""

    def emit(self, graph: DependencyGraph, resolved: ResolvedGraph) -> BuildPlan:
        closures: Dict[str, FrozenSet[str]] = {}
        modules: Dict[str, ModulePlan] = {}

        # build order guarantees every dependency's closure exists already
        for name in resolved.build_order:
            direct = graph.dependencies(name, STATIC_KINDS)
            closure: Set[str] = set(direct)
            for dep in direct:
                closure |= closures[dep]
            closures[name] = frozenset(closure)

            link_order = tuple(sorted(closure, key=resolved.position))
            desc = graph.descriptor(name)

            modules[name] = ModulePlan(
                name=name,
                include_paths=self._include_paths(desc, direct, resolved),
                link_order=link_order,
                dynamic_loads=frozenset(graph.dependencies(name, (EdgeKind.DYNAMIC_LOAD,))),
                pch=self._pch_plan(desc, link_order, graph),
            )

        dynamic_edges = len(graph.edges_of_kind(EdgeKind.DYNAMIC_LOAD))
        return BuildPlan(
            plan_version=PLAN_VERSION,
            build_order=resolved.build_order,
            modules=modules,
            metadata={
                "module_count": len(resolved.build_order),
                "static_edge_count": len(graph.edges) - dynamic_edges,
                "dynamic_edge_count": dynamic_edges,
            },
        )

    def _include_paths(
        self,
        desc: ModuleDescriptor,
        direct: List[str],
        resolved: ResolvedGraph,
    ) -> Tuple[str, ...]:
        paths: List[str] = list(desc.public_include_paths) + list(desc.private_include_paths)
        for dep in sorted(direct, key=resolved.position):
            paths.extend(resolved.public_includes[dep])
        return _dedupe(paths)

    def _pch_plan(
        self,
        desc: ModuleDescriptor,
        link_order: Tuple[str, ...],
        graph: DependencyGraph,
    ) -> PCHPlan:
        mode = desc.pch_usage
        provides = desc.shared_pch_header

        if mode is PCHUsageMode.NONE:
            return PCHPlan(mode=mode.value, provides_shared=provides)

        if mode.allows_explicit and desc.private_pch_header:
            return PCHPlan(mode=mode.value, header=desc.private_pch_header, provides_shared=provides)

        if mode.allows_shared:
            # latest provider in build order is the most specific one
            for dep in reversed(link_order):
                header = graph.descriptor(dep).shared_pch_header
                if header:
                    return PCHPlan(mode=mode.value, header=header, shared_from=dep, provides_shared=provides)

        return PCHPlan(mode=mode.value, provides_shared=provides)


def emit_plan(graph: DependencyGraph, resolved: ResolvedGraph) -> BuildPlan:
    return BuildPlanEmitter().emit(graph, resolved)
