from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from buildgraph.core.descriptors.loader import registry_from_payload
from buildgraph.core.graph.builder import DependencyGraphBuilder
from buildgraph.core.graph.resolver import GraphResolver
from buildgraph.core.observability.metrics import inc_named
from buildgraph.core.pipeline import resolve_registry
from buildgraph.core.settings import ResolutionLimits, load_limits

router = APIRouter(prefix="/api/v1", tags=["plans"])


class ResolveRequest(BaseModel):
    # raw descriptor mappings, same shape as <Module>.build.yaml files
    descriptors: List[Dict[str, Any]] = Field(default_factory=list)

    # may only tighten the server-side limits
    max_modules: Optional[int] = Field(default=None, gt=0)
    max_edges: Optional[int] = Field(default=None, gt=0)

    def limits(self) -> ResolutionLimits:
        base = load_limits()
        return ResolutionLimits(
            max_modules=min(self.max_modules or base.max_modules, base.max_modules),
            max_edges=min(self.max_edges or base.max_edges, base.max_edges),
        )


@router.post("/plans/resolve")
def resolve_plan(req: ResolveRequest):
    inc_named("plans_resolve")
    registry = registry_from_payload(req.descriptors)
    plan = resolve_registry(registry, limits=req.limits())
    return plan.to_dict()


@router.post("/graph/validate")
def validate_graph(req: ResolveRequest):
    inc_named("graph_validate")
    registry = registry_from_payload(req.descriptors)
    graph = DependencyGraphBuilder(req.limits()).build(registry)
    resolver = GraphResolver()
    resolver.validate(graph)
    order = resolver.topological_order(graph)
    return {
        "valid": True,
        "module_count": len(order),
        "edge_count": len(graph.edges),
        "build_order": order,
    }
