from .models import DependencyEdge, DependencyGraph, EdgeKind
from .builder import DependencyGraphBuilder, build_graph
from .resolver import GraphResolver, ResolvedGraph

__all__ = [
    "DependencyEdge",
    "DependencyGraph",
    "EdgeKind",
    "DependencyGraphBuilder",
    "build_graph",
    "GraphResolver",
    "ResolvedGraph",
]
