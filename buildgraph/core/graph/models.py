from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Tuple

from buildgraph.core.descriptors.models import ModuleDescriptor
from buildgraph.core.descriptors.registry import DescriptorRegistry


class EdgeKind(str, Enum):
    PUBLIC_LINK = "PublicLink"
    PRIVATE_LINK = "PrivateLink"
    DYNAMIC_LOAD = "DynamicLoad"

    @property
    def is_static(self) -> bool:
        return self is not EdgeKind.DYNAMIC_LOAD


STATIC_KINDS: FrozenSet[EdgeKind] = frozenset({EdgeKind.PUBLIC_LINK, EdgeKind.PRIVATE_LINK})


@dataclass(frozen=True)
class DependencyEdge:
    # source depends on target
    source: str
    target: str
    kind: EdgeKind


@dataclass(frozen=True)
class DependencyGraph:
    """Derived, read-only view of one registry's dependency structure."""

    registry: DescriptorRegistry
    nodes: Tuple[str, ...]
    edges: Tuple[DependencyEdge, ...]
    _out: Dict[str, Dict[EdgeKind, Tuple[str, ...]]] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        out: Dict[str, Dict[EdgeKind, List[str]]] = defaultdict(lambda: defaultdict(list))
        for e in self.edges:
            out[e.source][e.kind].append(e.target)
        frozen = {
            src: {kind: tuple(sorted(set(targets))) for kind, targets in by_kind.items()}
            for src, by_kind in out.items()
        }
        object.__setattr__(self, "_out", frozen)

    def descriptor(self, name: str) -> ModuleDescriptor:
        return self.registry.lookup(name)

    def dependencies(self, name: str, kinds: Iterable[EdgeKind] = STATIC_KINDS) -> List[str]:
        """Direct targets of `name` over the given edge kinds, sorted by name."""
        by_kind = self._out.get(name, {})
        found = set()
        for kind in kinds:
            found.update(by_kind.get(kind, ()))
        return sorted(found)

    def edges_of_kind(self, *kinds: EdgeKind) -> List[DependencyEdge]:
        wanted = set(kinds)
        return [e for e in self.edges if e.kind in wanted]

    def __contains__(self, name: object) -> bool:
        return name in self.registry

    def __len__(self) -> int:
        return len(self.nodes)
