from __future__ import annotations

from typing import Dict, Iterable, KeysView, List, Optional, ValuesView

from buildgraph.core.descriptors.models import ModuleDescriptor
from buildgraph.core.errors import (
    BuildGraphError,
    DuplicateModule,
    RegistrySealed,
    UnknownModule,
    raise_collected,
)


class DescriptorRegistry:
    """Module name -> descriptor for a single resolution run.

    Registration order is preserved and is what all() yields. The registry
    is sealed by the graph builder; after that it cannot change.
    """

    def __init__(self):
        self._descriptors: Dict[str, ModuleDescriptor] = {}
        self._sealed = False

    @classmethod
    def from_descriptors(
        cls,
        descriptors: Iterable[ModuleDescriptor],
        *,
        sort_by_name: bool = True,
    ) -> "DescriptorRegistry":
        """
        Register a batch. Every duplicate is reported, not only the first:
        one duplicate raises DuplicateModule, several raise DescriptorErrors.
        """
        items = list(descriptors)
        if sort_by_name:
            # stable: equal names keep discovery order for the diagnostic
            items.sort(key=lambda d: d.name)

        reg = cls()
        clashes: Dict[str, List[Optional[str]]] = {}
        for d in items:
            try:
                reg.register(d)
            except DuplicateModule:
                sources = clashes.setdefault(d.name, [reg._descriptors[d.name].source])
                sources.append(d.source)

        errors: List[BuildGraphError] = [
            DuplicateModule(module=name, sources=sources) for name, sources in clashes.items()
        ]
        raise_collected(errors)
        return reg

    def register(self, descriptor: ModuleDescriptor) -> None:
        if self._sealed:
            raise RegistrySealed(module=descriptor.name)
        existing = self._descriptors.get(descriptor.name)
        if existing is not None:
            raise DuplicateModule(module=descriptor.name, sources=[existing.source, descriptor.source])
        self._descriptors[descriptor.name] = descriptor

    def lookup(self, name: str) -> ModuleDescriptor:
        d = self._descriptors.get(name)
        if d is None:
            raise UnknownModule(module=name)
        return d

    def all(self) -> ValuesView[ModuleDescriptor]:
        # dict views are lazy and can be iterated any number of times
        return self._descriptors.values()

    def names(self) -> KeysView[str]:
        return self._descriptors.keys()

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)
