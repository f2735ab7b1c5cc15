from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from buildgraph.core.errors import InvalidDescriptor


class PCHUsageMode(str, Enum):
    NONE = "None"
    USE_EXPLICIT_OR_SHARED_PCH = "UseExplicitOrSharedPCH"
    USE_SHARED_PCHS = "UseSharedPCHs"
    USE_EXPLICIT_PCH = "UseExplicitPCH"

    @classmethod
    def parse(cls, raw: Union[str, "PCHUsageMode", None]) -> "PCHUsageMode":
        if raw is None:
            return cls.USE_EXPLICIT_OR_SHARED_PCH
        if isinstance(raw, cls):
            return raw
        key = str(raw).strip()
        mode = _PCH_ALIASES.get(key.lower())
        if mode is None:
            raise ValueError(f"unknown pch_usage {raw!r}")
        return mode

    @property
    def allows_explicit(self) -> bool:
        return self in (PCHUsageMode.USE_EXPLICIT_PCH, PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCH)

    @property
    def allows_shared(self) -> bool:
        return self in (PCHUsageMode.USE_SHARED_PCHS, PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCH)


# Engine spellings (ModuleRules.PCHUsageMode) are accepted alongside ours.
_PCH_ALIASES: Dict[str, PCHUsageMode] = {
    "none": PCHUsageMode.NONE,
    "nopchs": PCHUsageMode.NONE,
    "useexplicitorsharedpch": PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCH,
    "useexplicitorsharedpchs": PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCH,
    "default": PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCH,
    "usesharedpchs": PCHUsageMode.USE_SHARED_PCHS,
    "usesharedpch": PCHUsageMode.USE_SHARED_PCHS,
    "useexplicitpch": PCHUsageMode.USE_EXPLICIT_PCH,
    "useexplicitpchs": PCHUsageMode.USE_EXPLICIT_PCH,
    "nosharedpchs": PCHUsageMode.USE_EXPLICIT_PCH,
}


@dataclass(frozen=True)
class ModuleDescriptor:
    """Immutable declaration of one build module.

    Sequences passed in are normalised: include paths to tuples (order is
    significant), dependency sets to frozensets. Construction validates the
    whole descriptor and raises InvalidDescriptor listing every problem.
    """

    name: str
    public_include_paths: Tuple[str, ...] = ()
    private_include_paths: Tuple[str, ...] = ()
    public_dependencies: FrozenSet[str] = frozenset()
    private_dependencies: FrozenSet[str] = frozenset()
    dynamic_dependencies: FrozenSet[str] = frozenset()
    pch_usage: PCHUsageMode = PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCH
    private_pch_header: Optional[str] = None
    shared_pch_header: Optional[str] = None
    module_dir: Optional[str] = None
    source: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        problems: List[str] = []
        name = self.name if isinstance(self.name, str) else ""
        if not name.strip():
            problems.append("name must be a non-empty string")

        for attr in ("public_include_paths", "private_include_paths"):
            paths = _as_tuple(getattr(self, attr))
            object.__setattr__(self, attr, paths)
            for p in paths:
                if not isinstance(p, str) or not p.strip():
                    problems.append(f"{attr} contains an empty path entry")
                    break

        for attr in ("public_dependencies", "private_dependencies", "dynamic_dependencies"):
            deps = frozenset(_as_tuple(getattr(self, attr)))
            object.__setattr__(self, attr, deps)
            if any(not isinstance(d, str) or not d.strip() for d in deps):
                problems.append(f"{attr} contains an empty module name")
            if name and name in deps:
                problems.append(f"{attr} lists the module itself")

        for attr in ("private_pch_header", "shared_pch_header"):
            value = getattr(self, attr)
            if value is not None and (not isinstance(value, str) or not value.strip()):
                problems.append(f"{attr} must be a non-empty path when set")

        try:
            object.__setattr__(self, "pch_usage", PCHUsageMode.parse(self.pch_usage))
        except ValueError as e:
            problems.append(str(e))

        if problems:
            raise InvalidDescriptor(module=name or "<unnamed>", problems=problems, source=self.source)

    @property
    def static_dependencies(self) -> FrozenSet[str]:
        return self.public_dependencies | self.private_dependencies

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "public_include_paths": list(self.public_include_paths),
            "private_include_paths": list(self.private_include_paths),
            "public_dependencies": sorted(self.public_dependencies),
            "private_dependencies": sorted(self.private_dependencies),
            "dynamic_dependencies": sorted(self.dynamic_dependencies),
            "pch_usage": self.pch_usage.value,
            "private_pch_header": self.private_pch_header,
            "shared_pch_header": self.shared_pch_header,
            "module_dir": self.module_dir,
        }


def _as_tuple(value: Any) -> Tuple[Any, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (set, frozenset)):
        return tuple(sorted(value, key=str))
    return tuple(value)


class ModuleDescriptorBuilder:
    """
    Accumulates descriptor fields, then produces one validated
    ModuleDescriptor. Nothing is visible to the rest of the system until
    build() succeeds.
    """

    def __init__(self, name: str):
        self._name = name
        self._public_includes: List[str] = []
        self._private_includes: List[str] = []
        self._public_deps: List[str] = []
        self._private_deps: List[str] = []
        self._dynamic_deps: List[str] = []
        self._pch_usage: Union[str, PCHUsageMode] = PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCH
        self._private_pch_header: Optional[str] = None
        self._shared_pch_header: Optional[str] = None
        self._module_dir: Optional[str] = None
        self._source: Optional[str] = None

    def public_include_paths(self, *paths: str) -> "ModuleDescriptorBuilder":
        self._public_includes.extend(paths)
        return self

    def private_include_paths(self, *paths: str) -> "ModuleDescriptorBuilder":
        self._private_includes.extend(paths)
        return self

    def public_dependencies(self, *names: str) -> "ModuleDescriptorBuilder":
        self._public_deps.extend(names)
        return self

    def private_dependencies(self, *names: str) -> "ModuleDescriptorBuilder":
        self._private_deps.extend(names)
        return self

    def dynamic_dependencies(self, *names: str) -> "ModuleDescriptorBuilder":
        self._dynamic_deps.extend(names)
        return self

    def pch_usage(self, mode: Union[str, PCHUsageMode]) -> "ModuleDescriptorBuilder":
        self._pch_usage = mode
        return self

    def private_pch_header(self, header: Optional[str]) -> "ModuleDescriptorBuilder":
        self._private_pch_header = header
        return self

    def shared_pch_header(self, header: Optional[str]) -> "ModuleDescriptorBuilder":
        self._shared_pch_header = header
        return self

    def module_dir(self, path: Optional[str]) -> "ModuleDescriptorBuilder":
        self._module_dir = path
        return self

    def source(self, path: Optional[str]) -> "ModuleDescriptorBuilder":
        self._source = path
        return self

    def build(self) -> ModuleDescriptor:
        return ModuleDescriptor(
            name=self._name,
            public_include_paths=tuple(self._public_includes),
            private_include_paths=tuple(self._private_includes),
            public_dependencies=frozenset(self._public_deps),
            private_dependencies=frozenset(self._private_deps),
            dynamic_dependencies=frozenset(self._dynamic_deps),
            pch_usage=self._pch_usage,
            private_pch_header=self._private_pch_header,
            shared_pch_header=self._shared_pch_header,
            module_dir=self._module_dir,
            source=self._source,
        )
