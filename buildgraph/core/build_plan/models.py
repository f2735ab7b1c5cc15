from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, Tuple

PLAN_VERSION = "v1"


@dataclass(frozen=True)
class PCHPlan:
    mode: str
    header: Optional[str] = None
    # module whose shared PCH is reused
    shared_from: Optional[str] = None
    # header this module offers to dependents as a shared PCH
    provides_shared: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "header": self.header,
            "shared_from": self.shared_from,
            "provides_shared": self.provides_shared,
        }


@dataclass(frozen=True)
class ModulePlan:
    name: str
    include_paths: Tuple[str, ...] = ()
    link_order: Tuple[str, ...] = ()
    dynamic_loads: FrozenSet[str] = frozenset()
    pch: PCHPlan = field(default_factory=lambda: PCHPlan(mode="None"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "include_paths": list(self.include_paths),
            "link_order": list(self.link_order),
            "dynamic_loads": sorted(self.dynamic_loads),
            "pch": self.pch.to_dict(),
        }


@dataclass(frozen=True)
class BuildPlan:
    plan_version: str
    build_order: Tuple[str, ...]
    modules: Dict[str, ModulePlan] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def module(self, name: str) -> ModulePlan:
        return self.modules[name]

    def compute_plan_id(self) -> str:
        payload = {
            "plan_version": self.plan_version,
            "build_order": list(self.build_order),
            "modules": [self.modules[n].to_dict() for n in self.build_order],
        }
        return hashlib.sha256(json.dumps(payload, sort_keys=True).encode("utf-8")).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plan_id": self.compute_plan_id(),
            "plan_version": self.plan_version,
            "build_order": list(self.build_order),
            "modules": {n: self.modules[n].to_dict() for n in self.build_order},
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "BuildPlan":
        modules: Dict[str, ModulePlan] = {}
        for name, m in (obj.get("modules") or {}).items():
            pch = m.get("pch") or {}
            modules[name] = ModulePlan(
                name=m.get("name", name),
                include_paths=tuple(m.get("include_paths") or ()),
                link_order=tuple(m.get("link_order") or ()),
                dynamic_loads=frozenset(m.get("dynamic_loads") or ()),
                pch=PCHPlan(
                    mode=pch.get("mode", "None"),
                    header=pch.get("header"),
                    shared_from=pch.get("shared_from"),
                    provides_shared=pch.get("provides_shared"),
                ),
            )
        return cls(
            plan_version=obj.get("plan_version", PLAN_VERSION),
            build_order=tuple(obj.get("build_order") or ()),
            modules=modules,
            metadata=obj.get("metadata") or {},
        )
