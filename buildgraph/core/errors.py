"""Configuration errors raised while resolving a module build graph.

Every error is attributable: it names the offending module (and for cycles
the full chain) so the author can fix the descriptor and re-run. None of
these are transient, so nothing in buildgraph retries them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence


class BuildGraphError(Exception):
    code = "BUILD_GRAPH_ERROR"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": str(self)}


class InvalidDescriptor(BuildGraphError):
    code = "INVALID_DESCRIPTOR"

    def __init__(self, *, module: str, problems: Sequence[str], source: Optional[str] = None):
        self.module = module
        self.problems = list(problems)
        self.source = source
        where = f" ({source})" if source else ""
        super().__init__(f"Invalid descriptor for module {module!r}{where}: " + "; ".join(self.problems))

    def to_dict(self) -> Dict[str, Any]:
        return {
            **super().to_dict(),
            "module": self.module,
            "problems": self.problems,
            "source": self.source,
        }


class DuplicateModule(BuildGraphError):
    code = "DUPLICATE_MODULE"

    def __init__(self, *, module: str, sources: Sequence[Optional[str]] = ()):
        self.module = module
        self.sources = [s for s in sources if s]
        where = f" (declared in {', '.join(self.sources)})" if self.sources else ""
        super().__init__(f"Module {module!r} is declared more than once{where}")

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "module": self.module, "sources": self.sources}


class UnknownModule(BuildGraphError):
    code = "UNKNOWN_MODULE"

    def __init__(self, *, module: str):
        self.module = module
        super().__init__(f"Unknown module: {module!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "module": self.module}


class UnresolvedDependency(BuildGraphError):
    code = "UNRESOLVED_DEPENDENCY"

    def __init__(self, *, module: str, dependency: str, kind: str):
        self.module = module
        self.dependency = dependency
        self.kind = kind
        super().__init__(
            f"Module {module!r} references unknown module {dependency!r} ({kind})"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            **super().to_dict(),
            "module": self.module,
            "dependency": self.dependency,
            "kind": self.kind,
        }


class CyclicDependency(BuildGraphError):
    code = "CYCLIC_DEPENDENCY"

    def __init__(self, *, cycle: Sequence[str]):
        # closed chain, first == last
        self.cycle = list(cycle)
        super().__init__("Cyclic static dependency: " + " -> ".join(self.cycle))

    @property
    def modules(self) -> List[str]:
        return sorted(set(self.cycle))

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "cycle": self.cycle}


class GraphTooLarge(BuildGraphError):
    code = "GRAPH_TOO_LARGE"

    def __init__(self, *, what: str, count: int, limit: int):
        self.what = what
        self.count = int(count)
        self.limit = int(limit)
        super().__init__(f"Build graph has too many {what}: {count} > limit {limit}")

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "what": self.what, "count": self.count, "limit": self.limit}


class RegistrySealed(BuildGraphError):
    code = "REGISTRY_SEALED"

    def __init__(self, *, module: str):
        self.module = module
        super().__init__(f"Cannot register {module!r}: registry is sealed once graph building starts")


class DescriptorErrors(BuildGraphError):
    """Several local descriptor defects reported together."""

    code = "DESCRIPTOR_ERRORS"

    def __init__(self, errors: Sequence[BuildGraphError]):
        self.errors = list(errors)
        lines = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"{len(self.errors)} descriptor errors:\n{lines}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": f"{len(self.errors)} descriptor errors",
            "errors": [e.to_dict() for e in self.errors],
        }


def raise_collected(errors: Sequence[BuildGraphError]) -> None:
    """Raise nothing, the single error, or a DescriptorErrors group."""
    if not errors:
        return
    if len(errors) == 1:
        raise errors[0]
    raise DescriptorErrors(errors)
