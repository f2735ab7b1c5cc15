from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from buildgraph.core.build_plan.persist import save_plan
from buildgraph.core.descriptors.loader import load_registry
from buildgraph.core.errors import BuildGraphError
from buildgraph.core.graph.builder import DependencyGraphBuilder
from buildgraph.core.graph.resolver import GraphResolver
from buildgraph.core.pipeline import resolve_project
from buildgraph.core.settings import ResolutionLimits, load_limits

log = logging.getLogger("buildgraph.cli")


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {raw!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {raw}")
    return value


def build_argument_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="buildgraph", description="Resolve module descriptors into a build plan")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    ap.add_argument("--max-modules", type=_positive_int, default=None)
    ap.add_argument("--max-edges", type=_positive_int, default=None)
    ap.add_argument("--workers", type=_positive_int, default=None, help="Descriptor parse threads")

    sub = ap.add_subparsers(dest="command", required=True)

    p_resolve = sub.add_parser("resolve", help="Emit the full build plan as JSON")
    p_resolve.add_argument("root", type=Path)
    p_resolve.add_argument("--out", type=Path, default=None, help="Write plan JSON here instead of stdout")
    p_resolve.add_argument("--save", type=Path, default=None, help="Also persist under DIR/.buildgraph/plans")

    p_validate = sub.add_parser("validate", help="Check descriptors and the static graph")
    p_validate.add_argument("root", type=Path)

    p_order = sub.add_parser("order", help="Print the global build order, one module per line")
    p_order.add_argument("root", type=Path)

    p_includes = sub.add_parser("includes", help="Print a module's transitive public include paths")
    p_includes.add_argument("root", type=Path)
    p_includes.add_argument("module")

    return ap


def _limits(args: argparse.Namespace) -> ResolutionLimits:
    base = load_limits()
    return ResolutionLimits(
        max_modules=args.max_modules if args.max_modules is not None else base.max_modules,
        max_edges=args.max_edges if args.max_edges is not None else base.max_edges,
    )


def _emit(obj: Any) -> None:
    sys.stdout.write(json.dumps(obj, indent=2) + "\n")


def _run(args: argparse.Namespace) -> int:
    limits = _limits(args)

    if args.command == "resolve":
        plan = resolve_project(args.root, limits=limits, workers=args.workers)
        payload = plan.to_dict()
        if args.save is not None:
            save_plan(args.save, plan)
        if args.out is not None:
            args.out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        else:
            _emit(payload)
        return 0

    registry = load_registry(args.root, workers=args.workers)
    graph = DependencyGraphBuilder(limits).build(registry)
    resolver = GraphResolver()
    resolver.validate(graph)

    if args.command == "validate":
        _emit({"valid": True, "module_count": len(graph.nodes), "edge_count": len(graph.edges)})
    elif args.command == "order":
        for name in resolver.topological_order(graph):
            sys.stdout.write(name + "\n")
    elif args.command == "includes":
        for p in resolver.transitive_public_includes(graph, args.module):
            sys.stdout.write(p + "\n")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_argument_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return _run(args)
    except BuildGraphError as e:
        sys.stderr.write(json.dumps(e.to_dict(), indent=2) + "\n")
        return 1
    except FileNotFoundError as e:
        sys.stderr.write(f"ERROR: {e}\n")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
