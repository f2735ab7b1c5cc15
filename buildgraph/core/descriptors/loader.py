"""
Descriptor discovery.

Finds `<Module>.build.yaml` / `.build.yml` / `.build.json` files under a
project root, parses them in parallel and turns each into a
ModuleDescriptor. Relative include paths are joined onto the directory the
file lives in, the way ModuleDirectory works for engine build rules:

    name: UI
    pch_usage: UseExplicitOrSharedPCHs
    public_include_paths: [Source/Public, Source/Classes]
    private_include_paths: [Source/Private]
    public_dependencies: [Core, CoreUObject, Engine]
    private_dependencies: [RenderCore, RHI]
    dynamically_loaded_modules: []

Every malformed file is reported, not only the first one.
"""
from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from buildgraph.core.descriptors.models import ModuleDescriptor, PCHUsageMode
from buildgraph.core.descriptors.registry import DescriptorRegistry
from buildgraph.core.errors import (
    BuildGraphError,
    DescriptorErrors,
    DuplicateModule,
    InvalidDescriptor,
    raise_collected,
)
from buildgraph.core.settings import discovery_workers

_log = logging.getLogger("buildgraph.discovery")

DESCRIPTOR_SUFFIXES = (".build.yaml", ".build.yml", ".build.json")


class ModuleDescriptorFile(BaseModel):
    """On-disk / over-the-wire shape of one module descriptor."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: Optional[str] = None
    pch_usage: str = PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCH.value
    public_include_paths: List[str] = Field(default_factory=list)
    private_include_paths: List[str] = Field(default_factory=list)
    public_dependencies: List[str] = Field(default_factory=list)
    private_dependencies: List[str] = Field(default_factory=list)
    dynamic_dependencies: List[str] = Field(
        default_factory=list, alias="dynamically_loaded_modules"
    )
    private_pch_header: Optional[str] = None
    shared_pch_header: Optional[str] = None

    def to_descriptor(
        self,
        *,
        default_name: Optional[str] = None,
        module_dir: Optional[str] = None,
        source: Optional[str] = None,
    ) -> ModuleDescriptor:
        def _join(p: str) -> str:
            if module_dir is None or not p or PurePosixPath(p).is_absolute():
                return p
            return (PurePosixPath(module_dir) / p).as_posix()

        return ModuleDescriptor(
            name=self.name if self.name is not None else (default_name or ""),
            public_include_paths=tuple(_join(p) for p in self.public_include_paths),
            private_include_paths=tuple(_join(p) for p in self.private_include_paths),
            public_dependencies=frozenset(self.public_dependencies),
            private_dependencies=frozenset(self.private_dependencies),
            dynamic_dependencies=frozenset(self.dynamic_dependencies),
            pch_usage=self.pch_usage,
            private_pch_header=_join(self.private_pch_header) if self.private_pch_header else self.private_pch_header,
            shared_pch_header=_join(self.shared_pch_header) if self.shared_pch_header else self.shared_pch_header,
            module_dir=module_dir,
            source=source,
        )


def module_name_from_path(path: Path) -> str:
    name = path.name
    for suffix in DESCRIPTOR_SUFFIXES:
        if name.lower().endswith(suffix):
            return name[: -len(suffix)]
    return path.stem


def discover_descriptor_files(root: Path) -> List[Path]:
    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(f"project root not found: {root}")
    found = [
        p
        for p in root.rglob("*")
        if p.is_file() and p.name.lower().endswith(DESCRIPTOR_SUFFIXES)
    ]
    return sorted(found)


def _validation_problems(exc: ValidationError) -> List[str]:
    out: List[str] = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", ())) or "<root>"
        out.append(f"{loc}: {err.get('msg', 'invalid')}")
    return out


def parse_descriptor(
    data: Any,
    *,
    default_name: Optional[str] = None,
    module_dir: Optional[str] = None,
    source: Optional[str] = None,
) -> ModuleDescriptor:
    """Validate one raw mapping (already decoded from YAML/JSON)."""
    name_hint = default_name or "<unnamed>"
    if isinstance(data, dict) and isinstance(data.get("name"), str):
        name_hint = data["name"] or name_hint
    if not isinstance(data, dict):
        raise InvalidDescriptor(
            module=name_hint,
            problems=[f"descriptor must be a mapping, got {type(data).__name__}"],
            source=source,
        )
    try:
        parsed = ModuleDescriptorFile.model_validate(data)
    except ValidationError as exc:
        raise InvalidDescriptor(module=name_hint, problems=_validation_problems(exc), source=source)
    return parsed.to_descriptor(default_name=default_name, module_dir=module_dir, source=source)


def load_descriptor_file(path: Path) -> ModuleDescriptor:
    path = Path(path)
    default_name = module_name_from_path(path)
    source = path.as_posix()
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InvalidDescriptor(module=default_name, problems=[f"cannot read file: {exc}"], source=source)
    except UnicodeDecodeError as exc:
        _log.warning("Descriptor %s is not UTF-8: %s", source, exc)
        raise InvalidDescriptor(module=default_name, problems=[f"not valid UTF-8: {exc}"], source=source)

    try:
        if path.name.lower().endswith(".json"):
            data = json.loads(raw_text)
        else:
            data = yaml.safe_load(raw_text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        _log.warning("Failed to parse descriptor %s: %s", source, exc)
        raise InvalidDescriptor(module=default_name, problems=[f"unparseable: {exc}"], source=source)

    return parse_descriptor(
        data,
        default_name=default_name,
        module_dir=path.parent.as_posix(),
        source=source,
    )


def _load_one(path: Path) -> Tuple[Optional[ModuleDescriptor], Optional[InvalidDescriptor]]:
    try:
        return load_descriptor_file(path), None
    except InvalidDescriptor as exc:
        _log.warning("Invalid descriptor %s: %s", path, "; ".join(exc.problems))
        return None, exc


def collect_descriptors(
    root: Path,
    *,
    workers: Optional[int] = None,
) -> Tuple[List[ModuleDescriptor], List[InvalidDescriptor]]:
    """Returns (valid descriptors sorted by name, per-file errors)."""
    files = discover_descriptor_files(root)
    n = workers or discovery_workers()

    if n <= 1 or len(files) <= 1:
        results = [_load_one(p) for p in files]
    else:
        with ThreadPoolExecutor(max_workers=n, thread_name_prefix="buildgraph-discovery") as pool:
            # map() keeps input order, so results stay deterministic
            results = list(pool.map(_load_one, files))

    descriptors = [d for d, _ in results if d is not None]
    errors = [e for _, e in results if e is not None]
    descriptors.sort(key=lambda d: d.name)

    _log.debug(
        "discovery root=%s files=%s valid=%s invalid=%s workers=%s",
        root,
        len(files),
        len(descriptors),
        len(errors),
        n,
    )
    return descriptors, errors


def load_descriptors(root: Path, *, workers: Optional[int] = None) -> List[ModuleDescriptor]:
    descriptors, errors = collect_descriptors(root, workers=workers)
    raise_collected(errors)
    return descriptors


def load_registry(root: Path, *, workers: Optional[int] = None) -> DescriptorRegistry:
    """
    Discover, parse and register everything under root. Invalid files and
    duplicate names are reported together in one DescriptorErrors.
    """
    descriptors, invalid = collect_descriptors(root, workers=workers)
    return _register_or_raise(descriptors, invalid)


def _register_or_raise(
    descriptors: List[ModuleDescriptor],
    invalid: List[InvalidDescriptor],
) -> DescriptorRegistry:
    errors: List[BuildGraphError] = list(invalid)
    try:
        registry = DescriptorRegistry.from_descriptors(descriptors)
    except DuplicateModule as exc:
        errors.append(exc)
    except DescriptorErrors as exc:
        errors.extend(exc.errors)
    raise_collected(errors)
    return registry


def descriptors_from_payload(items: List[Dict[str, Any]]) -> Tuple[List[ModuleDescriptor], List[InvalidDescriptor]]:
    out: List[ModuleDescriptor] = []
    errors: List[InvalidDescriptor] = []
    for i, item in enumerate(items):
        try:
            out.append(parse_descriptor(item, source=f"descriptors[{i}]"))
        except InvalidDescriptor as exc:
            errors.append(exc)
    return out, errors


def registry_from_payload(items: List[Dict[str, Any]]) -> DescriptorRegistry:
    descriptors, invalid = descriptors_from_payload(items)
    return _register_or_raise(descriptors, invalid)
