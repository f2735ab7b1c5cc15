from __future__ import annotations

from pathlib import Path
from typing import List

import pytest
from fastapi.testclient import TestClient

from buildgraph.api.main import app
from buildgraph.core.descriptors.models import ModuleDescriptor
from buildgraph.core.observability.metrics import reset_metrics

from factories import make, scenario_payload, write_descriptor


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # Limits and worker counts come from the environment; keep tests hermetic
    for key in (
        "BUILDGRAPH_MAX_MODULES",
        "BUILDGRAPH_MAX_EDGES",
        "BUILDGRAPH_DISCOVERY_WORKERS",
        "BUILDGRAPH_HOST",
        "BUILDGRAPH_PORT",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_metrics()


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def ui_scenario() -> List[ModuleDescriptor]:
    """Core / Engine / UI / RenderCore / RHI, plus Game depending on UI."""
    return [
        make("Core", public_include_paths=["Core/Public"], private_include_paths=["Core/Private"]),
        make(
            "Engine",
            public_include_paths=["Engine/Public"],
            private_include_paths=["Engine/Private"],
            public_dependencies=["Core"],
        ),
        make(
            "UI",
            public_include_paths=["UI/Source/Public", "UI/Source/Classes"],
            private_include_paths=["UI/Source/Private"],
            public_dependencies=["Core", "Engine"],
            private_dependencies=["RenderCore", "RHI"],
        ),
        make("RenderCore", public_include_paths=["RenderCore/Public"]),
        make("RHI", public_include_paths=["RHI/Public"]),
        make("Game", public_include_paths=["Game/Public"], public_dependencies=["UI"]),
    ]


@pytest.fixture()
def project_root(tmp_path: Path) -> Path:
    """Source tree laid out like an engine project, one descriptor per module."""
    root = tmp_path / "Project"
    for data in scenario_payload():
        name = data["name"]
        body = {k: v for k, v in data.items() if k != "name"}
        write_descriptor(root / "Source" / "Runtime" / name, name, body)
    return root
