import json

import pytest

from buildgraph.cli import main

from factories import write_descriptor


def test_order(project_root, capsys):
    assert main(["order", str(project_root)]) == 0
    out = capsys.readouterr().out.split()
    assert out == ["Core", "Engine", "RHI", "RenderCore", "UI"]


def test_validate(project_root, capsys):
    assert main(["validate", str(project_root)]) == 0
    body = json.loads(capsys.readouterr().out)
    assert body == {"valid": True, "module_count": 5, "edge_count": 5}


def test_includes(project_root, capsys):
    assert main(["includes", str(project_root), "Engine"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].endswith("Engine/Public")
    assert lines[1].endswith("Core/Public")


def test_resolve_writes_and_saves(project_root, tmp_path):
    out = tmp_path / "plan.json"
    saved = tmp_path / "state"

    assert main(["resolve", str(project_root), "--out", str(out), "--save", str(saved)]) == 0

    body = json.loads(out.read_text(encoding="utf-8"))
    assert body["build_order"][0] == "Core"
    assert (saved / ".buildgraph" / "plans" / f"{body['plan_id']}.json").exists()


def test_cycle_exits_with_diagnostic(tmp_path, capsys):
    write_descriptor(tmp_path / "A", "A", {"public_dependencies": ["B"]})
    write_descriptor(tmp_path / "B", "B", {"public_dependencies": ["A"]})

    assert main(["resolve", str(tmp_path)]) == 1
    err = json.loads(capsys.readouterr().err)
    assert err["code"] == "CYCLIC_DEPENDENCY"
    assert set(err["cycle"]) == {"A", "B"}


def test_max_modules_flag(project_root, capsys):
    assert main(["--max-modules", "2", "validate", str(project_root)]) == 1
    assert json.loads(capsys.readouterr().err)["code"] == "GRAPH_TOO_LARGE"


def test_missing_root(tmp_path, capsys):
    assert main(["order", str(tmp_path / "missing")]) == 2
    assert "not found" in capsys.readouterr().err


@pytest.mark.parametrize("flag,value", [("--max-modules", "-1"), ("--max-modules", "0"), ("--max-edges", "x")])
def test_limit_flags_must_be_positive(project_root, capsys, flag, value):
    with pytest.raises(SystemExit) as ei:
        main([flag, value, "validate", str(project_root)])
    assert ei.value.code == 2
    assert flag in capsys.readouterr().err


def test_non_utf8_descriptor_exits_with_diagnostic(project_root, capsys):
    (project_root / "Source" / "Runtime" / "Bad").mkdir()
    (project_root / "Source" / "Runtime" / "Bad" / "Bad.build.yaml").write_bytes(b"\xff\xfe")

    assert main(["order", str(project_root)]) == 1
    out = capsys.readouterr().err
    err = json.loads(out[out.index("{"):])
    assert err["code"] == "INVALID_DESCRIPTOR"
    assert err["module"] == "Bad"
