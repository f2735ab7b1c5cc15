import pytest

from buildgraph.core.descriptors.registry import DescriptorRegistry
from buildgraph.core.errors import DescriptorErrors, DuplicateModule, RegistrySealed, UnknownModule
from buildgraph.core.graph.builder import build_graph

from factories import make


def test_register_and_lookup():
    reg = DescriptorRegistry()
    core = make("Core")
    reg.register(core)

    assert reg.lookup("Core") is core
    assert "Core" in reg
    assert len(reg) == 1


def test_lookup_unknown_module():
    with pytest.raises(UnknownModule) as ei:
        DescriptorRegistry().lookup("Nope")
    assert ei.value.module == "Nope"


def test_duplicate_name_fails():
    reg = DescriptorRegistry()
    reg.register(make("Core"))
    with pytest.raises(DuplicateModule) as ei:
        reg.register(make("Core", public_include_paths=["Other"]))
    assert ei.value.module == "Core"


def test_all_is_restartable_and_registration_ordered():
    reg = DescriptorRegistry()
    for name in ("B", "A", "C"):
        reg.register(make(name))

    view = reg.all()
    assert [d.name for d in view] == ["B", "A", "C"]
    assert [d.name for d in view] == ["B", "A", "C"]


def test_from_descriptors_sorts_by_name():
    reg = DescriptorRegistry.from_descriptors([make("Engine"), make("Core"), make("UI")])
    assert list(reg.names()) == ["Core", "Engine", "UI"]


def test_from_descriptors_reports_every_duplicate():
    descs = [
        make("Core", source="a/Core.build.yaml"),
        make("Core", source="b/Core.build.yaml"),
        make("RHI", source="a/RHI.build.yaml"),
        make("RHI", source="b/RHI.build.yaml"),
        make("Engine"),
    ]
    with pytest.raises(DescriptorErrors) as ei:
        DescriptorRegistry.from_descriptors(descs)

    errors = ei.value.errors
    assert sorted(e.module for e in errors) == ["Core", "RHI"]
    core = next(e for e in errors if e.module == "Core")
    assert core.sources == ["a/Core.build.yaml", "b/Core.build.yaml"]


def test_single_duplicate_raised_as_itself():
    with pytest.raises(DuplicateModule):
        DescriptorRegistry.from_descriptors([make("Core"), make("Core")])


def test_registry_sealed_after_graph_build():
    reg = DescriptorRegistry.from_descriptors([make("Core")])
    build_graph(reg)

    assert reg.sealed
    with pytest.raises(RegistrySealed):
        reg.register(make("Engine"))
