import dataclasses

import pytest

from buildgraph.core.descriptors.models import ModuleDescriptor, ModuleDescriptorBuilder, PCHUsageMode
from buildgraph.core.errors import InvalidDescriptor


def test_builder_produces_immutable_descriptor():
    d = (
        ModuleDescriptorBuilder("UI")
        .pch_usage("UseExplicitOrSharedPCHs")
        .public_include_paths("Source/Public", "Source/Classes")
        .private_include_paths("Source/Private")
        .public_dependencies("Core", "CoreUObject", "Engine")
        .private_dependencies("RenderCore", "RHI")
        .build()
    )

    assert d.name == "UI"
    assert d.public_include_paths == ("Source/Public", "Source/Classes")
    assert d.public_dependencies == frozenset({"Core", "CoreUObject", "Engine"})
    assert d.dynamic_dependencies == frozenset()
    assert d.pch_usage is PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCH

    with pytest.raises(dataclasses.FrozenInstanceError):
        d.name = "Other"


def test_sequences_are_normalised():
    d = ModuleDescriptor(name="A", public_include_paths=["x", "y"], private_dependencies=["B", "B"])
    assert d.public_include_paths == ("x", "y")
    assert d.private_dependencies == frozenset({"B"})


def test_empty_name_rejected():
    with pytest.raises(InvalidDescriptor) as ei:
        ModuleDescriptor(name="  ")
    assert "name" in ei.value.problems[0]


def test_self_reference_rejected():
    with pytest.raises(InvalidDescriptor) as ei:
        ModuleDescriptor(name="A", private_dependencies=["A"])
    assert ei.value.module == "A"
    assert any("private_dependencies" in p for p in ei.value.problems)


def test_self_reference_in_dynamic_set_rejected():
    with pytest.raises(InvalidDescriptor):
        ModuleDescriptorBuilder("A").dynamic_dependencies("A").build()


def test_empty_path_entry_rejected():
    with pytest.raises(InvalidDescriptor) as ei:
        ModuleDescriptor(name="A", public_include_paths=["Public", ""])
    assert any("public_include_paths" in p for p in ei.value.problems)


def test_all_problems_reported_together():
    with pytest.raises(InvalidDescriptor) as ei:
        ModuleDescriptor(
            name="A",
            private_include_paths=[""],
            public_dependencies=["A"],
            pch_usage="Sometimes",
        )
    assert len(ei.value.problems) == 3


def test_pch_mode_accepts_engine_spellings():
    assert PCHUsageMode.parse("UseExplicitOrSharedPCHs") is PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCH
    assert PCHUsageMode.parse("NoPCHs") is PCHUsageMode.NONE
    assert PCHUsageMode.parse("None") is PCHUsageMode.NONE
    assert PCHUsageMode.parse("UseSharedPCHs") is PCHUsageMode.USE_SHARED_PCHS
    assert PCHUsageMode.parse(None) is PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCH


def test_pch_mode_flags():
    assert PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCH.allows_explicit
    assert PCHUsageMode.USE_EXPLICIT_OR_SHARED_PCH.allows_shared
    assert not PCHUsageMode.USE_SHARED_PCHS.allows_explicit
    assert not PCHUsageMode.NONE.allows_shared


def test_source_does_not_affect_equality():
    a = ModuleDescriptor(name="A", source="one.build.yaml")
    b = ModuleDescriptor(name="A", source="two.build.yaml")
    assert a == b
