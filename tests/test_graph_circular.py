import pytest

from buildgraph.core.errors import CyclicDependency
from buildgraph.core.graph.resolver import GraphResolver

from factories import graph_of, make


def test_detects_public_cycle():
    g = graph_of(make("A", public_dependencies=["B"]), make("B", public_dependencies=["A"]))

    with pytest.raises(CyclicDependency) as ei:
        GraphResolver().validate(g)

    cycle = ei.value.cycle
    assert cycle[0] == cycle[-1]
    assert set(cycle) == {"A", "B"}
    assert ei.value.modules == ["A", "B"]


def test_detects_mixed_public_private_cycle():
    g = graph_of(
        make("A", private_dependencies=["C"]),
        make("B", public_dependencies=["A"]),
        make("C", public_dependencies=["B"]),
    )

    with pytest.raises(CyclicDependency) as ei:
        GraphResolver().validate(g)
    assert ei.value.cycle == ["A", "C", "B", "A"]


def test_dynamic_back_reference_is_allowed():
    g = graph_of(make("A", public_dependencies=["B"]), make("B", dynamic_dependencies=["A"]))

    resolver = GraphResolver()
    resolver.validate(g)
    assert resolver.topological_order(g) == ["B", "A"]


def test_topological_order_refuses_cycles():
    g = graph_of(
        make("A", public_dependencies=["B"]),
        make("B", public_dependencies=["A"]),
        make("C"),
    )
    with pytest.raises(CyclicDependency):
        GraphResolver().topological_order(g)


def test_cycle_error_serialises_chain():
    g = graph_of(make("A", public_dependencies=["B"]), make("B", private_dependencies=["A"]))
    with pytest.raises(CyclicDependency) as ei:
        GraphResolver().validate(g)

    payload = ei.value.to_dict()
    assert payload["code"] == "CYCLIC_DEPENDENCY"
    assert payload["cycle"] == ["A", "B", "A"]
