"""Prometheus export endpoint contract tests.

Validates that the scrape endpoint is reachable and returns the expected
metric names. Absolute counter values are process-global and not checked.
"""

from buildgraph.core.observability.metrics import snapshot_named

from factories import scenario_payload


def test_prometheus_metrics_endpoint_returns_200(client):
    client.post("/api/v1/plans/resolve", json={"descriptors": scenario_payload()})
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "buildgraph_http_requests_total" in r.text
    assert "buildgraph_resolutions_total" in r.text


def test_named_counters_track_outcomes(client):
    client.post("/api/v1/plans/resolve", json={"descriptors": scenario_payload()})
    client.post(
        "/api/v1/plans/resolve",
        json={"descriptors": [{"name": "A", "public_dependencies": ["B"]}, {"name": "B", "public_dependencies": ["A"]}]},
    )

    snap = snapshot_named()
    assert snap["plans_resolve"] == 2
    assert snap["resolutions_ok"] == 1
    assert snap["resolutions_cyclic_dependency"] == 1


def test_snapshot_endpoint(client):
    client.post("/api/v1/graph/validate", json={"descriptors": scenario_payload()})
    r = client.get("/api/v1/metrics/snapshot")
    assert r.status_code == 200
    assert r.json()["counters"]["graph_validate"] == 1
