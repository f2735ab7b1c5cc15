import buildgraph.api.endpoints.plans as plans

from factories import scenario_payload


def test_configuration_error_is_422_with_request_id(client):
    payload = {"descriptors": [{"name": "UI", "public_dependencies": ["Core"]}]}
    r = client.post("/api/v1/plans/resolve", json=payload, headers={"X-Request-Id": "rid-422"})

    assert r.status_code == 422
    assert r.headers["X-Request-Id"] == "rid-422"
    body = r.json()
    assert body["request_id"] == "rid-422"
    assert body["detail"]["code"] == "UNRESOLVED_DEPENDENCY"


def test_unhandled_error_hides_traceback(client, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("emitter exploded")

    monkeypatch.setattr(plans, "resolve_registry", boom)
    r = client.post("/api/v1/plans/resolve", json={"descriptors": scenario_payload()}, headers={"X-Request-Id": "rid-500"})

    assert r.status_code == 500
    assert r.json() == {"detail": "Internal Server Error", "request_id": "rid-500"}
    assert "Traceback" not in r.text
    assert "emitter exploded" not in r.text


def test_unknown_route_is_plain_404(client):
    r = client.get("/api/v1/does/not/exist")
    assert r.status_code == 404
    assert "Traceback" not in r.text
