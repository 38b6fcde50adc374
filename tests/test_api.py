import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from hpa.api import create_app
from hpa.targets import UtilizationTarget, ValueTarget


@pytest.fixture
def client():
    targets = {
        "cpu": UtilizationTarget(name="cpu", average_utilization=50),
        "queue": ValueTarget(name="queue", lower=20000, upper=40000),
        "idle": ValueTarget(name="idle", lower=0, upper=0),
    }
    app = create_app(targets)
    return app.test_client()


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_list_targets(client):
    resp = client.get("/targets")
    assert resp.status_code == 200
    targets = resp.get_json()["targets"]
    assert targets["cpu"] == {"type": "Utilization", "average_utilization": 50}
    assert targets["queue"] == {"type": "Value", "lower": 20000, "upper": 40000}


def test_resource_ratio_endpoint(client):
    payload = {
        "metrics": {"pod-a": 50, "pod-b": 150},
        "requests": {"pod-a": 100, "pod-b": 100},
        "target_utilization": 50,
    }
    resp = client.post("/ratio/resource", json=payload)
    assert resp.status_code == 200
    assert resp.get_json() == {
        "utilization_ratio": 2.0,
        "current_utilization": 100,
        "raw_average_value": 100000,
    }


def test_resource_ratio_endpoint_with_quantities(client):
    payload = {
        "metrics": {"pod-a": "100m", "pod-b": "300m"},
        "requests": {"pod-a": "500m", "pod-b": "500m"},
        "target_utilization": 40,
    }
    resp = client.post("/ratio/resource", json=payload)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["current_utilization"] == 40
    assert data["utilization_ratio"] == 1.0
    assert data["raw_average_value"] == 200


def test_resource_ratio_endpoint_disjoint_pods(client):
    payload = {"metrics": {"pod-a": 10}, "requests": {"pod-b": 100}, "target_utilization": 50}
    resp = client.post("/ratio/resource", json=payload)
    assert resp.status_code == 422
    assert resp.get_json()["kind"] == "NoMatchedMetricsError"


@pytest.mark.parametrize(
    "payload",
    [
        {"requests": {"pod-a": 100}, "target_utilization": 50},
        {"metrics": {"pod-a": 10}, "target_utilization": 50},
        {"metrics": {"pod-a": 10}, "requests": {"pod-a": 100}},
        {"metrics": {"pod-a": 10}, "requests": {"pod-a": 100}, "target_utilization": "50"},
        {"metrics": {"pod-a": "ten"}, "requests": {"pod-a": 100}, "target_utilization": 50},
        {"metrics": [10], "requests": {"pod-a": 100}, "target_utilization": 50},
    ],
)
def test_resource_ratio_endpoint_bad_request(client, payload):
    resp = client.post("/ratio/resource", json=payload)
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_resource_ratio_endpoint_non_json_body(client):
    resp = client.post("/ratio/resource", data="not json")
    assert resp.status_code == 400


def test_usage_ratio_endpoint_in_range(client):
    payload = {"metrics": {"pod-a": 30, "pod-b": 30}, "target": {"lower": 20, "upper": 40}}
    resp = client.post("/ratio/usage", json=payload)
    assert resp.status_code == 200
    assert resp.get_json() == {"usage_ratio": 1.0, "current_usage": 30000}


def test_usage_ratio_endpoint_single_value(client):
    payload = {"metrics": {"pod-a": 10, "pod-b": 10}, "target": {"value": 20}}
    resp = client.post("/ratio/usage", json=payload)
    assert resp.status_code == 200
    assert resp.get_json() == {"usage_ratio": 0.5, "current_usage": 10000}


def test_usage_ratio_endpoint_empty_metrics(client):
    resp = client.post("/ratio/usage", json={"metrics": {}, "target": {"value": 20}})
    assert resp.status_code == 422
    assert resp.get_json()["kind"] == "EmptyMetricSetError"


def test_usage_ratio_endpoint_inverted_range(client):
    payload = {"metrics": {"pod-a": 30}, "target": {"lower": 40, "upper": 20}}
    resp = client.post("/ratio/usage", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "InvalidTargetRangeError"


def test_usage_ratio_endpoint_missing_target(client):
    resp = client.post("/ratio/usage", json={"metrics": {"pod-a": 30}, "target": {"lower": 20}})
    assert resp.status_code == 400


def test_evaluate_utilization_target(client):
    payload = {"metrics": {"pod-a": 80}, "requests": {"pod-a": 100}}
    resp = client.post("/evaluate/cpu", json=payload)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["target"] == "cpu"
    assert data["type"] == "Utilization"
    assert data["utilization_ratio"] == 1.6


def test_evaluate_utilization_target_without_requests(client):
    resp = client.post("/evaluate/cpu", json={"metrics": {"pod-a": 80}})
    assert resp.status_code == 422


def test_evaluate_value_target(client):
    resp = client.post("/evaluate/queue", json={"metrics": {"pod-a": 60}})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["type"] == "Value"
    assert data["usage_ratio"] == 1.5
    assert data["current_usage"] == 60000


def test_evaluate_zero_target(client):
    resp = client.post("/evaluate/idle", json={"metrics": {"pod-a": 5}})
    assert resp.status_code == 422
    assert resp.get_json()["kind"] == "ZeroTargetError"


def test_evaluate_unknown_target(client):
    resp = client.post("/evaluate/nope", json={"metrics": {"pod-a": 5}})
    assert resp.status_code == 404


def test_build_app_reads_targets_path(tmp_path, monkeypatch):
    path = tmp_path / "targets.yaml"
    path.write_text("targets:\n  - {name: mem, type: Utilization, average_utilization: 70}\n")
    monkeypatch.setenv("PODSCALE_TARGETS_PATH", str(path))

    from app import build_app

    resp = build_app().test_client().get("/targets")
    assert list(resp.get_json()["targets"]) == ["mem"]


def test_build_app_survives_bad_targets(tmp_path, monkeypatch):
    path = tmp_path / "targets.yaml"
    path.write_text("targets:\n  - {name: mem, type: Bogus}\n")
    monkeypatch.setenv("PODSCALE_TARGETS_PATH", str(path))

    from app import build_app

    resp = build_app().test_client().get("/targets")
    assert resp.get_json()["targets"] == {}


def test_usage_ratio_endpoint_integer_and_string_values_agree(client):
    payload = {"metrics": {"pod-a": 30, "pod-b": "30"}, "target": {"value": "30"}}
    resp = client.post("/ratio/usage", json=payload)
    assert resp.status_code == 200
    assert resp.get_json() == {"usage_ratio": 1.0, "current_usage": 30000}
