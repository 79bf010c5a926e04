import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from sequencer.config import settings
from sequencer.data.matrix_repository import load_matrix_entries
from sequencer.main import create_app


@pytest.fixture(autouse=True)
def clear_matrix_cache():
    load_matrix_entries.cache_clear()
    yield
    load_matrix_entries.cache_clear()


@pytest.fixture
def api_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    from sequencer.services.optimizer import service as optimizer_service
    from sequencer.persistence.filesystem import FileStorage

    monkeypatch.setattr(optimizer_service, "FileStorage", lambda: FileStorage(root=tmp_path))
    monkeypatch.setattr(settings, "matrix_file", None)
    monkeypatch.setattr(settings, "use_matrix_lookup", False)
    return TestClient(create_app())


def _payload(**overrides) -> dict:
    payload = {
        "orders": [
            {"id": "WO-1", "values": {"Color": "Red"}},
            {"id": "WO-2", "values": {"Color": "Blue"}},
            {"id": "WO-3", "values": {"Color": "Red"}},
        ],
        "attributes": [{"column": "Color", "changeover_time": 20}],
    }
    payload.update(overrides)
    return payload


def test_health(api_client: TestClient):
    response = api_client.get(f"{settings.api_prefix}/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_optimize_endpoint(api_client: TestClient):
    response = api_client.post(f"{settings.api_prefix}/sequences/optimize", json=_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["total_before"] == 40
    assert body["total_after"] == 20
    assert body["savings_percent"] == 50
    assert sorted(order["id"] for order in body["sequence"]) == ["WO-1", "WO-2", "WO-3"]
    assert [order["sequence_number"] for order in body["sequence"]] == [1, 2, 3]
    assert body["attribute_stats"] == [
        {"column": "Color", "changeover_count": 1, "total_time": 20, "parallel_group": "default"}
    ]
    assert body["metadata"]["order_count"] == 3


def test_optimize_endpoint_with_inline_matrix(api_client: TestClient):
    payload = _payload(
        orders=[
            {"id": "1", "values": {"Material": "Steel"}},
            {"id": "2", "values": {"Material": "Aluminum"}},
            {"id": "3", "values": {"Material": "Plastic"}},
        ],
        attributes=[{"column": "Material", "changeover_time": 15}],
        use_matrix_lookup=True,
        matrix_entries=[{"attribute": "Material", "from_value": "Steel", "to_value": "Aluminum", "minutes": 5}],
    )

    response = api_client.post(f"{settings.api_prefix}/sequences/optimize", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert [order["work_time"] for order in body["sequence"]] == [0, 5, 15]
    assert body["metadata"]["matrix_lookup"] is True


def test_optimize_endpoint_uses_stored_matrix(api_client: TestClient, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    matrix_path = tmp_path / "matrix.csv"
    matrix_path.write_text("Attribute,FromValue,ToValue,Minutes\nMaterial,Steel,Aluminum,5\n", encoding="utf-8")
    monkeypatch.setattr(settings, "matrix_file", matrix_path)

    payload = _payload(
        orders=[
            {"id": "1", "values": {"Material": "Steel"}},
            {"id": "2", "values": {"Material": "Aluminum"}},
        ],
        attributes=[{"column": "Material", "changeover_time": 15}],
        use_matrix_lookup=True,
    )

    response = api_client.post(f"{settings.api_prefix}/sequences/optimize", json=payload)

    assert response.status_code == 200
    assert response.json()["total_after"] == 5
    assert response.json()["metadata"]["matrix_entries"] == 1


def test_optimize_endpoint_reports_unreadable_matrix(api_client: TestClient, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "matrix_file", tmp_path / "absent.csv")

    response = api_client.post(f"{settings.api_prefix}/sequences/optimize", json=_payload(use_matrix_lookup=True))

    assert response.status_code == 400
    assert "matrix" in response.json()["detail"].lower()


def test_optimize_endpoint_rejects_duplicate_columns(api_client: TestClient):
    payload = _payload(
        attributes=[
            {"column": "Color", "changeover_time": 20},
            {"column": "Color", "changeover_time": 10},
        ]
    )

    response = api_client.post(f"{settings.api_prefix}/sequences/optimize", json=payload)

    assert response.status_code == 422


@pytest.mark.parametrize("second_id", ["WO-1", "WO-1 ", " WO-1"])
def test_optimize_endpoint_rejects_duplicate_order_ids(api_client: TestClient, second_id: str):
    payload = _payload(
        orders=[
            {"id": "WO-1", "values": {"Color": "Red"}},
            {"id": second_id, "values": {"Color": "Blue"}},
            {"id": "WO-2", "values": {"Color": "Red"}},
        ]
    )

    response = api_client.post(f"{settings.api_prefix}/sequences/optimize", json=payload)

    assert response.status_code == 422
    assert "Duplicate order id" in response.text


def test_optimize_endpoint_rejects_blank_order_id(api_client: TestClient):
    payload = _payload(orders=[{"id": "  ", "values": {"Color": "Red"}}])

    response = api_client.post(f"{settings.api_prefix}/sequences/optimize", json=payload)

    assert response.status_code == 422


def test_optimize_endpoint_strips_order_ids(api_client: TestClient):
    payload = _payload(
        orders=[
            {"id": " WO-1", "values": {"Color": "Red"}},
            {"id": "WO-2 ", "values": {"Color": "Blue"}},
            {"id": "WO-3", "values": {"Color": "Red"}},
        ]
    )

    response = api_client.post(f"{settings.api_prefix}/sequences/optimize", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert sorted(order["id"] for order in body["sequence"]) == ["WO-1", "WO-2", "WO-3"]
    for order in body["sequence"][1:]:
        assert order["work_time"] == (0 if order["changeover_reasons"] == [] else 20)
    assert body["total_after"] == 20


def test_optimize_endpoint_persists_history(api_client: TestClient, tmp_path: Path):
    response = api_client.post(
        f"{settings.api_prefix}/sequences/optimize",
        json=_payload(persist=True, run_label="Line 2 Monday", requested_by="planner"),
    )

    assert response.status_code == 200
    run_dirs = list((tmp_path / "outputs").iterdir())
    assert len(run_dirs) == 1
    history = json.loads((run_dirs[0] / "history.json").read_text(encoding="utf-8"))
    assert history["run_label"] == "Line 2 Monday"
    assert history["order_count"] == 3
    assert history["total_after"] == 20
    assert (run_dirs[0] / "summary.json").exists()


def test_matrix_prefetch_endpoint(api_client: TestClient, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    matrix_path = tmp_path / "matrix.csv"
    matrix_path.write_text(
        "Attribute,FromValue,ToValue,Minutes\nColor,Red,Blue,12\nColor,Red,Green,30\nSize,S,L,4\n",
        encoding="utf-8",
    )
    monkeypatch.setattr(settings, "matrix_file", matrix_path)

    response = api_client.post(
        f"{settings.api_prefix}/matrix/prefetch",
        json={"attribute_names": ["Color"], "values_by_attribute": {"Color": ["Red", "Blue"]}},
    )

    assert response.status_code == 200
    entries = response.json()["entries"]
    assert len(entries) == 1
    assert entries[0]["from_value"] == "Red"
    assert entries[0]["minutes"] == 12


def test_matrix_prefetch_without_configured_file(api_client: TestClient):
    response = api_client.post(
        f"{settings.api_prefix}/matrix/prefetch",
        json={"attribute_names": ["Color"], "values_by_attribute": {"Color": ["Red"]}},
    )

    assert response.status_code == 200
    assert response.json() == {"entries": []}
