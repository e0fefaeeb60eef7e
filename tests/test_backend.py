import asyncio
import json

import pytest

from ipc_handler import IPCHandler
from main import ChartBackend


@pytest.fixture
def backend():
    return ChartBackend()


def call(backend, method, params=None, request_id=1):
    line = json.dumps({"jsonrpc": "2.0", "id": request_id, "method": method, "params": params or {}})
    return asyncio.run(backend.ipc.handle_line(line))


def test_ping(backend):
    response = call(backend, "ping")
    assert response["error"] is None
    assert response["result"]["status"] == "healthy"


def test_configure_chart(backend, resale_fields, resale_records):
    response = call(backend, "configure_chart", {"fields": resale_fields, "records": resale_records})

    result = response["result"]
    assert result["xKey"] == "year"
    assert result["yKey"] == "resale_price"
    assert result["seriesKey"] == "town"
    assert result["useBarChart"] is False
    assert result["sumData"] is True
    json.dumps(response, allow_nan=False)


def test_configure_chart_with_overrides(backend, resale_fields, resale_records):
    response = call(backend, "configure_chart", {
        "fields": resale_fields,
        "records": resale_records,
        "x_key": "town",
        "series_key": "",
        "sum_data": False,
    })

    result = response["result"]
    assert result["xKey"] == "town"
    assert result["seriesKey"] is None
    assert result["type"] == "bar"
    assert len(result["dataset"]["All Data"]) == len(resale_records)


def test_compute_labels(backend, resale_fields, resale_records):
    response = call(backend, "compute_labels", {"fields": resale_fields, "records": resale_records})
    assert response["result"] == {"x_key": "year", "y_key": "resale_price", "series_key": "town"}


def test_describe_fields(backend, resale_fields, resale_records):
    response = call(backend, "describe_fields", {"fields": resale_fields, "records": resale_records})
    assert set(response["result"]["fields"]) == {"year", "town", "resale_price"}


def test_normalize_payload(backend):
    payload = {"code": 0, "data": {"rows": [{"year": 2020, "value": 1}]}}

    response = call(backend, "normalize_payload", {"payload": payload})

    assert response["result"]["fields"] == [{"id": "year", "type": "number"}, {"id": "value", "type": "number"}]
    assert response["result"]["records"] == [{"year": 2020, "value": 1}]


def test_load_file(backend, tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("year,value\n2019,1\n2020,2\n", encoding="utf-8")

    response = call(backend, "load_file", {"file_path": str(path)})

    assert response["result"]["row_count"] == 2


def test_load_missing_file(backend, tmp_path):
    response = call(backend, "load_file", {"file_path": str(tmp_path / "nope.csv")})
    assert response["error"]["code"] == -32602


def test_catalogue_methods(backend):
    listing = {"code": 0, "data": {"datasets": [
        {"datasetId": "d_2", "name": "B", "format": "CSV", "managedByAgencyName": "Zeta"},
        {"datasetId": "d_1", "name": "A", "format": "CSV", "managedByAgencyName": "Alpha"},
    ]}}

    organisations = call(backend, "list_organisations", {"listing": listing})["result"]
    resources = call(backend, "list_resources", {"listing": listing, "organisation": "Zeta"})["result"]

    assert organisations == {"organisations": ["Alpha", "Zeta"], "count": 2}
    assert resources == {"resources": [{"resource_id": "d_2", "resource_name": "B"}], "count": 1}


def test_invalid_input_maps_to_invalid_params(backend):
    response = call(backend, "configure_chart", {"fields": [], "records": []})
    assert response["error"]["code"] == -32602
    assert response["result"] is None


def test_unknown_param_maps_to_invalid_params(backend):
    response = call(backend, "ping", {"verbose": True})
    assert response["error"]["code"] == -32602


def test_unknown_method(backend):
    assert call(backend, "explode")["error"]["code"] == -32601


def test_parse_error(backend):
    response = asyncio.run(backend.ipc.handle_line("{not json"))
    assert response["error"]["code"] == -32700
    assert response["id"] is None


def test_missing_method(backend):
    response = asyncio.run(backend.ipc.handle_line(json.dumps({"id": 3})))
    assert response["error"]["code"] == -32600


def test_internal_error_has_traceback():
    async def broken():
        raise RuntimeError("boom")

    ipc = IPCHandler()
    ipc.register_handler("broken", broken)

    response = asyncio.run(ipc.handle_line(json.dumps({"id": 9, "method": "broken"})))

    assert response["error"]["code"] == -32603
    assert "boom" in response["error"]["message"]
    assert "traceback" in response["error"]["data"]


def test_timeout():
    async def slow():
        await asyncio.sleep(1)

    ipc = IPCHandler(request_timeout=0.01)
    ipc.register_handler("slow", slow)

    response = asyncio.run(ipc.handle_line(json.dumps({"id": 1, "method": "slow"})))

    assert response["error"]["code"] == -32000


def test_overflowing_x_still_answers(backend):
    records = [{"distance": "9" * 400, "value": 1}, {"distance": "1", "value": 2}]
    fields = [{"id": "distance"}, {"id": "value"}]

    response = call(backend, "configure_chart", {
        "fields": fields, "records": records, "x_key": "distance", "y_key": "value",
    })

    assert response["error"] is None
    json.dumps(response, allow_nan=False)


def test_unencodable_result_becomes_internal_error(monkeypatch):
    written = []
    monkeypatch.setattr(IPCHandler, "_write_line", staticmethod(written.append))

    ipc = IPCHandler()
    asyncio.run(ipc._emit({"jsonrpc": "2.0", "id": 4, "result": float("inf"), "error": None}))

    response = json.loads(written[0])
    assert response["id"] == 4
    assert response["error"]["code"] == -32603
