from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_function_listing():
    resp = client.get("/crs/functions")
    assert resp.status_code == 200
    by_name = {f["name"]: f for f in resp.json()}
    assert by_name["name"]["params"] == ["crs"]
    assert by_name["type"]["params"] == ["crs"]
    assert by_name["axis_name"]["params"] == ["crs", "index"]
    assert by_name["axis_name"]["optional"] == ["index"]
    assert by_name["geo_distance"]["params"] == ["crs", "point1", "point2"]
    assert by_name["is_equivalent_to_relaxed"]["params"] == ["crs", "crs2"]
    assert "read_text" not in by_name


def test_name_of_epsg_code():
    resp = client.post("/crs/name", json={"crs": [[4326]]})
    assert resp.status_code == 200
    assert resp.json() == {"value": "WGS 84", "error": None, "detail": None}


def test_scalar_and_flat_row_shorthand():
    assert client.post("/crs/name", json={"crs": 28992}).json()["value"] == "Amersfoort / RD New"
    assert client.post("/crs/name", json={"crs": ["EPSG", 28992]}).json()["value"] == "Amersfoort / RD New"


def test_indexed_read():
    data = client.post("/crs/axis_abbreviation", json={"crs": [[4326]], "index": 1}).json()
    assert data["value"] == "Lat"
    data = client.post("/crs/axis_abbreviation", json={"crs": [[4326]], "index": 7}).json()
    assert data["value"] == "<index out of range>"


def test_failed_cell_is_still_http_200():
    resp = client.post("/crs/name", json={"crs": [[999999]]})
    assert resp.status_code == 200
    data = resp.json()
    assert data["value"] is None
    assert data["error"] == "#VALUE!"
    assert data["detail"]


def test_distance_endpoint():
    payload = {"crs": [[4326]], "point1": [[5.0, 52.0]], "point2": [[6.0, 52.0]]}
    data = client.post("/crs/geo_distance", json=payload).json()
    assert 68_000 < data["value"] < 70_000


def test_equivalence_endpoint():
    data = client.post("/crs/is_equivalent_to_relaxed", json={"crs": [[4326]], "crs2": [["OGC:CRS84"]]}).json()
    assert data["value"] is True


def test_usage_area_center_is_a_row():
    data = client.post("/crs/usage_area_center", json={"crs": [[28992]]}).json()
    assert len(data["value"]) == 1 and len(data["value"][0]) == 2


def test_unknown_function_is_404():
    resp = client.post("/crs/no_such_function", json={"crs": [[4326]]})
    assert resp.status_code == 404


def test_missing_argument_is_422():
    resp = client.post("/crs/geo_distance", json={"crs": [[4326]], "point1": [[5.0, 52.0]]})
    assert resp.status_code == 422
    resp = client.post("/crs/name", json={})
    assert resp.status_code == 422
