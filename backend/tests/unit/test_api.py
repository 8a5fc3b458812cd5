"""HTTP tests for the geometry endpoints."""

from fastapi.testclient import TestClient

BASE = "/api/v1/geometries"


def _create(client: TestClient, name: str, gtype: int = 1, wkt: str = "30 10"):
    return client.post(BASE, json={"name": name, "type": gtype, "wkt": wkt})


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["store"] == "memory"


class TestCreateAndRead:
    def test_create_returns_envelope(self, client: TestClient) -> None:
        response = _create(client, "Lake A")

        assert response.status_code == 201
        assert response.json() == {
            "success": True,
            "message": "Geometry created",
            "data": {"id": 1, "name": "Lake A", "type": 1, "wkt": "POINT (30 10)"},
            "statusCode": 201,
        }

    def test_duplicate_name_is_409(self, client: TestClient) -> None:
        _create(client, "Lake A")
        response = _create(client, "lake a", wkt="1 1")

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["data"] is None
        assert body["statusCode"] == 409

    def test_missing_body(self, client: TestClient) -> None:
        response = client.post(BASE)
        assert response.status_code == 400
        assert response.json()["message"] == "Payload is required."

    def test_get_by_id(self, client: TestClient) -> None:
        _create(client, "Road", gtype=2, wkt="0 0 1 1")
        response = client.get(f"{BASE}/1")

        assert response.status_code == 200
        assert response.json()["data"]["wkt"] == "LINESTRING (0 0, 1 1)"

    def test_get_unknown_id(self, client: TestClient) -> None:
        response = client.get(f"{BASE}/404")
        assert response.status_code == 404
        assert response.json()["message"] == "Geometry not found"

    def test_list(self, client: TestClient) -> None:
        _create(client, "Lake A")
        _create(client, "Lake B", wkt="1 1")
        response = client.get(BASE)

        assert response.status_code == 200
        assert [g["name"] for g in response.json()["data"]] == ["Lake A", "Lake B"]


class TestPaged:
    def test_paging_fields_use_camel_case(self, client: TestClient) -> None:
        for i in range(1, 13):
            _create(client, f"Site {i:02d}", wkt=f"{i} {i}")

        response = client.get(f"{BASE}/paged", params={"page": 2, "pageSize": 5})
        data = response.json()["data"]

        assert response.status_code == 200
        assert data["totalCount"] == 12
        assert data["totalPages"] == 3
        assert data["page"] == 2
        assert data["pageSize"] == 5
        assert [g["id"] for g in data["items"]] == [6, 7, 8, 9, 10]

    def test_default_page_size(self, client: TestClient) -> None:
        response = client.get(f"{BASE}/paged")
        assert response.json()["data"]["pageSize"] == 10

    def test_search(self, client: TestClient) -> None:
        _create(client, "North Lake")
        _create(client, "River", wkt="1 1")
        response = client.get(f"{BASE}/paged", params={"search": "lake"})
        assert [g["name"] for g in response.json()["data"]["items"]] == ["North Lake"]

    def test_page_size_limit(self, client: TestClient) -> None:
        response = client.get(f"{BASE}/paged", params={"pageSize": 51})
        assert response.status_code == 400
        assert response.json()["message"] == "Page size must be at most 50."


class TestUpdateAndDelete:
    def test_update(self, client: TestClient) -> None:
        _create(client, "Lake A")
        response = client.put(f"{BASE}/1", json={"name": "Lake B"})

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Lake B"

    def test_update_without_changes(self, client: TestClient) -> None:
        _create(client, "Lake A")
        response = client.put(f"{BASE}/1", json={"name": "Lake A"})

        assert response.status_code == 400
        assert response.json()["message"] == "No changes made"

    def test_delete(self, client: TestClient) -> None:
        _create(client, "Lake A")
        response = client.delete(f"{BASE}/1")

        assert response.status_code == 200
        assert response.json()["data"] is True
        assert client.delete(f"{BASE}/1").status_code == 404


class TestBatch:
    def test_batch_added(self, client: TestClient) -> None:
        response = client.post(
            f"{BASE}/batch",
            json=[
                {"name": "Well", "type": 1, "wkt": "1 2"},
                {"name": "Field", "type": 3, "wkt": "0 0 0 5 5 5 5 0 0 0"},
            ],
        )

        assert response.status_code == 201
        assert response.json()["message"] == "Batch added"
        assert response.json()["data"][1]["wkt"] == "POLYGON ((0 0, 0 5, 5 5, 5 0, 0 0))"

    def test_batch_is_all_or_nothing(self, client: TestClient) -> None:
        response = client.post(
            f"{BASE}/batch",
            json=[
                {"name": "Well", "type": 1, "wkt": "1 2"},
                {"name": "well", "type": 1, "wkt": "3 4"},
            ],
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Item 1: Duplicate name: well"
        assert client.get(BASE).json()["data"] == []

    def test_empty_batch(self, client: TestClient) -> None:
        response = client.post(f"{BASE}/batch", json=[])
        assert response.status_code == 400
        assert response.json()["message"] == "Payload is empty"
