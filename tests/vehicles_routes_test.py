from tests.mocks.config_mocks import HEADERS

VEHICLE = {
    "plate": "QRS4T56",
    "model": "Actros",
    "brand": "Mercedes-Benz",
    "year": 2021,
    "km": 120000,
}


async def _register(client, **overrides):
    response = await client.post(
        "/api/vehicles", json={**VEHICLE, **overrides}, headers=HEADERS
    )
    assert response.status_code == 201, response.text
    return response.json()


async def test_requires_api_key(async_client):
    response = await async_client.get("/api/vehicles")
    assert response.status_code == 401


async def test_register_and_fetch_vehicle(async_client):
    created = await _register(async_client)
    assert created["status"] == "active"

    response = await async_client.get(
        f"/api/vehicles/{created['id']}", headers=HEADERS
    )
    assert response.status_code == 200
    assert response.json()["plate"] == "QRS4T56"

    response = await async_client.get("/api/vehicles", headers=HEADERS)
    assert [v["plate"] for v in response.json()] == ["QRS4T56"]


async def test_duplicate_plate(async_client):
    await _register(async_client)
    response = await async_client.post("/api/vehicles", json=VEHICLE, headers=HEADERS)
    assert response.status_code == 409


async def test_plate_too_long(async_client):
    response = await async_client.post(
        "/api/vehicles", json={**VEHICLE, "plate": "ABCDEFGHIJK"}, headers=HEADERS
    )
    assert response.status_code == 422


async def test_update_vehicle(async_client):
    created = await _register(async_client)
    response = await async_client.put(
        f"/api/vehicles/{created['id']}",
        json={"status": "maintenance", "km": 125000},
        headers=HEADERS,
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["status"] == "maintenance"
    assert data["km"] == 125000
    assert data["plate"] == "QRS4T56"


async def test_update_to_taken_plate(async_client):
    await _register(async_client)
    other = await _register(async_client, plate="LMN7O89")
    response = await async_client.put(
        f"/api/vehicles/{other['id']}", json={"plate": "QRS4T56"}, headers=HEADERS
    )
    assert response.status_code == 409


async def test_delete_vehicle(async_client):
    created = await _register(async_client)
    response = await async_client.delete(
        f"/api/vehicles/{created['id']}", headers=HEADERS
    )
    assert response.status_code == 204

    response = await async_client.get(
        f"/api/vehicles/{created['id']}", headers=HEADERS
    )
    assert response.status_code == 404


async def test_update_required_field_to_null(async_client):
    created = await _register(async_client)
    for field in ("plate", "status"):
        response = await async_client.put(
            f"/api/vehicles/{created['id']}", json={field: None}, headers=HEADERS
        )
        assert response.status_code == 400, response.text
        assert field in response.json()["detail"]


async def test_update_optional_field_to_null(async_client):
    created = await _register(async_client)
    response = await async_client.put(
        f"/api/vehicles/{created['id']}", json={"model": None}, headers=HEADERS
    )
    assert response.status_code == 200, response.text
    assert response.json()["model"] is None
