def test_health_returns_200(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "timestamp" in data
    assert data["database"]["status"] == "connected"
    assert data["database"]["dialect"] == "sqlite"


def test_schemes_lists_only_active(client, seeded):
    response = client.get("/api/schemes")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    names = [s["name"] for s in body["data"]]
    assert names == ["Flat 2%"]
    assert body["data"][0]["tenor_options"] == [3, 6, 9, 12]


def test_unknown_route_returns_404(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
