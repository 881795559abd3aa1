def test_root(client):
    assert client.get("/").json() == {"message": "Marketplace API running"}


def test_database_check(client, user):
    body = client.get("/test").json()
    assert body["database"] == "✅ Connected & Working"
    assert body["database_name"] == "marketplace"
    assert "user" in body["collections"]


def test_unknown_route_uses_error_envelope(client):
    res = client.get("/api/nowhere")
    assert res.status_code == 404
    assert res.json() == {"success": False, "message": "Not Found"}
