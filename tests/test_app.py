def test_health_is_excluded_from_security_headers(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert "Content-Security-Policy" not in response.headers


def test_api_responses_carry_security_headers(client):
    response = client.get("/")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["Cache-Control"] == "no-store"
    assert "Strict-Transport-Security" not in response.headers


def test_malformed_body_is_422(client, auth):
    auth.login(uid="root", roles=["admin"])
    response = client.post("/tenants", json={"name": ""})

    assert response.status_code == 422
    assert isinstance(response.json()["detail"], list)
