def test_register_returns_user_and_token(client):
    response = client.post(
        "/api/auth/register",
        json={"email": "ana@example.com", "password": "secret123", "username": "ana"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "ana@example.com"
    assert "password_hash" not in body["user"]
    assert body["token"]["token_type"] == "bearer"
    assert body["token"]["access_token"]


def test_register_duplicate_email(client, register):
    register(email="dup@example.com")
    response = client.post(
        "/api/auth/register", json={"email": "dup@example.com", "password": "secret123"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists with this email"


def test_register_duplicate_username(client, register):
    register(username="sam")
    response = client.post(
        "/api/auth/register",
        json={"email": "other@example.com", "password": "secret123", "username": "sam"},
    )
    assert response.status_code == 400


def test_register_validation_error_is_400(client):
    response = client.post("/api/auth/register", json={"email": "not-an-email", "password": "x"})
    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Invalid request data"
    assert body["errors"]


def test_login(client, register):
    register(email="login@example.com", password="secret123")
    response = client.post(
        "/api/auth/login", json={"email": "login@example.com", "password": "secret123"}
    )
    assert response.status_code == 200
    assert response.json()["token"]["access_token"]


def test_login_with_wrong_password(client, register):
    register(email="login@example.com", password="secret123")
    response = client.post(
        "/api/auth/login", json={"email": "login@example.com", "password": "wrong-password"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_current_user(client, register):
    account = register(email="me@example.com")
    response = client.get("/api/auth/user", headers=account["headers"])
    assert response.status_code == 200
    assert response.json()["id"] == account["user"]["id"]


def test_missing_or_invalid_token(client):
    assert client.get("/api/auth/user").status_code == 401
    response = client.get("/api/auth/user", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


def test_logout(client, register):
    account = register()
    response = client.post("/api/auth/logout", headers=account["headers"])
    assert response.status_code == 200


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
