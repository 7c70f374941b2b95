def test_register_creates_team_and_admin(client, admin):
    assert admin["user"]["role"] == "admin"
    assert admin["team"]["name"] == "Field Team"
    assert admin["user"]["team_id"] == admin["team"]["id"]
    assert admin["token_type"] == "bearer"


def test_register_duplicate_email(client, admin):
    r = client.post("/api/auth/register", json={
        "email": admin["email"],
        "full_name": "Someone Else",
        "password": "secret123",
        "team_name": "Other",
    })
    assert r.status_code == 400
    assert r.json()["detail"] == "Email already registered"


def test_login_with_form_data(client, admin):
    r = client.post("/api/auth/login", data={"username": admin["email"], "password": admin["password"]})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["access_token"]
    assert body["user"]["email"] == admin["email"]


def test_login_wrong_password(client, admin):
    r = client.post("/api/auth/login", data={"username": admin["email"], "password": "nope-nope"})
    assert r.status_code == 401


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
    r = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_me_returns_current_user(client, admin):
    r = client.get("/api/auth/me", headers=admin["headers"])
    assert r.status_code == 200
    assert r.json()["id"] == admin["user"]["id"]


def test_admin_adds_member_and_lists_team(client, admin):
    r = client.post("/api/users", json={
        "email": "collector@example.com",
        "full_name": "Field Collector",
        "password": "collector1",
    }, headers=admin["headers"])
    assert r.status_code == 201, r.text
    assert r.json()["role"] == "member"
    assert r.json()["team_id"] == admin["team"]["id"]

    members = client.get("/api/users", headers=admin["headers"]).json()
    assert {m["email"] for m in members} == {admin["email"], "collector@example.com"}


def test_member_cannot_add_users(client, admin):
    client.post("/api/users", json={
        "email": "member@example.com", "full_name": "Member", "password": "member123",
    }, headers=admin["headers"])
    token = client.post(
        "/api/auth/login", data={"username": "member@example.com", "password": "member123"}
    ).json()["access_token"]

    r = client.post("/api/users", json={
        "email": "another@example.com", "full_name": "Another", "password": "another1",
    }, headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403


def test_viewer_cannot_submit_responses(client, admin, active_template, candidate):
    client.post("/api/users", json={
        "email": "viewer@example.com", "full_name": "Viewer", "password": "viewer123", "role": "viewer",
    }, headers=admin["headers"])
    token = client.post(
        "/api/auth/login", data={"username": "viewer@example.com", "password": "viewer123"}
    ).json()["access_token"]

    r = client.post("/api/survey-responses/sync", json={"responses": [candidate(active_template["id"])]},
                    headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403
