from fastapi.testclient import TestClient
from sqlmodel import Session
from models import User

def test_get_me(client: TestClient, member, auth):
    response = client.get("/api/users/me", headers=auth(member))
    assert response.status_code == 200
    assert response.json()["email"] == "member@example.com"

def test_get_me_unknown_user(client: TestClient):
    response = client.get("/api/users/me", headers={"X-User-Id": "00000000-0000-0000-0000-000000000000"})
    assert response.status_code == 401

def test_get_me_invalid_header(client: TestClient):
    response = client.get("/api/users/me", headers={"X-User-Id": "not-a-uuid"})
    assert response.status_code == 401

def test_list_users_admin_only(client: TestClient, member, admin, auth):
    assert client.get("/api/users", headers=auth(member)).status_code == 403

    response = client.get("/api/users", headers=auth(admin))
    assert response.status_code == 200
    # 新しい順
    assert [u["name"] for u in response.json()] == ["Admin", "Member"]

def test_create_user(client: TestClient, admin, auth):
    response = client.post(
        "/api/users", json={"name": "Drummer", "email": "Drums@Example.com"}, headers=auth(admin)
    )
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "drums@example.com"
    assert data["role"] == ""
    assert data["user_level"] == 1

def test_create_user_validation(client: TestClient, admin, auth):
    response = client.post("/api/users", json={"name": "No Email"}, headers=auth(admin))
    assert response.status_code == 400
    assert response.json()["detail"] == "Name and email are required"

    response = client.post(
        "/api/users", json={"name": "Bad", "email": "bad@example.com", "user_level": 7}, headers=auth(admin)
    )
    assert response.status_code == 400

def test_create_user_duplicate_email(client: TestClient, member, admin, auth):
    response = client.post(
        "/api/users", json={"name": "Copy", "email": "member@example.com"}, headers=auth(admin)
    )
    assert response.status_code == 409

def test_user_updates_own_profile(client: TestClient, member, auth):
    response = client.put(
        f"/api/users/{member.id}", json={"name": "Renamed", "role": "bass"}, headers=auth(member)
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["role"] == "bass"

def test_user_cannot_raise_own_level(client: TestClient, member, auth):
    response = client.put(f"/api/users/{member.id}", json={"user_level": 3}, headers=auth(member))
    assert response.status_code == 403

def test_user_cannot_update_others(client: TestClient, member, editor, auth):
    response = client.put(f"/api/users/{editor.id}", json={"name": "Hacked"}, headers=auth(member))
    assert response.status_code == 403

def test_admin_changes_level(client: TestClient, member, admin, auth):
    response = client.put(f"/api/users/{member.id}", json={"user_level": 2}, headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["user_level"] == 2

def test_delete_user(client: TestClient, session: Session, member, admin, auth):
    member_id = member.id
    response = client.delete(f"/api/users/{member_id}", headers=auth(admin))
    assert response.status_code == 204
    assert session.get(User, member_id) is None

def test_admin_cannot_delete_self(client: TestClient, admin, auth):
    response = client.delete(f"/api/users/{admin.id}", headers=auth(admin))
    assert response.status_code == 400
