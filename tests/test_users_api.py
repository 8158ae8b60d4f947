from pet_minder_api.app.core.security import create_access_token, decode_access_token

USERS = "/api/v1/users/"


def test_first_user_is_admin(client, admin, user1):
    assert admin["role"] == "admin"
    assert user1["role"] == "regular"


def test_duplicate_email_is_rejected(client, user1):
    response = client.post(USERS, json={"email": "user1@example.com", "password": "other"})
    assert response.status_code == 400


def test_login(client, user1):
    response = client.post(USERS + "login", json={"email": "user1@example.com", "password": "secret"})
    assert response.status_code == 200
    token = response.json()
    assert token["token_type"] == "bearer"
    assert decode_access_token(token["access_token"])["sub"] == user1["id"]

    me = client.get(USERS + "me", headers={"Authorization": f"Bearer {token['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "user1@example.com"

    bad = client.post(USERS + "login", json={"email": "user1@example.com", "password": "wrong"})
    assert bad.status_code == 401


def test_me_includes_owned_records(client, user1, pet_payload):
    client.post("/api/v1/pets/", json=pet_payload, headers=user1["headers"])
    client.post("/api/v1/tasks/", json={"type": "Walk", "title": "Evening walk"}, headers=user1["headers"])
    client.post(
        "/api/v1/reminders/",
        json={"title": "Brush teeth", "fire_at": "2024-01-01T20:00:00Z", "is_recurring": True,
              "recurrence_pattern": "Daily"},
        headers=user1["headers"],
    )

    detail = client.get(USERS + "me", headers=user1["headers"]).json()
    assert detail["id"] == user1["id"]
    assert [pet["name"] for pet in detail["pets"]] == ["Biscuit"]
    assert [task["title"] for task in detail["tasks"]] == ["Evening walk"]
    assert detail["reminders"][0]["is_due"] is True
    assert len(detail["reminders"][0]["next_occurrences"]) == 5
    assert "password" not in detail


def test_user_records_are_owner_scoped(client, admin, user1, user2):
    assert client.get(USERS + user2["id"], headers=user1["headers"]).status_code == 403
    assert client.get(USERS + "missing", headers=user1["headers"]).status_code == 404
    assert client.get(USERS + user2["id"], headers=admin["headers"]).status_code == 200
    assert client.get(USERS + user1["id"], headers=user1["headers"]).status_code == 200


def test_only_admin_lists_users(client, admin, user1):
    assert client.get(USERS, headers=user1["headers"]).status_code == 403
    emails = [u["email"] for u in client.get(USERS, headers=admin["headers"]).json()]
    assert emails == ["admin@example.com", "user1@example.com"]


def test_role_changes_are_reserved_to_admins(client, admin, user1):
    response = client.patch(USERS + user1["id"], json={"role": "admin"}, headers=user1["headers"])
    assert response.status_code == 403

    response = client.patch(USERS + user1["id"], json={"first_name": "Anna"}, headers=user1["headers"])
    assert response.status_code == 200
    assert response.json()["first_name"] == "Anna"

    response = client.patch(USERS + user1["id"], json={"role": "admin"}, headers=admin["headers"])
    assert response.json()["role"] == "admin"
    # The role is read from the database, so the existing token now acts as admin.
    assert client.get(USERS, headers=user1["headers"]).status_code == 200


def test_password_change(client, user1):
    client.patch(USERS + user1["id"], json={"password": "new-secret"}, headers=user1["headers"])
    old = client.post(USERS + "login", json={"email": "user1@example.com", "password": "secret"})
    new = client.post(USERS + "login", json={"email": "user1@example.com", "password": "new-secret"})
    assert old.status_code == 401
    assert new.status_code == 200


def test_deleting_a_user_removes_their_records(client, admin, user1, pet_payload):
    client.post("/api/v1/pets/", json=pet_payload, headers=user1["headers"])
    client.post("/api/v1/reminders/", json={"title": "Vet", "fire_at": "2030-01-01T00:00:00Z"},
                headers=user1["headers"])

    assert client.delete(USERS + user1["id"], headers=admin["headers"]).status_code == 204
    assert client.get("/api/v1/pets/", headers=admin["headers"]).json() == []
    assert client.get("/api/v1/reminders/", headers=admin["headers"]).json() == []
    # Tokens of deleted users stop working.
    assert client.get(USERS + "me", headers=user1["headers"]).status_code == 401


def test_expired_token_is_rejected(client, user1):
    token = create_access_token({"sub": user1["id"]}, expires_delta=-60)
    response = client.get(USERS + "me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
