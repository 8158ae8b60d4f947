TASKS = "/api/v1/tasks/"


def _task(**overrides):
    payload = {"type": "Grooming", "title": "Trim claws", "due_date": "2030-05-01T10:00:00Z"}
    payload.update(overrides)
    return payload


def test_task_lifecycle(client, user1, pet_payload):
    pet = client.post("/api/v1/pets/", json=pet_payload, headers=user1["headers"]).json()

    response = client.post(TASKS, json=_task(pet_id=pet["id"]), headers=user1["headers"])
    assert response.status_code == 201, response.text
    task = response.json()
    assert task["owner_id"] == user1["id"]
    assert task["is_completed"] is False

    url = TASKS + task["id"]
    updated = client.patch(url, json={"is_completed": True}, headers=user1["headers"]).json()
    assert updated["is_completed"] is True
    assert updated["title"] == "Trim claws"

    cleared = client.patch(url, json={"pet_id": None, "due_date": None}, headers=user1["headers"]).json()
    assert cleared["pet_id"] is None
    assert cleared["due_date"] is None

    assert client.delete(url, headers=user1["headers"]).status_code == 204
    assert client.get(url, headers=user1["headers"]).status_code == 404


def test_task_access_is_owner_scoped(client, admin, user1, user2):
    task = client.post(TASKS, json=_task(), headers=user2["headers"]).json()
    url = TASKS + task["id"]

    assert client.get(TASKS + "missing", headers=user1["headers"]).status_code == 404
    assert client.get(url, headers=user1["headers"]).status_code == 403
    assert client.patch(url, json={"title": "Mine now"}, headers=user1["headers"]).status_code == 403
    assert client.get(TASKS, headers=user1["headers"]).json() == []

    assert client.patch(url, json={"title": "Checked"}, headers=admin["headers"]).status_code == 200
    assert client.get(url, headers=user2["headers"]).json()["title"] == "Checked"


def test_admin_create_requires_owner(client, admin, user1):
    assert client.post(TASKS, json=_task(), headers=admin["headers"]).status_code == 400
    response = client.post(TASKS, json=_task(owner_id=user1["id"]), headers=admin["headers"])
    assert response.status_code == 201
    assert response.json()["owner_id"] == user1["id"]


def test_task_cannot_point_at_another_owners_pet(client, user1, user2, pet_payload):
    pet = client.post("/api/v1/pets/", json=pet_payload, headers=user2["headers"]).json()
    assert client.post(TASKS, json=_task(pet_id=pet["id"]), headers=user1["headers"]).status_code == 400

    task = client.post(TASKS, json=_task(), headers=user1["headers"]).json()
    response = client.patch(TASKS + task["id"], json={"pet_id": pet["id"]}, headers=user1["headers"])
    assert response.status_code == 400


def test_open_tasks_are_listed_first(client, user1):
    done = client.post(TASKS, json=_task(title="Done", is_completed=True), headers=user1["headers"]).json()
    late = client.post(TASKS, json=_task(title="Later", due_date="2031-01-01T00:00:00Z"), headers=user1["headers"]).json()
    soon = client.post(TASKS, json=_task(title="Soon"), headers=user1["headers"]).json()

    listed = [t["id"] for t in client.get(TASKS, headers=user1["headers"]).json()]
    assert listed == [soon["id"], late["id"], done["id"]]
