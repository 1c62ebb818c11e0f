"""Tests for the store service routes."""

import pytest
from fastapi.testclient import TestClient

from sprintboard.models.board import Task

from factories import ADMIN


@pytest.fixture
def client(api):
    return TestClient(api)


class TestColumns:
    def test_board_nested_and_ordered(self, client, board):
        """Columns left to right, tasks by order, assignee embedded without password."""
        res = client.get("/api/columns")
        assert res.status_code == 200
        columns = res.json()
        assert [c["title"] for c in columns] == ["To Do", "Done"]
        tasks = columns[0]["tasks"]
        assert [t["title"] for t in tasks] == ["A", "B", "C"]
        assert tasks[0]["taskId"] == "PROJ-1"
        assert tasks[0]["assignee"]["name"] == "Developer User"
        assert "password" not in tasks[0]["assignee"]
        assert "passwordHash" not in tasks[0]["assignee"]

    def test_create_without_order_goes_last(self, client, board):
        res = client.post("/api/columns", json={"title": "Review"})
        assert res.status_code == 200
        assert res.json()["order"] == 3

    def test_update(self, client, board):
        res = client.put("/api/columns", json={"id": board["done"], "title": "Shipped"})
        assert res.json()["title"] == "Shipped"

    def test_delete_cascades_to_tasks(self, client, board, db):
        res = client.delete("/api/columns", params={"id": board["todo"]})
        assert res.status_code == 200
        db.expire_all()
        assert db.get(Task, board["cards"]["A"]) is None

    def test_delete_requires_id(self, client):
        res = client.delete("/api/columns")
        assert res.status_code == 400
        assert res.json() == {"error": "Column ID is required"}

    def test_update_unknown(self, client):
        res = client.put("/api/columns", json={"id": 999, "title": "x"})
        assert res.status_code == 404
        assert res.json() == {"error": "Column not found"}


class TestTasks:
    def test_create_appends_and_generates_key(self, client, board):
        res = client.post("/api/tasks", json={"title": "D", "columnId": board["todo"], "storyPoints": 3})
        assert res.status_code == 200
        task = res.json()
        assert task["order"] == 3
        assert task["taskId"] == f"PROJ-{task['id']}"
        assert task["priority"] == "medium"
        assert task["progress"] == 0
        assert task["storyPoints"] == 3

    def test_create_keeps_given_key(self, client, board):
        res = client.post("/api/tasks", json={"title": "D", "columnId": board["todo"], "taskId": "WEB-7"})
        assert res.json()["taskId"] == "WEB-7"

    def test_create_rejects_unknown_column(self, client, board):
        res = client.post("/api/tasks", json={"title": "D", "columnId": 999})
        assert res.status_code == 400
        assert res.json() == {"error": "Column does not exist"}

    def test_create_rejects_bad_progress(self, client, board):
        res = client.post("/api/tasks", json={"title": "D", "columnId": board["todo"], "progress": 120})
        assert res.status_code == 400
        assert res.json() == {"error": "Invalid request"}

    def test_put_updates_fields(self, client, board):
        res = client.put("/api/tasks", json={
            "id": board["cards"]["A"], "module": "auth", "target": "web", "imageUrl": "/a.png",
            "startDate": "2024-06-03", "assigneeId": None,
        })
        task = res.json()
        assert (task["module"], task["target"], task["imageUrl"]) == ("auth", "web", "/a.png")
        assert task["startDate"] == "2024-06-03"
        assert task["assignee"] is None

    def test_patch_moves(self, client, board):
        res = client.patch("/api/tasks", json={"id": board["cards"]["A"], "columnId": board["done"], "order": 0})
        assert res.status_code == 200
        assert (res.json()["columnId"], res.json()["order"]) == (board["done"], 0)

    def test_patch_unknown_task(self, client, board):
        res = client.patch("/api/tasks", json={"id": 999, "order": 0})
        assert res.status_code == 404
        assert res.json() == {"error": "Task not found"}

    def test_delete(self, client, board):
        assert client.delete("/api/tasks", params={"id": board["cards"]["B"]}).status_code == 200
        titles = [t["title"] for t in client.get("/api/tasks").json()]
        assert "B" not in titles


class TestSprints:
    def test_create_defaults_to_planned(self, client):
        res = client.post("/api/sprints", json={"name": "Sprint 1", "startDate": "2024-05-01"})
        sprint = res.json()
        assert sprint["status"] == "planned"
        assert sprint["startDate"] == "2024-05-01"
        assert sprint["tasks"] == []

    def test_rejects_unknown_status(self, client):
        res = client.post("/api/sprints", json={"name": "Sprint 1", "status": "someday"})
        assert res.status_code == 400

    def test_lists_tasks_and_detaches_on_delete(self, client, board, add_sprint, db):
        sprint_id = add_sprint()
        client.put("/api/tasks", json={"id": board["cards"]["A"], "sprintId": sprint_id})

        sprints = client.get("/api/sprints").json()
        assert [t["title"] for t in sprints[0]["tasks"]] == ["A"]

        assert client.delete("/api/sprints", params={"id": sprint_id}).status_code == 200
        db.expire_all()
        task = db.get(Task, board["cards"]["A"])
        assert task is not None
        assert task.sprint_id is None

    def test_update(self, client, add_sprint):
        sprint_id = add_sprint(status="planned")
        res = client.put("/api/sprints", json={"id": sprint_id, "status": "completed", "endDate": "2024-05-14"})
        assert res.json()["status"] == "completed"
        assert res.json()["endDate"] == "2024-05-14"


class TestUsersAndAuth:
    def test_login(self, client, board):
        res = client.post("/api/auth", json={"email": ADMIN[0], "password": ADMIN[1]})
        assert res.status_code == 200
        user = res.json()
        assert user["role"] == "admin"
        assert "password" not in user and "passwordHash" not in user

    def test_login_wrong_password(self, client, board):
        res = client.post("/api/auth", json={"email": ADMIN[0], "password": "nope"})
        assert res.status_code == 401
        assert res.json() == {"error": "Invalid email or password"}

    def test_login_unknown_email(self, client, board):
        res = client.post("/api/auth", json={"email": "ghost@example.com", "password": "x"})
        assert res.status_code == 401

    def test_create_and_login(self, client):
        res = client.post("/api/users", json={"name": "Sam", "email": "sam@example.com", "password": "pw"})
        assert res.json()["role"] == "developer"
        assert client.post("/api/auth", json={"email": "sam@example.com", "password": "pw"}).status_code == 200

    def test_duplicate_email(self, client, board):
        res = client.post("/api/users", json={"name": "Again", "email": ADMIN[0], "password": "pw"})
        assert res.status_code == 400
        assert res.json() == {"error": "Email is already registered"}

    def test_password_change(self, client, board):
        client.put("/api/users", json={"id": board["users"]["admin"], "password": "newpass"})
        assert client.post("/api/auth", json={"email": ADMIN[0], "password": ADMIN[1]}).status_code == 401
        assert client.post("/api/auth", json={"email": ADMIN[0], "password": "newpass"}).status_code == 200

    def test_delete_unassigns_tasks(self, client, board, db):
        assert client.delete("/api/users", params={"id": board["users"]["developer"]}).status_code == 200
        db.expire_all()
        assert db.get(Task, board["cards"]["A"]).assignee_id is None


class TestTimestamps:
    def test_defaults_are_timezone_aware(self):
        """Naive datetimes are rejected by newer sqlmodel releases."""
        task = Task(task_key="PROJ-9", title="T", column_id=1)
        assert task.created_at.tzinfo is not None
        assert task.updated_at.tzinfo is not None

    def test_update_stamps_a_write(self, client, board, db):
        res = client.put("/api/tasks", json={"id": board["cards"]["A"], "title": "A2"})
        assert res.status_code == 200
        db.expire_all()
        task = db.get(Task, board["cards"]["A"])
        assert task.updated_at >= task.created_at
