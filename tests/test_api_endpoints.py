"""Integration tests for API endpoints.

These tests verify API endpoints work correctly end-to-end.
"""

from datetime import datetime, timedelta

from executask.models.constants import MAX_ATTACHMENT_SIZE


API = "/api/v1"


def _create_todo(test_client, **body):
    body.setdefault("title", "Test Todo")
    response = test_client.post(f"{API}/todos", json=body)
    assert response.status_code == 201, response.text
    return response.json()


class TestTodoEndpoints:
    """Test todo CRUD API endpoints."""

    def test_create_todo(self, test_client):
        """Test POST /todos endpoint."""
        response = test_client.post(f"{API}/todos", json={"title": "Buy milk", "priority": "high"})

        assert response.status_code == 201
        todo = response.json()
        assert todo["id"]
        assert todo["title"] == "Buy milk"
        assert todo["priority"] == "high"
        assert todo["status"] == "active"
        assert todo["dueDate"] is None
        assert todo["createdAt"] <= todo["updatedAt"]

    def test_create_todo_defaults_priority(self, test_client):
        todo = _create_todo(test_client, title="Plain")
        assert todo["priority"] == "medium"

    def test_create_then_read_round_trip(self, test_client):
        due = (datetime.utcnow() + timedelta(days=2)).replace(microsecond=0).isoformat()
        body = {
            "title": "Round trip",
            "description": "All fields",
            "priority": "low",
            "status": "draft",
            "dueDate": due,
            "metadata": {"tags": ["a", "b"], "color": "#ff0000"},
            "sortOrder": 3,
        }
        created = _create_todo(test_client, **body)

        response = test_client.get(f"{API}/todos/{created['id']}")

        assert response.status_code == 200
        fetched = response.json()
        for key in ("id", "title", "description", "priority", "status", "dueDate", "metadata",
                    "sortOrder", "createdAt", "updatedAt"):
            assert fetched[key] == created[key]
        assert fetched["children"] == []
        assert fetched["comments"] == []
        assert fetched["attachments"] == []
        assert fetched["category"] is None

    def test_create_accepts_snake_case(self, test_client):
        parent = _create_todo(test_client, title="Parent")
        child = _create_todo(test_client, title="Child", parent_todo_id=parent["id"])
        assert child["parentTodoId"] == parent["id"]

    def test_create_under_subtask_is_rejected(self, test_client):
        parent = _create_todo(test_client, title="Parent")
        child = _create_todo(test_client, title="Child", parentTodoId=parent["id"])

        response = test_client.post(f"{API}/todos", json={"title": "Grandchild", "parentTodoId": child["id"]})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "PARENT_CANNOT_HAVE_CHILDREN"
        assert body["status"] == 400
        listing = test_client.get(f"{API}/todos").json()
        assert listing["total"] == 2

    def test_create_validation_lists_every_field(self, test_client):
        response = test_client.post(
            f"{API}/todos",
            json={"title": "   ", "priority": "urgent", "status": "completed"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        fields = {e["field"] for e in body["errors"]}
        assert {"title", "priority", "status"} <= fields

    def test_create_title_too_long(self, test_client):
        response = test_client.post(f"{API}/todos", json={"title": "x" * 256})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "title"

    def test_get_missing_todo(self, test_client):
        response = test_client.get(f"{API}/todos/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"code": "TODO_NOT_FOUND", "message": "Todo not found", "status": 404}

    def test_other_users_todo_is_not_found(self, test_client, as_other_user):
        todo = _create_todo(test_client)

        as_other_user()

        assert test_client.get(f"{API}/todos/{todo['id']}").status_code == 404
        assert test_client.patch(f"{API}/todos/{todo['id']}", json={"title": "x"}).status_code == 404
        assert test_client.delete(f"{API}/todos/{todo['id']}").status_code == 404

    def test_get_populated_todo(self, test_client):
        category = test_client.post(f"{API}/categories", json={"name": "Home"}).json()
        parent = _create_todo(test_client, title="Parent", categoryId=category["id"])
        _create_todo(test_client, title="Child", parentTodoId=parent["id"])
        test_client.post(f"{API}/todos/{parent['id']}/comments", json={"content": "Nice"})

        body = test_client.get(f"{API}/todos/{parent['id']}").json()

        assert body["category"]["name"] == "Home"
        assert [c["title"] for c in body["children"]] == ["Child"]
        assert [c["content"] for c in body["comments"]] == ["Nice"]

    def test_update_todo(self, test_client):
        todo = _create_todo(test_client, title="Before", description="Keep me")

        response = test_client.patch(f"{API}/todos/{todo['id']}", json={"title": "After"})

        assert response.status_code == 200
        updated = response.json()
        assert updated["title"] == "After"
        assert updated["description"] == "Keep me"
        assert updated["updatedAt"] > todo["updatedAt"]

    def test_repeated_update_is_idempotent(self, test_client):
        todo = _create_todo(test_client)
        payload = {"status": "completed", "priority": "high"}

        first = test_client.patch(f"{API}/todos/{todo['id']}", json=payload).json()
        second = test_client.patch(f"{API}/todos/{todo['id']}", json=payload).json()

        for key in ("status", "priority", "completedAt", "title"):
            assert first[key] == second[key]
        assert second["updatedAt"] > first["updatedAt"]

    def test_update_rejects_null_title(self, test_client):
        todo = _create_todo(test_client)
        response = test_client.patch(f"{API}/todos/{todo['id']}", json={"title": None})
        assert response.status_code == 400

    def test_delete_todo(self, test_client):
        todo = _create_todo(test_client)

        response = test_client.delete(f"{API}/todos/{todo['id']}")

        assert response.status_code == 204
        assert test_client.get(f"{API}/todos/{todo['id']}").status_code == 404


class TestTodoListEndpoint:
    """Test GET /todos filters and pagination."""

    def test_list_completed_with_pagination(self, test_client):
        for i in range(3):
            todo = _create_todo(test_client, title=f"Done {i}")
            test_client.patch(f"{API}/todos/{todo['id']}", json={"status": "completed"})
        _create_todo(test_client, title="Open")

        response = test_client.get(f"{API}/todos", params={"status": "completed", "page": 1, "limit": 20})

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) <= 20
        assert all(t["status"] == "completed" for t in body["data"])
        assert body["total"] >= len(body["data"])
        assert body["total"] == 3
        assert body["page"] == 1
        assert body["limit"] == 20
        assert body["totalPages"] == 1

    def test_list_camel_case_filters(self, test_client):
        parent = _create_todo(test_client, title="Parent")
        _create_todo(test_client, title="Child", parentTodoId=parent["id"])

        body = test_client.get(f"{API}/todos", params={"parentTodoId": parent["id"]}).json()

        assert [t["title"] for t in body["data"]] == ["Child"]

    def test_list_search_and_sort(self, test_client):
        _create_todo(test_client, title="Alpha report")
        _create_todo(test_client, title="Beta report")
        _create_todo(test_client, title="Gamma")

        body = test_client.get(f"{API}/todos", params={"search": "REPORT", "sort": "title", "order": "asc"}).json()

        assert [t["title"] for t in body["data"]] == ["Alpha report", "Beta report"]

    def test_list_overdue_filter(self, test_client):
        past = (datetime.utcnow() - timedelta(days=1)).isoformat()
        _create_todo(test_client, title="Late", dueDate=past)
        _create_todo(test_client, title="No date")

        body = test_client.get(f"{API}/todos", params={"overdue": "true"}).json()

        assert [t["title"] for t in body["data"]] == ["Late"]

    def test_list_rejects_limit_over_maximum(self, test_client):
        response = test_client.get(f"{API}/todos", params={"limit": 101})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "limit"

    def test_list_rejects_unknown_sort(self, test_client):
        response = test_client.get(f"{API}/todos", params={"sort": "color"})
        assert response.status_code == 400

    def test_list_rejects_inverted_due_window(self, test_client):
        response = test_client.get(
            f"{API}/todos",
            params={"dueFrom": "2030-02-01T00:00:00", "dueTo": "2030-01-01T00:00:00"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_stats(self, test_client, as_other_user):
        _create_todo(test_client, status="draft")
        done = _create_todo(test_client)
        test_client.patch(f"{API}/todos/{done['id']}", json={"status": "completed"})

        body = test_client.get(f"{API}/todos/stats").json()
        assert body == {"total": 2, "draft": 1, "active": 0, "completed": 1, "archived": 0, "overdue": 0}

        as_other_user()
        assert test_client.get(f"{API}/todos/stats").json()["total"] == 0


class TestAttachmentEndpoints:
    """Test attachment upload/download/delete."""

    def test_upload_list_download_delete(self, test_client, object_store):
        todo = _create_todo(test_client)

        upload = test_client.post(
            f"{API}/todos/{todo['id']}/attachments",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert upload.status_code == 201
        attachment = upload.json()
        assert attachment["name"] == "notes.txt"
        assert attachment["fileSize"] == 5
        assert attachment["mimeType"] == "text/plain"
        assert "objectKey" not in attachment

        listing = test_client.get(f"{API}/todos/{todo['id']}/attachments").json()
        assert [a["id"] for a in listing] == [attachment["id"]]

        download = test_client.get(f"{API}/todos/{todo['id']}/attachments/{attachment['id']}/download")
        assert download.status_code == 200
        assert download.json()["url"].startswith("https://objects.test/")
        assert download.json()["expiresIn"] > 0

        delete = test_client.delete(f"{API}/todos/{todo['id']}/attachments/{attachment['id']}")
        assert delete.status_code == 204
        assert object_store.objects == {}

    def test_upload_disallowed_type(self, test_client):
        todo = _create_todo(test_client)

        response = test_client.post(
            f"{API}/todos/{todo['id']}/attachments",
            files={"file": ("script.sh", b"#!/bin/sh", "application/x-sh")},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ATTACHMENT"

    def test_upload_over_size_limit(self, test_client, object_store):
        todo = _create_todo(test_client)

        response = test_client.post(
            f"{API}/todos/{todo['id']}/attachments",
            files={"file": ("big.txt", b"x" * (MAX_ATTACHMENT_SIZE + 1), "text/plain")},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ATTACHMENT"
        assert response.json()["errors"][0]["field"] == "file"
        assert object_store.objects == {}

    def test_delete_todo_with_two_attachments(self, test_client, object_store, attachment_repository, test_user_id):
        todo = _create_todo(test_client)
        for name in ("a.txt", "b.txt"):
            test_client.post(
                f"{API}/todos/{todo['id']}/attachments",
                files={"file": (name, b"data", "text/plain")},
            )
        assert len(object_store.objects) == 2

        assert test_client.delete(f"{API}/todos/{todo['id']}").status_code == 204

        assert attachment_repository.list_for_todo(test_user_id, todo["id"]) == []
        assert object_store.objects == {}


class TestCommentEndpoints:

    def test_comment_lifecycle(self, test_client):
        todo = _create_todo(test_client)

        created = test_client.post(f"{API}/todos/{todo['id']}/comments", json={"content": "First"})
        assert created.status_code == 201
        comment = created.json()
        assert comment["todoId"] == todo["id"]

        edited = test_client.patch(f"{API}/comments/{comment['id']}", json={"content": "Edited"})
        assert edited.json()["content"] == "Edited"

        assert test_client.delete(f"{API}/comments/{comment['id']}").status_code == 204
        assert test_client.get(f"{API}/todos/{todo['id']}/comments").json() == []

    def test_blank_comment_rejected(self, test_client):
        todo = _create_todo(test_client)
        response = test_client.post(f"{API}/todos/{todo['id']}/comments", json={"content": "   "})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "content"


class TestCategoryEndpoints:

    def test_category_crud(self, test_client):
        created = test_client.post(f"{API}/categories", json={"name": "Work", "color": "#123abc"})
        assert created.status_code == 201
        category = created.json()

        assert test_client.get(f"{API}/categories/{category['id']}").json()["name"] == "Work"

        updated = test_client.patch(f"{API}/categories/{category['id']}", json={"name": "Office"})
        assert updated.json()["name"] == "Office"
        assert updated.json()["color"] == "#123abc"

        listing = test_client.get(f"{API}/categories").json()
        assert [c["name"] for c in listing["data"]] == ["Office"]

        assert test_client.delete(f"{API}/categories/{category['id']}").status_code == 204
        assert test_client.get(f"{API}/categories/{category['id']}").status_code == 404

    def test_duplicate_category_name(self, test_client):
        test_client.post(f"{API}/categories", json={"name": "Work"})

        response = test_client.post(f"{API}/categories", json={"name": "Work"})

        assert response.status_code == 400
        assert response.json()["code"] == "ALREADY_EXISTS"

    def test_invalid_color(self, test_client):
        response = test_client.post(f"{API}/categories", json={"name": "Work", "color": "red"})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "color"


class TestHealthAndErrors:

    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_unknown_route_uses_error_envelope(self, test_client):
        response = test_client.get(f"{API}/nothing-here")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"
        assert response.json()["status"] == 404
