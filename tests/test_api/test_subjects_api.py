"""
Tests for Subjects API endpoints
"""
from timetable.infrastructure.stores import new_identifier


def test_create_and_list(authenticated_client):
    response = authenticated_client.post("/api/v1/subjects", json={"name": "Math", "color": "#3B82F6"})
    assert response.status_code == 201
    assert response.json()["is_active"] is True

    authenticated_client.post("/api/v1/subjects", json={"name": "Art", "color": "#EC4899", "is_active": False})

    assert len(authenticated_client.get("/api/v1/subjects").json()) == 2
    active = authenticated_client.get("/api/v1/subjects", params={"active_only": True}).json()
    assert [s["name"] for s in active] == ["Math"]


def test_invalid_color_is_422(authenticated_client):
    response = authenticated_client.post("/api/v1/subjects", json={"name": "Math", "color": "blue"})
    assert response.status_code == 422


def test_blank_name_is_400(authenticated_client):
    response = authenticated_client.post("/api/v1/subjects", json={"name": "  ", "color": "#3B82F6"})
    assert response.status_code == 400


def test_ensure_is_idempotent(authenticated_client):
    first = authenticated_client.post("/api/v1/subjects/ensure", json={"name": "Other"}).json()
    second = authenticated_client.post("/api/v1/subjects/ensure", json={"name": "Other"}).json()

    assert first["created"] is True
    assert second["created"] is False
    assert first["id"] == second["id"]
    assert first["color"] == "#6B7280"


def test_update_subject(authenticated_client):
    subject = authenticated_client.post("/api/v1/subjects", json={"name": "Math", "color": "#3B82F6"}).json()

    response = authenticated_client.put(
        f"/api/v1/subjects/{subject['id']}",
        json={"name": "Maths", "color": "#1D4ED8", "is_active": False},
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Maths"
    assert response.json()["is_active"] is False


def test_subject_recolor_does_not_touch_events(authenticated_client):
    subject = authenticated_client.post("/api/v1/subjects", json={"name": "Math", "color": "#3B82F6"}).json()
    authenticated_client.post("/api/v1/events", json={
        "title": "Algebra", "start_date": "2024-01-01", "subject_id": subject["id"],
    })

    authenticated_client.put(f"/api/v1/subjects/{subject['id']}", json={"name": "Math", "color": "#1D4ED8"})

    events = authenticated_client.get("/api/v1/events").json()
    assert events[0]["color"] == "#3B82F6"


def test_delete_subject(authenticated_client):
    subject = authenticated_client.post("/api/v1/subjects", json={"name": "Math", "color": "#3B82F6"}).json()

    assert authenticated_client.delete(f"/api/v1/subjects/{subject['id']}").json() == {"success": True}
    assert authenticated_client.delete(f"/api/v1/subjects/{subject['id']}").status_code == 404


def test_update_missing_subject_is_404(authenticated_client):
    response = authenticated_client.put(
        f"/api/v1/subjects/{new_identifier()}", json={"name": "X", "color": "#000000"},
    )
    assert response.status_code == 404
