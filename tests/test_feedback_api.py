import pytest

import core.audit
from models.audit_log import AdminLog
from models.feedback import Feedback


def audit_actions(db):
    db.expire_all()
    return [e.action for e in db.query(AdminLog).order_by(AdminLog.id).all()]


def fetch(db, feedback_id):
    db.expire_all()
    return db.query(Feedback).filter(Feedback.id == feedback_id).first()


# =====================================================
# Public submission
# =====================================================

def test_anonymous_submission_shows_up_in_admin_listing(client, admin):
    _, headers = admin
    response = client.post(
        "/api/feedback",
        json={"category": "safety", "message": "broken light", "priority": "critical"},
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Feedback submitted anonymously"}

    listing = client.get("/api/admin/feedback", headers=headers).json()
    assert listing["pagination"]["total"] == 1
    item = listing["feedback"][0]
    assert item["category"] == "safety"
    assert item["message"] == "broken light"
    assert item["priority"] == "critical"
    assert item["status"] == "new"
    assert item["deletion_requested"] is False


def test_submission_defaults_priority_to_medium(client, db):
    client.post("/api/feedback", json={"category": "events", "message": "more hackathons"})
    assert db.query(Feedback).one().priority == "medium"


@pytest.mark.parametrize("body", [
    {"message": "no category"},
    {"category": "general"},
    {"category": "general", "message": "   "},
])
def test_submission_requires_category_and_message(client, body):
    response = client.post("/api/feedback", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "Category and message are required"}


def test_submission_rejects_unknown_category(client):
    response = client.post("/api/feedback", json={"category": "cafeteria", "message": "cold food"})
    assert response.status_code == 400
    assert "error" in response.json()


# =====================================================
# Stats and listing
# =====================================================

def test_stats_aggregates(client, resolver, make_feedback):
    _, headers = resolver
    make_feedback(category="safety", priority="critical")
    make_feedback(category="safety", priority="low")
    make_feedback(category="teaching", priority="low")

    data = client.get("/api/stats", headers=headers).json()
    assert data["total"] == 3
    assert sorted(data["byCategory"], key=lambda c: c["category"]) == [
        {"category": "safety", "count": 2},
        {"category": "teaching", "count": 1},
    ]
    assert {p["priority"]: p["count"] for p in data["byPriority"]} == {"critical": 1, "low": 2}
    assert len(data["recent"]) == 3


def test_listing_filters_and_hides_trash(client, admin, make_feedback):
    _, headers = admin
    make_feedback(category="safety", status="new")
    make_feedback(category="safety", status="resolved")
    make_feedback(category="teaching", status="new")
    trashed = make_feedback(category="safety", deletion_requested=True, deletion_requested_by="x")

    safety = client.get("/api/admin/feedback", params={"category": "safety"}, headers=headers).json()
    assert safety["pagination"]["total"] == 2
    assert trashed.id not in [f["id"] for f in safety["feedback"]]

    resolved = client.get("/api/admin/feedback", params={"status": "resolved", "category": "all"}, headers=headers).json()
    assert [f["status"] for f in resolved["feedback"]] == ["resolved"]

    trash = client.get("/api/admin/feedback", params={"deletion_status": "pending"}, headers=headers).json()
    assert [f["id"] for f in trash["feedback"]] == [trashed.id]


def test_listing_paginates(client, admin, make_feedback):
    _, headers = admin
    for i in range(5):
        make_feedback(message=f"item {i}")

    page = client.get("/api/admin/feedback", params={"page": 2, "limit": 2}, headers=headers).json()
    assert page["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}
    assert len(page["feedback"]) == 2


# =====================================================
# Edits
# =====================================================

def test_status_update_by_resolver(client, db, resolver, make_feedback):
    _, headers = resolver
    item = make_feedback()

    response = client.patch(f"/api/admin/feedback/{item.id}/status", json={"status": "reviewed"}, headers=headers)
    assert response.status_code == 200
    assert fetch(db, item.id).status == "reviewed"
    assert audit_actions(db) == ["UPDATE_STATUS"]


def test_status_update_validates_value(client, resolver, make_feedback):
    _, headers = resolver
    item = make_feedback()
    response = client.patch(f"/api/admin/feedback/{item.id}/status", json={"status": "closed"}, headers=headers)
    assert response.status_code == 400


def test_details_edit_logs_minimal_diff(client, db, superadmin, make_feedback):
    record, headers = superadmin
    item = make_feedback(message="a", category="general", priority="low")

    response = client.patch(
        f"/api/admin/feedback/{item.id}/details",
        json={"message": "b", "category": "general", "priority": "low"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["message"] == "b"

    db.expire_all()
    entry = db.query(AdminLog).one()
    assert entry.action == "EDIT_FEEDBACK"
    assert entry.admin_id == record.id
    assert entry.changes == {"message": {"from": "a", "to": "b"}}


def test_details_edit_without_change_logs_null_diff(client, db, superadmin, make_feedback):
    _, headers = superadmin
    item = make_feedback(message="same", priority="high")

    client.patch(f"/api/admin/feedback/{item.id}/details", json={"priority": "high"}, headers=headers)

    db.expire_all()
    assert db.query(AdminLog).one().changes is None


def test_details_edit_requires_superadmin(client, admin, make_feedback):
    _, headers = admin
    item = make_feedback()
    response = client.patch(f"/api/admin/feedback/{item.id}/details", json={"message": "x"}, headers=headers)
    assert response.status_code == 403


def test_details_edit_unknown_feedback_is_404(client, superadmin):
    _, headers = superadmin
    response = client.patch("/api/admin/feedback/999/details", json={"message": "x"}, headers=headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Feedback not found"}


def test_details_edit_with_empty_body_is_400(client, superadmin, make_feedback):
    _, headers = superadmin
    item = make_feedback()
    response = client.patch(f"/api/admin/feedback/{item.id}/details", json={}, headers=headers)
    assert response.status_code == 400


# =====================================================
# Trash
# =====================================================

def test_admin_delete_moves_to_trash(client, db, admin, make_feedback):
    record, headers = admin
    item = make_feedback()

    response = client.delete(f"/api/admin/feedback/{item.id}", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Moved to Trash (Pending Approval)."

    stored = fetch(db, item.id)
    assert stored is not None
    assert stored.deletion_requested is True
    assert stored.deletion_requested_by == record.id
    assert audit_actions(db) == ["DELETE_REQUEST"]


def test_admin_delete_of_trashed_item_is_idempotent(client, db, admin, make_feedback):
    _, headers = admin
    item = make_feedback(deletion_requested=True, deletion_requested_by="first-admin")

    response = client.delete(f"/api/admin/feedback/{item.id}", headers=headers)
    assert response.status_code == 200
    assert fetch(db, item.id).deletion_requested_by == "first-admin"
    assert audit_actions(db) == []


@pytest.mark.parametrize("trashed", [False, True])
def test_superadmin_delete_is_permanent(client, db, superadmin, make_feedback, trashed):
    _, headers = superadmin
    item = make_feedback(deletion_requested=trashed)

    response = client.delete(f"/api/admin/feedback/{item.id}", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Permanently deleted."
    assert fetch(db, item.id) is None
    assert audit_actions(db) == ["DELETE_PERMANENT"]

    again = client.delete(f"/api/admin/feedback/{item.id}", headers=headers)
    assert again.status_code == 404


def test_resolver_cannot_delete(client, resolver, make_feedback):
    _, headers = resolver
    item = make_feedback()
    response = client.delete(f"/api/admin/feedback/{item.id}", headers=headers)
    assert response.status_code == 403


def test_restore_clears_flag_and_requester(client, db, superadmin, make_feedback):
    _, headers = superadmin
    item = make_feedback(deletion_requested=True, deletion_requested_by="some-admin")

    response = client.post(f"/api/admin/feedback/{item.id}/restore", headers=headers)
    assert response.status_code == 200

    stored = fetch(db, item.id)
    assert stored.deletion_requested is False
    assert stored.deletion_requested_by is None
    assert audit_actions(db) == ["RESTORE_FEEDBACK"]


def test_restore_of_active_item_is_noop(client, db, superadmin, make_feedback):
    _, headers = superadmin
    item = make_feedback()

    response = client.post(f"/api/admin/feedback/{item.id}/restore", headers=headers)
    assert response.status_code == 200
    assert fetch(db, item.id).deletion_requested is False


def test_restore_requires_superadmin(client, admin, make_feedback):
    _, headers = admin
    item = make_feedback(deletion_requested=True)
    assert client.post(f"/api/admin/feedback/{item.id}/restore", headers=headers).status_code == 403


# =====================================================
# Bulk purges and manual entry
# =====================================================

def test_purge_resolved(client, db, admin, make_feedback):
    _, headers = admin
    make_feedback(status="resolved")
    make_feedback(status="resolved", deletion_requested=True)
    keep = make_feedback(status="new")

    response = client.delete("/api/admin/feedback/resolved", headers=headers)
    assert response.status_code == 200
    assert response.json()["deleted"] == 2

    db.expire_all()
    assert [f.id for f in db.query(Feedback).all()] == [keep.id]
    assert audit_actions(db) == ["PURGE_RESOLVED"]


def test_purge_all(client, db, admin, make_feedback):
    _, headers = admin
    make_feedback()
    make_feedback(deletion_requested=True)

    response = client.delete("/api/admin/feedback", headers=headers)
    assert response.status_code == 200

    db.expire_all()
    assert db.query(Feedback).count() == 0
    assert audit_actions(db) == ["PURGE_ALL"]


def test_manual_entry(client, db, superadmin):
    _, headers = superadmin
    response = client.post(
        "/api/admin/feedback",
        json={"category": "administration", "message": "Phoned in", "status": "reviewed"},
        headers=headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["priority"] == "medium"
    assert data["status"] == "reviewed"
    assert fetch(db, data["id"]) is not None
    assert audit_actions(db) == ["MANUAL_CREATE_FEEDBACK"]


# =====================================================
# Audit isolation
# =====================================================

def test_audit_failure_does_not_change_response(client, db, admin, make_feedback, monkeypatch):
    _, headers = admin
    first = make_feedback()
    second = make_feedback()

    expected = client.delete(f"/api/admin/feedback/{first.id}", headers=headers)

    def broken(**kwargs):
        raise RuntimeError("audit store down")

    monkeypatch.setattr(core.audit, "AdminLog", broken)
    response = client.delete(f"/api/admin/feedback/{second.id}", headers=headers)

    assert response.status_code == expected.status_code == 200
    assert response.json() == expected.json()
    assert fetch(db, second.id).deletion_requested is True
    assert audit_actions(db) == ["DELETE_REQUEST"]
