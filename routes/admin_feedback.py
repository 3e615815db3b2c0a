"""
Admin feedback triage: listing, status and detail edits, the trash
(soft delete / restore) and bulk purges.
"""

import math
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from typing import Optional

from core.audit import AuditAction, get_diff, log_admin_action
from core.deletion import (
    DeleteOutcome,
    RestoreOutcome,
    plan_delete,
    plan_restore,
    request_deletion,
    restore,
    state_of,
)
from core.dependencies import require_auth, require_admin, require_resolver, require_superadmin
from database.database import get_db
from models.feedback import Feedback, FeedbackPriority, FeedbackStatus
from schemas.feedback import FeedbackDetailsUpdate, FeedbackManualCreate, FeedbackStatusUpdate

router = APIRouter(prefix="/api/admin/feedback", tags=["admin-feedback"])


def get_feedback_or_404(db: Session, feedback_id: int) -> Feedback:
    item = db.query(Feedback).filter(Feedback.id == feedback_id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Feedback not found")
    return item


@router.get("")
def list_feedback(
    category: Optional[str] = None,
    status: Optional[str] = None,
    deletion_status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    user: dict = Depends(require_auth),
    db: Session = Depends(get_db),
):
    query = db.query(Feedback)

    if category and category != "all":
        query = query.filter(Feedback.category == category)
    if status and status != "all":
        query = query.filter(Feedback.status == status)

    # trash is the pending partition of the same table
    if deletion_status == "pending":
        query = query.filter(Feedback.deletion_requested.is_(True))
    else:
        query = query.filter(Feedback.deletion_requested.is_(False))

    total = query.count()
    items = (
        query.order_by(Feedback.created_at.desc(), Feedback.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "feedback": [item.to_dict() for item in items],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }


@router.post("")
def create_feedback(
    body: FeedbackManualCreate,
    request: Request,
    user: dict = Depends(require_superadmin),
    db: Session = Depends(get_db),
):
    item = Feedback(
        category=body.category.value,
        message=body.message,
        priority=(body.priority or FeedbackPriority.medium).value,
        status=(body.status or FeedbackStatus.new).value,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    data = item.to_dict()

    log_admin_action(db, user["id"], AuditAction.MANUAL_CREATE_FEEDBACK, f"Created feedback {data['id']}", request)
    return data


# Must be registered before "/{feedback_id}"
@router.delete("/resolved")
def purge_resolved(
    request: Request,
    user: dict = Depends(require_admin),
    db: Session = Depends(get_db),
):
    deleted = (
        db.query(Feedback)
        .filter(Feedback.status == FeedbackStatus.resolved.value)
        .delete(synchronize_session=False)
    )
    db.commit()

    log_admin_action(db, user["id"], AuditAction.PURGE_RESOLVED, f"Purged {deleted} resolved feedback", request)
    return {"success": True, "message": "Resolved items purged", "deleted": deleted}


@router.delete("")
def purge_all(
    request: Request,
    user: dict = Depends(require_admin),
    db: Session = Depends(get_db),
):
    deleted = db.query(Feedback).delete(synchronize_session=False)
    db.commit()

    log_admin_action(db, user["id"], AuditAction.PURGE_ALL, "Deleted all feedback", request)
    return {"success": True, "message": "All items purged", "deleted": deleted}


@router.patch("/{feedback_id}/status")
def update_status(
    feedback_id: int,
    body: FeedbackStatusUpdate,
    request: Request,
    user: dict = Depends(require_resolver),
    db: Session = Depends(get_db),
):
    item = get_feedback_or_404(db, feedback_id)
    previous = item.status
    item.status = body.status.value
    db.commit()
    db.refresh(item)
    data = item.to_dict()

    log_admin_action(
        db, user["id"], AuditAction.UPDATE_STATUS,
        f"Feedback {feedback_id} status {previous} -> {data['status']}", request,
    )
    return {"success": True, "data": data}


@router.patch("/{feedback_id}/details")
def update_details(
    feedback_id: int,
    body: FeedbackDetailsUpdate,
    request: Request,
    user: dict = Depends(require_superadmin),
    db: Session = Depends(get_db),
):
    changes = {
        field: getattr(value, "value", value)
        for field, value in body.dict(exclude_unset=True).items()
        if value is not None
    }
    if not changes:
        raise HTTPException(status_code=400, detail="Nothing to update")

    item = get_feedback_or_404(db, feedback_id)
    old_data = item.to_dict()

    for field, value in changes.items():
        setattr(item, field, value)
    db.commit()
    db.refresh(item)
    new_data = item.to_dict()

    diff = get_diff(old_data, new_data)
    log_admin_action(db, user["id"], AuditAction.EDIT_FEEDBACK, f"Modified feedback {feedback_id}", request, diff)
    return {"success": True, "data": new_data}


@router.delete("/{feedback_id}")
def delete_feedback(
    feedback_id: int,
    request: Request,
    user: dict = Depends(require_admin),
    db: Session = Depends(get_db),
):
    item = get_feedback_or_404(db, feedback_id)
    outcome = plan_delete(user["role"], state_of(item))

    if outcome is DeleteOutcome.HARD_DELETE:
        db.delete(item)
        db.commit()
        log_admin_action(
            db, user["id"], AuditAction.DELETE_PERMANENT,
            f"Superadmin permanently deleted feedback {feedback_id}", request,
        )
        return {"success": True, "message": "Permanently deleted."}

    if outcome is DeleteOutcome.ALREADY_PENDING:
        return {"success": True, "message": "Already in Trash (Pending Approval)."}

    request_deletion(item, user["id"])
    db.commit()
    log_admin_action(db, user["id"], AuditAction.DELETE_REQUEST, f"Requested deletion for {feedback_id}", request)
    return {"success": True, "message": "Moved to Trash (Pending Approval)."}


@router.post("/{feedback_id}/restore")
def restore_feedback(
    feedback_id: int,
    request: Request,
    user: dict = Depends(require_superadmin),
    db: Session = Depends(get_db),
):
    item = get_feedback_or_404(db, feedback_id)

    if plan_restore(state_of(item)) is RestoreOutcome.NOOP:
        return {"success": True, "message": "Feedback is not in Trash."}

    restore(item)
    db.commit()
    log_admin_action(db, user["id"], AuditAction.RESTORE_FEEDBACK, f"Restored feedback {feedback_id}", request)
    return {"success": True, "message": "Feedback restored."}
