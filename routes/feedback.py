import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.dependencies import require_auth
from database.database import get_db
from models.feedback import Feedback
from schemas.feedback import FeedbackSubmit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["feedback"])


@router.post("/feedback")
def submit_feedback(body: FeedbackSubmit, db: Session = Depends(get_db)):
    """Anonymous submission. Nothing about the sender is stored."""
    if not body.category or not body.message or not body.message.strip():
        raise HTTPException(status_code=400, detail="Category and message are required")

    try:
        db.add(Feedback(
            category=body.category.value,
            message=body.message,
            priority=body.priority.value,
        ))
        db.commit()
    except SQLAlchemyError:
        logger.exception("Feedback submission failed")
        db.rollback()
        raise HTTPException(status_code=500, detail="Submission failed")

    return {"success": True, "message": "Feedback submitted anonymously"}


@router.get("/stats")
def get_stats(user: dict = Depends(require_auth), db: Session = Depends(get_db)):
    total = db.query(func.count(Feedback.id)).scalar() or 0

    by_category = (
        db.query(Feedback.category, func.count(Feedback.id))
        .group_by(Feedback.category)
        .all()
    )
    by_priority = (
        db.query(Feedback.priority, func.count(Feedback.id))
        .group_by(Feedback.priority)
        .all()
    )
    recent = (
        db.query(Feedback)
        .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        .limit(5)
        .all()
    )

    return {
        "total": total,
        "byCategory": [{"category": c, "count": n} for c, n in by_category],
        "byPriority": [{"priority": p, "count": n} for p, n in by_priority],
        "recent": [item.to_dict() for item in recent],
    }
