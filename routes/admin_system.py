import os
import time
from datetime import datetime, timezone

import psutil
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from core.audit import AuditAction, log_admin_action
from core.dependencies import require_superadmin
from database.database import get_db
from models.access_log import AccessLog
from models.admin import Admin
from models.audit_log import AdminLog
from models.feedback import Feedback

router = APIRouter(prefix="/api/admin", tags=["admin-system"])

STARTED_AT = time.time()
AUDIT_LOG_LIMIT = 100


def admin_log_to_dict(entry: AdminLog):
    return {
        "id": entry.id,
        "admin_id": entry.admin_id,
        "action": entry.action,
        "details": entry.details,
        "ip_address": entry.ip_address,
        "changes": entry.changes,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }


def access_log_to_dict(entry: AccessLog):
    return {
        "id": entry.id,
        "ip_address": entry.ip_address,
        "method": entry.method,
        "path": entry.path,
        "status_code": entry.status_code,
        "duration_ms": entry.duration_ms,
        "user_agent": entry.user_agent,
        "metadata": entry.meta,
        "request_body": entry.request_body,
        "query_params": entry.query_params,
        "headers": entry.headers,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }


@router.get("/logs")
def list_logs(user: dict = Depends(require_superadmin), db: Session = Depends(get_db)):
    entries = (
        db.query(AdminLog)
        .order_by(AdminLog.created_at.desc(), AdminLog.id.desc())
        .limit(AUDIT_LOG_LIMIT)
        .all()
    )
    return [admin_log_to_dict(e) for e in entries]


@router.delete("/logs")
def flush_logs(request: Request, user: dict = Depends(require_superadmin), db: Session = Depends(get_db)):
    db.query(AdminLog).delete(synchronize_session=False)
    db.commit()

    # written after the wipe, so it is the only entry left
    log_admin_action(db, user["id"], AuditAction.FLUSH_LOGS, "Wiped all system logs", request)
    return {"success": True, "message": "Logs flushed"}


@router.get("/traffic")
def list_traffic(
    limit: int = Query(100, ge=1, le=1000),
    user: dict = Depends(require_superadmin),
    db: Session = Depends(get_db),
):
    entries = (
        db.query(AccessLog)
        .order_by(AccessLog.created_at.desc(), AccessLog.id.desc())
        .limit(limit)
        .all()
    )
    return [access_log_to_dict(e) for e in entries]


@router.get("/system-health")
def system_health(user: dict = Depends(require_superadmin), db: Session = Depends(get_db)):
    mem = psutil.Process(os.getpid()).memory_info()
    return {
        "uptime": time.time() - STARTED_AT,
        "memory": {"rss": mem.rss, "vms": mem.vms},
        "counts": {
            "feedback": db.query(func.count(Feedback.id)).scalar() or 0,
            "admins": db.query(func.count(Admin.id)).scalar() or 0,
            "logs": db.query(func.count(AdminLog.id)).scalar() or 0,
        },
        "status": "OPERATIONAL",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/diagnose")
def diagnose():
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}
