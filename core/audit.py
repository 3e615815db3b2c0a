import json
import logging
import enum
from typing import Optional, Dict, Any
from fastapi import Request
from sqlalchemy.orm import Session

from models.audit_log import AdminLog

logger = logging.getLogger(__name__)


class AuditAction(str, enum.Enum):
    EDIT_FEEDBACK = "EDIT_FEEDBACK"
    UPDATE_STATUS = "UPDATE_STATUS"
    DELETE_PERMANENT = "DELETE_PERMANENT"
    DELETE_REQUEST = "DELETE_REQUEST"
    RESTORE_FEEDBACK = "RESTORE_FEEDBACK"
    PURGE_RESOLVED = "PURGE_RESOLVED"
    PURGE_ALL = "PURGE_ALL"
    MANUAL_CREATE_FEEDBACK = "MANUAL_CREATE_FEEDBACK"
    APPROVE_ADMIN = "APPROVE_ADMIN"
    REVOKE_ADMIN = "REVOKE_ADMIN"
    DELETE_USER = "DELETE_USER"
    UPDATE_ROLE = "UPDATE_ROLE"
    INVITE_USER = "INVITE_USER"
    CREATE_USER = "CREATE_USER"
    FLUSH_LOGS = "FLUSH_LOGS"


def _serialize(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def get_diff(old: Dict[str, Any], new: Dict[str, Any]) -> Optional[Dict[str, Dict[str, Any]]]:
    """Shallow field-level delta between two snapshots of the same entity.

    Only keys of ``new`` are inspected. Values are compared by their JSON
    serialization, so nested structures count as changed when any part of
    them differs. Returns ``None`` when nothing changed.
    """
    changes = {}
    for key, to_value in new.items():
        from_value = old.get(key)
        if _serialize(from_value) != _serialize(to_value):
            changes[key] = {"from": from_value, "to": to_value}
    return changes or None


# matches the ip_address column width
IP_MAX_LENGTH = 45


def first_forwarded_hop(forwarded: Optional[str]) -> Optional[str]:
    """Originating client of an ``X-Forwarded-For`` chain."""
    if not forwarded:
        return None
    hop = forwarded.split(",")[0].strip()
    return hop[:IP_MAX_LENGTH] or None


def get_client_ip(request: Request) -> Optional[str]:
    forwarded = first_forwarded_hop(request.headers.get("x-forwarded-for"))
    if forwarded:
        return forwarded
    return request.client.host if request.client else None


def log_admin_action(
    db: Session,
    admin_id: Optional[str],
    action: str,
    details: str,
    request: Request,
    diff: Optional[Dict[str, Any]] = None,
) -> Optional[AdminLog]:
    """Append one audit entry. Never raises.

    The business change has already been committed when this runs, so a
    failure here is logged and the entry is dropped.
    """
    try:
        entry = AdminLog(
            admin_id=admin_id,
            action=getattr(action, "value", action),
            details=details,
            ip_address=get_client_ip(request),
            changes=diff,
        )
        db.add(entry)
        db.commit()
        return entry
    except Exception:
        logger.exception("Audit logging failed for action %s by %s", action, admin_id)
        try:
            db.rollback()
        except Exception:
            logger.exception("Rollback after audit failure also failed")
        return None
