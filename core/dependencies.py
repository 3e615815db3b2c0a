from fastapi import Header, HTTPException, Request, status, Depends
from fastapi.routing import APIRoute
from sqlalchemy.orm import Session
from starlette.routing import Match
from typing import Optional

from core.security import Identity, resolve_identity
from core.rbac import has_required_role
from database.database import SessionLocal, get_db
from models.admin import Admin


def get_identity(authorization: Optional[str] = Header(None)) -> Identity:
    return resolve_identity(authorization)


def check_approval(db: Session, identity: Identity) -> dict:
    record: Optional[Admin] = db.query(Admin).filter(Admin.id == identity.id).first()
    if not record or not record.approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account Pending Approval. Contact Superadmin.",
        )

    return {
        "id": record.id,
        "email": record.email or identity.email,
        "role": record.role,
        "approved": record.approved,
    }


def check_role(db: Session, user: dict, min_role: str) -> dict:
    # Fresh lookup so a downgrade applies on the very next request
    role = db.query(Admin.role).filter(Admin.id == user["id"]).scalar()
    if role is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    if not has_required_role(role, min_role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Insufficient permissions. Required: {min_role.upper()}",
        )

    user["role"] = role
    return user


def require_auth(
    request: Request,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Authenticated *and* approved staff member.

    Returns a dict with the caller's id, email, role and approval flag. The
    role here is informational only; ``require_role`` re-reads it.
    """
    user = check_approval(db, identity)
    # picked up by the traffic recorder
    request.state.actor = {"user_id": user["id"], "role": user["role"]}
    return user


def require_role(min_role: str):
    """Dependency factory: approved caller whose *current* stored role is at
    least ``min_role``."""

    def role_dependency(
        request: Request,
        user: dict = Depends(require_auth),
        db: Session = Depends(get_db),
    ):
        user = check_role(db, user, min_role)
        request.state.actor = {"user_id": user["id"], "role": user["role"]}
        return user

    role_dependency.min_role = min_role
    return role_dependency


# Shortcuts
require_superadmin = require_role("superadmin")
require_admin = require_role("admin")
require_resolver = require_role("resolver")


def _gate_of(dependant):
    """(protected, min_role) declared anywhere in a route's dependency tree."""
    protected, min_role = False, None
    for sub in dependant.dependencies:
        if sub.call is require_auth:
            protected = True
        if getattr(sub.call, "min_role", None):
            protected, min_role = True, sub.call.min_role
        sub_protected, sub_role = _gate_of(sub)
        protected = protected or sub_protected
        min_role = min_role or sub_role
    return protected, min_role


def enforce_route_gates(request: Request) -> None:
    """Run the gates of the route ``request`` targets.

    FastAPI decodes the JSON body before it resolves dependencies, so a
    malformed body on a protected route reaches the validation handler
    without any gate having run. The handler calls this first; it raises the
    same 401/403 the dependencies would.
    """
    route = None
    for candidate in request.app.router.routes:
        if isinstance(candidate, APIRoute) and candidate.matches(request.scope)[0] == Match.FULL:
            route = candidate
            break
    if route is None:
        return

    protected, min_role = _gate_of(route.dependant)
    if not protected:
        return

    identity = resolve_identity(request.headers.get("authorization"))
    db = SessionLocal()
    try:
        user = check_approval(db, identity)
        if min_role:
            user = check_role(db, user, min_role)
    finally:
        db.close()
    request.state.actor = {"user_id": user["id"], "role": user["role"]}
