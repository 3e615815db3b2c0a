from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional

from core.audit import AuditAction, log_admin_action
from core.dependencies import require_superadmin
from core.provisioning import MIN_PASSWORD_LENGTH, SignupError, normalize_email, register_user
from core.rbac import is_master_account
from database.database import get_db
from models.admin import Admin
from models.invited_email import InvitedEmail
from schemas.admin import ApprovalUpdate, CreateUserRequest, InviteRequest, RoleUpdate

router = APIRouter(prefix="/api/admin", tags=["admin-users"])


def admin_to_dict(admin: Admin) -> Dict[str, Any]:
    return {
        "id": admin.id,
        "email": admin.email,
        "role": admin.role,
        "approved": bool(admin.approved),
        "created_at": admin.created_at.isoformat() if admin.created_at else None,
    }


def get_admin_or_404(db: Session, admin_id: str) -> Admin:
    target: Optional[Admin] = db.query(Admin).filter(Admin.id == admin_id).first()
    if not target:
        raise HTTPException(status_code=404, detail="User not found")
    return target


@router.get("/users")
def list_users(user: dict = Depends(require_superadmin), db: Session = Depends(get_db)):
    admins = db.query(Admin).order_by(Admin.created_at.desc()).all()
    return [admin_to_dict(a) for a in admins]


@router.patch("/users/{admin_id}")
def set_approval(
    admin_id: str,
    body: ApprovalUpdate,
    request: Request,
    user: dict = Depends(require_superadmin),
    db: Session = Depends(get_db),
):
    target = get_admin_or_404(db, admin_id)
    target.approved = body.approved
    db.commit()
    db.refresh(target)
    data = admin_to_dict(target)

    action = AuditAction.APPROVE_ADMIN if body.approved else AuditAction.REVOKE_ADMIN
    log_admin_action(db, user["id"], action, f"Target: {data['email']}", request)
    return {"success": True, "user": data}


@router.patch("/users/{admin_id}/role")
def change_role(
    admin_id: str,
    body: RoleUpdate,
    request: Request,
    user: dict = Depends(require_superadmin),
    db: Session = Depends(get_db),
):
    target = get_admin_or_404(db, admin_id)
    if is_master_account(target.email):
        raise HTTPException(status_code=403, detail="You cannot change the master account's role.")

    email = target.email
    target.role = body.role.value
    db.commit()

    log_admin_action(db, user["id"], AuditAction.UPDATE_ROLE, f"Changed {email} role to {body.role.value}", request)
    return {"success": True}


@router.delete("/users/{admin_id}")
def delete_user(
    admin_id: str,
    request: Request,
    user: dict = Depends(require_superadmin),
    db: Session = Depends(get_db),
):
    target = get_admin_or_404(db, admin_id)

    if is_master_account(target.email):
        raise HTTPException(status_code=403, detail="You cannot delete the master account.")
    if target.id == user["id"]:
        raise HTTPException(status_code=403, detail="You cannot delete yourself.")

    email = target.email
    # The auth identity survives; without a staff record it is rejected at the approval gate
    db.delete(target)
    db.commit()

    log_admin_action(db, user["id"], AuditAction.DELETE_USER, f"Deleted admin {email}", request)
    return {"success": True}


@router.post("/invite")
def invite_user(
    body: InviteRequest,
    request: Request,
    user: dict = Depends(require_superadmin),
    db: Session = Depends(get_db),
):
    email = normalize_email(body.email)
    if db.query(InvitedEmail).filter(InvitedEmail.email == email).first():
        raise HTTPException(status_code=400, detail="Email already invited")

    db.add(InvitedEmail(email=email, role=body.role.value, invited_by=user["id"]))
    db.commit()

    log_admin_action(db, user["id"], AuditAction.INVITE_USER, f"Whitelisted {email} as {body.role.value}", request)
    return {"success": True, "message": f"User whitelisted as {body.role.value.upper()}."}


@router.post("/users/create")
def create_user(
    body: CreateUserRequest,
    request: Request,
    user: dict = Depends(require_superadmin),
    db: Session = Depends(get_db),
):
    if len(body.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="Invalid email or password (min 6 chars)")

    email = normalize_email(body.email)
    role = body.role.value

    # Whitelist first so provisioning approves the account. An existing
    # invite is reused with the requested role.
    invite = db.query(InvitedEmail).filter(InvitedEmail.email == email).first()
    if invite:
        invite.role = role
    else:
        db.add(InvitedEmail(email=email, role=role, invited_by=user["id"]))
    db.commit()

    try:
        new_user = register_user(db, email, body.password)
    except SignupError as e:
        raise HTTPException(status_code=400, detail=str(e))

    created = {"id": new_user.id, "email": new_user.email}
    log_admin_action(db, user["id"], AuditAction.CREATE_USER, f"Manually created user {email} ({role})", request)
    return {"success": True, "user": created, "message": "User created and auto-approved."}
