"""
Account provisioning: the local counterpart of the hosted auth service's
signup call and the ``handle_new_user`` database trigger that turns a new
auth user into a staff record.
"""

import logging
from typing import Optional
from sqlalchemy.orm import Session

from core.security import hash_password
from models.admin import Admin, AdminRole
from models.auth_user import AuthUser
from models.invited_email import InvitedEmail

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class SignupError(Exception):
    pass


def normalize_email(email: str) -> str:
    return email.strip().lower()


def handle_new_user(db: Session, auth_user: AuthUser) -> Admin:
    """Whitelisted emails get an approved record with the invited role;
    everyone else lands as an unapproved resolver."""
    invite: Optional[InvitedEmail] = (
        db.query(InvitedEmail).filter(InvitedEmail.email == auth_user.email).first()
    )
    if invite:
        record = Admin(id=auth_user.id, email=auth_user.email, role=invite.role, approved=True)
    else:
        record = Admin(id=auth_user.id, email=auth_user.email, role=AdminRole.resolver.value, approved=False)
    db.add(record)
    return record


def register_user(db: Session, email: str, password: str) -> AuthUser:
    """Create the auth user and its staff record in one commit."""
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise SignupError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters")

    email = normalize_email(email)
    if db.query(AuthUser).filter(AuthUser.email == email).first():
        raise SignupError("User already registered")

    user = AuthUser(email=email, password_hash=hash_password(password))
    db.add(user)
    db.flush()

    record = handle_new_user(db, user)
    db.commit()
    db.refresh(user)
    logger.info("Registered %s (role=%s, approved=%s)", email, record.role, record.approved)
    return user
