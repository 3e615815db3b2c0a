from typing import Optional
import os

ROLE_HIERARCHY = {"superadmin": 3, "admin": 2, "resolver": 1}


def role_level(role: Optional[str]) -> int:
    """Ordinal level of a role; anything unrecognised counts as 0."""
    if role is None:
        return 0
    return ROLE_HIERARCHY.get(getattr(role, "value", role), 0)


def has_required_role(caller_role: Optional[str], required_role: str) -> bool:
    return role_level(caller_role) >= role_level(required_role)


def get_master_email() -> Optional[str]:
    # read per call so the master account can be rotated without a restart
    master = os.getenv("MASTER_ADMIN_EMAIL")
    return master.strip().lower() if master and master.strip() else None


def is_master_account(email: Optional[str]) -> bool:
    master = get_master_email()
    if not master or not email:
        return False
    return email.strip().lower() == master
