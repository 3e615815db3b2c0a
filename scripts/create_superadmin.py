#!/usr/bin/env python3
"""
Bootstrap an approved superadmin.
Usage: python3 scripts/create_superadmin.py <email> <password>
"""

import argparse
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from database.database import SessionLocal, init_db
from core.provisioning import SignupError, normalize_email, register_user
from models.admin import Admin, AdminRole
from models.invited_email import InvitedEmail


def create_superadmin(email: str, password: str) -> bool:
    """Whitelist the email as superadmin, then sign it up."""
    init_db()
    db = SessionLocal()
    email = normalize_email(email)

    try:
        invite = db.query(InvitedEmail).filter(InvitedEmail.email == email).first()
        if invite:
            invite.role = AdminRole.superadmin.value
        else:
            db.add(InvitedEmail(email=email, role=AdminRole.superadmin.value))
        db.commit()

        user = register_user(db, email, password)
        record = db.query(Admin).filter(Admin.id == user.id).first()

        print(f"✅ Superadmin '{email}' created")
        print(f"   ID: {user.id}")
        print(f"   Role: {record.role}")
        print(f"   Approved: {record.approved}")
        return True

    except SignupError as e:
        db.rollback()
        print(f"❌ Error: {e}")
        return False
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Create an approved superadmin account")
    parser.add_argument("email")
    parser.add_argument("password")
    args = parser.parse_args()

    if not create_superadmin(args.email, args.password):
        sys.exit(1)


if __name__ == "__main__":
    main()
