# routes/auth.py
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional

from core.dependencies import require_auth
from core.provisioning import SignupError, normalize_email, register_user
from core.security import create_access_token, verify_password
from database.database import get_db
from models.admin import Admin
from models.auth_user import AuthUser
from schemas.auth import LoginRequest, SignupRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup")
def signup(body: SignupRequest, db: Session = Depends(get_db)):
    try:
        user = register_user(db, body.email, body.password)
    except SignupError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    record: Optional[Admin] = db.query(Admin).filter(Admin.id == user.id).first()
    approved = bool(record and record.approved)
    return {
        "success": True,
        "user": {"id": user.id, "email": user.email},
        "approved": approved,
        "message": "Account active." if approved else "Account created. Pending approval.",
    }


@router.post("/login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user: Optional[AuthUser] = (
        db.query(AuthUser).filter(AuthUser.email == normalize_email(body.email)).first()
    )
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid login credentials")

    logger.info("User %s logged in", user.email)
    return {
        "access_token": create_access_token({"sub": user.id, "email": user.email}),
        "token_type": "bearer",
    }


@router.get("/me")
def get_me(user: dict = Depends(require_auth)):
    return user
