from jose import jwt, JWTError
from fastapi import HTTPException, status
from datetime import datetime, timedelta
from dataclasses import dataclass
from passlib.context import CryptContext
from typing import Optional
import os

# ------------------------------------------
# Security settings from environment variables
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    raise ValueError("SECRET_KEY environment variable is not set! Generate one with: openssl rand -hex 32")

ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass
class Identity:
    """A verified token subject. Lives for one request only."""
    id: str
    email: Optional[str]
    token: str


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

hash_password = get_password_hash

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def create_access_token(data: dict, expires_delta: timedelta = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def resolve_identity(authorization: Optional[str]) -> Identity:
    """Turn an ``Authorization: Bearer <token>`` header into an Identity.

    Fails closed: a missing header, a non-bearer scheme, a bad signature,
    an expired token or a token without a subject all raise 401.
    """
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing Authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    token = token.strip()
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")

    return Identity(id=str(user_id), email=payload.get("email"), token=token)
