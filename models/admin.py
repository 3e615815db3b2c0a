from sqlalchemy import Column, String, Boolean, DateTime
from datetime import datetime
from models.base import Base
import enum


class AdminRole(str, enum.Enum):
    resolver = "resolver"
    admin = "admin"
    superadmin = "superadmin"


class Admin(Base):
    """Staff record keyed by the auth user id. Role is stored as plain text so
    that an unrecognised value degrades to the lowest access level."""

    __tablename__ = "admins"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(String(32), nullable=False, default=AdminRole.resolver.value)
    approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
