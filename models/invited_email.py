from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime
from models.base import Base


class InvitedEmail(Base):
    __tablename__ = "invited_emails"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False)
    role = Column(String(32), nullable=False, default="resolver")
    invited_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
