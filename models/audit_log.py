from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from datetime import datetime
from models.base import Base


class AdminLog(Base):

    __tablename__ = "admin_logs"

    id = Column(Integer, primary_key=True, index=True)

    admin_id = Column(String(36), nullable=True, index=True)
    action = Column(String(64), nullable=False, index=True)
    details = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)

    changes = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
