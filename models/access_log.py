from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from datetime import datetime
from models.base import Base


class AccessLog(Base):
    __tablename__ = "access_logs"

    id = Column(Integer, primary_key=True)
    ip_address = Column(String(45), nullable=True)
    method = Column(String(10), nullable=False)
    path = Column(String(2048), nullable=False)
    status_code = Column(Integer, nullable=True)
    duration_ms = Column(Integer, nullable=True)
    user_agent = Column(Text, nullable=True)

    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, nullable=True)
    request_body = Column(JSON, nullable=True)
    query_params = Column(JSON, nullable=True)
    headers = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
