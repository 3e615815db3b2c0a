from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from datetime import datetime
from models.base import Base
import enum


class FeedbackCategory(str, enum.Enum):
    teaching = "teaching"
    facilities = "facilities"
    administration = "administration"
    safety = "safety"
    events = "events"
    general = "general"


class FeedbackPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class FeedbackStatus(str, enum.Enum):
    new = "new"
    reviewed = "reviewed"
    resolved = "resolved"


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String(32), nullable=False, index=True)
    message = Column(Text, nullable=False)
    priority = Column(String(16), nullable=False, default=FeedbackPriority.medium.value)
    status = Column(String(16), nullable=False, default=FeedbackStatus.new.value, index=True)

    deletion_requested = Column(Boolean, nullable=False, default=False, index=True)
    deletion_requested_by = Column(String(36), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "category": self.category,
            "message": self.message,
            "priority": self.priority,
            "status": self.status,
            "deletion_requested": bool(self.deletion_requested),
            "deletion_requested_by": self.deletion_requested_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
