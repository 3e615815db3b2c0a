from pydantic import BaseModel, Field
from typing import Optional

from models.feedback import FeedbackCategory, FeedbackPriority, FeedbackStatus


class FeedbackSubmit(BaseModel):
    # presence is checked by the route so the error reads like the public form expects
    category: Optional[FeedbackCategory] = None
    message: Optional[str] = None
    priority: FeedbackPriority = FeedbackPriority.medium


class FeedbackManualCreate(BaseModel):
    category: FeedbackCategory
    message: str = Field(min_length=1)
    priority: Optional[FeedbackPriority] = None
    status: Optional[FeedbackStatus] = None


class FeedbackDetailsUpdate(BaseModel):
    message: Optional[str] = Field(default=None, min_length=1)
    category: Optional[FeedbackCategory] = None
    priority: Optional[FeedbackPriority] = None


class FeedbackStatusUpdate(BaseModel):
    status: FeedbackStatus
