from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import FeedbackCategory, FeedbackPriority, FeedbackStatus
from ..employees.model import EmployeeSummary


@dataclass(frozen=True)
class Feedback:
    feedback_id: int
    submitted_by: int
    submitter_name: str
    submitter_email: str
    category: FeedbackCategory
    subject: str
    message: str
    status: FeedbackStatus
    priority: FeedbackPriority
    admin_notes: str = ""
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewFeedback:
    submitted_by: int
    submitter_name: str
    submitter_email: str
    category: FeedbackCategory
    subject: str
    message: str
    priority: FeedbackPriority
    created_at: datetime


@dataclass(frozen=True)
class FeedbackView:
    feedback: Feedback
    reviewer: Optional[EmployeeSummary] = None
