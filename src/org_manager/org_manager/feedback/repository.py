from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import FeedbackCategory, FeedbackPriority, FeedbackStatus
from .model import Feedback, NewFeedback


class FeedbackRepository(Protocol):
    def get(self, feedback_id: int) -> Optional[Feedback]:
        raise NotImplementedError

    def create(self, feedback: NewFeedback) -> int:
        raise NotImplementedError

    def list_feedback(
        self,
        *,
        submitted_by: Optional[int] = None,
        status: Optional[FeedbackStatus] = None,
        category: Optional[FeedbackCategory] = None,
        priority: Optional[FeedbackPriority] = None,
        limit: int = 500,
    ) -> Sequence[Feedback]:
        raise NotImplementedError

    def update_review(
        self,
        feedback_id: int,
        *,
        status: FeedbackStatus,
        priority: FeedbackPriority,
        admin_notes: str,
        reviewed_by: Optional[int],
        reviewed_at: Optional[datetime],
    ) -> bool:
        raise NotImplementedError

    def delete(self, feedback_id: int) -> bool:
        raise NotImplementedError
