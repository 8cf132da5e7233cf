"""
Follow-up actions of public submissions (leads, travel periods, trip joins).

The notification email and the request audit row are advisory. Each runs on
its own, a failure is logged and reported as an outcome, and the submission
itself still succeeds.
"""
import logging
from typing import Awaitable, List, Optional

from fastapi import BackgroundTasks
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import crud, schemas
from .database import is_missing_table
from .email_service import EmailNotConfigured

logger = logging.getLogger(__name__)


class Submission:
    """Outcomes of one submission's follow-up actions"""

    def __init__(self, label: str):
        self.label = label
        self.request_id: Optional[int] = None
        self.follow_ups: List[schemas.FollowUpResult] = []

    def _outcome(self, action: str, error: Optional[str] = None) -> schemas.FollowUpResult:
        outcome = schemas.FollowUpResult(action=action, ok=error is None, error=error)
        self.follow_ups.append(outcome)
        return outcome

    @property
    def email_sent(self) -> bool:
        return any(f.action == "email" and f.ok for f in self.follow_ups)

    async def send_email(self, sending: Awaitable) -> schemas.FollowUpResult:
        try:
            await sending
        except EmailNotConfigured as e:
            logger.warning("%s: email notification skipped, %s", self.label, e)
            return self._outcome("email", str(e))
        except Exception as e:
            logger.exception("%s: email notification failed", self.label)
            return self._outcome("email", str(e) or e.__class__.__name__)
        return self._outcome("email")

    def record_request(self, db: Session, **values) -> schemas.FollowUpResult:
        values.setdefault("status", "pending")
        try:
            row = crud.requests.insert(db, **values)
        except SQLAlchemyError as e:
            db.rollback()
            if is_missing_table(e):
                logger.warning("%s: requests table does not exist, submission not tracked", self.label)
                return self._outcome("request", "Requests table does not exist")
            logger.exception("%s: failed to create request", self.label)
            return self._outcome("request", "Failed to create request")

        self.request_id = row.id
        logger.info(
            "%s: request %s created (%s) for %s",
            self.label,
            row.id,
            row.request_type,
            f"user {row.user_id}" if row.user_id else "guest",
        )
        return self._outcome("request")

    def alert_admins(
        self,
        background_tasks: BackgroundTasks,
        notifier,
        request_type: str,
        title: str,
        contact_name: Optional[str] = None,
        contact_phone: Optional[str] = None,
        contact_email: Optional[str] = None,
    ) -> schemas.FollowUpResult:
        """Queue the Telegram alert to run after the response"""
        if not notifier.configured:
            return self._outcome("telegram", "Telegram not configured")

        background_tasks.add_task(
            notifier.send_new_request_notification,
            request_id=self.request_id,
            request_type=request_type,
            title=title,
            contact_name=contact_name,
            contact_phone=contact_phone,
            contact_email=contact_email,
        )
        return self._outcome("telegram")

    def response(self, message: str) -> schemas.SubmissionResponse:
        return schemas.SubmissionResponse(
            success=True,
            message=message,
            emailSent=self.email_sent,
            requestId=self.request_id,
            followUps=self.follow_ups,
        )
