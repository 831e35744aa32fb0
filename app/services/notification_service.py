"""
Notification Service - student emails on application status changes.

Events are queued in an outbox after a transition has been written and
drained by a FastAPI background task. Delivery is best-effort: failures are
logged and never propagate back to the transition that produced them.

Delivery goes through the Web3Forms relay; without an access key sending is
skipped with a warning.
"""

import logging
import threading
from collections import deque
from datetime import datetime
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from app.core.config import get_settings
from app.models.entities import Application, ApplicationStatus

logger = logging.getLogger(__name__)


class NotificationEvent(BaseModel):
    student_email: str
    subject: str
    body: str


# ============================================================
# MESSAGE COMPOSITION
# ============================================================

def _format_datetime(value: Any) -> str:
    if isinstance(value, datetime):
        return value.strftime("%d %b %Y, %I:%M %p %Z").strip()
    return str(value)


def build_status_message(
    student_name: Optional[str],
    internship: Dict[str, Any],
    application: Application,
    feedback: Optional[str] = None
) -> str:
    lines = [
        f"Hello {student_name or 'Student'},",
        "",
        f'Your application status for "{internship.get("title")}" at {internship.get("company")} '
        f"has been updated to: {application.status}.",
    ]

    interview = application.interview_scheduled
    if application.status == ApplicationStatus.interview_scheduled and interview:
        lines += ["", "Interview Details:", f"- Date: {_format_datetime(interview.date)}"]
        if interview.mode:
            lines.append(f"- Mode: {interview.mode}")
        if interview.location:
            lines.append(f"- Location: {interview.location}")
        if interview.meeting_link:
            lines.append(f"- Meeting Link: {interview.meeting_link}")

    offer = application.offer_details
    if application.status == ApplicationStatus.offered and offer:
        lines += ["", "Offer Details:"]
        for key, label in (("stipend", "Stipend"), ("duration", "Duration"),
                           ("startDate", "Start Date"), ("offerExpiry", "Offer Expiry")):
            if offer.get(key):
                lines.append(f"- {label}: {offer[key]}")

    if feedback:
        lines += ["", "Feedback:", feedback]

    lines += ["", "Regards,", get_settings().notification_from_name]
    return "\n".join(lines)


def build_status_event(
    student: Optional[Dict[str, Any]],
    internship: Optional[Dict[str, Any]],
    application: Application,
    feedback: Optional[str] = None
) -> Optional[NotificationEvent]:
    """Event for a status change, or None when the student has no email."""
    if not student or not student.get("email"):
        logger.warning("Student email missing for application %s, no notification", application.id)
        return None
    internship = internship or {}
    status_words = str(application.status).replace("_", " ")
    return NotificationEvent(
        student_email=student["email"],
        subject=f"Application {status_words} - {internship.get('title') or 'Internship'}",
        body=build_status_message(student.get("name"), internship, application, feedback)
    )


# ============================================================
# DELIVERY
# ============================================================

class Web3FormsSender:
    """Posts messages to the Web3Forms email relay."""

    def __init__(self, access_key: str, url: str, from_name: str, reply_to: Optional[str] = None,
                 timeout: float = 10.0):
        self.access_key = access_key
        self.url = url
        self.from_name = from_name
        self.reply_to = reply_to
        self.timeout = timeout

    def send(self, event: NotificationEvent) -> bool:
        """Send one event. Returns False when skipped; raises on delivery errors."""
        if not self.access_key:
            logger.warning("WEB3FORMS_KEY missing. Skipping email to %s", event.student_email)
            return False

        payload = {
            "access_key": self.access_key,
            "subject": event.subject,
            "from_name": self.from_name,
            "email": event.student_email,
            "message": event.body,
        }
        if self.reply_to:
            payload["reply_to"] = self.reply_to

        with httpx.Client(timeout=self.timeout) as client:
            response = client.post(self.url, json=payload)
            response.raise_for_status()
        return True


class NotificationOutbox:
    """
    Queue of pending notifications.

    Usage:
        outbox.enqueue(event)
        background_tasks.add_task(outbox.dispatch_pending)
    """

    def __init__(self, sender):
        self.sender = sender
        self._pending = deque()
        self._lock = threading.Lock()

    def enqueue(self, event: Optional[NotificationEvent]):
        if event is not None:
            with self._lock:
                self._pending.append(event)

    def pending_count(self) -> int:
        return len(self._pending)

    def dispatch_pending(self) -> int:
        """Deliver everything queued. Returns the number of events sent."""
        sent = 0
        while True:
            with self._lock:
                if not self._pending:
                    break
                event = self._pending.popleft()
            try:
                if self.sender.send(event):
                    sent += 1
            except Exception as e:
                logger.error("Notification to %s failed: %s", event.student_email, e)
        return sent


def build_sender() -> Web3FormsSender:
    settings = get_settings()
    return Web3FormsSender(
        access_key=settings.web3forms_key,
        url=settings.web3forms_url,
        from_name=settings.notification_from_name,
        reply_to=settings.notification_reply_to,
        timeout=settings.notification_timeout_seconds
    )
