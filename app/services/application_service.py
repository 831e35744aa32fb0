"""
Application State Machine

Lifecycle of a student's application to an internship:

    applied ──────────────┐
      │                   ▼
      └──> pending_mentor_approval ──> approved ──> interview_scheduled
                   │                      │            │   (reschedule)
                   ▼                      ▼            ▼
                rejected <──────────── any step ── interview_completed
                                                       │
                                                       ▼
                                            offered ──> accepted

Initial state: pending_mentor_approval when a mentor could be assigned,
otherwise applied. Transitions are performed by the assigned mentor or an
admin and checked against TRANSITIONS; accepted and rejected are terminal.
"""

import logging
import uuid
from datetime import timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from app.core.config import get_settings
from app.core.errors import Conflict, Forbidden, Ineligible, InvalidState, NotFound, ValidationError
from app.models.actors import Actor, AdminActor, MentorActor, StudentActor
from app.models.entities import (
    Application, ApplicationStatus, Internship, InternshipStatus, InterviewDetails, MentorApproval,
    Student, utcnow
)
from app.services.audit_service import AuditService
from app.services.eligibility_service import check_eligibility
from app.services.notification_service import NotificationOutbox, build_status_event
from app.services.record_store import RecordStores
from app.services.visibility import application_filter, can_view_application

logger = logging.getLogger(__name__)

S = ApplicationStatus

TRANSITIONS = {
    S.applied: {S.pending_mentor_approval, S.approved, S.rejected},
    S.pending_mentor_approval: {S.approved, S.rejected},
    S.approved: {S.interview_scheduled, S.rejected},
    S.interview_scheduled: {S.interview_scheduled, S.interview_completed, S.rejected},
    S.interview_completed: {S.offered, S.rejected},
    S.offered: {S.accepted, S.rejected},
    S.accepted: set(),
    S.rejected: set(),
}

INTERNSHIP_SUMMARY_FIELDS = ("id", "title", "company", "location", "stipend", "duration")
STUDENT_SUMMARY_FIELDS = ("id", "name", "email", "resumeLink", "department", "cgpa", "semester")


def can_transition(current: str, new: str) -> bool:
    return S(new) in TRANSITIONS[S(current)]


def _summary(doc: Optional[Dict[str, Any]], fields) -> Optional[Dict[str, Any]]:
    if not doc:
        return None
    return {f: doc.get(f) for f in fields}


def _normalize_interview(details: Union[InterviewDetails, Dict[str, Any]]) -> Dict[str, Any]:
    """Validate interview details, storing the date as an absolute UTC timestamp."""
    try:
        interview = details if isinstance(details, InterviewDetails) else InterviewDetails.model_validate(details)
    except PydanticValidationError as e:
        raise ValidationError("Interview details need a valid date") from e
    date = interview.date
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    interview = interview.model_copy(update={"date": date.astimezone(timezone.utc)})
    return interview.to_document()


class ApplicationService:

    def __init__(self, stores: RecordStores, audit: AuditService, outbox: NotificationOutbox,
                 enforce_cap: Optional[bool] = None):
        self.stores = stores
        self.audit = audit
        self.outbox = outbox
        self.enforce_cap = get_settings().enforce_application_cap if enforce_cap is None else enforce_cap

    # --------------------------------------------------------
    # Creation
    # --------------------------------------------------------

    def _assign_mentor(self, student: Student, requested_mentor_id: Optional[str]) -> Optional[str]:
        """Requested mentor, else first same-department mentor, else first mentor."""
        if requested_mentor_id:
            if not self.stores.mentors.find(requested_mentor_id):
                raise NotFound("Mentor not found")
            return requested_mentor_id

        same_department = self.stores.mentors.find_one({"department": student.department})
        if same_department:
            return same_department["id"]
        first = self.stores.mentors.query(limit=1)
        return first[0]["id"] if first else None

    def _refresh_application_count(self, internship_id: str):
        # Derived from the applications themselves, never a blind increment
        count = self.stores.applications.count({"internshipId": internship_id})
        self.stores.internships.update(internship_id, {"currentApplications": count})

    def create(self, actor: Actor, internship_id: str, cover_letter: Optional[str],
               requested_mentor_id: Optional[str] = None) -> Application:
        if not isinstance(actor, StudentActor):
            raise Forbidden("Only students can apply to internships")
        if not internship_id or not cover_letter or not cover_letter.strip():
            raise ValidationError("Internship ID and cover letter are required")

        internship_doc = self.stores.internships.find(internship_id)
        if not internship_doc:
            raise NotFound("Internship not found")

        if self.stores.applications.find_one({"studentId": actor.id, "internshipId": internship_id}):
            raise Conflict("You have already applied for this internship")

        internship = Internship.model_validate(internship_doc)
        if internship.status != InternshipStatus.active:
            raise InvalidState("This internship is not accepting applications")
        if not check_eligibility(actor.profile, internship):
            raise Ineligible("You are not eligible for this internship")
        if self.enforce_cap and internship.current_applications >= internship.max_applications:
            raise InvalidState("This internship has reached its application limit")

        mentor_id = self._assign_mentor(actor.profile, requested_mentor_id)
        now = utcnow()
        application = Application(
            id=f"APP{uuid.uuid4().hex[:8].upper()}",
            student_id=actor.id,
            internship_id=internship_id,
            status=S.pending_mentor_approval if mentor_id else S.applied,
            cover_letter=cover_letter,
            mentor_id=mentor_id,
            applied_at=now,
            updated_at=now
        )
        try:
            self.stores.applications.insert(application.to_document())
        except Conflict as e:
            # A concurrent request won the unique index
            raise Conflict("You have already applied for this internship") from e

        self._refresh_application_count(internship_id)
        logger.info("Application %s created by %s for %s (mentor: %s)",
                    application.id, actor.id, internship_id, mentor_id)
        return application

    # --------------------------------------------------------
    # Transitions
    # --------------------------------------------------------

    def transition(
        self,
        actor: Actor,
        application_id: str,
        new_status: str,
        feedback: Optional[str] = None,
        interview_details: Optional[Union[InterviewDetails, Dict[str, Any]]] = None,
        offer_details: Optional[Dict[str, Any]] = None
    ) -> Application:
        if not isinstance(actor, (MentorActor, AdminActor)):
            raise Forbidden("Access denied. Insufficient permissions.")

        doc = self.stores.applications.find(application_id)
        if not doc:
            raise NotFound("Application not found")
        if isinstance(actor, MentorActor) and doc.get("mentorId") != actor.id:
            raise Forbidden("Access denied")

        try:
            new_status = S(new_status)
        except ValueError:
            raise ValidationError(f"Unknown application status: {new_status}")
        if not can_transition(doc["status"], new_status):
            raise InvalidState(f"Cannot move application from {doc['status']} to {new_status.value}")

        now = utcnow()
        patch: Dict[str, Any] = {"status": new_status.value, "updatedAt": now}
        if not doc.get("processedAt"):
            patch["processedAt"] = now

        if isinstance(actor, MentorActor):
            if new_status in (S.approved, S.rejected):
                patch["mentorApproval"] = MentorApproval(new_status.value).value
            if feedback is not None:
                patch["mentorFeedback"] = feedback

        if interview_details:
            patch["interviewScheduled"] = _normalize_interview(interview_details)
        if offer_details:
            patch["offerDetails"] = offer_details
        if feedback and new_status == S.interview_completed:
            patch["interviewFeedback"] = feedback

        updated = self.stores.applications.update(application_id, patch)
        if updated is None:
            raise NotFound("Application not found")
        application = Application.model_validate(updated)

        self.audit.record_if_admin(actor, "UPDATE_APPLICATION_STATUS", {
            "applicationId": application_id, "from": doc["status"], "to": new_status.value
        })
        logger.info("Application %s: %s -> %s by %s %s",
                    application_id, doc["status"], new_status.value, actor.role, actor.id)

        self._notify(application, feedback)
        return application

    def _notify(self, application: Application, feedback: Optional[str]):
        try:
            student = self.stores.students.find(application.student_id)
            internship = self.stores.internships.find(application.internship_id)
            self.outbox.enqueue(build_status_event(student, internship, application, feedback))
        except Exception as e:
            logger.error("Could not queue notification for application %s: %s", application.id, e)

    # --------------------------------------------------------
    # Reads
    # --------------------------------------------------------

    def _enrich(self, docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Attach internship and student summaries to application documents."""
        internship_ids = list({d["internshipId"] for d in docs})
        student_ids = list({d["studentId"] for d in docs})
        internships = {i["id"]: i for i in self.stores.internships.query({"id": {"$in": internship_ids}})}
        students = {s["id"]: s for s in self.stores.students.query({"id": {"$in": student_ids}})}

        enriched = []
        for doc in docs:
            application = Application.model_validate(doc).to_document()
            application["internship"] = _summary(internships.get(doc["internshipId"]), INTERNSHIP_SUMMARY_FIELDS)
            application["student"] = _summary(students.get(doc["studentId"]), STUDENT_SUMMARY_FIELDS)
            enriched.append(application)
        return enriched

    def get(self, actor: Optional[Actor], application_id: str) -> Dict[str, Any]:
        doc = self.stores.applications.find(application_id)
        if not doc:
            raise NotFound("Application not found")
        if not can_view_application(actor, doc, self.stores):
            raise Forbidden("Access denied")
        return self._enrich([doc])[0]

    def list(self, actor: Optional[Actor], status: Optional[str] = None) -> List[Dict[str, Any]]:
        filters = application_filter(actor, self.stores)
        if status:
            filters = {"$and": [filters, {"status": status}]} if filters else {"status": status}
        return self._enrich(self.stores.applications.query(filters))

    def pending_for_mentor(self, actor: Actor) -> List[Dict[str, Any]]:
        if not isinstance(actor, MentorActor):
            raise Forbidden("Mentors only")
        docs = self.stores.applications.query({
            "mentorId": actor.id, "status": S.pending_mentor_approval.value
        })
        return self._enrich(docs)
