"""
Internship Lifecycle Manager

Two ways an internship enters the system:
1. Direct posting  - admin creates it, status=active, postedBy=admin
2. Submission      - recruiter submits it, status=submitted, submittedBy=recruiter

Submissions wait for an admin:
    submitted --approve--> active   (postedBy = submittedBy)
    submitted --reject---> rejected (rejectionReason required)

Afterwards admins may deactivate/reactivate freely. Recruiters may edit
their own postings and delete their own internships that are not active.
Every admin mutation is written to the audit log.
"""

import logging
import re
import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import Forbidden, InvalidState, NotFound, ValidationError
from app.models.actors import Actor, AdminActor, RecruiterActor, StudentActor
from app.models.entities import Internship, InternshipStatus, utcnow
from app.services.audit_service import AuditService
from app.services.eligibility_service import evaluate
from app.services.record_store import RecordStores
from app.services.visibility import can_view_internship, internship_filter, owns_internship

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "company", "description", "requiredSkills", "eligibleDepartments")
LIST_FIELDS = ("requiredSkills", "preferredSkills", "eligibleDepartments", "requirements", "benefits")

# Never taken from a patch
IMMUTABLE_FIELDS = {"id", "currentApplications", "createdAt"}
# Workflow fields a recruiter cannot set directly
WORKFLOW_FIELDS = {
    "status", "postedBy", "submittedBy", "submittedAt", "approvedBy", "approvedAt",
    "rejectedBy", "rejectedAt", "rejectionReason", "adminNotes",
}

_STIPEND_PATTERN = re.compile(r"(\d[\d,]*)")


class InternshipFilters(BaseModel):
    status: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    company: Optional[str] = None
    work_mode: Optional[str] = None
    skills: Optional[str] = None
    min_stipend: Optional[int] = None
    max_stipend: Optional[int] = None
    recommended: bool = False


def parse_stipend(stipend: Optional[str]) -> Optional[int]:
    """
    Pull the amount out of a currency-formatted stipend.

    "₹15,000/month" -> 15000, "Unpaid" -> None
    """
    if not stipend:
        return None
    match = _STIPEND_PATTERN.search(str(stipend))
    if not match:
        return None
    return int(match.group(1).replace(",", ""))


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(v) for v in value]


def _normalize(fields: Dict[str, Any]) -> Dict[str, Any]:
    fields = dict(fields)
    for key in LIST_FIELDS:
        if key in fields:
            fields[key] = _as_list(fields[key])
    return fields


def _check_required(doc: Dict[str, Any], required=REQUIRED_FIELDS):
    missing = [f for f in required if doc.get(f) in (None, "", [])]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def _to_internship(doc: Dict[str, Any]) -> Internship:
    try:
        return Internship.model_validate(doc)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid internship: {e.errors()[0].get('msg')}") from e


def _matches_filters(doc: Dict[str, Any], filters: InternshipFilters) -> bool:
    if filters.location and filters.location.lower() not in (doc.get("location") or "").lower():
        return False
    if filters.company and filters.company.lower() not in (doc.get("company") or "").lower():
        return False

    if filters.skills:
        wanted = [s.lower() for s in _as_list(filters.skills)]
        required = [s.lower() for s in doc.get("requiredSkills") or []]
        if not any(w in r for w in wanted for r in required):
            return False

    if filters.min_stipend is not None or filters.max_stipend is not None:
        amount = parse_stipend(doc.get("stipend"))
        # Unparseable stipends are not filtered out
        if amount is not None:
            if filters.min_stipend is not None and amount < filters.min_stipend:
                return False
            if filters.max_stipend is not None and amount > filters.max_stipend:
                return False
    return True


class InternshipService:

    def __init__(self, stores: RecordStores, audit: AuditService):
        self.stores = stores
        self.audit = audit

    # --------------------------------------------------------
    # Helpers
    # --------------------------------------------------------

    def _load(self, internship_id: str) -> Dict[str, Any]:
        doc = self.stores.internships.find(internship_id)
        if not doc:
            raise NotFound("Internship not found")
        return doc

    def _require_admin(self, actor: Actor, message: str = "Only admins can perform this action"):
        if not isinstance(actor, AdminActor):
            raise Forbidden(message)

    def _save(self, internship_id: str, patch: Dict[str, Any]) -> Internship:
        patch["updatedAt"] = utcnow()
        updated = self.stores.internships.update(internship_id, patch)
        if updated is None:
            raise NotFound("Internship not found")
        return Internship.model_validate(updated)

    def _new_document(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        now = utcnow()
        doc = {k: v for k, v in _normalize(fields).items() if k not in IMMUTABLE_FIELDS | WORKFLOW_FIELDS}
        doc.update({
            "id": f"INT{uuid.uuid4().hex[:8].upper()}",
            "currentApplications": 0,
            "createdAt": now,
            "updatedAt": now,
        })
        return doc

    # --------------------------------------------------------
    # Creation
    # --------------------------------------------------------

    def create_direct(self, actor: Actor, fields: Dict[str, Any]) -> Internship:
        """Admin posting, live immediately."""
        self._require_admin(actor, "Only admins can post internships directly")
        doc = self._new_document(fields)
        _check_required(doc)
        doc.update({"status": InternshipStatus.active.value, "postedBy": actor.id, "submittedBy": None})

        internship = _to_internship(doc)
        self.stores.internships.insert(internship.to_document())
        self.audit.record_if_admin(actor, "CREATE_INTERNSHIP", {"internshipId": internship.id, "title": internship.title})
        logger.info("Internship %s posted by admin %s", internship.id, actor.id)
        return internship

    def submit(self, actor: Actor, fields: Dict[str, Any]) -> Internship:
        """Recruiter submission, pending admin approval."""
        if not isinstance(actor, RecruiterActor):
            raise Forbidden("Only recruiters can submit internships")
        doc = self._new_document(fields)
        if not doc.get("company"):
            doc["company"] = actor.company
        _check_required(doc)
        doc.update({
            "status": InternshipStatus.submitted.value,
            "submittedBy": actor.id,
            "submittedAt": doc["createdAt"],
            "postedBy": None,
        })

        internship = _to_internship(doc)
        self.stores.internships.insert(internship.to_document())
        logger.info("Internship %s submitted by recruiter %s", internship.id, actor.id)
        return internship

    # --------------------------------------------------------
    # Approval workflow
    # --------------------------------------------------------

    def approve(self, actor: Actor, internship_id: str, admin_notes: Optional[str] = None) -> Internship:
        self._require_admin(actor, "Only admins can approve internships")
        doc = self._load(internship_id)
        if doc.get("status") != InternshipStatus.submitted.value:
            raise InvalidState(f"Only submitted internships can be approved (status: {doc.get('status')})")

        internship = self._save(internship_id, {
            "status": InternshipStatus.active.value,
            "postedBy": doc.get("submittedBy"),
            "approvedBy": actor.id,
            "approvedAt": utcnow(),
            "adminNotes": admin_notes,
        })
        self.audit.record_if_admin(actor, "APPROVE_INTERNSHIP", {
            "internshipId": internship_id, "submittedBy": doc.get("submittedBy"), "adminNotes": admin_notes
        })
        logger.info("Internship %s approved by %s", internship_id, actor.id)
        return internship

    def reject(self, actor: Actor, internship_id: str, rejection_reason: Optional[str],
               admin_notes: Optional[str] = None) -> Internship:
        self._require_admin(actor, "Only admins can reject internships")
        if not rejection_reason or not rejection_reason.strip():
            raise ValidationError("Rejection reason is required")
        doc = self._load(internship_id)
        if doc.get("status") != InternshipStatus.submitted.value:
            raise InvalidState(f"Only submitted internships can be rejected (status: {doc.get('status')})")

        internship = self._save(internship_id, {
            "status": InternshipStatus.rejected.value,
            "rejectedBy": actor.id,
            "rejectedAt": utcnow(),
            "rejectionReason": rejection_reason.strip(),
            "adminNotes": admin_notes,
        })
        self.audit.record_if_admin(actor, "REJECT_INTERNSHIP", {
            "internshipId": internship_id, "rejectionReason": internship.rejection_reason
        })
        logger.info("Internship %s rejected by %s", internship_id, actor.id)
        return internship

    def set_status(self, actor: Actor, internship_id: str, status: str) -> Internship:
        """Deactivate or reactivate a live posting."""
        self._require_admin(actor, "Only admins can change internship status")
        if status not in (InternshipStatus.active.value, InternshipStatus.inactive.value):
            raise ValidationError("Status must be 'active' or 'inactive'")
        doc = self._load(internship_id)
        if doc.get("status") in (InternshipStatus.submitted.value, InternshipStatus.rejected.value):
            raise InvalidState("Submissions must be approved or rejected first")

        internship = self._save(internship_id, {"status": status})
        self.audit.record_if_admin(actor, "UPDATE_INTERNSHIP_STATUS", {"internshipId": internship_id, "status": status})
        return internship

    # --------------------------------------------------------
    # Edit / delete
    # --------------------------------------------------------

    def update(self, actor: Actor, internship_id: str, patch: Dict[str, Any]) -> Internship:
        doc = self._load(internship_id)
        # Status and ownership only move through approve, reject and set_status
        patch = {k: v for k, v in _normalize(patch).items() if k not in IMMUTABLE_FIELDS | WORKFLOW_FIELDS}

        if isinstance(actor, RecruiterActor):
            if doc.get("postedBy") != actor.id:
                raise Forbidden("You can only edit internships you posted")
            if doc.get("status") == InternshipStatus.submitted.value:
                raise InvalidState("Pending submissions cannot be edited")
        elif not isinstance(actor, AdminActor):
            raise Forbidden("Access denied. Insufficient permissions.")

        merged = {**doc, **patch}
        _check_required(merged)
        _to_internship(merged)

        internship = self._save(internship_id, patch)
        self.audit.record_if_admin(actor, "UPDATE_INTERNSHIP", {
            "internshipId": internship_id, "fields": sorted(patch)
        })
        return internship

    def delete(self, actor: Actor, internship_id: str) -> Internship:
        doc = self._load(internship_id)

        if isinstance(actor, RecruiterActor):
            if not owns_internship(actor.id, doc):
                raise Forbidden("You can only delete your own internships")
            if doc.get("status") == InternshipStatus.active.value:
                raise InvalidState("Active internships cannot be deleted by recruiters")
        elif not isinstance(actor, AdminActor):
            raise Forbidden("Access denied. Insufficient permissions.")

        removed = self.stores.internships.remove(internship_id)
        if removed is None:
            raise NotFound("Internship not found")
        self.audit.record_if_admin(actor, "DELETE_INTERNSHIP", {"internshipId": internship_id, "title": doc.get("title")})
        logger.info("Internship %s deleted by %s %s", internship_id, actor.role, actor.id)
        return Internship.model_validate(removed)

    # --------------------------------------------------------
    # Reads
    # --------------------------------------------------------

    def get(self, actor: Optional[Actor], internship_id: str) -> Dict[str, Any]:
        doc = self._load(internship_id)
        visible = can_view_internship(actor, doc) or (
            isinstance(actor, RecruiterActor) and owns_internship(actor.id, doc)
        )
        if not visible:
            raise NotFound("Internship not found")
        return self.annotate(actor, [Internship.model_validate(doc)])[0]

    def list(self, actor: Optional[Actor], filters: Optional[InternshipFilters] = None) -> List[Dict[str, Any]]:
        filters = filters or InternshipFilters()
        clauses = [internship_filter(actor)]

        status = filters.status
        if status is None and not isinstance(actor, AdminActor):
            status = InternshipStatus.active.value
        if status and status != "all":
            clauses.append({"status": status})
        if filters.department:
            clauses.append({"eligibleDepartments": filters.department})
        if filters.work_mode:
            clauses.append({"workMode": filters.work_mode})

        clauses = [c for c in clauses if c]
        docs = self.stores.internships.query({"$and": clauses} if clauses else {})
        internships = [Internship.model_validate(d) for d in docs if _matches_filters(d, filters)]

        results = self.annotate(actor, internships)
        if filters.recommended and isinstance(actor, StudentActor):
            results.sort(key=lambda r: r["recommendationScore"], reverse=True)
        return results

    def list_own(self, actor: Actor) -> List[Internship]:
        """Recruiter's postings and submissions in every status."""
        if not isinstance(actor, RecruiterActor):
            raise Forbidden("Recruiters only")
        docs = self.stores.internships.query({"$or": [{"postedBy": actor.id}, {"submittedBy": actor.id}]})
        return [Internship.model_validate(d) for d in docs]

    def annotate(self, actor: Optional[Actor], internships: List[Internship]) -> List[Dict[str, Any]]:
        """
        Serialize internships, adding eligibility, score and applied flag
        for student callers only.
        """
        results = [i.to_document() for i in internships]
        if not isinstance(actor, StudentActor):
            return results

        applied_ids = {a["internshipId"] for a in self.stores.applications.query({"studentId": actor.id})}
        for internship, result in zip(internships, results):
            evaluation = evaluate(actor.profile, internship, has_applied=internship.id in applied_ids)
            result.update(evaluation.to_document())
        return results
