"""
Visibility Filter

Role-dependent narrowing of which internships, applications and students a
caller may see. Every list and read path goes through these filters.

Rules:
- Internships: `submitted` only for admins; `rejected` only for admins and
  the recruiter who submitted it.
- Applications: students see their own, mentors their assigned ones,
  recruiters those made to their own internships, admins everything.
  Recruiters are narrowed on purpose; they never see applications to
  other companies' postings.
- Students: recruiters see only students who applied to one of their
  internships; mentors and admins are unrestricted.
"""

from typing import List, Optional

from app.core.errors import Forbidden
from app.models.actors import Actor, AdminActor, MentorActor, RecruiterActor, StudentActor
from app.models.entities import InternshipStatus
from app.services.record_store import RecordStores, matches

_HIDDEN_STATUSES = [InternshipStatus.submitted.value, InternshipStatus.rejected.value]


def _unknown_actor(actor) -> TypeError:
    return TypeError(f"Unhandled actor type: {type(actor).__name__}")


# ============================================================
# INTERNSHIPS
# ============================================================

def internship_filter(actor: Optional[Actor]) -> dict:
    """Mongo filter restricting internships to those the actor may see."""
    if isinstance(actor, AdminActor):
        return {}
    if actor is None:
        return {"status": {"$nin": _HIDDEN_STATUSES}}
    if isinstance(actor, (StudentActor, MentorActor, RecruiterActor)):
        return {"$or": [
            {"status": {"$nin": _HIDDEN_STATUSES}},
            {"status": InternshipStatus.rejected.value, "submittedBy": actor.id},
        ]}
    raise _unknown_actor(actor)


def can_view_internship(actor: Optional[Actor], internship_doc: dict) -> bool:
    return matches(internship_doc, internship_filter(actor))


def recruiter_internship_ids(stores: RecordStores, recruiter_id: str) -> List[str]:
    """Internships the recruiter posted or submitted."""
    docs = stores.internships.query({"$or": [{"postedBy": recruiter_id}, {"submittedBy": recruiter_id}]})
    return [d["id"] for d in docs]


def owns_internship(recruiter_id: str, internship_doc: dict) -> bool:
    return recruiter_id in (internship_doc.get("postedBy"), internship_doc.get("submittedBy"))


# ============================================================
# APPLICATIONS
# ============================================================

def application_filter(actor: Optional[Actor], stores: RecordStores) -> dict:
    """Mongo filter restricting applications to those the actor may see."""
    if actor is None:
        raise Forbidden("Access denied")
    if isinstance(actor, AdminActor):
        return {}
    if isinstance(actor, StudentActor):
        return {"studentId": actor.id}
    if isinstance(actor, MentorActor):
        return {"mentorId": actor.id}
    if isinstance(actor, RecruiterActor):
        return {"internshipId": {"$in": recruiter_internship_ids(stores, actor.id)}}
    raise _unknown_actor(actor)


def can_view_application(actor: Optional[Actor], application_doc: dict, stores: RecordStores) -> bool:
    try:
        return matches(application_doc, application_filter(actor, stores))
    except Forbidden:
        return False


# ============================================================
# STUDENTS
# ============================================================

def allowed_student_ids(stores: RecordStores, recruiter_id: str) -> List[str]:
    """Students with at least one application to the recruiter's internships."""
    internship_ids = recruiter_internship_ids(stores, recruiter_id)
    if not internship_ids:
        return []
    applications = stores.applications.query({"internshipId": {"$in": internship_ids}})
    seen = []
    for app in applications:
        if app["studentId"] not in seen:
            seen.append(app["studentId"])
    return seen


def student_filter(actor: Optional[Actor], stores: RecordStores) -> dict:
    """Mongo filter restricting the student directory for the actor."""
    if isinstance(actor, (AdminActor, MentorActor)):
        return {}
    if isinstance(actor, RecruiterActor):
        return {"id": {"$in": allowed_student_ids(stores, actor.id)}}
    if actor is None or isinstance(actor, StudentActor):
        raise Forbidden("Access denied. Insufficient permissions.")
    raise _unknown_actor(actor)
