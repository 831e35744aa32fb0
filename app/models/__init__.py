"""
Models module - internal data structures.

- entities: documents kept in the record store (students, internships, ...)
- actors: the resolved identity a request is performed as

Difference from schemas:
- Models: Internal data structures
- Schemas: API contract (what client sends/receives)
"""

from app.models.actors import (
    Actor, AdminActor, MentorActor, RecruiterActor, StudentActor, actor_from_document
)
from app.models.entities import (
    Admin, Application, ApplicationStatus, AuditEntry, Internship, InternshipStatus,
    InterviewDetails, MatchEvaluation, Mentor, MentorApproval, PlacementStatus,
    Recruiter, Student, UserRole
)

__all__ = [
    "Actor", "AdminActor", "MentorActor", "RecruiterActor", "StudentActor",
    "actor_from_document", "Admin", "Application", "ApplicationStatus", "AuditEntry",
    "Internship", "InternshipStatus", "InterviewDetails", "MatchEvaluation", "Mentor",
    "MentorApproval", "PlacementStatus", "Recruiter", "Student", "UserRole",
]
