"""
Resolved request identities.

An actor is one of four closed variants, each carrying only the attributes
its role needs. Anonymous callers are represented by ``None``.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from app.models.entities import Admin, Mentor, Recruiter, Student, UserRole


class _BaseActor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: str = ""


class StudentActor(_BaseActor):
    role: Literal["student"] = "student"
    profile: Student


class MentorActor(_BaseActor):
    role: Literal["mentor"] = "mentor"
    department: Optional[str] = None


class AdminActor(_BaseActor):
    role: Literal["admin"] = "admin"


class RecruiterActor(_BaseActor):
    role: Literal["recruiter"] = "recruiter"
    company: Optional[str] = None


Actor = Union[StudentActor, MentorActor, AdminActor, RecruiterActor]


def actor_from_document(role: UserRole, doc: dict) -> Actor:
    """Build the actor variant for a user document of the given role."""
    if role == UserRole.student:
        student = Student.model_validate(doc)
        return StudentActor(id=student.id, email=student.email, name=student.name, profile=student)
    if role == UserRole.mentor:
        mentor = Mentor.model_validate(doc)
        return MentorActor(id=mentor.id, email=mentor.email, name=mentor.name, department=mentor.department)
    if role == UserRole.admin:
        admin = Admin.model_validate(doc)
        return AdminActor(id=admin.id, email=admin.email, name=admin.name)
    if role == UserRole.recruiter:
        recruiter = Recruiter.model_validate(doc)
        return RecruiterActor(id=recruiter.id, email=recruiter.email, name=recruiter.name, company=recruiter.company)
    raise ValueError(f"Unknown role: {role}")
