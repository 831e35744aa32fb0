"""
Domain entities stored in the record store.

Documents are kept in camelCase (the shape the dashboard and the stored
collections use); Python code reads and writes the snake_case attributes.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)

    def to_document(self) -> Dict[str, Any]:
        """Dump to the camelCase document stored in a collection."""
        return self.model_dump(by_alias=True)


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    mentor = "mentor"
    admin = "admin"
    recruiter = "recruiter"


class ApplicationStatus(str, Enum):
    applied = "applied"
    pending_mentor_approval = "pending_mentor_approval"
    approved = "approved"
    rejected = "rejected"
    interview_scheduled = "interview_scheduled"
    interview_completed = "interview_completed"
    offered = "offered"
    accepted = "accepted"


class InternshipStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    submitted = "submitted"
    rejected = "rejected"


class PlacementStatus(str, Enum):
    active = "active"
    placed = "placed"
    inactive = "inactive"


class MentorApproval(str, Enum):
    approved = "approved"
    rejected = "rejected"


# ============================================================
# USERS
# ============================================================

class PlacementDetails(CamelModel):
    company: str
    position: str
    package: str
    join_date: Optional[datetime] = None


class Student(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole = UserRole.student
    department: str
    semester: int = Field(1, ge=1, le=8)
    cgpa: float = Field(0.0, ge=0, le=10)
    skills: List[str] = Field(default_factory=list)
    resume_link: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_placed: bool = False
    placement_status: PlacementStatus = PlacementStatus.active
    placed_at: Optional[PlacementDetails] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def placed_students_have_details(self):
        if self.is_placed and self.placed_at is None:
            raise ValueError("placedAt is required when isPlaced is true")
        return self


class Mentor(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole = UserRole.mentor
    department: Optional[str] = None
    designation: Optional[str] = None


class Admin(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole = UserRole.admin


class Recruiter(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole = UserRole.recruiter
    company: Optional[str] = None


# ============================================================
# INTERNSHIPS
# ============================================================

class Internship(CamelModel):
    id: str
    title: str
    company: str
    description: str = ""
    required_skills: List[str] = Field(default_factory=list)
    preferred_skills: List[str] = Field(default_factory=list)
    eligible_departments: List[str] = Field(default_factory=list)
    minimum_semester: int = 4
    minimum_cgpa: float = Field(6.0, alias="minimumCGPA")
    stipend: Optional[str] = None
    duration: Optional[str] = None
    location: Optional[str] = None
    work_mode: str = "On-site"
    application_deadline: Optional[str] = None
    start_date: Optional[str] = None
    max_applications: int = 50
    current_applications: int = 0
    status: InternshipStatus = InternshipStatus.active
    requirements: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    company_description: str = ""
    posted_by: Optional[str] = None
    submitted_by: Optional[str] = None
    submitted_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# APPLICATIONS
# ============================================================

class InterviewDetails(CamelModel):
    date: datetime
    mode: Optional[str] = None
    location: Optional[str] = None
    meeting_link: Optional[str] = None


class Application(CamelModel):
    id: str
    student_id: str
    internship_id: str
    status: ApplicationStatus
    cover_letter: str = ""
    mentor_id: Optional[str] = None
    mentor_approval: Optional[MentorApproval] = None
    mentor_feedback: Optional[str] = None
    interview_scheduled: Optional[InterviewDetails] = None
    interview_feedback: Optional[str] = None
    offer_details: Optional[Dict[str, Any]] = None
    applied_at: datetime
    updated_at: datetime
    processed_at: Optional[datetime] = None


class MatchEvaluation(CamelModel):
    """Read-time eligibility and fit of one student against one internship."""
    is_eligible: bool
    recommendation_score: int
    has_applied: bool = False


class AuditEntry(CamelModel):
    id: str
    admin_id: str
    action: str
    details: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime
