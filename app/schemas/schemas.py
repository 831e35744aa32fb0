"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Field names are snake_case in Python and camelCase on the wire.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import EmailStr, Field

from app.models.entities import (
    Application, ApplicationStatus, AuditEntry, CamelModel, Internship,
    InterviewDetails, Mentor, PlacementDetails, PlacementStatus, Student, UserRole
)

SkillList = Union[List[str], str]


# ============================================================
# AUTH SCHEMAS
# ============================================================

class LoginRequest(CamelModel):
    email: EmailStr
    password: str
    role: Optional[UserRole] = None


class TokenResponse(CamelModel):
    message: str = "Login successful"
    token: str
    token_type: str = "bearer"
    user: Dict[str, Any]


class VerifyResponse(CamelModel):
    valid: bool
    user: Dict[str, Any]


# ============================================================
# STUDENT SCHEMAS
# ============================================================

class StudentCreate(CamelModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    semester: int = Field(1, ge=1, le=8)
    cgpa: float = Field(0, ge=0, le=10)
    skills: SkillList = []
    resume_link: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    password: Optional[str] = None


class StudentProfileUpdate(CamelModel):
    name: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[int] = Field(None, ge=1, le=8)
    cgpa: Optional[float] = Field(None, ge=0, le=10)
    skills: Optional[SkillList] = None
    resume_link: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_placed: Optional[bool] = None
    placement_status: Optional[PlacementStatus] = None
    placed_at: Optional[PlacementDetails] = None


class StudentResponse(CamelModel):
    message: str
    student: Student


class StudentListResponse(CamelModel):
    students: List[Student]
    total: int


class MentorListResponse(CamelModel):
    mentors: List[Mentor]
    total: int


# ============================================================
# INTERNSHIP SCHEMAS
# ============================================================

class InternshipCreate(CamelModel):
    """Body for direct postings and recruiter submissions (company optional for recruiters)."""
    title: Optional[str] = None
    company: Optional[str] = None
    description: Optional[str] = None
    required_skills: Optional[SkillList] = None
    preferred_skills: SkillList = []
    eligible_departments: Optional[SkillList] = None
    minimum_semester: int = Field(4, ge=1, le=8)
    minimum_cgpa: float = Field(6.0, ge=0, le=10, alias="minimumCGPA")
    stipend: Optional[str] = None
    duration: Optional[str] = None
    location: Optional[str] = None
    work_mode: str = "On-site"
    application_deadline: Optional[str] = None
    start_date: Optional[str] = None
    max_applications: int = Field(50, ge=1)
    company_description: str = ""
    requirements: List[str] = []
    benefits: List[str] = []


class InternshipUpdate(CamelModel):
    title: Optional[str] = None
    company: Optional[str] = None
    description: Optional[str] = None
    required_skills: Optional[SkillList] = None
    preferred_skills: Optional[SkillList] = None
    eligible_departments: Optional[SkillList] = None
    minimum_semester: Optional[int] = Field(None, ge=1, le=8)
    minimum_cgpa: Optional[float] = Field(None, ge=0, le=10, alias="minimumCGPA")
    stipend: Optional[str] = None
    duration: Optional[str] = None
    location: Optional[str] = None
    work_mode: Optional[str] = None
    application_deadline: Optional[str] = None
    start_date: Optional[str] = None
    max_applications: Optional[int] = Field(None, ge=1)
    company_description: Optional[str] = None
    requirements: Optional[List[str]] = None
    benefits: Optional[List[str]] = None


class ApprovalRequest(CamelModel):
    admin_notes: Optional[str] = None


class RejectionRequest(CamelModel):
    rejection_reason: Optional[str] = None
    admin_notes: Optional[str] = None


class InternshipStatusUpdate(CamelModel):
    status: str


class InternshipResponse(CamelModel):
    message: str
    internship: Internship


class InternshipListResponse(CamelModel):
    internships: List[Dict[str, Any]]
    total: int
    filters: Dict[str, Any] = {}


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(CamelModel):
    internship_id: str
    cover_letter: Optional[str] = None
    mentor_id: Optional[str] = None


class ApplicationStatusUpdate(CamelModel):
    status: ApplicationStatus
    feedback: Optional[str] = None
    interview_details: Optional[InterviewDetails] = None
    offer_details: Optional[Dict[str, Any]] = None


class ApplicationResponse(CamelModel):
    message: str
    application: Application


class ApplicationListResponse(CamelModel):
    applications: List[Dict[str, Any]]
    total: int


# ============================================================
# AUDIT SCHEMAS
# ============================================================

class AuditLogResponse(CamelModel):
    entries: List[AuditEntry]
    total: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(CamelModel):
    message: str
    success: bool = True


class ErrorResponse(CamelModel):
    detail: str
    error: str
