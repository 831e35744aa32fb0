"""
Student Routes

POST /students - Create student (admin only)
GET /students - Search students (admin / mentor / recruiter, recruiters scoped to their applicants)
GET /students/profile - Get own profile
PUT /students/profile - Update own profile
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_student_service
from app.core.auth import hash_password, require_roles
from app.models.actors import Actor
from app.models.entities import Student
from app.schemas.schemas import StudentCreate, StudentListResponse, StudentProfileUpdate, StudentResponse
from app.services.student_service import StudentFilters, StudentService

router = APIRouter(prefix="/students", tags=["Students"])


@router.post("", response_model=StudentResponse, status_code=201)
async def create_student(
    data: StudentCreate,
    actor: Actor = Depends(require_roles("admin")),
    service: StudentService = Depends(get_student_service)
):
    fields = data.model_dump(by_alias=True, exclude_none=True, exclude={"password"})
    password_hash = hash_password(data.password) if data.password else None
    student = service.create(actor, fields, password_hash=password_hash)
    return StudentResponse(message="Student created", student=student)


@router.get("", response_model=StudentListResponse)
async def list_students(
    department: Optional[str] = Query(None),
    semester: Optional[int] = Query(None),
    cgpa: Optional[float] = Query(None, description="Minimum CGPA"),
    skills: Optional[str] = Query(None, description="Comma-separated skills, any match"),
    actor: Actor = Depends(require_roles("admin", "mentor", "recruiter")),
    service: StudentService = Depends(get_student_service)
):
    filters = StudentFilters(department=department, semester=semester, cgpa=cgpa, skills=skills)
    students = service.list(actor, filters)
    return StudentListResponse(students=students, total=len(students))


@router.get("/profile", response_model=Student)
async def get_profile(
    actor: Actor = Depends(require_roles("student")),
    service: StudentService = Depends(get_student_service)
):
    return service.get_profile(actor)


@router.put("/profile", response_model=StudentResponse)
async def update_profile(
    data: StudentProfileUpdate,
    actor: Actor = Depends(require_roles("student")),
    service: StudentService = Depends(get_student_service)
):
    """Update own profile. Only provided fields are updated."""
    student = service.update_profile(actor, data.model_dump(by_alias=True, exclude_unset=True))
    return StudentResponse(message="Profile updated successfully", student=student)
