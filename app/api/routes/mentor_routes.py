"""
Mentor Routes

GET /mentors - List mentors (students pick one when applying)
GET /mentors/profile - Get own mentor profile
"""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_student_service
from app.core.auth import get_current_actor, require_roles
from app.core.errors import NotFound
from app.models.actors import Actor
from app.models.entities import Mentor
from app.schemas.schemas import MentorListResponse
from app.services.record_store import RecordStores, get_record_stores
from app.services.student_service import StudentService

router = APIRouter(prefix="/mentors", tags=["Mentors"])


@router.get("", response_model=MentorListResponse)
async def list_mentors(
    actor: Actor = Depends(get_current_actor),
    service: StudentService = Depends(get_student_service)
):
    mentors = service.list_mentors()
    return MentorListResponse(mentors=mentors, total=len(mentors))


@router.get("/profile", response_model=Mentor)
async def get_mentor_profile(
    actor: Actor = Depends(require_roles("mentor")),
    stores: RecordStores = Depends(get_record_stores)
):
    doc = stores.mentors.find(actor.id)
    if not doc:
        raise NotFound("Mentor not found")
    return Mentor.model_validate(doc)
