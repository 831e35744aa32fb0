"""
Recruiter Routes

GET /recruiters/profile - Get own recruiter profile
"""

from fastapi import APIRouter, Depends

from app.core.auth import require_roles
from app.core.errors import NotFound
from app.models.actors import Actor
from app.models.entities import Recruiter
from app.services.record_store import RecordStores, get_record_stores

router = APIRouter(prefix="/recruiters", tags=["Recruiters"])


@router.get("/profile", response_model=Recruiter)
async def get_recruiter_profile(
    actor: Actor = Depends(require_roles("recruiter")),
    stores: RecordStores = Depends(get_record_stores)
):
    doc = stores.recruiters.find(actor.id)
    if not doc:
        raise NotFound("Recruiter not found")
    return Recruiter.model_validate(doc)
