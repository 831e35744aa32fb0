"""
Internship Routes

GET /internships - List visible internships with filters (students get match scores)
GET /internships/mine - Recruiter's own postings and submissions
GET /internships/{id} - Get internship details
POST /internships - Post internship directly (admin only)
POST /internships/submit - Submit internship for approval (recruiter only)
POST /internships/{id}/approve - Approve a submission (admin only)
POST /internships/{id}/reject - Reject a submission (admin only)
PUT /internships/{id}/status - Activate / deactivate (admin only)
PUT /internships/{id} - Edit (admin, or owning recruiter)
DELETE /internships/{id} - Delete (admin, or owning recruiter if not active)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_internship_service
from app.core.auth import get_current_actor, get_optional_actor, require_roles
from app.models.actors import Actor
from app.schemas.schemas import (
    ApprovalRequest, InternshipCreate, InternshipListResponse, InternshipResponse,
    InternshipStatusUpdate, InternshipUpdate, RejectionRequest
)
from app.services.internship_service import InternshipFilters, InternshipService

router = APIRouter(prefix="/internships", tags=["Internships"])


@router.get("", response_model=InternshipListResponse)
async def list_internships(
    status: Optional[str] = Query(None, description="Status filter, 'all' for every visible status"),
    department: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    company: Optional[str] = Query(None),
    work_mode: Optional[str] = Query(None, alias="workMode"),
    skills: Optional[str] = Query(None, description="Comma-separated skills, any match"),
    min_stipend: Optional[int] = Query(None, alias="minStipend"),
    max_stipend: Optional[int] = Query(None, alias="maxStipend"),
    recommended: bool = Query(False),
    actor: Optional[Actor] = Depends(get_optional_actor),
    service: InternshipService = Depends(get_internship_service)
):
    """List internships the caller may see. Students also get isEligible, recommendationScore and hasApplied."""
    filters = InternshipFilters(
        status=status, department=department, location=location, company=company,
        work_mode=work_mode, skills=skills, min_stipend=min_stipend, max_stipend=max_stipend,
        recommended=recommended
    )
    internships = service.list(actor, filters)
    return InternshipListResponse(
        internships=internships,
        total=len(internships),
        filters=filters.model_dump(exclude_none=True)
    )


@router.get("/mine", response_model=InternshipListResponse)
async def list_my_internships(
    actor: Actor = Depends(require_roles("recruiter")),
    service: InternshipService = Depends(get_internship_service)
):
    internships = [i.to_document() for i in service.list_own(actor)]
    return InternshipListResponse(internships=internships, total=len(internships))


@router.get("/{internship_id}")
async def get_internship(
    internship_id: str,
    actor: Optional[Actor] = Depends(get_optional_actor),
    service: InternshipService = Depends(get_internship_service)
):
    return service.get(actor, internship_id)


@router.post("", response_model=InternshipResponse, status_code=201)
async def create_internship(
    data: InternshipCreate,
    actor: Actor = Depends(require_roles("admin")),
    service: InternshipService = Depends(get_internship_service)
):
    """Post an internship directly. Live immediately."""
    internship = service.create_direct(actor, data.model_dump(by_alias=True, exclude_none=True))
    return InternshipResponse(message="Internship created successfully", internship=internship)


@router.post("/submit", response_model=InternshipResponse, status_code=201)
async def submit_internship(
    data: InternshipCreate,
    actor: Actor = Depends(require_roles("recruiter")),
    service: InternshipService = Depends(get_internship_service)
):
    """Submit an internship for admin approval. Company defaults to the recruiter's."""
    internship = service.submit(actor, data.model_dump(by_alias=True, exclude_none=True))
    return InternshipResponse(message="Internship submitted for approval", internship=internship)


@router.post("/{internship_id}/approve", response_model=InternshipResponse)
async def approve_internship(
    internship_id: str,
    data: ApprovalRequest,
    actor: Actor = Depends(get_current_actor),
    service: InternshipService = Depends(get_internship_service)
):
    internship = service.approve(actor, internship_id, data.admin_notes)
    return InternshipResponse(message="Internship approved successfully", internship=internship)


@router.post("/{internship_id}/reject", response_model=InternshipResponse)
async def reject_internship(
    internship_id: str,
    data: RejectionRequest,
    actor: Actor = Depends(get_current_actor),
    service: InternshipService = Depends(get_internship_service)
):
    internship = service.reject(actor, internship_id, data.rejection_reason, data.admin_notes)
    return InternshipResponse(message="Internship rejected", internship=internship)


@router.put("/{internship_id}/status", response_model=InternshipResponse)
async def update_internship_status(
    internship_id: str,
    data: InternshipStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    service: InternshipService = Depends(get_internship_service)
):
    internship = service.set_status(actor, internship_id, data.status)
    return InternshipResponse(message=f"Internship marked {internship.status}", internship=internship)


@router.put("/{internship_id}", response_model=InternshipResponse)
async def update_internship(
    internship_id: str,
    data: InternshipUpdate,
    actor: Actor = Depends(get_current_actor),
    service: InternshipService = Depends(get_internship_service)
):
    """Edit an internship. Only provided fields are updated."""
    internship = service.update(actor, internship_id, data.model_dump(by_alias=True, exclude_unset=True))
    return InternshipResponse(message="Internship updated successfully", internship=internship)


@router.delete("/{internship_id}", response_model=InternshipResponse)
async def delete_internship(
    internship_id: str,
    actor: Actor = Depends(get_current_actor),
    service: InternshipService = Depends(get_internship_service)
):
    internship = service.delete(actor, internship_id)
    return InternshipResponse(message="Internship deleted successfully", internship=internship)
