"""
Application Routes

GET /applications - Applications visible to the caller
GET /applications/pending/mentor - Applications awaiting the mentor's decision
GET /applications/{id} - Get one application
POST /applications - Apply to an internship (student only)
PUT /applications/{id}/status - Move an application along (mentor / admin)
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from app.api.dependencies import get_application_service, get_outbox
from app.core.auth import get_current_actor, require_roles
from app.models.actors import Actor
from app.schemas.schemas import (
    ApplicationCreate, ApplicationListResponse, ApplicationResponse, ApplicationStatusUpdate
)
from app.services.application_service import ApplicationService
from app.services.notification_service import NotificationOutbox

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("", response_model=ApplicationListResponse)
async def list_applications(
    status: Optional[str] = Query(None),
    actor: Actor = Depends(get_current_actor),
    service: ApplicationService = Depends(get_application_service)
):
    applications = service.list(actor, status)
    return ApplicationListResponse(applications=applications, total=len(applications))


@router.get("/pending/mentor", response_model=ApplicationListResponse)
async def pending_mentor_applications(
    actor: Actor = Depends(require_roles("mentor")),
    service: ApplicationService = Depends(get_application_service)
):
    applications = service.pending_for_mentor(actor)
    return ApplicationListResponse(applications=applications, total=len(applications))


@router.get("/{application_id}")
async def get_application(
    application_id: str,
    actor: Actor = Depends(get_current_actor),
    service: ApplicationService = Depends(get_application_service)
):
    return service.get(actor, application_id)


@router.post("", response_model=ApplicationResponse, status_code=201)
async def create_application(
    data: ApplicationCreate,
    actor: Actor = Depends(require_roles("student")),
    service: ApplicationService = Depends(get_application_service)
):
    """Apply to an internship. One application per internship; eligibility is checked."""
    application = service.create(actor, data.internship_id, data.cover_letter, data.mentor_id)
    return ApplicationResponse(message="Application submitted successfully", application=application)


@router.put("/{application_id}/status", response_model=ApplicationResponse)
async def update_application_status(
    application_id: str,
    data: ApplicationStatusUpdate,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(require_roles("mentor", "admin")),
    service: ApplicationService = Depends(get_application_service),
    outbox: NotificationOutbox = Depends(get_outbox)
):
    """Update status. The student is emailed after the response is sent."""
    application = service.transition(
        actor,
        application_id,
        data.status,
        feedback=data.feedback,
        interview_details=data.interview_details,
        offer_details=data.offer_details
    )
    background_tasks.add_task(outbox.dispatch_pending)
    return ApplicationResponse(message="Application status updated successfully", application=application)
