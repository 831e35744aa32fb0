"""
Admin Routes

GET /admins/profile - Get own admin profile
GET /admins/audit-log - Most recent audit entries, newest first
"""

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_audit_service
from app.core.auth import require_roles
from app.core.errors import NotFound
from app.models.actors import Actor
from app.models.entities import Admin
from app.schemas.schemas import AuditLogResponse
from app.services.audit_service import AuditService
from app.services.record_store import RecordStores, get_record_stores

router = APIRouter(prefix="/admins", tags=["Admin"])


@router.get("/profile", response_model=Admin)
async def get_admin_profile(
    actor: Actor = Depends(require_roles("admin")),
    stores: RecordStores = Depends(get_record_stores)
):
    doc = stores.admins.find(actor.id)
    if not doc:
        raise NotFound("Admin not found")
    return Admin.model_validate(doc)


@router.get("/audit-log", response_model=AuditLogResponse)
async def get_audit_log(
    limit: int = Query(100, ge=1, le=1000),
    actor: Actor = Depends(require_roles("admin")),
    audit: AuditService = Depends(get_audit_service)
):
    entries = audit.recent(limit)
    return AuditLogResponse(entries=entries, total=len(entries))
