"""
Service dependencies for route injection.

Tests swap the backing pieces with app.dependency_overrides:
    app.dependency_overrides[get_record_stores] = lambda: RecordStores.in_memory()
"""

from functools import lru_cache

from fastapi import Depends

from app.services.application_service import ApplicationService
from app.services.audit_service import AuditService
from app.services.internship_service import InternshipService
from app.services.notification_service import NotificationOutbox, build_sender
from app.services.record_store import RecordStores, get_record_stores
from app.services.student_service import StudentService


@lru_cache()
def get_outbox() -> NotificationOutbox:
    return NotificationOutbox(build_sender())


def get_audit_service(stores: RecordStores = Depends(get_record_stores)) -> AuditService:
    return AuditService(stores.audit_log)


def get_internship_service(
    stores: RecordStores = Depends(get_record_stores),
    audit: AuditService = Depends(get_audit_service)
) -> InternshipService:
    return InternshipService(stores, audit)


def get_application_service(
    stores: RecordStores = Depends(get_record_stores),
    audit: AuditService = Depends(get_audit_service),
    outbox: NotificationOutbox = Depends(get_outbox)
) -> ApplicationService:
    return ApplicationService(stores, audit, outbox)


def get_student_service(stores: RecordStores = Depends(get_record_stores)) -> StudentService:
    return StudentService(stores)
