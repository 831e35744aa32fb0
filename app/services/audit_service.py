"""
Audit Service - trail of admin-performed mutations.

Only the most recent `audit_log_limit` entries (1000 by default) are kept;
the oldest entries are evicted first.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from app.core.config import get_settings
from app.models.actors import Actor, AdminActor
from app.models.entities import AuditEntry, utcnow
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)


class AuditService:

    def __init__(self, store: RecordStore, limit: Optional[int] = None):
        self.store = store
        self.limit = limit if limit is not None else get_settings().audit_log_limit

    def record(self, admin_id: str, action: str, details: Optional[Dict[str, Any]] = None) -> AuditEntry:
        entry = AuditEntry(
            id=uuid.uuid4().hex,
            admin_id=admin_id,
            action=action,
            details=details or {},
            timestamp=utcnow()
        )
        self.store.insert(entry.to_document())
        self._evict_overflow()
        return entry

    def record_if_admin(self, actor: Actor, action: str, details: Optional[Dict[str, Any]] = None):
        """
        Audit a mutation when it was performed by an admin.

        Called after the mutation is written, so a failed audit write is
        logged instead of raised.
        """
        if not isinstance(actor, AdminActor):
            return
        try:
            self.record(actor.id, action, details)
        except Exception as e:
            logger.error("Audit write failed for %s by %s: %s", action, actor.id, e)

    def _evict_overflow(self):
        overflow = self.store.count() - self.limit
        if overflow <= 0:
            return
        oldest = self.store.query(sort=[("timestamp", 1)], limit=overflow)
        for doc in oldest:
            self.store.remove(doc["id"])
        logger.debug("Evicted %d audit entries", len(oldest))

    def recent(self, limit: int = 100) -> List[AuditEntry]:
        """Newest entries first."""
        docs = self.store.query(sort=[("timestamp", -1)], limit=limit)
        return [AuditEntry.model_validate(d) for d in docs]
