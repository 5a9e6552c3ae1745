"""Privacy audit trail — single entry point for recording operator actions.

Persists one AuditEntry per state-changing action on a data-subject request
or consent record. Writing the entry is best-effort: a failure is logged and
never undoes or blocks the action being audited.
"""

import logging
from typing import Any

from ragdesk.application.interfaces import AuditLogRepository
from ragdesk.domain.entities import AuditEntry, RequestOrigin

logger = logging.getLogger(__name__)


class AuditTrail:
    """Records and logs privacy actions.

    Usage:
        trail = AuditTrail(audit_repository)
        await trail.record(
            actor_id="admin-1",
            action="approve_request",
            resource_type="data_subject_request",
            resource_id=request.id,
            changes={"old_status": "pending", "new_status": "approved"},
            origin=RequestOrigin(ip_address="10.0.0.1"),
        )
    """

    def __init__(self, audit_repository: AuditLogRepository):
        self._repo = audit_repository

    async def record(
        self,
        *,
        actor_id: str,
        action: str,
        resource_type: str,
        resource_id: str | None,
        changes: dict[str, Any],
        origin: RequestOrigin | None = None,
    ) -> AuditEntry | None:
        """Persist an audit entry.

        Returns:
            The persisted entry, or None if the write failed.
        """
        origin = origin or RequestOrigin()
        entry = AuditEntry(
            actor_id=actor_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            changes=changes,
            ip_address=origin.ip_address,
            user_agent=origin.user_agent,
        )

        try:
            saved = await self._repo.create(entry)
        except Exception:
            logger.exception(
                "Failed to write audit entry action=%s resource=%s/%s actor=%s",
                action,
                resource_type,
                resource_id,
                actor_id,
            )
            return None

        logger.info(
            "AUDIT [%s] %s/%s actor=%s ip=%s",
            action,
            resource_type,
            resource_id,
            actor_id,
            origin.ip_address or "n/a",
        )
        return saved

    async def history(self, resource_type: str, resource_id: str) -> list[AuditEntry]:
        """Audit entries for one resource, most recent first."""
        return await self._repo.list_for_resource(resource_type, resource_id)
