"""Application service (use case) for data-subject requests.

Owns the request lifecycle on top of the ``DataSubjectRequest`` state
machine: submission, listing with SLA tracking, processing commands
(approve / reject / complete), administrative cancel, and the audit
entry written for each of them.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from ragdesk.application.interfaces import DataRequestRepository
from ragdesk.application.schemas.data_request import (
    ApproveCommand,
    CompleteCommand,
    DataRequestCreate,
    RejectCommand,
)
from ragdesk.application.services.audit_trail import AuditTrail
from ragdesk.application.services.cascading_deletion import CascadingDeletion
from ragdesk.domain.entities import (
    AuditEntry,
    DataSubjectRequest,
    RequestOrigin,
    RequestStatus,
    RequestType,
    SLAStatus,
)
from ragdesk.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "data_subject_request"

# Shown to the submitter; not a commitment.
_ESTIMATED_TURNAROUND = timedelta(hours=24)


@dataclass
class ProcessOutcome:
    request: DataSubjectRequest
    processed_at: datetime


@dataclass
class RequestStats:
    """Totals per status plus SLA pressure on open requests."""

    by_status: dict[RequestStatus, int]
    overdue: int = 0
    due_soon: int = 0

    @property
    def total(self) -> int:
        return sum(self.by_status.values())


class DataRequestService:
    """Orchestrates data-subject request workflows. Depends on ports via DI."""

    def __init__(
        self,
        repository: DataRequestRepository,
        audit_trail: AuditTrail,
        cascading_deletion: CascadingDeletion,
        *,
        sla_days: int = 30,
        sla_warning_days: int = 27,
        export_retention_days: int = 30,
    ):
        self._repository = repository
        self._audit = audit_trail
        self._deletion = cascading_deletion
        self._sla_days = sla_days
        self._sla_warning_days = sla_warning_days
        self._export_retention = timedelta(days=export_retention_days)

    @property
    def sla_days(self) -> int:
        return self._sla_days

    def sla_status(self, request: DataSubjectRequest, now: datetime | None = None) -> SLAStatus | None:
        return request.sla_status(
            now, sla_days=self._sla_days, warning_days=self._sla_warning_days
        )

    # ── Queries ──────────────────────────────────────────────────────

    async def get_request(self, request_id: str) -> DataSubjectRequest:
        request = await self._repository.get_by_id(request_id)
        if request is None:
            raise EntityNotFoundError("DataSubjectRequest", request_id)
        return request

    async def get_with_history(
        self, request_id: str
    ) -> tuple[DataSubjectRequest, list[AuditEntry]]:
        request = await self.get_request(request_id)
        history = await self._audit.history(RESOURCE_TYPE, request_id)
        return request, history

    async def list_requests(
        self,
        *,
        status: RequestStatus | None = None,
        request_type: RequestType | None = None,
        subject_id: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[DataSubjectRequest], int]:
        """One page of requests (newest first) and the total matching count."""
        requests = await self._repository.get_all(
            status=status,
            request_type=request_type,
            subject_id=subject_id,
            skip=skip,
            limit=limit,
        )
        total = await self._repository.count(
            status=status, request_type=request_type, subject_id=subject_id
        )
        return requests, total

    async def stats(self, now: datetime | None = None) -> RequestStats:
        now = now or datetime.now(timezone.utc)
        counts = await self._repository.count_by_status()
        stats = RequestStats(by_status={s: counts.get(s, 0) for s in RequestStatus})
        for request in await self._repository.list_open():
            sla = self.sla_status(request, now)
            if sla is SLAStatus.OVERDUE:
                stats.overdue += 1
            elif sla is SLAStatus.WARNING:
                stats.due_soon += 1
        return stats

    # ── Commands ─────────────────────────────────────────────────────

    async def submit(
        self,
        data: DataRequestCreate,
        *,
        actor_id: str,
        origin: RequestOrigin | None = None,
    ) -> tuple[DataSubjectRequest, datetime]:
        """Create a pending request.

        Returns:
            The stored request and an estimated completion time.
        """
        request = DataSubjectRequest(
            subject_id=data.subject_id,
            request_type=data.request_type,
            request_details=dict(data.request_details),
            notes=data.notes,
        )
        if request.request_type is RequestType.EXPORT:
            request.expires_at = request.submitted_at + self._export_retention

        request = await self._repository.create(request)
        logger.info(
            "Data request %s submitted (%s for subject %s)",
            request.id,
            request.request_type.value,
            request.subject_id,
        )

        await self._audit.record(
            actor_id=actor_id,
            action="create_data_request",
            resource_type=RESOURCE_TYPE,
            resource_id=request.id,
            changes=data.model_dump(mode="json"),
            origin=origin,
        )
        return request, request.submitted_at + _ESTIMATED_TURNAROUND

    async def process(
        self,
        request_id: str,
        command: ApproveCommand | RejectCommand | CompleteCommand,
        *,
        actor_id: str,
        origin: RequestOrigin | None = None,
    ) -> ProcessOutcome:
        """Apply an approve / reject / complete command.

        Completing a deletion request erases the subject's data first; the
        erasure is best-effort and its per-collection errors end up in the
        request result, not in an exception.

        Raises:
            EntityNotFoundError: unknown request.
            InvalidStateTransition: the action is not allowed from the
                current status (``RequestAlreadyFinalized`` when terminal).
            ConcurrentModificationError: the request changed meanwhile.
        """
        request = await self.get_request(request_id)
        expected_version = request.version
        old_status = request.status

        if isinstance(command, ApproveCommand):
            request.approve(actor_id, command.notes)
        elif isinstance(command, RejectCommand):
            request.reject(actor_id, command.notes)
        else:
            request.ensure_can("complete")
            completed_at = datetime.now(timezone.utc)
            result = await self._completion_result(request, command, completed_at)
            request.complete(actor_id, result, command.notes, completed_at=completed_at)

        request = await self._repository.update(request, expected_version=expected_version)
        processed_at = request.completed_at or datetime.now(timezone.utc)

        logger.info(
            "Data request %s: %s -> %s by %s",
            request.id,
            old_status.value,
            request.status.value,
            actor_id,
        )
        await self._audit.record(
            actor_id=actor_id,
            action=f"{command.action}_request",
            resource_type=RESOURCE_TYPE,
            resource_id=request.id,
            changes={
                "old_status": old_status.value,
                "new_status": request.status.value,
                "action": command.action,
                "notes": command.notes,
                "processed_data": request.result,
            },
            origin=origin,
        )
        return ProcessOutcome(request=request, processed_at=processed_at)

    async def cancel(
        self,
        request_id: str,
        *,
        actor_id: str,
        notes: str | None = None,
        origin: RequestOrigin | None = None,
    ) -> ProcessOutcome:
        """Administratively cancel a pending or approved request."""
        request = await self.get_request(request_id)
        expected_version = request.version
        old_status = request.status

        request.cancel(actor_id, notes)
        request = await self._repository.update(request, expected_version=expected_version)

        logger.info("Data request %s cancelled by %s", request.id, actor_id)
        await self._audit.record(
            actor_id=actor_id,
            action="cancel_request",
            resource_type=RESOURCE_TYPE,
            resource_id=request.id,
            changes={
                "old_status": old_status.value,
                "new_status": request.status.value,
                "action": "cancel",
                "notes": notes,
            },
            origin=origin,
        )
        return ProcessOutcome(request=request, processed_at=request.completed_at)

    # ── Internals ────────────────────────────────────────────────────

    async def _completion_result(
        self,
        request: DataSubjectRequest,
        command: CompleteCommand,
        completed_at: datetime,
    ) -> dict[str, Any]:
        if request.request_type is RequestType.DELETION:
            # The request row itself survives as the record of the erasure.
            summary = await self._deletion.run(request.subject_id, keep_ids=(request.id,))
            return {
                "deletion_summary": summary.to_dict(),
                "deletion_completed_at": completed_at.isoformat(),
            }

        if (
            request.request_type in (RequestType.EXPORT, RequestType.PORTABILITY)
            and command.export_data is not None
        ):
            return {
                "export_data": command.export_data,
                "export_completed_at": completed_at.isoformat(),
            }

        return {}
