"""Concrete repository for the privacy audit log."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ragdesk.application.interfaces import AuditLogRepository
from ragdesk.domain.entities import AuditEntry
from ragdesk.infrastructure.database.models import AuditLogModel


class SQLAlchemyAuditLogRepository(AuditLogRepository):
    """Append-only; entries are never updated or deleted."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: AuditLogModel) -> AuditEntry:
        return AuditEntry(
            id=model.id,
            actor_id=model.actor_id,
            action=model.action,
            resource_type=model.resource_type,
            resource_id=model.resource_id,
            changes=model.changes or {},
            ip_address=model.ip_address,
            user_agent=model.user_agent,
            created_at=model.created_at,
        )

    async def create(self, entry: AuditEntry) -> AuditEntry:
        model = AuditLogModel(
            actor_id=entry.actor_id,
            action=entry.action,
            resource_type=entry.resource_type,
            resource_id=entry.resource_id,
            changes=entry.changes,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            created_at=entry.created_at,
        )
        # Savepoint: a failed audit insert must not roll back the audited change.
        async with self._session.begin_nested():
            self._session.add(model)
        return self._to_entity(model)

    async def list_for_resource(self, resource_type: str, resource_id: str) -> list[AuditEntry]:
        stmt = (
            select(AuditLogModel)
            .where(
                AuditLogModel.resource_type == resource_type,
                AuditLogModel.resource_id == resource_id,
            )
            .order_by(AuditLogModel.created_at.desc(), AuditLogModel.id.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]
