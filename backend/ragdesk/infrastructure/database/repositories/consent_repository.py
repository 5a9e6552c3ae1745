"""Concrete repository for append-only consent records."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ragdesk.application.interfaces import ConsentRepository
from ragdesk.domain.entities import ConsentRecord, ConsentType, LegalBasis
from ragdesk.infrastructure.database.models import ConsentRecordModel


class SQLAlchemyConsentRepository(ConsentRepository):

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: ConsentRecordModel) -> ConsentRecord:
        return ConsentRecord(
            id=model.id,
            subject_id=model.subject_id,
            consent_type=ConsentType(model.consent_type),
            consent_given=model.consent_given,
            legal_basis=LegalBasis(model.legal_basis),
            consent_text=model.consent_text,
            version=model.version,
            source=model.source,
            created_at=model.created_at,
        )

    async def create(self, record: ConsentRecord) -> ConsentRecord:
        model = ConsentRecordModel(
            id=record.id,
            subject_id=record.subject_id,
            consent_type=record.consent_type.value,
            consent_given=record.consent_given,
            legal_basis=record.legal_basis.value,
            consent_text=record.consent_text,
            version=record.version,
            source=record.source,
            created_at=record.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def list_for_subject(
        self,
        subject_id: str,
        *,
        consent_type: ConsentType | None = None,
    ) -> list[ConsentRecord]:
        stmt = select(ConsentRecordModel).where(ConsentRecordModel.subject_id == subject_id)
        if consent_type is not None:
            stmt = stmt.where(ConsentRecordModel.consent_type == consent_type.value)
        stmt = stmt.order_by(ConsentRecordModel.created_at.asc())
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]
