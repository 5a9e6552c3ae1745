"""Concrete repository for data-subject requests with optimistic locking."""

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ragdesk.application.interfaces import DataRequestRepository
from ragdesk.domain.entities import DataSubjectRequest, RequestStatus, RequestType
from ragdesk.domain.exceptions import ConcurrentModificationError
from ragdesk.infrastructure.database.models import DataSubjectRequestModel

_OPEN_STATUSES = [s.value for s in RequestStatus if not s.is_terminal]


class SQLAlchemyDataRequestRepository(DataRequestRepository):
    """Implements the DataRequestRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: DataSubjectRequestModel) -> DataSubjectRequest:
        return DataSubjectRequest(
            id=model.id,
            subject_id=model.subject_id,
            request_type=RequestType(model.request_type),
            status=RequestStatus(model.status),
            request_details=model.request_details or {},
            notes=model.notes,
            admin_notes=model.admin_notes,
            result=model.result or {},
            processed_by=model.processed_by,
            submitted_at=model.submitted_at,
            approved_at=model.approved_at,
            completed_at=model.completed_at,
            expires_at=model.expires_at,
            version=model.version,
        )

    def _filtered(self, stmt, status, request_type, subject_id):
        if status is not None:
            stmt = stmt.where(DataSubjectRequestModel.status == status.value)
        if request_type is not None:
            stmt = stmt.where(DataSubjectRequestModel.request_type == request_type.value)
        if subject_id is not None:
            stmt = stmt.where(DataSubjectRequestModel.subject_id == subject_id)
        return stmt

    async def get_by_id(self, request_id: str) -> DataSubjectRequest | None:
        model = await self._session.get(DataSubjectRequestModel, request_id, populate_existing=True)
        return self._to_entity(model) if model else None

    async def get_all(
        self,
        *,
        status: RequestStatus | None = None,
        request_type: RequestType | None = None,
        subject_id: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[DataSubjectRequest]:
        stmt = self._filtered(select(DataSubjectRequestModel), status, request_type, subject_id)
        stmt = stmt.order_by(DataSubjectRequestModel.submitted_at.desc()).offset(skip).limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def count(
        self,
        *,
        status: RequestStatus | None = None,
        request_type: RequestType | None = None,
        subject_id: str | None = None,
    ) -> int:
        stmt = self._filtered(
            select(func.count()).select_from(DataSubjectRequestModel),
            status,
            request_type,
            subject_id,
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def count_by_status(self) -> dict[RequestStatus, int]:
        stmt = select(DataSubjectRequestModel.status, func.count()).group_by(
            DataSubjectRequestModel.status
        )
        result = await self._session.execute(stmt)
        return {RequestStatus(status): int(total) for status, total in result.all()}

    async def list_open(self) -> list[DataSubjectRequest]:
        stmt = select(DataSubjectRequestModel).where(
            DataSubjectRequestModel.status.in_(_OPEN_STATUSES)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def create(self, request: DataSubjectRequest) -> DataSubjectRequest:
        model = DataSubjectRequestModel(
            id=request.id,
            subject_id=request.subject_id,
            request_type=request.request_type.value,
            status=request.status.value,
            request_details=request.request_details,
            notes=request.notes,
            admin_notes=request.admin_notes,
            result=request.result,
            processed_by=request.processed_by,
            submitted_at=request.submitted_at,
            approved_at=request.approved_at,
            completed_at=request.completed_at,
            expires_at=request.expires_at,
            version=request.version,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def update(self, request: DataSubjectRequest, *, expected_version: int) -> DataSubjectRequest:
        # Compare-and-set on version; a lost race matches zero rows.
        stmt = (
            update(DataSubjectRequestModel)
            .where(
                DataSubjectRequestModel.id == request.id,
                DataSubjectRequestModel.version == expected_version,
            )
            .values(
                status=request.status.value,
                admin_notes=request.admin_notes,
                result=request.result,
                processed_by=request.processed_by,
                approved_at=request.approved_at,
                completed_at=request.completed_at,
                expires_at=request.expires_at,
                version=expected_version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:
            raise ConcurrentModificationError("DataSubjectRequest", request.id, expected_version)

        request.version = expected_version + 1
        return request
