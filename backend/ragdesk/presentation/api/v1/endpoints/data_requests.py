"""Data-subject request endpoints: submit, list, inspect, process, cancel."""

from datetime import datetime, timezone

from fastapi import APIRouter, Body, Depends, Query, status

from ragdesk.application.schemas.data_request import (
    AuditEntryResponse,
    CancelRequestBody,
    DataRequestCreate,
    DataRequestCreatedResponse,
    DataRequestDetailResponse,
    DataRequestListResponse,
    DataRequestResponse,
    DataRequestStats,
    PaginationSchema,
    ProcessCommandVariant,
    ProcessResultResponse,
)
from ragdesk.application.services import DataRequestService
from ragdesk.application.services.data_request_service import ProcessOutcome
from ragdesk.domain.entities import DataSubjectRequest, RequestOrigin, RequestStatus, RequestType
from ragdesk.infrastructure.dependencies import get_data_request_service
from ragdesk.presentation.api.v1.request_context import (
    DOMAIN_ERRORS,
    get_actor_id,
    get_request_origin,
    to_http_exception,
)

router = APIRouter(prefix="/data-requests", tags=["Data Requests"])


def _to_response(
    request: DataSubjectRequest, service: DataRequestService, now: datetime
) -> DataRequestResponse:
    sla = service.sla_status(request, now)
    return DataRequestResponse(
        id=request.id,
        subject_id=request.subject_id,
        request_type=request.request_type,
        status=request.status,
        request_details=request.request_details,
        notes=request.notes,
        admin_notes=request.admin_notes,
        result=request.result,
        processed_by=request.processed_by,
        submitted_at=request.submitted_at,
        approved_at=request.approved_at,
        completed_at=request.completed_at,
        expires_at=request.expires_at,
        sla_deadline=request.sla_deadline(service.sla_days),
        sla_status=sla.value if sla else None,
        version=request.version,
    )


def _process_response(outcome: ProcessOutcome) -> ProcessResultResponse:
    request = outcome.request
    return ProcessResultResponse(
        request_id=request.id,
        new_status=request.status,
        processed_at=outcome.processed_at,
        processing_time_hours=request.processing_time_hours(),
        result=request.result,
    )


@router.get("", response_model=DataRequestListResponse, dependencies=[Depends(get_actor_id)])
async def list_requests(
    status_filter: RequestStatus | None = Query(None, alias="status"),
    request_type: RequestType | None = Query(None, alias="type"),
    subject_id: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    include_stats: bool = Query(False),
    service: DataRequestService = Depends(get_data_request_service),
) -> DataRequestListResponse:
    """Paginated requests (newest first) with SLA tracking and optional stats."""
    now = datetime.now(timezone.utc)
    requests, total = await service.list_requests(
        status=status_filter,
        request_type=request_type,
        subject_id=subject_id,
        skip=(page - 1) * limit,
        limit=limit,
    )

    stats = None
    if include_stats:
        raw = await service.stats(now)
        stats = DataRequestStats(
            total=raw.total,
            **{s.value: raw.by_status[s] for s in RequestStatus},
            overdue=raw.overdue,
            due_soon=raw.due_soon,
        )

    return DataRequestListResponse(
        requests=[_to_response(r, service, now) for r in requests],
        stats=stats,
        pagination=PaginationSchema(
            page=page, limit=limit, total=total, has_more=page * limit < total
        ),
    )


@router.post("", response_model=DataRequestCreatedResponse, status_code=status.HTTP_201_CREATED)
async def submit_request(
    data: DataRequestCreate,
    actor_id: str = Depends(get_actor_id),
    origin: RequestOrigin = Depends(get_request_origin),
    service: DataRequestService = Depends(get_data_request_service),
) -> DataRequestCreatedResponse:
    request, estimated_completion = await service.submit(data, actor_id=actor_id, origin=origin)
    return DataRequestCreatedResponse(
        request_id=request.id,
        status=request.status,
        estimated_completion=estimated_completion,
        message=f"{request.request_type.value.capitalize()} request created successfully",
    )


@router.get(
    "/{request_id}",
    response_model=DataRequestDetailResponse,
    dependencies=[Depends(get_actor_id)],
)
async def get_request(
    request_id: str,
    service: DataRequestService = Depends(get_data_request_service),
) -> DataRequestDetailResponse:
    """A single request with its audit trail, most recent entry first."""
    try:
        request, history = await service.get_with_history(request_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return DataRequestDetailResponse(
        request=_to_response(request, service, datetime.now(timezone.utc)),
        audit_logs=[AuditEntryResponse.model_validate(entry) for entry in history],
    )


@router.put("/{request_id}/process", response_model=ProcessResultResponse)
async def process_request(
    request_id: str,
    command: ProcessCommandVariant = Body(..., discriminator="action"),
    actor_id: str = Depends(get_actor_id),
    origin: RequestOrigin = Depends(get_request_origin),
    service: DataRequestService = Depends(get_data_request_service),
) -> ProcessResultResponse:
    """Approve, reject or complete a request.

    Completing a deletion request erases the subject's data; collections
    that could not be erased are listed under
    ``result.deletion_summary.errors`` while ``success`` stays true.
    """
    try:
        outcome = await service.process(request_id, command, actor_id=actor_id, origin=origin)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return _process_response(outcome)


@router.post("/{request_id}/cancel", response_model=ProcessResultResponse)
async def cancel_request(
    request_id: str,
    body: CancelRequestBody | None = Body(None),
    actor_id: str = Depends(get_actor_id),
    origin: RequestOrigin = Depends(get_request_origin),
    service: DataRequestService = Depends(get_data_request_service),
) -> ProcessResultResponse:
    try:
        outcome = await service.cancel(
            request_id,
            actor_id=actor_id,
            notes=body.notes if body else None,
            origin=origin,
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return _process_response(outcome)
