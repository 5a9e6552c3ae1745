"""Consent endpoints. The acting identity is the consenting subject."""

from fastapi import APIRouter, Depends, Query, status

from ragdesk.application.schemas.consent import (
    ConsentCreate,
    ConsentRecordedResponse,
    ConsentResponse,
    CurrentConsentsResponse,
)
from ragdesk.application.services import ConsentService
from ragdesk.domain.entities import ConsentType, RequestOrigin
from ragdesk.infrastructure.dependencies import get_consent_service
from ragdesk.presentation.api.v1.request_context import get_actor_id, get_request_origin

router = APIRouter(prefix="/consents", tags=["Consent"])


@router.post("", response_model=ConsentRecordedResponse, status_code=status.HTTP_201_CREATED)
async def record_consent(
    data: ConsentCreate,
    actor_id: str = Depends(get_actor_id),
    origin: RequestOrigin = Depends(get_request_origin),
    service: ConsentService = Depends(get_consent_service),
) -> ConsentRecordedResponse:
    record = await service.record(actor_id, data, origin=origin)
    return ConsentRecordedResponse(consent_id=record.id, recorded_at=record.created_at)


@router.get("", response_model=CurrentConsentsResponse)
async def current_consents(
    subject_id: str | None = Query(None, description="Defaults to the caller"),
    consent_type: ConsentType | None = Query(None),
    actor_id: str = Depends(get_actor_id),
    service: ConsentService = Depends(get_consent_service),
) -> CurrentConsentsResponse:
    """The consent currently in force per type (latest record wins)."""
    subject = subject_id or actor_id
    records = await service.current_consents(subject, consent_type=consent_type)
    return CurrentConsentsResponse(
        subject_id=subject,
        consents=[ConsentResponse.model_validate(r) for r in records],
    )
