"""Pydantic DTOs for data-subject requests and their processing commands."""

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from ragdesk.domain.entities import RequestStatus, RequestType


# ── Request Schemas ──────────────────────────────────────────────────


class DataRequestCreate(BaseModel):
    """Schema for submitting a new data-subject request."""

    subject_id: str = Field(..., min_length=1, max_length=255)
    request_type: RequestType = Field(..., examples=["deletion"])
    request_details: dict[str, Any] = Field(default_factory=dict)
    notes: str | None = None


class ApproveCommand(BaseModel):
    action: Literal["approve"]
    notes: str | None = None


class RejectCommand(BaseModel):
    action: Literal["reject"]
    notes: str | None = None


class CompleteCommand(BaseModel):
    action: Literal["complete"]
    notes: str | None = None
    export_data: dict[str, Any] | None = Field(
        None, description="Export bundle attached verbatim to export/portability requests",
    )


ProcessCommandVariant = Union[ApproveCommand, RejectCommand, CompleteCommand]

# Tagged on "action"; unknown actions fail validation before dispatch.
ProcessCommand = Annotated[ProcessCommandVariant, Field(discriminator="action")]


class CancelRequestBody(BaseModel):
    notes: str | None = None


# ── Response Schemas ─────────────────────────────────────────────────


class DataRequestResponse(BaseModel):
    """A data-subject request with SLA tracking."""

    id: str
    subject_id: str
    request_type: RequestType
    status: RequestStatus
    request_details: dict[str, Any] = {}
    notes: str | None = None
    admin_notes: str | None = None
    result: dict[str, Any] = {}
    processed_by: str | None = None
    submitted_at: datetime
    approved_at: datetime | None = None
    completed_at: datetime | None = None
    expires_at: datetime | None = None
    sla_deadline: datetime
    sla_status: str | None = None
    version: int


class DataRequestStats(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    completed: int = 0
    rejected: int = 0
    cancelled: int = 0
    overdue: int = 0
    due_soon: int = 0


class PaginationSchema(BaseModel):
    page: int
    limit: int
    total: int
    has_more: bool


class DataRequestListResponse(BaseModel):
    requests: list[DataRequestResponse]
    stats: DataRequestStats | None = None
    pagination: PaginationSchema


class AuditEntryResponse(BaseModel):
    id: int | None
    actor_id: str
    action: str
    resource_type: str
    resource_id: str | None
    changes: dict[str, Any]
    ip_address: str | None
    user_agent: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class DataRequestDetailResponse(BaseModel):
    request: DataRequestResponse
    audit_logs: list[AuditEntryResponse]


class DataRequestCreatedResponse(BaseModel):
    success: bool = True
    request_id: str
    status: RequestStatus
    estimated_completion: datetime
    message: str


class ProcessResultResponse(BaseModel):
    """Outcome of an approve / reject / complete / cancel action."""

    success: bool = True
    request_id: str
    new_status: RequestStatus
    processed_at: datetime
    processing_time_hours: int | None = None
    result: dict[str, Any] = {}
