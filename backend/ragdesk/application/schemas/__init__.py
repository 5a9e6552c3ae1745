from .consent import (
    ConsentCreate,
    ConsentRecordedResponse,
    ConsentResponse,
    CurrentConsentsResponse,
)
from .data_request import (
    ApproveCommand,
    AuditEntryResponse,
    CancelRequestBody,
    CompleteCommand,
    DataRequestCreate,
    DataRequestCreatedResponse,
    DataRequestDetailResponse,
    DataRequestListResponse,
    DataRequestResponse,
    DataRequestStats,
    PaginationSchema,
    ProcessCommand,
    ProcessCommandVariant,
    ProcessResultResponse,
    RejectCommand,
)
from .documents import (
    DocumentIngestRequest,
    DocumentSummarySchema,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    IngestResultResponse,
    NormalizeUrlRequest,
    NormalizeUrlResponse,
    SearchRequest,
    SearchResponse,
)

__all__ = [
    "ConsentCreate",
    "ConsentRecordedResponse",
    "ConsentResponse",
    "CurrentConsentsResponse",
    "ApproveCommand",
    "AuditEntryResponse",
    "CancelRequestBody",
    "CompleteCommand",
    "DataRequestCreate",
    "DataRequestCreatedResponse",
    "DataRequestDetailResponse",
    "DataRequestListResponse",
    "DataRequestResponse",
    "DataRequestStats",
    "PaginationSchema",
    "ProcessCommand",
    "ProcessCommandVariant",
    "ProcessResultResponse",
    "RejectCommand",
    "DocumentIngestRequest",
    "DocumentSummarySchema",
    "DuplicateCheckRequest",
    "DuplicateCheckResponse",
    "IngestResultResponse",
    "NormalizeUrlRequest",
    "NormalizeUrlResponse",
    "SearchRequest",
    "SearchResponse",
]
