from .audit_entry import AuditEntry, RequestOrigin
from .consent import ConsentRecord, ConsentType, LegalBasis, resolve_current_consents
from .data_request import (
    SUBJECT_DATA_COLLECTIONS,
    CollectionDeletionOutcome,
    DataSubjectRequest,
    DeletionSummary,
    RequestStatus,
    RequestType,
    SLAStatus,
    SubjectCollection,
)
from .document import Document, DocumentChunk, SearchMatch, SourceType

__all__ = [
    "AuditEntry",
    "RequestOrigin",
    "ConsentRecord",
    "ConsentType",
    "LegalBasis",
    "resolve_current_consents",
    "SUBJECT_DATA_COLLECTIONS",
    "CollectionDeletionOutcome",
    "DataSubjectRequest",
    "DeletionSummary",
    "RequestStatus",
    "RequestType",
    "SLAStatus",
    "SubjectCollection",
    "Document",
    "DocumentChunk",
    "SearchMatch",
    "SourceType",
]
