from .audit_trail import AuditTrail
from .cascading_deletion import CascadingDeletion
from .consent_service import ConsentService
from .data_request_service import DataRequestService
from .document_service import DocumentService
from .embedding_gateway import EmbeddingGateway

__all__ = [
    "AuditTrail",
    "CascadingDeletion",
    "ConsentService",
    "DataRequestService",
    "DocumentService",
    "EmbeddingGateway",
]
