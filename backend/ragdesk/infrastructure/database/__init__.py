from .base import Base
from .session import engine, async_session_factory, get_db_session
from .models import (
    AuditLogModel,
    ConsentRecordModel,
    DataSubjectRequestModel,
    DocumentChunkModel,
    DocumentModel,
)

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "get_db_session",
    "AuditLogModel",
    "ConsentRecordModel",
    "DataSubjectRequestModel",
    "DocumentChunkModel",
    "DocumentModel",
]
