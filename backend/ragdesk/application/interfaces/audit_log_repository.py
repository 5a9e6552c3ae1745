"""Abstract repository interface for the privacy audit log."""

from abc import ABC, abstractmethod

from ragdesk.domain.entities import AuditEntry


class AuditLogRepository(ABC):
    """Port — append-only persistence for audit entries."""

    @abstractmethod
    async def create(self, entry: AuditEntry) -> AuditEntry:
        """Persist a new audit entry.

        Returns:
            The created entry with its assigned ID.
        """
        ...

    @abstractmethod
    async def list_for_resource(self, resource_type: str, resource_id: str) -> list[AuditEntry]:
        """Audit entries for one resource, most recent first."""
        ...
