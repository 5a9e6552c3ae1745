"""Abstract repository interface (port) for consent history."""

from abc import ABC, abstractmethod

from ragdesk.domain.entities import ConsentRecord, ConsentType


class ConsentRepository(ABC):
    """Port for append-only consent records."""

    @abstractmethod
    async def create(self, record: ConsentRecord) -> ConsentRecord:
        ...

    @abstractmethod
    async def list_for_subject(
        self,
        subject_id: str,
        *,
        consent_type: ConsentType | None = None,
    ) -> list[ConsentRecord]:
        """Full consent history for a subject, oldest first."""
        ...
