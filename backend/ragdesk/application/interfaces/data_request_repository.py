"""Abstract repository interface (port) for data-subject requests."""

from abc import ABC, abstractmethod

from ragdesk.domain.entities import DataSubjectRequest, RequestStatus, RequestType


class DataRequestRepository(ABC):
    """Port for data-subject request persistence."""

    @abstractmethod
    async def get_by_id(self, request_id: str) -> DataSubjectRequest | None:
        ...

    @abstractmethod
    async def get_all(
        self,
        *,
        status: RequestStatus | None = None,
        request_type: RequestType | None = None,
        subject_id: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[DataSubjectRequest]:
        """Retrieve a filtered, paginated list, newest first."""
        ...

    @abstractmethod
    async def create(self, request: DataSubjectRequest) -> DataSubjectRequest:
        ...

    @abstractmethod
    async def update(self, request: DataSubjectRequest, *, expected_version: int) -> DataSubjectRequest:
        """Write the request only if its stored version is still ``expected_version``.

        The stored version is bumped on success.

        Raises:
            ConcurrentModificationError: someone else wrote in between.
        """
        ...

    @abstractmethod
    async def count(
        self,
        *,
        status: RequestStatus | None = None,
        request_type: RequestType | None = None,
        subject_id: str | None = None,
    ) -> int:
        """Number of requests matching the same filters as ``get_all``."""
        ...

    @abstractmethod
    async def count_by_status(self) -> dict[RequestStatus, int]:
        """Totals per status across all requests."""
        ...

    @abstractmethod
    async def list_open(self) -> list[DataSubjectRequest]:
        """Every request that is not yet in a terminal status."""
        ...
