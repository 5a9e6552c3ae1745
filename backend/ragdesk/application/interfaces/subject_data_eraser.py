"""Abstract interface (port) for erasing a data subject's rows from one collection."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ragdesk.domain.entities import SubjectCollection


class SubjectDataEraser(ABC):
    """Port used by cascading deletion, one collection at a time."""

    @abstractmethod
    async def delete_subject_rows(
        self,
        collection: SubjectCollection,
        subject_id: str,
        *,
        keep_ids: Sequence[str] = (),
    ) -> int:
        """Delete every row of ``collection`` owned by ``subject_id``.

        Rows whose primary key is in ``keep_ids`` are left in place.

        Returns:
            Number of rows removed.
        """
        ...
