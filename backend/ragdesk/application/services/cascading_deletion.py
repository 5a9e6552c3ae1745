"""Cascading erasure of a data subject's records across dependent collections."""

import logging
from collections.abc import Sequence

from ragdesk.application.interfaces import SubjectDataEraser
from ragdesk.domain.entities import (
    SUBJECT_DATA_COLLECTIONS,
    CollectionDeletionOutcome,
    DeletionSummary,
    SubjectCollection,
)

logger = logging.getLogger(__name__)


class CascadingDeletion:
    """Deletes a subject's rows collection by collection, in dependency order.

    Collections run one after another, never concurrently. A failing
    collection is recorded in the summary and the next one is still
    attempted; nothing is rolled back.
    """

    def __init__(
        self,
        eraser: SubjectDataEraser,
        collections: Sequence[SubjectCollection] = SUBJECT_DATA_COLLECTIONS,
    ):
        self._eraser = eraser
        self._collections = tuple(collections)

    @property
    def collections(self) -> tuple[SubjectCollection, ...]:
        return self._collections

    async def run(self, subject_id: str, *, keep_ids: Sequence[str] = ()) -> DeletionSummary:
        summary = DeletionSummary()

        for collection in self._collections:
            try:
                deleted = await self._eraser.delete_subject_rows(
                    collection, subject_id, keep_ids=keep_ids
                )
            except Exception as exc:
                logger.error(
                    "Error deleting from %s for subject %s: %s",
                    collection.name,
                    subject_id,
                    exc,
                )
                summary.outcomes.append(
                    CollectionDeletionOutcome(
                        collection=collection.name,
                        error=f"Failed to delete from {collection.name}: {exc}",
                    )
                )
                continue

            summary.outcomes.append(
                CollectionDeletionOutcome(collection=collection.name, records_deleted=deleted)
            )
            if deleted:
                logger.info("Deleted %d row(s) from %s", deleted, collection.name)

        if summary.is_partial:
            logger.warning(
                "Subject %s erased with %d failed collection(s); manual cleanup needed",
                subject_id,
                len(summary.errors),
            )
        return summary
