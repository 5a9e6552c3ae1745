"""SQL implementation of SubjectDataEraser — one DELETE per collection."""

import logging
from collections.abc import Sequence

from sqlalchemy import column, delete, table
from sqlalchemy.ext.asyncio import AsyncSession

from ragdesk.application.interfaces import SubjectDataEraser
from ragdesk.domain.entities import SubjectCollection

logger = logging.getLogger(__name__)


class SQLAlchemySubjectDataEraser(SubjectDataEraser):
    """Deletes subject rows by table name.

    Each call runs in its own savepoint, so a failing table (missing,
    locked, constraint violation) leaves the rest of the transaction usable.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def delete_subject_rows(
        self,
        collection: SubjectCollection,
        subject_id: str,
        *,
        keep_ids: Sequence[str] = (),
    ) -> int:
        target = table(collection.name, column("id"), column(collection.subject_column))
        stmt = delete(target).where(target.c[collection.subject_column] == subject_id)
        if keep_ids:
            stmt = stmt.where(target.c.id.not_in(list(keep_ids)))

        async with self._session.begin_nested():
            result = await self._session.execute(stmt)

        logger.debug("DELETE %s for %s: %d row(s)", collection.name, subject_id, result.rowcount)
        return result.rowcount
