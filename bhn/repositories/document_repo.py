from typing import List

from sqlalchemy import select

from bhn.core.exceptions import SubjectConflict
from bhn.models.document_model import Document
from bhn.models.subject import SubjectReference
from bhn.repositories.base_repo import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    """Repository layer for document metadata."""

    model = Document

    async def list_for_subject(self, subject: SubjectReference) -> List[Document]:
        """
        Get documents about one patient, health record or birth registration.

        Args:
            subject: The record the documents refer to

        Returns:
            List of document models, newest first

        Raises:
            SubjectConflict: If documents cannot refer to that kind of record
        """
        column_name = Document.__subject_columns__.get(subject.kind)
        if column_name is None:
            raise SubjectConflict(
                f"documents cannot reference a {subject.kind.value}",
                table=Document.__tablename__,
            )

        column = getattr(Document, column_name)
        result = await self.db.execute(
            select(Document)
            .where(column == subject.id)
            .order_by(Document.created_at.desc())
        )
        return list(result.scalars().all())
