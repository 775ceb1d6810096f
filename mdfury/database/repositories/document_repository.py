import logging
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc, or_, cast, String
from mdfury.database.models.db_models import Document

logger = logging.getLogger(__name__)


class DocumentRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, document_id: str) -> Optional[Document]:
        result = await self.db.execute(
            select(Document).where(Document.id == document_id)
        )
        return result.scalars().first()

    async def get_by_bin_id(self, bin_id: str) -> Optional[Document]:
        result = await self.db.execute(
            select(Document).where(Document.bin_id == bin_id)
        )
        return result.scalars().first()

    async def get_by_lookup_key(self, lookup_key: str) -> Optional[Document]:
        """Find a document by bin id, falling back to the raw id for old links"""
        document = await self.get_by_bin_id(lookup_key)
        if document is None:
            document = await self.get_by_id(lookup_key)
        return document

    async def get_owned(self, document_id: str, owner_id: int) -> Optional[Document]:
        result = await self.db.execute(
            select(Document).where(
                Document.id == document_id,
                Document.owner_id == owner_id
            )
        )
        return result.scalars().first()

    async def find_bin_id_conflict(self, bin_id: str,
                                   exclude_id: Optional[str] = None) -> Optional[Document]:
        """Return a document already addressable as ``bin_id`` (by bin id or by id)"""
        query = select(Document).where(
            or_(Document.bin_id == bin_id, Document.id == bin_id)
        )
        if exclude_id is not None:
            query = query.where(Document.id != exclude_id)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def list_by_owner(self, owner_id: int, search: Optional[str] = None) -> List[Document]:
        query = select(Document).where(Document.owner_id == owner_id)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                Document.title.ilike(pattern),
                Document.content.ilike(pattern),
                cast(Document.tags, String).ilike(pattern)
            ))
        result = await self.db.execute(query.order_by(desc(Document.updated_at)))
        return result.scalars().all()

    async def save(self, document: Document) -> Document:
        try:
            self.db.add(document)
            await self.db.commit()
            await self.db.refresh(document)
            return document
        except Exception as e:
            logger.error(f"Error saving document {document.bin_id}: {str(e)}")
            await self.db.rollback()
            raise

    async def delete(self, document: Document) -> None:
        try:
            await self.db.delete(document)
            await self.db.commit()
        except Exception as e:
            logger.error(f"Error deleting document {document.id}: {str(e)}")
            await self.db.rollback()
            raise
