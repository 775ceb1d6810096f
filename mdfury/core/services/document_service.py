import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mdfury.core.exceptions import BinIdConflictError, DocumentNotFoundError, ValidationFailedError
from mdfury.core.services.access_resolver import AccessResult, resolve_access
from mdfury.core.services.document_guard import apply_visibility_rule, validate_bin_id
from mdfury.core.utils import generate_bin_id, utcnow
from mdfury.database.models.db_models import Document
from mdfury.database.repositories.document_repository import DocumentRepository
from mdfury.schemas.document import DocumentCreateRequest, DocumentUpdateRequest

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled Document"


def _clean_title(title: Optional[str]) -> str:
    return (title or "").strip() or DEFAULT_TITLE


class DocumentService:
    """Owner-side document operations plus public bin resolution.

    Every create and update goes through ``apply_visibility_rule`` before the
    row is written, and bin id changes are checked against both the ``bin_id``
    and ``id`` of every other document.
    """

    def __init__(self, db: AsyncSession):
        self.repo = DocumentRepository(db)

    async def _ensure_bin_id_available(self, bin_id: str, exclude_id: Optional[str] = None) -> None:
        conflict = await self.repo.find_bin_id_conflict(bin_id, exclude_id=exclude_id)
        if conflict is not None:
            logger.info(f"Bin ID conflict for '{bin_id}'")
            raise BinIdConflictError(bin_id)

    async def _save(self, document: Document) -> Document:
        bin_id, document_id = document.bin_id, document.id
        try:
            return await self.repo.save(document)
        except IntegrityError:
            # Only a unique bin_id clash is a conflict; anything else propagates
            if await self.repo.find_bin_id_conflict(bin_id, exclude_id=document_id) is None:
                raise
            raise BinIdConflictError(bin_id)

    async def _insert(self, owner_id: Optional[int], data: DocumentCreateRequest,
                      requested_is_public: Optional[bool]) -> Document:
        bin_id = validate_bin_id(data.bin_id or generate_bin_id())
        await self._ensure_bin_id_available(bin_id)

        is_public, password = apply_visibility_rule(requested_is_public, data.password)

        now = utcnow()
        document = Document(
            bin_id=bin_id,
            owner_id=owner_id,
            title=_clean_title(data.title),
            content=data.content,
            tags=list(data.tags or []),
            is_public=is_public,
            password=password,
            created_at=now,
            updated_at=now
        )
        document = await self._save(document)
        logger.info(f"Created document {document.id} (bin_id={bin_id}, owner={owner_id})")
        return document

    async def create_document(self, owner_id: int, data: DocumentCreateRequest) -> Document:
        requested_is_public = data.is_public
        if requested_is_public is None and data.is_private is not None:
            requested_is_public = not data.is_private
        return await self._insert(owner_id, data, requested_is_public)

    async def create_anonymous_document(self, data: DocumentCreateRequest) -> Document:
        """Save an ownerless bin; anonymous bins are always public"""
        if not data.title.strip() or not data.content:
            raise ValidationFailedError("Title and content are required")
        return await self._insert(None, data, True)

    async def update_document(self, document_id: str, owner_id: int,
                              data: DocumentUpdateRequest) -> Document:
        document = await self.repo.get_owned(document_id, owner_id)
        if document is None:
            raise DocumentNotFoundError()

        fields = {key: value for key, value in data.model_dump(exclude_unset=True).items()
                  if value is not None}

        new_bin_id = fields.get("bin_id")
        if new_bin_id is not None and new_bin_id != document.bin_id:
            validate_bin_id(new_bin_id)
            await self._ensure_bin_id_available(new_bin_id, exclude_id=document.id)
            document.bin_id = new_bin_id

        if "title" in fields:
            document.title = _clean_title(fields["title"])
        if "content" in fields:
            document.content = fields["content"]
        if "tags" in fields:
            document.tags = list(fields["tags"])

        document.is_public, document.password = apply_visibility_rule(
            fields.get("is_public"), fields.get("password"), existing=document)
        document.updated_at = utcnow()

        document = await self._save(document)
        logger.info(f"Updated document {document.id} (owner={owner_id})")
        return document

    async def delete_document(self, document_id: str, owner_id: int) -> None:
        document = await self.repo.get_owned(document_id, owner_id)
        if document is None:
            raise DocumentNotFoundError()
        await self.repo.delete(document)
        logger.info(f"Deleted document {document_id} (owner={owner_id})")

    async def get_document(self, document_id: str, requester_id: Optional[int] = None) -> Document:
        """Fetch by raw id for the owner, or for anyone when the resolver grants it"""
        document = await self.repo.get_by_id(document_id)
        if document is not None and requester_id is not None and document.owner_id == requester_id:
            return document
        if not resolve_access(document, None, requester_id).granted:
            raise DocumentNotFoundError("Document not found")
        return document

    async def list_user_documents(self, owner_id: int, query: Optional[str] = None) -> List[Document]:
        search = query.strip() if query else None
        return await self.repo.list_by_owner(owner_id, search=search or None)

    async def resolve_access(self, lookup_key: str,
                             supplied_password: Optional[str] = None,
                             requester_id: Optional[int] = None) -> AccessResult:
        document = await self.repo.get_by_lookup_key(lookup_key)
        return resolve_access(document, supplied_password, requester_id)
