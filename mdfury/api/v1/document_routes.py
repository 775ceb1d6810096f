from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from mdfury.api.v1.auth import get_current_user, get_current_user_optional
from mdfury.api.v1.utils.http_errors import domain_error_to_http
from mdfury.core.config import config
from mdfury.core.exceptions import MdFuryError
from mdfury.core.services.document_service import DocumentService
from mdfury.database.database_factory import get_db
from mdfury.database.models import User
from mdfury.schemas.base import BaseResponse, error_detail
from mdfury.schemas.document import (DocumentCreateRequest, DocumentListResponse,
                                     DocumentResponse, DocumentUpdateRequest)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/markdowns", tags=["Markdowns"])


async def get_document_service(db: AsyncSession = Depends(get_db)) -> DocumentService:
    return DocumentService(db)


def _server_error(action: str, error: Exception) -> HTTPException:
    logger.error(f"Error {action}: {str(error)}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                         detail=error_detail(f"Failed {action}"))


@router.get("", response_model=BaseResponse[DocumentListResponse])
async def list_documents(
    q: Optional[str] = Query(None, description="Search title, content and tags"),
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service)
):
    """List the caller's documents, newest edits first"""
    try:
        documents = await service.list_user_documents(current_user.id, q)
        return BaseResponse(data=DocumentListResponse(
            documents=[DocumentResponse.model_validate(doc) for doc in documents],
            total_count=len(documents)
        ))
    except Exception as e:
        raise _server_error("listing documents", e)


@router.post("", response_model=BaseResponse[DocumentResponse])
async def create_document(
    request: DocumentCreateRequest,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service)
):
    try:
        document = await service.create_document(current_user.id, request)
        return BaseResponse(data=DocumentResponse.model_validate(document),
                            message="Document created successfully")
    except MdFuryError as e:
        raise domain_error_to_http(e)
    except Exception as e:
        raise _server_error("creating document", e)


@router.post("/anonymous", response_model=BaseResponse[DocumentResponse])
async def create_anonymous_document(
    request: DocumentCreateRequest,
    service: DocumentService = Depends(get_document_service)
):
    """Save a bin without an account; only available in public mode"""
    if not config.PUBLIC_MODE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail=error_detail("Public mode is disabled"))
    try:
        document = await service.create_anonymous_document(request)
        return BaseResponse(data=DocumentResponse.model_validate(document),
                            message="Document created successfully")
    except MdFuryError as e:
        raise domain_error_to_http(e)
    except Exception as e:
        raise _server_error("creating anonymous document", e)


@router.get("/{document_id}", response_model=BaseResponse[DocumentResponse])
async def get_document(
    document_id: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: DocumentService = Depends(get_document_service)
):
    try:
        requester_id = current_user.id if current_user else None
        document = await service.get_document(document_id, requester_id)
        response = DocumentResponse.model_validate(document)
        if requester_id is None or document.owner_id != requester_id:
            # Only the owner sees the viewing password
            response.password = None
        return BaseResponse(data=response)
    except MdFuryError as e:
        raise domain_error_to_http(e)
    except Exception as e:
        raise _server_error("retrieving document", e)


@router.put("/{document_id}", response_model=BaseResponse[DocumentResponse])
async def update_document(
    document_id: str,
    request: DocumentUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service)
):
    """Partial update; the stored visibility is normalized before it is returned"""
    try:
        document = await service.update_document(document_id, current_user.id, request)
        return BaseResponse(data=DocumentResponse.model_validate(document),
                            message="Document updated successfully")
    except MdFuryError as e:
        raise domain_error_to_http(e)
    except Exception as e:
        raise _server_error("updating document", e)


@router.delete("/{document_id}", response_model=BaseResponse)
async def delete_document(
    document_id: str,
    current_user: User = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service)
):
    try:
        await service.delete_document(document_id, current_user.id)
        return BaseResponse(message="Document deleted successfully")
    except MdFuryError as e:
        raise domain_error_to_http(e)
    except Exception as e:
        raise _server_error("deleting document", e)
