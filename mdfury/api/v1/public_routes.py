import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from mdfury.api.v1.auth import get_current_user_optional
from mdfury.api.v1.document_routes import get_document_service
from mdfury.api.v1.utils.http_errors import access_denial_to_http
from mdfury.core.services.document_service import DocumentService
from mdfury.database.models import User
from mdfury.schemas.base import BaseResponse
from mdfury.schemas.document import PublicDocumentResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/public", tags=["Public Bins"])


@router.get("/{bin_id}", response_model=BaseResponse[PublicDocumentResponse])
async def get_public_document(
    request: Request,
    bin_id: str,
    password: Optional[str] = Query(None, description="Viewing password for protected bins"),
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: DocumentService = Depends(get_document_service)
):
    """
    Resolve a shared bin by its bin id (or raw document id).

    - 401: private and the caller is anonymous
    - 403: private and the caller isn't the owner
    - 423: password protected and the password is missing or wrong
    - 404: no such bin
    """
    requester_id = current_user.id if current_user else None
    result = await service.resolve_access(bin_id, password, requester_id)

    if not result.granted:
        logger.info(f"Access to bin {bin_id} denied: {result.outcome.value}")
        raise access_denial_to_http(result)

    return BaseResponse.from_request(request, data=PublicDocumentResponse.from_document(result.document))
