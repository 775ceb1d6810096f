import logging
from fastapi import APIRouter, Depends, HTTPException, status

from mdfury.api.v1.invitation_routes import get_invite_manager
from mdfury.api.v1.utils.http_errors import domain_error_to_http
from mdfury.core.config import config
from mdfury.core.exceptions import InvalidAdminKeyError, ValidationFailedError
from mdfury.core.services.invite_service import InviteCodeManager
from mdfury.schemas.base import BaseResponse, error_detail
from mdfury.schemas.invitation import (AdminKeyRequest, GeneratedInviteCodeResponse,
                                       InviteCodeGenerateRequest, InviteCodeStatsResponse)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invite", tags=["Admin - Invite Codes"])


@router.post("/verify", response_model=BaseResponse)
async def verify_invite_key(request: AdminKeyRequest,
                            manager: InviteCodeManager = Depends(get_invite_manager)):
    if not manager.verify_admin_key(request.invite_key):
        logger.warning("Invite key verification failed")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail=error_detail(InvalidAdminKeyError.default_message))
    return BaseResponse(message="Invite key verified")


@router.post("/generate", response_model=BaseResponse[GeneratedInviteCodeResponse])
async def generate_invite_code(request: InviteCodeGenerateRequest,
                               manager: InviteCodeManager = Depends(get_invite_manager)):
    """
    Generate a single-use invite code:
    - invite_key: the shared admin key
    - expiry_hours: optional lifetime; omitted, zero or negative never expires
    """
    try:
        invite = await manager.generate(request.invite_key, request.expiry_hours)
    except (InvalidAdminKeyError, ValidationFailedError) as e:
        raise domain_error_to_http(e)
    return BaseResponse(
        data=GeneratedInviteCodeResponse(code=invite.code, expires_at=invite.expires_at),
        message="Invite code generated successfully"
    )


@router.post("/stats", response_model=BaseResponse[InviteCodeStatsResponse])
async def invite_code_stats(request: AdminKeyRequest,
                            manager: InviteCodeManager = Depends(get_invite_manager)):
    try:
        stats = await manager.stats(request.invite_key, config.INVITE_STATS_RECENT_LIMIT)
    except InvalidAdminKeyError as e:
        raise domain_error_to_http(e)
    return BaseResponse(data=InviteCodeStatsResponse(**stats))
