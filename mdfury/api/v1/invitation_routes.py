import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from mdfury.api.v1.utils.http_errors import domain_error_to_http
from mdfury.core.config import config
from mdfury.core.exceptions import InviteCodeError
from mdfury.core.services.invite_service import InviteCodeManager, normalize_code
from mdfury.database.database_factory import get_db
from mdfury.schemas.base import BaseResponse, error_detail
from mdfury.schemas.invitation import (InviteCodeResponse, InviteCodeUseRequest,
                                       InviteCodeValidateRequest)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/invite",
    tags=["Invite Codes"],
    responses={404: {"description": "Not found"}}
)


async def get_invite_manager(db: AsyncSession = Depends(get_db)) -> InviteCodeManager:
    return InviteCodeManager(db, config.INVITE_KEY)


def _require_code(invite_code) -> str:
    if not normalize_code(invite_code):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail=error_detail("Invite code is required"))
    return invite_code


@router.post("/validate", response_model=BaseResponse[dict])
async def validate_invite_code(request: InviteCodeValidateRequest,
                               manager: InviteCodeManager = Depends(get_invite_manager)):
    """Check a code without consuming it"""
    code = _require_code(request.invite_code)
    try:
        normalized = await manager.require_valid(code)
    except InviteCodeError as e:
        logger.info(f"Invite code validation failed: {e.message}")
        raise domain_error_to_http(e)
    return BaseResponse(data={"code": normalized}, message="Invite code is valid")


@router.post("/use", response_model=BaseResponse[InviteCodeResponse])
async def use_invite_code(request: InviteCodeUseRequest,
                          manager: InviteCodeManager = Depends(get_invite_manager)):
    """Redeem a code, optionally recording who used it"""
    code = _require_code(request.invite_code)
    try:
        invite = await manager.redeem(code, request.used_by)
    except InviteCodeError as e:
        logger.info(f"Invite code redemption failed: {e.message}")
        raise domain_error_to_http(e)
    return BaseResponse(data=InviteCodeResponse.model_validate(invite),
                        message="Invite code marked as used")
