from fastapi import APIRouter

from mdfury.core.config import config
from mdfury.schemas.base import BaseResponse

router = APIRouter(prefix="/api/v1/config", tags=["Config"])


@router.get("/public-mode", response_model=BaseResponse[dict])
async def public_mode():
    """Whether the instance runs as an open, login-free pastebin"""
    return BaseResponse(data={"public_mode": config.PUBLIC_MODE})
