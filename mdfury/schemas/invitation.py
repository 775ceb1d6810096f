from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class AdminKeyRequest(BaseModel):
    invite_key: Optional[str] = Field(default=None, description="Shared admin invite key")


class InviteCodeGenerateRequest(AdminKeyRequest):
    expiry_hours: Optional[float] = Field(default=None, description="Hours until expiry; empty or <= 0 never expires")


class InviteCodeValidateRequest(BaseModel):
    invite_code: Optional[str] = None


class InviteCodeUseRequest(BaseModel):
    invite_code: Optional[str] = None
    used_by: Optional[int] = Field(default=None, description="Id of the user redeeming the code")


class GeneratedInviteCodeResponse(BaseModel):
    code: str
    expires_at: Optional[datetime] = None


class InviteCodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    is_used: bool
    created_at: datetime
    expires_at: Optional[datetime] = None
    used_at: Optional[datetime] = None
    used_by_user_id: Optional[int] = None


class InviteCodeStatsCounts(BaseModel):
    total: int
    active: int
    used: int
    expired: int


class RecentInviteCode(BaseModel):
    id: int
    code: str
    is_used: bool
    used_by: Optional[str] = None
    used_by_email: Optional[str] = None
    used_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: datetime
    is_expired: bool


class InviteCodeStatsResponse(BaseModel):
    stats: InviteCodeStatsCounts
    recent_codes: List[RecentInviteCode]
