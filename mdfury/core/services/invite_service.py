"""Invite code lifecycle: generation, validation, single-use redemption, stats.

A code moves from unused to used at most once. Redemption relies on one
conditional UPDATE (``WHERE is_used = false``) so that of two concurrent
redemptions the database lets exactly one through; the other is reported as
already used.
"""
import enum
import hashlib
import hmac
import logging
import secrets
import time
from datetime import timedelta
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from mdfury.core.exceptions import (
    InvalidAdminKeyError,
    InviteCodeAlreadyUsedError,
    InviteCodeExpiredError,
    InviteCodeNotFoundError,
    ValidationFailedError,
)
from mdfury.core.utils import utcnow
from mdfury.database.models.invitation import InviteCode
from mdfury.database.repositories.invitation_repository import InvitationRepository
from mdfury.database.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

CODE_LENGTH = 12
DEFAULT_RECENT_LIMIT = 20


class InviteCodeStatus(str, enum.Enum):
    VALID = "valid"
    NOT_FOUND = "not_found"
    ALREADY_USED = "already_used"
    EXPIRED = "expired"


# Exception raised for each failed validation status
STATUS_ERRORS = {
    InviteCodeStatus.NOT_FOUND: InviteCodeNotFoundError,
    InviteCodeStatus.ALREADY_USED: InviteCodeAlreadyUsedError,
    InviteCodeStatus.EXPIRED: InviteCodeExpiredError,
}


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


class InviteCodeManager:
    def __init__(self, db: AsyncSession, admin_key: Optional[str]):
        self.db = db
        self.admin_key = admin_key
        self.repo = InvitationRepository(db)

    def verify_admin_key(self, supplied_key: Optional[str]) -> bool:
        if not self.admin_key or not supplied_key:
            return False
        return hmac.compare_digest(supplied_key.encode("utf-8"), self.admin_key.encode("utf-8"))

    def _require_admin_key(self, supplied_key: Optional[str]) -> None:
        if not self.verify_admin_key(supplied_key):
            logger.warning("Rejected invite admin operation: invalid invite key")
            raise InvalidAdminKeyError()

    def _derive_code(self, admin_key: str) -> str:
        payload = f"{int(time.time() * 1000)}:{secrets.token_hex(8)}"
        digest = hmac.new(admin_key.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256)
        return digest.hexdigest()[:CODE_LENGTH].upper()

    async def generate(self, admin_key: str, expiry_hours: Optional[float] = None) -> InviteCode:
        """Create a new single-use code; ``expiry_hours`` <= 0 or None means no expiry."""
        self._require_admin_key(admin_key)

        expires_at = None
        if expiry_hours and expiry_hours > 0:
            try:
                expires_at = utcnow() + timedelta(hours=expiry_hours)
            except (OverflowError, ValueError):
                raise ValidationFailedError("Expiry is too far in the future")

        invite = await self.repo.create_invite_code(self._derive_code(admin_key), expires_at)
        logger.info(f"Generated invite code {invite.code} (expires_at={expires_at})")
        return invite

    async def validate(self, code: str) -> InviteCodeStatus:
        invite = await self.repo.get_invite_code(normalize_code(code))
        if invite is None:
            return InviteCodeStatus.NOT_FOUND
        # A used code stays used even after its expiry passes
        if invite.is_used:
            return InviteCodeStatus.ALREADY_USED
        if invite.is_expired(utcnow()):
            return InviteCodeStatus.EXPIRED
        return InviteCodeStatus.VALID

    async def require_valid(self, code: str) -> str:
        """Validate and raise the matching InviteCodeError on failure."""
        status = await self.validate(code)
        if status is not InviteCodeStatus.VALID:
            raise STATUS_ERRORS[status]()
        return normalize_code(code)

    async def redeem(self, code: str, redeemer_user_id: Optional[int] = None) -> InviteCode:
        """Mark a code used. Expiry is checked by ``validate``, not here."""
        normalized = normalize_code(code)
        invite = await self.repo.get_invite_code(normalized)
        if invite is None:
            raise InviteCodeNotFoundError()
        if invite.is_used:
            raise InviteCodeAlreadyUsedError()

        used_by = None
        if redeemer_user_id is not None:
            user = await UserRepository(self.db).get_user_by_id(redeemer_user_id)
            if user is not None:
                used_by = user.id
            else:
                logger.warning(f"Redeemer {redeemer_user_id} not found, recording invite {normalized} without user")

        if not await self.repo.mark_as_used(normalized, used_by, utcnow()):
            raise InviteCodeAlreadyUsedError()

        invite = await self.repo.refresh(invite)
        logger.info(f"Invite code {normalized} redeemed (used_by={used_by})")
        return invite

    async def stats(self, admin_key: str, recent_limit: int = DEFAULT_RECENT_LIMIT) -> Dict[str, Any]:
        self._require_admin_key(admin_key)

        now = utcnow()
        total = await self.repo.get_total_count()
        used = await self.repo.get_used_count()
        expired = await self.repo.get_expired_count(now)

        recent_codes = []
        for invite, user in await self.repo.get_recent_with_users(recent_limit):
            recent_codes.append({
                "id": invite.id,
                "code": invite.code,
                "is_used": invite.is_used,
                "used_by": user.username if user else None,
                "used_by_email": user.email if user else None,
                "used_at": invite.used_at,
                "expires_at": invite.expires_at,
                "created_at": invite.created_at,
                "is_expired": invite.is_expired(now),
            })

        return {
            "stats": {
                "total": total,
                "active": total - used - expired,
                "used": used,
                "expired": expired,
            },
            "recent_codes": recent_codes,
        }
