import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import update, desc, func, and_
from typing import Optional, List, Tuple
from datetime import datetime
from mdfury.database.models.invitation import InviteCode
from mdfury.database.models.db_models import User

logger = logging.getLogger(__name__)


class InvitationRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_invite_code(self, code: str,
                                 expires_at: Optional[datetime] = None) -> InviteCode:
        """Persist a new, unused invite code"""
        invitation = InviteCode(
            code=code,
            expires_at=expires_at,
            is_used=False
        )
        try:
            self.db.add(invitation)
            await self.db.commit()
            await self.db.refresh(invitation)
            return invitation
        except Exception as e:
            logger.error(f"Error creating invite code: {str(e)}")
            await self.db.rollback()
            raise

    async def get_invite_code(self, code: str) -> Optional[InviteCode]:
        """Get invite code by its value"""
        result = await self.db.execute(
            select(InviteCode).where(InviteCode.code == code)
        )
        return result.scalars().first()

    async def mark_as_used(self, code: str, user_id: Optional[int],
                           used_at: datetime) -> bool:
        """Flip ``is_used`` in one conditional UPDATE.

        Returns False when no unused row matched, i.e. someone else redeemed
        the code first.
        """
        try:
            result = await self.db.execute(
                update(InviteCode)
                .where(InviteCode.code == code, InviteCode.is_used.is_(False))
                .values(is_used=True, used_at=used_at, used_by_user_id=user_id)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            return result.rowcount == 1
        except Exception as e:
            logger.error(f"Error marking invite code {code} as used: {str(e)}")
            await self.db.rollback()
            raise

    async def refresh(self, invitation: InviteCode) -> InviteCode:
        await self.db.refresh(invitation)
        return invitation

    async def get_total_count(self) -> int:
        result = await self.db.execute(select(func.count(InviteCode.id)))
        return result.scalar() or 0

    async def get_used_count(self) -> int:
        result = await self.db.execute(
            select(func.count(InviteCode.id)).where(InviteCode.is_used.is_(True))
        )
        return result.scalar() or 0

    async def get_expired_count(self, now: datetime) -> int:
        """Unused codes whose expiry has passed; used codes never count as expired"""
        result = await self.db.execute(
            select(func.count(InviteCode.id)).where(and_(
                InviteCode.is_used.is_(False),
                InviteCode.expires_at.is_not(None),
                InviteCode.expires_at < now
            ))
        )
        return result.scalar() or 0

    async def get_recent_with_users(self, limit: int = 20) -> List[Tuple[InviteCode, Optional[User]]]:
        """Most recent codes, newest first, with the redeeming user joined in"""
        result = await self.db.execute(
            select(InviteCode, User)
            .outerjoin(User, User.id == InviteCode.used_by_user_id)
            .order_by(desc(InviteCode.created_at), desc(InviteCode.id))
            .limit(limit)
        )
        return [(row[0], row[1]) for row in result.all()]
