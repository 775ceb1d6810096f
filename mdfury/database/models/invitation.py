from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from mdfury.database.database_factory import Base
from mdfury.core.utils import utcnow


class InviteCode(Base):
    __tablename__ = "invite_codes"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(12), unique=True, nullable=False, index=True)
    is_used = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    expires_at = Column(DateTime, nullable=True)  # None means the code never expires
    used_at = Column(DateTime, nullable=True)
    used_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Relationship to user who used this code
    used_by_user = relationship("User", foreign_keys=[used_by_user_id])

    def is_expired(self, now=None) -> bool:
        now = now or utcnow()
        return self.expires_at is not None and self.expires_at < now
