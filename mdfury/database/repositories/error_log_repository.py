import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mdfury.database.models.error_log import ErrorLog

logger = logging.getLogger(__name__)


class ErrorLogRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_error_log(self, error_data: Dict[str, Any]) -> Optional[ErrorLog]:
        """Insert one error row; returns None instead of raising"""
        error_log = ErrorLog(**error_data)
        self.db.add(error_log)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error creating error log: {str(e)}")
            await self.db.rollback()
            return None
        return error_log
