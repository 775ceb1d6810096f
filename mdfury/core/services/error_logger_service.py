import logging
import socket
import traceback
from typing import Any, Dict, Optional

from fastapi import Request

from mdfury.core.config import config
from mdfury.database.database_factory import get_db
from mdfury.database.repositories.error_log_repository import ErrorLogRepository

logger = logging.getLogger(__name__)

ENVIRONMENT = "production" if config.API_PRODUCTION else "development"


def _innermost_frame(error: Exception) -> Dict[str, Any]:
    frames = traceback.extract_tb(error.__traceback__)
    if not frames:
        return {}
    frame = frames[-1]
    return {
        "component": frame.filename.rsplit("/", 1)[-1],
        "function": frame.name,
        "line_number": frame.lineno,
    }


class ErrorLoggerService:
    """Persists server-side failures to ``error_logs``.

    Called as a fire-and-forget task from the exception handlers, so it opens
    its own session and never raises.
    """

    @staticmethod
    async def log_error(error: Exception,
                        error_type: Optional[str] = None,
                        context_data: Optional[Dict[str, Any]] = None,
                        **request_info) -> Optional[str]:
        """
        Store one error row and return its fingerprint.

        ``request_info`` takes the request columns of ``ErrorLog``
        (request_id, user_fp, ip_address, path, method).
        """
        error_data = {
            "error_type": error_type or type(error).__name__,
            "error_message": str(error),
            "error_traceback": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
            "host": socket.gethostname(),
            "environment": ENVIRONMENT,
            "context_data": context_data or {},
            **_innermost_frame(error),
            **request_info,
        }

        try:
            async for db in get_db():
                error_log = await ErrorLogRepository(db).create_error_log(error_data)
                return error_log.fp if error_log else None
        except Exception as e:
            logger.error(f"Failed to log error to database: {str(e)}")
        return None

    @classmethod
    async def log_request_error(cls, request: Request, error: Exception,
                                error_type: Optional[str] = None,
                                context_data: Optional[Dict[str, Any]] = None) -> Optional[str]:
        user = getattr(request.state, "user", None)
        return await cls.log_error(
            error,
            error_type=error_type,
            context_data=context_data,
            request_id=getattr(request.state, "request_id", None),
            user_fp=getattr(user, "fp", None),
            ip_address=request.client.host if request.client else None,
            path=request.url.path,
            method=request.method,
        )
