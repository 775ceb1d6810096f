from fastapi import Request
import logging
import time
import uuid
from typing import Callable, Dict, Optional

from mdfury.core.security import decode_access_token, is_api_token

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = ["authorization", "cookie", "x-api-key"]
SENSITIVE_QUERY_PARAMS = ["password"]


def redact(values: Dict[str, str], sensitive: list) -> Dict[str, str]:
    safe_values = {**values}
    for name in sensitive:
        if name in safe_values:
            safe_values[name] = "[REDACTED]"
    return safe_values


def extract_user_fp_from_token(request: Request) -> Optional[str]:
    """Extract user fingerprint from a JWT; API tokens carry none"""
    auth_header = request.headers.get("authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None

    token = auth_header.replace("Bearer ", "")
    if is_api_token(token):
        return None
    token_data = decode_access_token(token)
    if token_data and "fp" in token_data:
        return token_data["fp"]
    return None


async def log_request_middleware(request: Request, call_next: Callable):
    """
    Log request details and timing for all operations.
    The request id is shared with BaseResponse.from_request and the error log.
    """
    start_time = time.time()

    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    path = request.url.path
    method = request.method

    logger.info(f"Request started: {method} {path} - RequestID: {request_id}")
    logger.debug(
        f"Request details: RequestID: {request_id} "
        f"ip={request.client.host if request.client else None} "
        f"user_fp={extract_user_fp_from_token(request)} "
        f"query={redact(dict(request.query_params), SENSITIVE_QUERY_PARAMS)} "
        f"headers={redact(dict(request.headers), SENSITIVE_HEADERS)}"
    )

    try:
        response = await call_next(request)
    except Exception as e:
        duration = time.time() - start_time
        logger.error(f"Request failed: {method} {path} - Error: {str(e)} - " +
                     f"(Duration: {duration:.2f}s) - RequestID: {request_id}", exc_info=True)
        raise

    duration = time.time() - start_time
    logger.info(f"Request completed: {method} {path} - Status: {response.status_code} " +
                f"(Duration: {duration:.2f}s) - RequestID: {request_id}")
    response.headers["X-Request-ID"] = request_id
    return response
