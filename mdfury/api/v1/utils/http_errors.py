import logging
from fastapi import HTTPException, status

from mdfury.core.exceptions import (
    BinIdConflictError,
    DocumentNotFoundError,
    InvalidAdminKeyError,
    InviteCodeError,
    MdFuryError,
    ValidationFailedError,
)
from mdfury.core.services.access_resolver import AccessOutcome, AccessResult
from mdfury.schemas.base import error_detail

logger = logging.getLogger(__name__)

# Checked in order, so subclasses must come before their bases
DOMAIN_ERROR_STATUS = (
    (ValidationFailedError, status.HTTP_400_BAD_REQUEST),
    (BinIdConflictError, status.HTTP_409_CONFLICT),
    (DocumentNotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidAdminKeyError, status.HTTP_403_FORBIDDEN),
    (InviteCodeError, status.HTTP_400_BAD_REQUEST),
)

ACCESS_DENIAL_STATUS = {
    AccessOutcome.AUTH_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    AccessOutcome.ACCESS_DENIED: status.HTTP_403_FORBIDDEN,
    AccessOutcome.PASSWORD_REQUIRED: status.HTTP_423_LOCKED,
}


def domain_error_to_http(error: MdFuryError) -> HTTPException:
    """Translate a domain error into the HTTPException the API sends back"""
    for error_class, status_code in DOMAIN_ERROR_STATUS:
        if isinstance(error, error_class):
            return HTTPException(status_code=status_code, detail=error_detail(error.message))
    logger.warning(f"Unmapped domain error {type(error).__name__}: {error.message}")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail(error.message))


def access_denial_to_http(result: AccessResult) -> HTTPException:
    """Anything the resolver doesn't classify collapses to 404"""
    status_code = ACCESS_DENIAL_STATUS.get(result.outcome, status.HTTP_404_NOT_FOUND)
    return HTTPException(status_code=status_code,
                         detail=error_detail(result.message, reason=result.outcome.value))
