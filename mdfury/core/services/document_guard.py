import re
import logging
from typing import Optional, Tuple

from mdfury.core.exceptions import ValidationFailedError
from mdfury.database.models.db_models import Document

logger = logging.getLogger(__name__)

BIN_ID_MAX_LENGTH = 128
BIN_ID_PATTERN = re.compile(r"[A-Za-z0-9-]+")


def validate_bin_id(bin_id: Optional[str]) -> str:
    """Check a bin id's format, raising ValidationFailedError with the reason."""
    if not bin_id:
        raise ValidationFailedError("Bin ID is required")

    if len(bin_id) > BIN_ID_MAX_LENGTH:
        raise ValidationFailedError(f"Bin ID must be {BIN_ID_MAX_LENGTH} characters or less")

    # Only allow A-Z, a-z, 0-9, and hyphen (-)
    if not BIN_ID_PATTERN.fullmatch(bin_id):
        raise ValidationFailedError("Bin ID can only contain letters, numbers, and hyphens")

    return bin_id


def normalize_password(password: Optional[str]) -> Optional[str]:
    return password or None


def apply_visibility_rule(requested_is_public: Optional[bool],
                          incoming_password: Optional[str],
                          existing: Optional[Document] = None) -> Tuple[bool, Optional[str]]:
    """Return the ``(is_public, password)`` pair to persist.

    ``None`` arguments mean "not supplied" and fall back to the stored
    document; an empty password clears it. Whenever the resulting document
    carries a password it is public, whatever visibility was requested.
    """
    if incoming_password is not None:
        password = normalize_password(incoming_password)
    else:
        password = normalize_password(existing.password) if existing is not None else None

    if requested_is_public is not None:
        is_public = requested_is_public
    elif existing is not None:
        is_public = existing.is_public
    else:
        is_public = True

    if password and not is_public:
        logger.info("Password-protected document forced public")
        is_public = True

    return is_public, password
