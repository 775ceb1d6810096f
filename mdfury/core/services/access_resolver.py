"""Read-access decisions for shared documents.

``resolve_access`` looks only at the loaded document and the request context.
The checks run in a fixed order and the first failing one wins:

1. the document must exist,
2. a private document needs a logged-in requester, and that requester must
   be the owner (who then skips the password check entirely),
3. a password-protected document needs the matching password, unless the
   requester is the owner,
4. otherwise access is granted.

Authentication and ownership are decided before the password, so an
anonymous stranger never learns whether a private document is protected.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from mdfury.database.models.db_models import Document

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Document not found"
AUTH_REQUIRED_MESSAGE = "This document is private. Please login to view it."
ACCESS_DENIED_MESSAGE = "You do not have permission to access this document."
INCORRECT_PASSWORD_MESSAGE = "Incorrect password. Please try again."


class AccessOutcome(str, enum.Enum):
    GRANTED = "granted"
    NOT_FOUND = "not_found"
    AUTH_REQUIRED = "auth_required"
    ACCESS_DENIED = "access_denied"
    PASSWORD_REQUIRED = "password_required"


@dataclass(frozen=True)
class AccessResult:
    outcome: AccessOutcome
    message: str = ""
    document: Optional[Document] = None

    @property
    def granted(self) -> bool:
        return self.outcome is AccessOutcome.GRANTED

    @classmethod
    def grant(cls, document: Document) -> "AccessResult":
        return cls(AccessOutcome.GRANTED, document=document)

    @classmethod
    def deny(cls, outcome: AccessOutcome, message: str = "") -> "AccessResult":
        return cls(outcome, message=message)


def resolve_access(document: Optional[Document],
                   supplied_password: Optional[str] = None,
                   requester_id: Optional[int] = None) -> AccessResult:
    """Decide whether ``requester_id`` may read ``document``."""
    if document is None:
        return AccessResult.deny(AccessOutcome.NOT_FOUND, NOT_FOUND_MESSAGE)

    is_owner = requester_id is not None and requester_id == document.owner_id

    if not document.is_public:
        if requester_id is None:
            return AccessResult.deny(AccessOutcome.AUTH_REQUIRED, AUTH_REQUIRED_MESSAGE)
        if not is_owner:
            return AccessResult.deny(AccessOutcome.ACCESS_DENIED, ACCESS_DENIED_MESSAGE)

    if document.password and not is_owner:
        if not supplied_password:
            return AccessResult.deny(AccessOutcome.PASSWORD_REQUIRED)
        if supplied_password != document.password:
            logger.info(f"Incorrect password supplied for bin {document.bin_id}")
            return AccessResult.deny(AccessOutcome.PASSWORD_REQUIRED, INCORRECT_PASSWORD_MESSAGE)

    return AccessResult.grant(document)
