"""Domain exceptions for mdFury.

Every error carries the user-facing message the API sends back, so routes
can translate them into HTTP responses without rewording.
"""


class MdFuryError(Exception):
    """Base exception for all mdFury errors."""

    default_message = "Request failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DocumentNotFoundError(MdFuryError):
    """Raised when a document is missing or belongs to someone else."""

    default_message = "Document not found or access denied"


class BinIdConflictError(MdFuryError):
    """Raised when the requested bin id is already taken."""

    default_message = "Bin ID already exists. Please choose a different ID."

    def __init__(self, bin_id: str, message: str = None):
        self.bin_id = bin_id
        super().__init__(message)


class ValidationFailedError(MdFuryError):
    """Raised when input is malformed or incomplete."""

    default_message = "Invalid request data"


class InvalidAdminKeyError(MdFuryError):
    """Raised when the admin invite key doesn't match the configured one."""

    default_message = "Invalid invite key"


class InviteCodeError(MdFuryError):
    """Base class for invite code validation and redemption failures."""


class InviteCodeNotFoundError(InviteCodeError):
    default_message = "Invalid invite code"


class InviteCodeAlreadyUsedError(InviteCodeError):
    default_message = "Invite code has already been used"


class InviteCodeExpiredError(InviteCodeError):
    default_message = "Invite code has expired"