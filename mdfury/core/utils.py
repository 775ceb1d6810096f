import string
import secrets
from datetime import datetime, timezone

BIN_ID_LENGTH = 6


def create_random_key(length: int = 25) -> str:
    """Generate a random string of specified length."""
    characters = string.ascii_letters + string.digits
    return ''.join(secrets.choice(characters) for _ in range(length))


def generate_bin_id() -> str:
    """Short public identifier used when the owner doesn't pick one."""
    return create_random_key(BIN_ID_LENGTH)


def utcnow() -> datetime:
    """Naive UTC timestamp, comparable with values read back from any backend."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
