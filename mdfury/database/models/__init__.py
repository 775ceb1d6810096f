from .db_models import User, Document
from .invitation import InviteCode
from .error_log import ErrorLog

__all__ = [
    'User', 'Document',
    'InviteCode', 'ErrorLog'
]
