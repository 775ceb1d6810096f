# Import all schema models for easier access
from .base import BaseResponse, ErrorResponse
from .document import (
    DocumentCreateRequest, DocumentUpdateRequest,
    DocumentResponse, PublicDocumentResponse, DocumentListResponse
)
from .invitation import (
    InviteCodeGenerateRequest, InviteCodeValidateRequest, InviteCodeUseRequest,
    InviteCodeResponse, InviteCodeStatsResponse
)
from .auth import LoginRequest, RegisterRequest, LoginResponse, UserResponse
