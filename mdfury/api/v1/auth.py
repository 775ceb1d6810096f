import logging
from typing import Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from mdfury.core.config import config
from mdfury.core.exceptions import InviteCodeError
from mdfury.core.security import (cache_user_data, create_access_token, create_api_token,
                                  decode_access_token, get_cached_user_data, get_password_hash,
                                  invalidate_cached_user_data, is_api_token, verify_password)
from mdfury.core.services.invite_service import InviteCodeManager
from mdfury.core.utils import utcnow
from mdfury.database.database_factory import get_db
from mdfury.database.models.db_models import User
from mdfury.database.repositories.user_repository import UserRepository
from mdfury.schemas.auth import (ApiTokenResponse, AuthConfigResponse, LoginRequest,
                                 LoginResponse, RegisterRequest, UserResponse)
from mdfury.schemas.base import BaseResponse, error_detail

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/auth",
    tags=["Authentication"],
    responses={404: {"description": "Not found"}}
)

MIN_PASSWORD_LENGTH = 6


class IdentityVerifier(Protocol):
    async def verify(self, request: Request) -> Optional[User]:
        ...


def _user_cache_data(user: User) -> dict:
    return {
        "id": user.id,
        "fp": user.fp,
        "username": user.username,
        "email": user.email,
        "display_name": user.display_name,
        "is_active": user.is_active,
    }


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("authorization")
    if not auth_header or not auth_header.lower().startswith("bearer "):
        return None
    return auth_header[7:].strip() or None


class BearerIdentityVerifier:
    """Resolves the caller from a Bearer JWT or a personal ``mdf_`` API token.

    Returns None for anonymous callers and for any token that doesn't map to
    an active user; routes decide whether that's acceptable.
    """

    def __init__(self, db: AsyncSession):
        self.user_repo = UserRepository(db)

    async def verify(self, request: Request) -> Optional[User]:
        token = _bearer_token(request)
        if token is None:
            return None

        if is_api_token(token):
            user = await self.user_repo.get_user_by_api_token(token)
        else:
            user = await self._user_from_jwt(token)

        if user is None or not user.is_active:
            return None
        request.state.user = user
        return user

    async def _user_from_jwt(self, token: str) -> Optional[User]:
        token_data = decode_access_token(token)
        if not token_data or "fp" not in token_data:
            logger.warning("Invalid token data during authentication")
            return None

        cached_data = await get_cached_user_data(token_data["fp"])
        if cached_data:
            logger.debug(f"Using cached user data for fp: {token_data['fp']}")
            return User(**cached_data)

        user = await self.user_repo.get_user_by_fp(token_data["fp"])
        if user is None:
            logger.warning(f"User not found for token fp: {token_data['fp']}")
            return None

        await cache_user_data(_user_cache_data(user))
        return user


async def get_identity_verifier(db: AsyncSession = Depends(get_db)) -> IdentityVerifier:
    return BearerIdentityVerifier(db)


async def get_current_user_optional(
        request: Request,
        verifier: IdentityVerifier = Depends(get_identity_verifier)) -> Optional[User]:
    """The caller's user, or None when the request is anonymous"""
    return await verifier.verify(request)


async def get_current_user(user: Optional[User] = Depends(get_current_user_optional)) -> User:
    """Get current authenticated user"""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_detail("Authentication required", logout=True),
            headers={"WWW-Authenticate": "Bearer"}
        )
    return user


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail(message))


@router.post("/register", response_model=BaseResponse[LoginResponse])
async def register(request: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Register a new user, consuming an invite code when registration is invite-only"""
    try:
        if config.DISABLE_REGISTRATION:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                                detail=error_detail("Registration is currently disabled"))
        if request.password != request.confirm_password:
            raise _bad_request("Passwords do not match")
        if len(request.password) < MIN_PASSWORD_LENGTH:
            raise _bad_request(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        user_repo = UserRepository(db)
        if await user_repo.get_user_by_username(request.username):
            raise _bad_request("Username already exists")
        if await user_repo.get_user_by_email(request.email):
            raise _bad_request("Email already exists")

        invite_manager = InviteCodeManager(db, config.INVITE_KEY)
        invite_code = None
        if config.REQUIRE_INVITE_CODE:
            if not (request.invite_code or "").strip():
                raise _bad_request("Invite code is required")
            try:
                invite_code = await invite_manager.require_valid(request.invite_code)
            except InviteCodeError as e:
                raise _bad_request(e.message)

        user = await user_repo.insert_user({
            "username": request.username,
            "email": request.email,
            "hashed_password": get_password_hash(request.password),
            "display_name": request.display_name or request.username,
            "is_active": True
        })
        if not user:
            raise _bad_request("Username or email already exists")

        if invite_code:
            try:
                await invite_manager.redeem(invite_code, user.id)
            except InviteCodeError as e:
                # Someone redeemed the code between validation and now
                logger.warning(f"Invite code {invite_code} lost during registration of {user.username}")
                await user_repo.delete_user(user)
                raise _bad_request(e.message)

        await cache_user_data(_user_cache_data(user))
        access_token = create_access_token(data={"sub": user.email, "fp": user.fp})

        logger.info(f"Successfully registered user: {user.username}")
        return BaseResponse(
            data=LoginResponse(access_token=access_token, user=UserResponse.model_validate(user)),
            message="Registration successful"
        )

    except HTTPException as he:
        raise he
    except Exception as e:
        logger.error(f"Registration error: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail=error_detail("Registration failed due to server error"))


@router.post("/login", response_model=BaseResponse[LoginResponse])
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Authenticate with username or email"""
    user_repo = UserRepository(db)
    user = await user_repo.get_user_by_login(request.username)

    if not user or not user.is_active or not verify_password(request.password, user.hashed_password):
        logger.warning(f"Failed login attempt for: {request.username}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail=error_detail("Invalid credentials"))

    user = await user_repo.update_user(user, {"last_login": utcnow()})
    await cache_user_data(_user_cache_data(user))
    access_token = create_access_token(data={"sub": user.email, "fp": user.fp})

    logger.info(f"Successful login for user: {user.username}")
    return BaseResponse(
        data=LoginResponse(access_token=access_token, user=UserResponse.model_validate(user)),
        message="Login successful"
    )


@router.get("/me", response_model=BaseResponse[UserResponse])
async def read_current_user(current_user: User = Depends(get_current_user)):
    return BaseResponse(data=UserResponse.model_validate(current_user))


@router.post("/token", response_model=BaseResponse[ApiTokenResponse])
async def regenerate_api_token(current_user: User = Depends(get_current_user),
                               db: AsyncSession = Depends(get_db)):
    """Issue a new personal API token, replacing the previous one"""
    user_repo = UserRepository(db)
    # The current user may come from the cache, so reload it in this session
    user = await user_repo.get_user_by_id(current_user.id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail=error_detail("User not found", logout=True))

    user = await user_repo.update_user(user, {"api_token": create_api_token()})
    await invalidate_cached_user_data(user.fp)

    logger.info(f"Regenerated API token for user: {user.username}")
    return BaseResponse(data=ApiTokenResponse(api_token=user.api_token),
                        message="API token generated")


@router.get("/config", response_model=BaseResponse[AuthConfigResponse])
async def auth_config():
    """Registration switches the frontend needs to render its sign-up form"""
    return BaseResponse(data=AuthConfigResponse(
        registration_disabled=config.DISABLE_REGISTRATION,
        invite_code_required=config.REQUIRE_INVITE_CODE,
        oauth_registration_disabled=config.DISABLE_OAUTH_REGISTRATION,
        oauth_providers={
            "google": bool(config.GOOGLE_CLIENT_ID),
            "github": bool(config.GITHUB_CLIENT_ID),
        }
    ))
