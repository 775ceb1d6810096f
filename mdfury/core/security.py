from datetime import datetime, timedelta, timezone
from typing import Optional
import bcrypt
import json
import logging
import secrets
from jose import jwt, JWTError
from mdfury.core.config import config
from mdfury.core.services.redis_service import RedisService

logger = logging.getLogger(__name__)

# Cache verified identities for 24 hours
USER_CACHE_TTL = 86400


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    try:
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
        return hashed.decode('utf-8')
    except Exception as e:
        logger.error(f"Error hashing password: {str(e)}")
        raise


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against a hash."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'),
                              hashed_password.encode('utf-8'))
    except ValueError as e:
        logger.error(f"Error verifying password: {str(e)}")
        return False


def create_access_token(data: dict,
                        expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.TOKEN_EXPIRE))
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode,
                             config.SECRET_KEY,
                             algorithm=config.TOKEN_ALGORITHM)
    logger.debug(f"Generated JWT token for user: {data.get('sub')}")
    return encoded_jwt


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and verify a JWT access token."""
    try:
        return jwt.decode(token,
                          config.SECRET_KEY,
                          algorithms=[config.TOKEN_ALGORITHM])
    except JWTError as e:
        logger.warning(f"Failed to decode token: {str(e)}")
        return None


def create_api_token() -> str:
    """Personal API token, recognizable by its prefix."""
    return f"{config.API_TOKEN_PREFIX}{secrets.token_hex(24)}"


def is_api_token(token: str) -> bool:
    return token.startswith(config.API_TOKEN_PREFIX)


def _user_cache_key(user_fp: str) -> str:
    return f"user:{user_fp}"


async def _redis() -> Optional[RedisService]:
    redis_service = await RedisService.get_instance()
    return redis_service if redis_service.enabled else None


async def cache_user_data(user_data: dict) -> None:
    """Store a verified user snapshot; failures only get logged."""
    try:
        redis_service = await _redis()
        if redis_service:
            await redis_service.set_value(_user_cache_key(user_data["fp"]), json.dumps(user_data),
                                          expire=USER_CACHE_TTL)
    except Exception as e:
        logger.error(f"Error caching user data: {str(e)}")


async def get_cached_user_data(user_fp: str) -> Optional[dict]:
    try:
        redis_service = await _redis()
        cached = await redis_service.get_value(_user_cache_key(user_fp)) if redis_service else None
        return json.loads(cached) if cached else None
    except Exception as e:
        logger.error(f"Error reading cached user data: {str(e)}")
        return None


async def invalidate_cached_user_data(user_fp: str) -> None:
    try:
        redis_service = await _redis()
        if redis_service:
            await redis_service.delete_value(_user_cache_key(user_fp))
    except Exception as e:
        logger.error(f"Error invalidating cached user data: {str(e)}")
