import os
from dotenv import load_dotenv
import logging

# Load .env file
load_dotenv(override=True)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    # Environment
    API_PRODUCTION = _env_flag("API_PRODUCTION")

    # Configure logging based on environment
    LOG_LEVEL = logging.WARNING if API_PRODUCTION else logging.DEBUG

    # Authentication
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
    TOKEN_ALGORITHM = "HS256"
    TOKEN_EXPIRE = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))
    API_TOKEN_PREFIX = "mdf_"

    # Database and Redis
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./mdfury.db")
    REDIS_URL = os.getenv("REDIS_URL")

    # Invite codes
    INVITE_KEY = os.getenv("INVITE_KEY")
    INVITE_STATS_RECENT_LIMIT = int(os.getenv("INVITE_STATS_RECENT_LIMIT", 20))

    # Registration
    DISABLE_REGISTRATION = _env_flag("DISABLE_REGISTRATION")
    REQUIRE_INVITE_CODE = _env_flag("REQUIRE_INVITE_CODE")
    DISABLE_OAUTH_REGISTRATION = _env_flag("DISABLE_OAUTH_REGISTRATION")
    PUBLIC_MODE = _env_flag("PUBLIC_MODE")

    # OAuth providers (only their presence is reported)
    GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
    GITHUB_CLIENT_ID = os.getenv("GITHUB_CLIENT_ID")


config = Config()

# Configure logging globally
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='mdFury %(asctime)s - %(name)s - %(levelname)s - %(message)s')
