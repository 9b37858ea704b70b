# bootcamp_api/utils/auth_utils.py
import hashlib
import secrets
from datetime import datetime, timedelta, timezone

import jwt

from bootcamp_api.core.config import Settings, settings as default_settings

RESET_TOKEN_TTL = timedelta(minutes=10)


def create_access_token(
    user_id: str,
    settings: Settings = default_settings,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=settings.JWT_EXPIRE_DAYS))
    to_encode = {"id": str(user_id), "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str, settings: Settings = default_settings) -> dict:
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.ALGORITHM])


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def generate_reset_token() -> tuple[str, str, datetime]:
    """
    Create a password reset token.

    Returns the raw token (emailed to the user), its sha256 digest (stored on
    the user document) and the expiry time.
    """
    token = secrets.token_hex(20)
    return token, hash_reset_token(token), datetime.now(timezone.utc) + RESET_TOKEN_TTL
