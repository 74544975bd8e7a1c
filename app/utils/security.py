from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Tuple

import bcrypt
from jose import JWTError, jwt

from core.config import config
from core.exceptions.base import UnauthorizedException


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    return bcrypt.checkpw(
        plain_password.encode("utf-8"), hashed_password.encode("utf-8")
    )


def _encode(claims: Dict[str, Any], lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + lifetime}
    return jwt.encode(payload, config.SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def create_access_token(user_id: str, role: str) -> str:
    """Access token carrying the role claim used for route gating."""
    return _encode(
        {"sub": user_id, "role": role, "type": "access"},
        timedelta(minutes=config.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(user_id: str) -> str:
    return _encode(
        {"sub": user_id, "type": "refresh"},
        timedelta(days=config.JWT_REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token."""
    try:
        return jwt.decode(token, config.SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        raise UnauthorizedException(message="Invalid or expired token")


def create_tokens(user_id: str, role: str) -> Tuple[str, str]:
    """Create both access and refresh tokens."""
    return create_access_token(user_id, role), create_refresh_token(user_id)
