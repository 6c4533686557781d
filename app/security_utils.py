"""
Security Utilities
Password hashing (passlib/bcrypt) and JWT access/refresh tokens (python-jose)
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError
from jose import jwt as jose_jwt
from passlib.context import CryptContext

from .config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    BCRYPT_ROUNDS,
    JWT_ALGORITHM,
    JWT_SECRET,
    REFRESH_TOKEN_EXPIRE_DAYS,
)

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as e:
        logger.error(f"Password verification error: {e}")
        return False


# ============================================================================
# JWT TOKENS
# ============================================================================


def create_token(claims: dict[str, Any], token_type: str, expires_delta: timedelta) -> str:
    """Create a signed JWT carrying the given claims plus type/iat/exp"""
    now = datetime.now(timezone.utc)
    to_encode = dict(claims)
    to_encode.update({"type": token_type, "iat": now, "exp": now + expires_delta})
    return jose_jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def create_token_pair(user_id: str, email: str, user_type: str) -> dict[str, str]:
    """Access + refresh tokens for a user, claims {userId, email, userType}"""
    claims = {"userId": user_id, "email": email, "userType": user_type}
    return {
        "accessToken": create_token(
            claims, ACCESS_TOKEN_TYPE, timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
        ),
        "refreshToken": create_token(
            claims, REFRESH_TOKEN_TYPE, timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
        ),
    }


def decode_token(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> Optional[dict[str, Any]]:
    """
    Verify and decode a JWT

    Returns:
        Decoded payload if valid and of the expected type, None otherwise
    """
    try:
        payload = jose_jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None

    if payload.get("type") != expected_type:
        logger.warning(f"⚠️ Rejected {payload.get('type')} token where {expected_type} was expected")
        return None
    if not payload.get("userId") or not payload.get("userType"):
        logger.warning("⚠️ Token missing userId/userType claims")
        return None
    return payload
