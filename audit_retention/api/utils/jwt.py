from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from config import ApplicationConfig


def generate_jwt(user_id: UUID, role: str) -> str:
    """
    Generate JWT access token

    Args:
        user_id: User UUID
        role: User role (ADMIN, MANAGER, USER)

    Returns:
        JWT token string (HS256, 15-minute expiry)
    """
    return create_access_token(str(user_id), role, timedelta(minutes=15))


def create_access_token(user_id: str, role: str, expires_delta: timedelta) -> str:
    """
    Create JWT access token with custom expiry

    Args:
        user_id: User UUID as string
        role: User role (ADMIN, MANAGER, USER)
        expires_delta: Token expiration duration

    Returns:
        JWT token string (HS256)
    """
    now = datetime.now(UTC)
    payload = {
        "user_id": user_id,
        "role": role,
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm="HS256")


def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify and decode JWT token

    Returns:
        Decoded payload dict or None if invalid
    """
    try:
        return jwt.decode(token, ApplicationConfig.JWT_SECRET, algorithms=["HS256"])
    except JWTError:
        return None
