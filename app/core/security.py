from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
from typing import Any

import bcrypt
import jwt
from fastapi import Header, HTTPException, status

from app.core import user_store
from app.core.config import settings

logger = logging.getLogger(__name__)


def check_api_key(x_api_key: str | None) -> None:
    if not settings.api_key:
        return
    if x_api_key != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please provide a valid API key.",
        )


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def generate_token(user_id: str) -> str:
    expires_at = datetime.now(timezone.utc) + timedelta(days=max(1, settings.jwt_expires_days))
    return jwt.encode(
        {"user_id": user_id, "exp": int(expires_at.timestamp())},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def verify_token(token: str) -> str | None:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError:
        return None
    user_id = payload.get("user_id")
    return str(user_id) if user_id else None


def token_from_header(authorization: str | None) -> str | None:
    value = (authorization or "").strip()
    if value.startswith("Bearer "):
        token = value[7:].strip()
        return token or None
    return None


def _user_from_header(authorization: str | None) -> dict[str, Any] | None:
    token = token_from_header(authorization)
    if not token:
        return None
    user_id = verify_token(token)
    if not user_id:
        return None
    return user_store.get_user_by_id(user_id)


def require_user(authorization: str | None = Header(default=None)) -> dict[str, Any]:
    token = token_from_header(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    user_id = verify_token(token)
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user = user_store.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def optional_user(authorization: str | None = Header(default=None)) -> dict[str, Any] | None:
    """Resolve the caller when a valid token is sent; anonymous otherwise."""
    user = _user_from_header(authorization)
    if authorization and user is None:
        logger.debug("optional_auth_ignored_invalid_token")
    return user
