"""
Bearer Token Authentication

Tokens are HS256 JWTs issued elsewhere and carrying ``sub`` (user id),
``role`` (Admin, Staff or Customer) and ``name``. This module decodes
them, exposes role guards for routes and maps callers onto access scopes.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from restaurant_ops.core.config import get_settings
from restaurant_ops.models import UserRole
from restaurant_ops.services.access import UNRESTRICTED, AccessScope, OwnedBy

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: int
    role: UserRole
    name: Optional[str] = None

    @property
    def is_customer(self) -> bool:
        return self.role == UserRole.CUSTOMER


# =============================================================================
# TOKENS
# =============================================================================

def create_access_token(
    user_id: int,
    role: UserRole,
    name: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed JWT for a user. Used by tooling and tests."""
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {"sub": str(user_id), "role": role.value, "name": name, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> CurrentUser:
    """
    Decode and validate a bearer token.

    Raises:
        ValueError: If the token is invalid, expired or missing claims
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as exc:
        raise ValueError(f"Invalid token: {exc}") from exc

    try:
        return CurrentUser(
            id=int(payload["sub"]),
            role=UserRole(payload["role"]),
            name=payload.get("name"),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError("Token is missing required claims") from exc


# =============================================================================
# FASTAPI DEPENDENCIES
# =============================================================================

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """Resolve the caller from the Authorization header or raise 401."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_access_token(credentials.credentials)
    except ValueError as exc:
        logger.warning(f"Rejected bearer token: {exc}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_roles(*roles: UserRole):
    """Dependency factory enforcing that the current user has one of ``roles``."""

    def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient privileges"
            )
        return user

    return dependency


require_staff = require_roles(UserRole.ADMIN, UserRole.STAFF)
require_admin = require_roles(UserRole.ADMIN)


def access_scope_for(user: CurrentUser) -> AccessScope:
    """Customers only see what they own; staff and admins see everything."""
    if user.is_customer:
        return OwnedBy(user.id)
    return UNRESTRICTED
