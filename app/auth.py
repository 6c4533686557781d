import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .errors import Forbidden, Unauthorized
from .security_utils import decode_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

USER_TYPES = ("customer", "provider", "admin")


@dataclass(frozen=True)
class CurrentUser:
    """Identity carried by the bearer token"""

    user_id: str
    email: str
    user_type: str

    @property
    def is_admin(self) -> bool:
        return self.user_type == "admin"


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> CurrentUser:
    """Resolve the caller from an `Authorization: Bearer <JWT>` header"""
    if not credentials or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthorized("Not authenticated. Please provide a valid Bearer token in the Authorization header.")

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise Unauthorized("Invalid or expired token")

    if payload["userType"] not in USER_TYPES:
        logger.warning(f"⚠️ Token carries unknown user type: {payload['userType']}")
        raise Unauthorized("Invalid token claims")

    user = CurrentUser(
        user_id=payload["userId"],
        email=payload.get("email", ""),
        user_type=payload["userType"],
    )
    request.state.user_id = user.user_id
    request.state.user_type = user.user_type
    return user


async def get_optional_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> CurrentUser | None:
    """Same as get_current_user for public endpoints, None when no token is sent"""
    if not credentials:
        return None
    return await get_current_user(request, credentials)


def require_roles(*roles: str):
    """
    Dependency factory restricting an endpoint to the given user types.

    Example:
        @router.post("", dependencies=[Depends(require_roles("provider", "admin"))])
    """
    allowed = set(roles)

    async def role_checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.user_type not in allowed:
            logger.warning(
                f"⚠️ User {user.user_id} ({user.user_type}) denied; requires one of {sorted(allowed)}"
            )
            raise Forbidden("Insufficient permissions")
        return user

    return role_checker


require_admin = require_roles("admin")
require_provider = require_roles("provider", "admin")
require_customer = require_roles("customer", "admin")
