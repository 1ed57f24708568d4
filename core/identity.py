"""
Caller identity forwarded by the upstream gateway.

Tokens are issued and verified before requests reach this service; the
gateway passes the resolved user id and role as headers and the service
trusts them.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header

from core.exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)


class CallerRole(str, enum.Enum):
    CUSTOMER = "CUSTOMER"
    SHOP_OWNER = "SHOP_OWNER"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Caller:
    id: str
    role: CallerRole

    @property
    def is_admin(self) -> bool:
        return self.role == CallerRole.ADMIN


def get_current_caller(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None)
) -> Caller:
    """Resolve the caller from the X-User-Id / X-User-Role headers."""
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError("Missing caller identity")

    try:
        role = CallerRole((x_user_role or CallerRole.CUSTOMER.value).upper())
    except ValueError:
        logger.warning(f"Rejected unknown role '{x_user_role}' for caller {x_user_id}")
        raise AuthenticationError("Unknown caller role", details={"role": x_user_role})

    return Caller(id=x_user_id.strip(), role=role)


def require_roles(*roles: CallerRole):
    """Build a dependency that only lets the given roles through."""
    allowed = set(roles)

    def dependency(caller: Caller = Depends(get_current_caller)) -> Caller:
        if caller.role not in allowed:
            logger.warning(f"Caller {caller.id} with role {caller.role.value} denied")
            raise AuthorizationError(
                "Insufficient permissions",
                details={"required_roles": sorted(role.value for role in allowed)}
            )
        return caller

    return dependency
