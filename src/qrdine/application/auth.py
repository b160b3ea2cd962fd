from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from qrdine.application.errors import ForbiddenError, UnauthorizedError
from qrdine.domain.common.ids import RestaurantId


class Role(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


@dataclass(frozen=True)
class Principal:
    role: Role
    restaurant_username: RestaurantId | None
    subject_id: str | None

    @property
    def customer_id(self) -> str | None:
        if self.role != Role.CUSTOMER:
            return None
        return self.subject_id


class AuthenticationRequiredError(UnauthorizedError):
    pass


class AdminAccessRequiredError(ForbiddenError):
    pass


def require_admin(principal: Principal | None, restaurant_id: RestaurantId) -> Principal:
    if principal is None:
        raise AuthenticationRequiredError("authentication required")
    if principal.role == Role.SUPERADMIN:
        return principal
    if principal.role == Role.ADMIN and principal.restaurant_username == restaurant_id:
        return principal
    raise AdminAccessRequiredError(f"admin access to restaurant {restaurant_id} required")


def resolve_admin_restaurant(
    principal: Principal | None,
    restaurant_override: str | None = None,
) -> RestaurantId:
    """Pick the tenant an admin request acts on.

    Admins always act on their own restaurant; only a superadmin may name another
    one through ``restaurant_override``.
    """
    if principal is None:
        raise AuthenticationRequiredError("authentication required")
    if principal.role == Role.SUPERADMIN and restaurant_override:
        return RestaurantId(restaurant_override)
    if principal.role not in (Role.ADMIN, Role.SUPERADMIN) or not principal.restaurant_username:
        raise AdminAccessRequiredError("admin access required")
    return principal.restaurant_username
