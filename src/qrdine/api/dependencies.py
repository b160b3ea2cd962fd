"""Request-scoped inputs shared by the routers.

The upstream session gateway authenticates callers and forwards the resulting
principal as ``X-Auth-*`` headers; this service trusts them as given.
"""

from __future__ import annotations

from fastapi import Depends, Header, Query, Request
from sqlalchemy import Engine

from qrdine.application.auth import (
    AuthenticationRequiredError,
    Principal,
    Role,
    resolve_admin_restaurant,
)
from qrdine.application.ports.cache import CacheStore
from qrdine.domain.common.ids import RestaurantId


class InvalidPrincipalError(AuthenticationRequiredError):
    pass


def engine_from(request: Request) -> Engine:
    return request.app.state.engine


def cache_from(request: Request) -> CacheStore | None:
    return getattr(request.app.state, "cache", None)


def current_principal(
    role: str | None = Header(default=None, alias="X-Auth-Role"),
    restaurant: str | None = Header(default=None, alias="X-Auth-Restaurant"),
    subject: str | None = Header(default=None, alias="X-Auth-Subject"),
) -> Principal | None:
    if not role:
        return None
    try:
        parsed_role = Role(role.strip().lower())
    except ValueError as exc:
        raise InvalidPrincipalError(f"unknown role {role!r}") from exc
    return Principal(
        role=parsed_role,
        restaurant_username=RestaurantId(restaurant) if restaurant else None,
        subject_id=subject or None,
    )


def admin_restaurant_id(
    principal: Principal | None = Depends(current_principal),
    restaurant: str | None = Query(default=None),
) -> RestaurantId:
    return resolve_admin_restaurant(principal, restaurant)
