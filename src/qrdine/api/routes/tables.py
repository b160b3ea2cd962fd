from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Request, status

from qrdine.api.dependencies import current_principal, engine_from
from qrdine.application.auth import Principal
from qrdine.application.dto.requests import CallStaffRequest, ClaimTableRequest
from qrdine.application.dto.responses import (
    CallStaffResponse,
    ClaimTableResponse,
    TableAccessResponse,
)
from qrdine.application.use_cases.claim_table import ClaimTable
from qrdine.application.use_cases.staff_calls import CallStaff
from qrdine.application.use_cases.table_access import ReleaseTable
from qrdine.domain.common.ids import RestaurantId, SessionToken, TableUsername
from qrdine.infrastructure.db.repositories.staff_call_repo import SqlAlchemyStaffCallRepository
from qrdine.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from qrdine.infrastructure.db.repositories.table_session_repo import (
    SqlAlchemyTableSessionRepository,
)

router = APIRouter()


def _claim_table_use_case(request: Request) -> ClaimTable:
    return ClaimTable(table_repository=SqlAlchemyTableRepository(engine_from(request)))


def _release_table_use_case(request: Request) -> ReleaseTable:
    engine = engine_from(request)
    return ReleaseTable(
        table_repository=SqlAlchemyTableRepository(engine),
        session_repository=SqlAlchemyTableSessionRepository(engine),
    )


def _call_staff_use_case(request: Request) -> CallStaff:
    engine = engine_from(request)
    return CallStaff(
        table_repository=SqlAlchemyTableRepository(engine),
        staff_call_repository=SqlAlchemyStaffCallRepository(engine),
    )


@router.post(
    "/v1/restaurants/{restaurant_id}/tables/{table}/claim",
    response_model=ClaimTableResponse,
)
def claim_table(
    restaurant_id: str,
    table: str,
    request_dto: ClaimTableRequest,
    request: Request,
) -> ClaimTableResponse:
    return _claim_table_use_case(request).execute(
        restaurant_id=RestaurantId(restaurant_id),
        table=TableUsername(table),
        session_id=SessionToken(request_dto.session_id),
    )


@router.post(
    "/v1/restaurants/{restaurant_id}/tables/{table}/release",
    response_model=TableAccessResponse,
)
def release_table(restaurant_id: str, table: str, request: Request) -> TableAccessResponse:
    return _release_table_use_case(request).execute(
        restaurant_id=RestaurantId(restaurant_id),
        table=TableUsername(table),
    )


@router.post(
    "/v1/restaurants/{restaurant_id}/tables/{table}/staff-calls",
    response_model=CallStaffResponse,
    status_code=status.HTTP_201_CREATED,
)
def call_staff(
    restaurant_id: str,
    table: str,
    request: Request,
    request_dto: CallStaffRequest | None = Body(default=None),
    principal: Principal | None = Depends(current_principal),
) -> CallStaffResponse:
    return _call_staff_use_case(request).execute(
        principal=principal,
        restaurant_id=RestaurantId(restaurant_id),
        table=TableUsername(table),
        reason=request_dto.reason if request_dto is not None else None,
    )
