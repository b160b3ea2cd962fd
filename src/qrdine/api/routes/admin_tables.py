from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status

from qrdine.api.dependencies import admin_restaurant_id, current_principal, engine_from
from qrdine.application.auth import Principal
from qrdine.application.dto.requests import CreateTableRequest, SetTableActiveRequest
from qrdine.application.dto.responses import TableAccessResponse, TableListResponse, TableResponse
from qrdine.application.use_cases.manage_tables import CreateTable, DeleteTable, ListTables
from qrdine.application.use_cases.table_access import SetTableActive
from qrdine.domain.common.ids import RestaurantId, TableId
from qrdine.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from qrdine.infrastructure.db.repositories.staff_call_repo import SqlAlchemyStaffCallRepository
from qrdine.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from qrdine.infrastructure.db.repositories.table_session_repo import (
    SqlAlchemyTableSessionRepository,
)

router = APIRouter(prefix="/v1/admin/tables")


def _set_table_active_use_case(request: Request) -> SetTableActive:
    engine = engine_from(request)
    return SetTableActive(
        table_repository=SqlAlchemyTableRepository(engine),
        session_repository=SqlAlchemyTableSessionRepository(engine),
        order_repository=SqlAlchemyOrderRepository(engine),
        staff_call_repository=SqlAlchemyStaffCallRepository(engine),
    )


@router.get("", response_model=TableListResponse)
def list_tables(
    request: Request,
    principal: Principal | None = Depends(current_principal),
    restaurant_id: RestaurantId = Depends(admin_restaurant_id),
) -> TableListResponse:
    use_case = ListTables(table_repository=SqlAlchemyTableRepository(engine_from(request)))
    return use_case.execute(principal=principal, restaurant_id=restaurant_id)


@router.post("", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
def create_table(
    request_dto: CreateTableRequest,
    request: Request,
    principal: Principal | None = Depends(current_principal),
    restaurant_id: RestaurantId = Depends(admin_restaurant_id),
) -> TableResponse:
    use_case = CreateTable(table_repository=SqlAlchemyTableRepository(engine_from(request)))
    return use_case.execute(
        principal=principal,
        restaurant_id=restaurant_id,
        request_dto=request_dto,
    )


@router.put("/{table_id}/active", response_model=TableAccessResponse)
def set_table_active(
    table_id: str,
    request_dto: SetTableActiveRequest,
    request: Request,
    principal: Principal | None = Depends(current_principal),
    restaurant_id: RestaurantId = Depends(admin_restaurant_id),
) -> TableAccessResponse:
    return _set_table_active_use_case(request).execute(
        principal=principal,
        restaurant_id=restaurant_id,
        table_id=TableId(table_id),
        is_active=request_dto.is_active,
    )


@router.delete("/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_table(
    table_id: str,
    request: Request,
    principal: Principal | None = Depends(current_principal),
    restaurant_id: RestaurantId = Depends(admin_restaurant_id),
) -> Response:
    use_case = DeleteTable(table_repository=SqlAlchemyTableRepository(engine_from(request)))
    use_case.execute(principal=principal, restaurant_id=restaurant_id, table_id=TableId(table_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
