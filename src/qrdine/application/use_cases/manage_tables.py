from __future__ import annotations

from uuid import uuid4

from qrdine.application.auth import Principal, require_admin
from qrdine.application.dto.requests import CreateTableRequest
from qrdine.application.dto.responses import TableListResponse, TableResponse
from qrdine.application.errors import ConflictError
from qrdine.application.mappers.table_mapper import to_table_response
from qrdine.application.ports.repositories import DuplicateTableUsernameError, TableRepository
from qrdine.application.use_cases.claim_table import TableNotFoundError
from qrdine.domain.common.clock import Clock, utcnow
from qrdine.domain.common.ids import RestaurantId, TableId, TableUsername
from qrdine.domain.table.entities import Table


class TableUsernameTakenError(ConflictError):
    pass


class TableOccupiedError(ConflictError):
    pass


class CreateTable:
    def __init__(self, table_repository: TableRepository, clock: Clock = utcnow) -> None:
        self._table_repository = table_repository
        self._clock = clock

    def execute(
        self,
        principal: Principal | None,
        restaurant_id: RestaurantId,
        request_dto: CreateTableRequest,
    ) -> TableResponse:
        require_admin(principal, restaurant_id)
        username = TableUsername(request_dto.username)
        if self._table_repository.get_by_username(restaurant_id, username) is not None:
            raise TableUsernameTakenError(f"table username {username} is already taken")

        table = Table(
            table_id=TableId(f"tbl_{uuid4().hex[:12]}"),
            restaurant_id=restaurant_id,
            username=username,
            name=request_dto.name,
            is_active=False,
            active_session_id=None,
            created_at=self._clock(),
        )
        try:
            self._table_repository.add(table)
        except DuplicateTableUsernameError as exc:
            raise TableUsernameTakenError(f"table username {username} is already taken") from exc
        return to_table_response(table)


class ListTables:
    def __init__(self, table_repository: TableRepository) -> None:
        self._table_repository = table_repository

    def execute(
        self,
        principal: Principal | None,
        restaurant_id: RestaurantId,
    ) -> TableListResponse:
        require_admin(principal, restaurant_id)
        tables = self._table_repository.list_for_restaurant(restaurant_id)
        tables.sort(key=lambda table: (table.name.lower(), str(table.username)))
        return TableListResponse(tables=[to_table_response(table) for table in tables])


class DeleteTable:
    def __init__(self, table_repository: TableRepository) -> None:
        self._table_repository = table_repository

    def execute(
        self,
        principal: Principal | None,
        restaurant_id: RestaurantId,
        table_id: TableId,
    ) -> None:
        require_admin(principal, restaurant_id)
        table = self._table_repository.get(restaurant_id, table_id)
        if table is None:
            raise TableNotFoundError(
                f"table not found for restaurant_id={restaurant_id}, table_id={table_id}"
            )
        if table.is_occupied:
            raise TableOccupiedError(f"table {table.username} is occupied; lock it first")
        if not self._table_repository.delete(restaurant_id, table_id):
            raise TableNotFoundError(
                f"table not found for restaurant_id={restaurant_id}, table_id={table_id}"
            )
