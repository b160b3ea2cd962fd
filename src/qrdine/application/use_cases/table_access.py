from __future__ import annotations

import logging

from qrdine.application.auth import Principal, require_admin
from qrdine.application.dto.responses import TableAccessResponse
from qrdine.application.errors import ConflictError
from qrdine.application.mappers.table_mapper import to_table_response, to_table_session_response
from qrdine.application.metrics.table_lifecycle import record_lock_blocked, record_session_closed
from qrdine.application.ports.repositories import (
    OrderRepository,
    StaffCallRepository,
    TableRepository,
    TableSessionRepository,
)
from qrdine.application.use_cases.claim_table import TableNotFoundError
from qrdine.domain.common.clock import Clock, utcnow
from qrdine.domain.common.ids import RestaurantId, TableId, TableUsername
from qrdine.domain.table.entities import Table, TableSession

logger = logging.getLogger(__name__)

RELEASE_ATTEMPTS = 3


class TableLockBlockedError(ConflictError):
    pass


class TableStateChangedError(ConflictError):
    pass


def _close_open_session(
    session_repository: TableSessionRepository,
    table: Table,
    clock: Clock,
) -> TableSession | None:
    if table.active_session_id is None:
        return None
    session = session_repository.get_open(
        table.restaurant_id, table.username, table.active_session_id
    )
    if session is None:
        return None
    return session.close(clock())


class SetTableActive:
    def __init__(
        self,
        table_repository: TableRepository,
        session_repository: TableSessionRepository,
        order_repository: OrderRepository,
        staff_call_repository: StaffCallRepository,
        clock: Clock = utcnow,
    ) -> None:
        self._table_repository = table_repository
        self._session_repository = session_repository
        self._order_repository = order_repository
        self._staff_call_repository = staff_call_repository
        self._clock = clock

    def execute(
        self,
        principal: Principal | None,
        restaurant_id: RestaurantId,
        table_id: TableId,
        is_active: bool,
    ) -> TableAccessResponse:
        require_admin(principal, restaurant_id)
        table = self._table_repository.get(restaurant_id, table_id)
        if table is None:
            raise TableNotFoundError(
                f"table not found for restaurant_id={restaurant_id}, table_id={table_id}"
            )

        if is_active:
            activated = self._table_repository.activate(restaurant_id, table_id)
            if activated is None:
                raise TableNotFoundError(
                    f"table not found for restaurant_id={restaurant_id}, table_id={table_id}"
                )
            logger.info(
                "table_unlocked",
                extra={"restaurant_id": str(restaurant_id), "table": str(table.username)},
            )
            return TableAccessResponse(message="Table unlocked", table=to_table_response(activated))

        occupant = table.active_session_id
        if occupant is not None:
            active_orders = self._order_repository.count_active_for_session(
                restaurant_id, occupant
            )
            active_calls = self._staff_call_repository.count_active_for_session(
                restaurant_id, occupant
            )
            if active_orders or active_calls:
                record_lock_blocked(str(restaurant_id))
                logger.info(
                    "table_lock_blocked",
                    extra={
                        "restaurant_id": str(restaurant_id),
                        "table": str(table.username),
                        "session_id": str(occupant),
                    },
                )
                raise TableLockBlockedError(
                    "Cannot lock table while there are pending orders or staff calls.",
                    details={"activeOrders": active_orders, "activeStaffCalls": active_calls},
                )

        closed_session = _close_open_session(self._session_repository, table, self._clock)
        if not self._table_repository.deactivate(table, occupant, closed_session):
            raise TableStateChangedError(
                f"table {table.username} changed while it was being locked; retry"
            )
        if closed_session is not None:
            record_session_closed(closed_session, trigger="lock")
        logger.info(
            "table_locked",
            extra={"restaurant_id": str(restaurant_id), "table": str(table.username)},
        )
        return TableAccessResponse(
            message="Table locked",
            table=to_table_response(table.deactivate()),
            closedSession=(
                to_table_session_response(closed_session) if closed_session is not None else None
            ),
        )


class ReleaseTable:
    """Customer logout: end the current occupancy and lock the table.

    Unlike the admin lock this never checks for pending orders or staff calls.
    A claim that lands between the read and the lock is released too, so its
    session is closed rather than left open behind a freed table.
    """

    def __init__(
        self,
        table_repository: TableRepository,
        session_repository: TableSessionRepository,
        clock: Clock = utcnow,
    ) -> None:
        self._table_repository = table_repository
        self._session_repository = session_repository
        self._clock = clock

    def execute(self, restaurant_id: RestaurantId, table: TableUsername) -> TableAccessResponse:
        for _ in range(RELEASE_ATTEMPTS):
            current = self._table_repository.get_by_username(restaurant_id, table)
            if current is None:
                raise TableNotFoundError(
                    f"table not found for restaurant_id={restaurant_id}, table={table}"
                )
            closed_session = _close_open_session(self._session_repository, current, self._clock)
            if self._table_repository.deactivate(
                current, current.active_session_id, closed_session
            ):
                break
            logger.info(
                "table_release_retry",
                extra={"restaurant_id": str(restaurant_id), "table": str(table)},
            )
        else:
            raise TableStateChangedError(
                f"table {table} kept changing while it was being released; retry"
            )

        if closed_session is not None:
            record_session_closed(closed_session, trigger="logout")
        logger.info(
            "table_released",
            extra={"restaurant_id": str(restaurant_id), "table": str(table)},
        )
        return TableAccessResponse(
            message="Table released",
            table=to_table_response(current.deactivate()),
            closedSession=(
                to_table_session_response(closed_session) if closed_session is not None else None
            ),
        )
