from __future__ import annotations

import logging
from uuid import uuid4

from qrdine.application.auth import Principal, require_admin
from qrdine.application.dto.responses import CallStaffResponse, StaffCallResponse
from qrdine.application.errors import NotFoundError
from qrdine.application.mappers.staff_call_mapper import to_staff_call_response
from qrdine.application.metrics.table_lifecycle import (
    record_staff_call_created,
    record_staff_call_resolved,
)
from qrdine.application.ports.repositories import StaffCallRepository, TableRepository
from qrdine.application.use_cases.claim_table import TableNotFoundError
from qrdine.application.use_cases.place_order import TableNotActiveError
from qrdine.domain.common.clock import Clock, utcnow
from qrdine.domain.common.ids import RestaurantId, StaffCallId, TableUsername
from qrdine.domain.staff_call.entities import (
    StaffCall,
    StaffCallStatus,
    StaffCallTransitionError,
    normalize_reason,
)

logger = logging.getLogger(__name__)

STAFF_NOTIFIED_MESSAGE = "Staff has been notified! Someone will be with you shortly."


class StaffCallNotFoundError(NotFoundError):
    pass


class CallStaff:
    def __init__(
        self,
        table_repository: TableRepository,
        staff_call_repository: StaffCallRepository,
        clock: Clock = utcnow,
    ) -> None:
        self._table_repository = table_repository
        self._staff_call_repository = staff_call_repository
        self._clock = clock

    def execute(
        self,
        principal: Principal | None,
        restaurant_id: RestaurantId,
        table: TableUsername,
        reason: str | None = None,
    ) -> CallStaffResponse:
        current = self._table_repository.get_by_username(restaurant_id, table)
        if current is None:
            raise TableNotFoundError(
                f"table not found for restaurant_id={restaurant_id}, table={table}"
            )
        if not current.is_active:
            raise TableNotActiveError(f"table {table} is not active")

        now = self._clock()
        call = StaffCall(
            call_id=StaffCallId(f"stc_{uuid4().hex[:12]}"),
            restaurant_id=restaurant_id,
            table=current.username,
            table_name=current.name,
            session_id=current.active_session_id,
            customer_id=principal.customer_id if principal is not None else None,
            reason=normalize_reason(reason),
            status=StaffCallStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )
        self._staff_call_repository.add(call)
        record_staff_call_created(str(restaurant_id))
        logger.info(
            "staff_call_created",
            extra={
                "restaurant_id": str(restaurant_id),
                "table": str(table),
                "call_id": str(call.call_id),
                "reason": call.reason,
            },
        )
        return CallStaffResponse(message=STAFF_NOTIFIED_MESSAGE, call=to_staff_call_response(call))


class ResolveStaffCall:
    def __init__(self, staff_call_repository: StaffCallRepository, clock: Clock = utcnow) -> None:
        self._staff_call_repository = staff_call_repository
        self._clock = clock

    def execute(
        self,
        principal: Principal | None,
        restaurant_id: RestaurantId,
        call_id: StaffCallId,
    ) -> StaffCallResponse:
        require_admin(principal, restaurant_id)
        call = self._staff_call_repository.get(call_id)
        if call is None or call.restaurant_id != restaurant_id:
            raise StaffCallNotFoundError(f"staff call {call_id} not found")

        try:
            resolved = call.resolve(self._clock())
        except StaffCallTransitionError:
            # resolving twice is a no-op
            return to_staff_call_response(call)

        if not self._staff_call_repository.mark_resolved(call_id, resolved.updated_at):
            # another admin got there first
            current = self._staff_call_repository.get(call_id)
            if current is None:
                raise StaffCallNotFoundError(f"staff call {call_id} not found")
            return to_staff_call_response(current)

        record_staff_call_resolved(str(restaurant_id))
        logger.info(
            "staff_call_resolved",
            extra={"restaurant_id": str(restaurant_id), "call_id": str(call_id)},
        )
        return to_staff_call_response(resolved)
