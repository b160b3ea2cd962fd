from __future__ import annotations

from qrdine.application.dto.responses import StaffCallResponse
from qrdine.domain.staff_call.entities import StaffCall


def to_staff_call_response(call: StaffCall) -> StaffCallResponse:
    return StaffCallResponse(
        callId=str(call.call_id),
        restaurantId=str(call.restaurant_id),
        table=str(call.table),
        tableName=call.table_name,
        sessionId=call.session_id,
        customerId=call.customer_id,
        reason=call.reason,
        status=call.status.value,
        createdAt=call.created_at,
        updatedAt=call.updated_at,
    )
