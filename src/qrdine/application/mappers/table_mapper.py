from __future__ import annotations

from qrdine.application.dto.responses import TableResponse, TableSessionResponse
from qrdine.domain.table.entities import Table, TableSession


def to_table_response(table: Table) -> TableResponse:
    return TableResponse(
        tableId=str(table.table_id),
        restaurantId=str(table.restaurant_id),
        username=str(table.username),
        name=table.name,
        isActive=table.is_active,
        activeSessionId=table.active_session_id,
        createdAt=table.created_at,
    )


def to_table_session_response(session: TableSession) -> TableSessionResponse:
    return TableSessionResponse(
        sessionId=str(session.session_id),
        restaurantId=str(session.restaurant_id),
        table=str(session.table),
        tableName=session.table_name,
        startTime=session.start_time,
        endTime=session.end_time,
        durationMinutes=session.duration_minutes,
    )
