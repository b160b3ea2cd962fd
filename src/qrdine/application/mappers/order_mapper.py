from __future__ import annotations

from qrdine.application.dto.responses import OrderLineResponse, OrderResponse
from qrdine.application.mappers.menu_mapper import to_money_response
from qrdine.domain.order.entities import Order


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        orderId=str(order.order_id),
        restaurantId=str(order.restaurant_id),
        table=str(order.table),
        tableName=order.table_name,
        sessionId=str(order.session_id),
        customerId=order.customer_id,
        state=order.state.value,
        phase=order.phase.value,
        lines=[
            OrderLineResponse(
                lineId=str(line.line_id),
                itemId=str(line.item_id),
                name=line.name,
                quantity=line.quantity,
                unitPrice=to_money_response(line.unit_price),
                lineTotal=to_money_response(line.line_total),
                adminApproved=line.admin_approved,
            )
            for line in order.lines
        ],
        total=to_money_response(order.total),
        createdAt=order.created_at,
        updatedAt=order.updated_at,
    )
