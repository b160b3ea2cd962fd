from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from qrdine.domain.common.ids import (
    MenuItemId,
    OrderId,
    OrderLineId,
    RestaurantId,
    SessionToken,
    TableUsername,
)
from qrdine.domain.common.money import Money


class OrderState(str, Enum):
    ACTIVE = "active"
    COMPLETE = "complete"
    REJECT = "reject"
    CANCEL = "cancel"

    @property
    def is_terminal(self) -> bool:
        return self != OrderState.ACTIVE


class OrderPhase(str, Enum):
    REQUEST = "request"
    IN_KITCHEN = "in_kitchen"
    CLOSED = "closed"


class OrderAction(str, Enum):
    ACCEPT = "accept"
    COMPLETE = "complete"
    REJECT = "reject"
    REJECT_ON_ACTIVE = "rejectOnActive"


@dataclass(frozen=True)
class OrderLine:
    line_id: OrderLineId
    item_id: MenuItemId
    name: str
    quantity: int
    unit_price: Money
    line_total: Money
    admin_approved: bool = False

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        if self.unit_price.currency != self.line_total.currency:
            raise ValueError("line_total currency must match unit_price currency")
        expected_total = self.unit_price.amount_cents * self.quantity
        if self.line_total.amount_cents != expected_total:
            raise ValueError("line_total must equal unit_price * quantity")


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    restaurant_id: RestaurantId
    table: TableUsername
    table_name: str
    session_id: SessionToken
    customer_id: str | None
    state: OrderState
    lines: list[OrderLine]
    total: Money
    created_at: datetime
    updated_at: datetime
    version: int = 1

    def __post_init__(self) -> None:
        if not self.lines:
            raise ValueError("order must contain at least one line")
        line_currency = self.lines[0].line_total.currency
        if any(line.line_total.currency != line_currency for line in self.lines):
            raise ValueError("all order lines must share one currency")
        if self.total.currency != line_currency:
            raise ValueError("order total currency must match line currency")
        expected_total = sum(line.line_total.amount_cents for line in self.lines)
        if self.total.amount_cents != expected_total:
            raise ValueError("order total must equal sum of line totals")
        if self.version < 1:
            raise ValueError("version must be >= 1")

    @property
    def phase(self) -> OrderPhase:
        if self.state.is_terminal:
            return OrderPhase.CLOSED
        if all(line.admin_approved for line in self.lines):
            return OrderPhase.IN_KITCHEN
        return OrderPhase.REQUEST

    def apply(self, action: OrderAction, now: datetime) -> Order:
        self._ensure_not_terminal(action.value)
        if action == OrderAction.ACCEPT:
            return self.accept(now)
        if action == OrderAction.COMPLETE:
            return replace(self, state=OrderState.COMPLETE, updated_at=now)
        if action == OrderAction.REJECT:
            if self.phase != OrderPhase.REQUEST:
                raise OrderTransitionError(
                    "cannot reject an order that was already accepted; use rejectOnActive"
                )
            return replace(self, state=OrderState.REJECT, updated_at=now)
        if action == OrderAction.REJECT_ON_ACTIVE:
            if self.phase != OrderPhase.IN_KITCHEN:
                raise OrderTransitionError("cannot rejectOnActive an order awaiting approval")
            return replace(self, state=OrderState.REJECT, updated_at=now)
        raise OrderTransitionError(f"unsupported order action: {action}")

    def accept(self, now: datetime) -> Order:
        self._ensure_not_terminal(OrderAction.ACCEPT.value)
        if self.phase == OrderPhase.IN_KITCHEN:
            return self
        return replace(
            self,
            lines=[replace(line, admin_approved=True) for line in self.lines],
            updated_at=now,
        )

    def cancel(self, now: datetime) -> Order:
        self._ensure_not_terminal("cancel")
        if self.phase != OrderPhase.REQUEST:
            raise OrderTransitionError("cannot cancel an order the kitchen has accepted")
        return replace(self, state=OrderState.CANCEL, updated_at=now)

    def _ensure_not_terminal(self, action: str) -> None:
        if self.state.is_terminal:
            raise OrderTransitionError(f"cannot {action} order from state={self.state.value}")


def create_active_order(
    order_id: OrderId,
    restaurant_id: RestaurantId,
    table: TableUsername,
    table_name: str,
    session_id: SessionToken,
    customer_id: str | None,
    lines: list[OrderLine],
    now: datetime,
) -> Order:
    if not lines:
        raise ValueError("order must contain at least one line")

    total = Money.zero(lines[0].line_total.currency)
    for line in lines:
        total = total.plus(line.line_total)
    return Order(
        order_id=order_id,
        restaurant_id=restaurant_id,
        table=table,
        table_name=table_name,
        session_id=session_id,
        customer_id=customer_id,
        state=OrderState.ACTIVE,
        lines=[replace(line, admin_approved=False) for line in lines],
        total=total,
        created_at=now,
        updated_at=now,
    )


class OrderTransitionError(Exception):
    pass
