from __future__ import annotations

from prometheus_client import Counter, Histogram

from qrdine.domain.order.entities import OrderState
from qrdine.domain.table.entities import TableSession

TABLE_CLAIMS_TOTAL = Counter(
    "qrdine_table_claims_total",
    "Total number of table claim attempts by outcome.",
    ["restaurant_id", "outcome"],
)

TABLE_LOCK_BLOCKED_TOTAL = Counter(
    "qrdine_table_lock_blocked_total",
    "Total number of table lock attempts refused because of pending work.",
    ["restaurant_id"],
)

TABLE_SESSIONS_CLOSED_TOTAL = Counter(
    "qrdine_table_sessions_closed_total",
    "Total number of table sessions closed.",
    ["restaurant_id", "trigger"],
)

TABLE_SESSION_DURATION_MINUTES = Histogram(
    "qrdine_table_session_duration_minutes",
    "Length of closed table sessions in minutes.",
    buckets=(5, 15, 30, 45, 60, 90, 120, 180, 240),
)

ORDERS_PLACED_TOTAL = Counter(
    "qrdine_orders_placed_total",
    "Total number of orders placed.",
    ["restaurant_id"],
)

ORDER_TRANSITION_TOTAL = Counter(
    "qrdine_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["action", "to"],
)

STAFF_CALLS_CREATED_TOTAL = Counter(
    "qrdine_staff_calls_created_total",
    "Total number of staff calls raised by customers.",
    ["restaurant_id"],
)

STAFF_CALLS_RESOLVED_TOTAL = Counter(
    "qrdine_staff_calls_resolved_total",
    "Total number of staff calls resolved by staff.",
    ["restaurant_id"],
)


def record_claim(restaurant_id: str, outcome: str) -> None:
    TABLE_CLAIMS_TOTAL.labels(restaurant_id=restaurant_id, outcome=outcome).inc()


def record_lock_blocked(restaurant_id: str) -> None:
    TABLE_LOCK_BLOCKED_TOTAL.labels(restaurant_id=restaurant_id).inc()


def record_session_closed(session: TableSession, trigger: str) -> None:
    TABLE_SESSIONS_CLOSED_TOTAL.labels(
        restaurant_id=str(session.restaurant_id),
        trigger=trigger,
    ).inc()
    if session.duration_minutes is not None:
        TABLE_SESSION_DURATION_MINUTES.observe(session.duration_minutes)


def record_order_placed(restaurant_id: str) -> None:
    ORDERS_PLACED_TOTAL.labels(restaurant_id=restaurant_id).inc()


def record_order_transition(action: str, to_state: OrderState) -> None:
    ORDER_TRANSITION_TOTAL.labels(action=action, to=to_state.value).inc()


def record_staff_call_created(restaurant_id: str) -> None:
    STAFF_CALLS_CREATED_TOTAL.labels(restaurant_id=restaurant_id).inc()


def record_staff_call_resolved(restaurant_id: str) -> None:
    STAFF_CALLS_RESOLVED_TOTAL.labels(restaurant_id=restaurant_id).inc()
