"""Read-side projection that stitches orders, staff calls and reviews back onto
the table session that produced them.

Records only share the denormalized ``session_id`` key, so everything here works
off explicit in-memory indexes rather than joins. Nothing in this module writes.
"""

from __future__ import annotations

from bisect import bisect_right
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Iterable, TypeVar

from qrdine.domain.common.clock import ensure_utc
from qrdine.domain.order.entities import Order
from qrdine.domain.review.entities import Review
from qrdine.domain.staff_call.entities import StaffCall
from qrdine.domain.table.entities import TableSession

T = TypeVar("T")


@dataclass(frozen=True)
class OrderCard:
    order: Order | None
    index: int
    time: datetime
    staff_calls: list[StaffCall] = field(default_factory=list)
    reviews: list[Review] = field(default_factory=list)


@dataclass(frozen=True)
class SessionView:
    session: TableSession
    orders: list[Order]
    staff_calls: list[StaffCall]
    reviews: list[Review]
    cards: list[OrderCard]


def index_by_session(
    records: Iterable[T],
    session_of: Callable[[T], str | None],
) -> dict[str, list[T]]:
    index: dict[str, list[T]] = defaultdict(list)
    for record in records:
        session_id = session_of(record)
        if session_id:
            index[session_id].append(record)
    return dict(index)


def dedupe_sessions(sessions: Iterable[TableSession]) -> list[TableSession]:
    """Keep one record per session id: closed beats open, then newest update wins."""
    chosen: dict[str, TableSession] = {}
    for session in sessions:
        current = chosen.get(session.session_id)
        if current is None or _rank(session) > _rank(current):
            chosen[session.session_id] = session
    return list(chosen.values())


def _rank(session: TableSession) -> tuple[bool, datetime]:
    return (not session.is_open, ensure_utc(session.updated_at))


def build_cards(
    session: TableSession,
    orders: list[Order],
    staff_calls: list[StaffCall],
    reviews: list[Review],
) -> list[OrderCard]:
    ordered = sorted(orders, key=lambda order: ensure_utc(order.created_at))
    if not ordered:
        if not staff_calls and not reviews:
            return []
        return [
            OrderCard(
                order=None,
                index=1,
                time=session.start_time,
                staff_calls=sorted(staff_calls, key=lambda call: ensure_utc(call.created_at)),
                reviews=sorted(reviews, key=lambda review: ensure_utc(review.created_at)),
            )
        ]

    starts = [ensure_utc(order.created_at) for order in ordered]
    calls_by_card: list[list[StaffCall]] = [[] for _ in ordered]
    reviews_by_card: list[list[Review]] = [[] for _ in ordered]

    for call in sorted(staff_calls, key=lambda call: ensure_utc(call.created_at)):
        calls_by_card[_card_slot(starts, call.created_at)].append(call)
    for review in sorted(reviews, key=lambda review: ensure_utc(review.created_at)):
        reviews_by_card[_card_slot(starts, review.created_at)].append(review)

    return [
        OrderCard(
            order=order,
            index=position + 1,
            time=order.created_at,
            staff_calls=calls_by_card[position],
            reviews=reviews_by_card[position],
        )
        for position, order in enumerate(ordered)
    ]


def _card_slot(starts: list[datetime], moment: datetime) -> int:
    # events before the first order belong to the first card
    return max(bisect_right(starts, ensure_utc(moment)) - 1, 0)


def build_session_views(
    sessions: Iterable[TableSession],
    orders: Iterable[Order],
    staff_calls: Iterable[StaffCall],
    reviews: Iterable[Review],
    on_date: date | None = None,
) -> list[SessionView]:
    orders_by_session = index_by_session(orders, lambda order: order.session_id)
    calls_by_session = index_by_session(staff_calls, lambda call: call.session_id)
    reviews_by_session = index_by_session(reviews, lambda review: review.session_id)

    views: list[SessionView] = []
    for session in dedupe_sessions(sessions):
        if on_date is not None and ensure_utc(session.start_time).date() != on_date:
            continue
        session_orders = sorted(
            orders_by_session.get(session.session_id, []),
            key=lambda order: ensure_utc(order.created_at),
        )
        session_calls = calls_by_session.get(session.session_id, [])
        session_reviews = reviews_by_session.get(session.session_id, [])
        views.append(
            SessionView(
                session=session,
                orders=session_orders,
                staff_calls=session_calls,
                reviews=session_reviews,
                cards=build_cards(session, session_orders, session_calls, session_reviews),
            )
        )

    views.sort(key=lambda view: ensure_utc(view.session.start_time), reverse=True)
    return views
