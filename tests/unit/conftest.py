from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from qrdine.application.auth import Principal, Role
from qrdine.application.ports.repositories import (
    DuplicateTableUsernameError,
    OpenSessionExistsError,
    OptimisticConcurrencyError,
)
from qrdine.domain.common.ids import (
    MenuItemId,
    OrderId,
    RestaurantId,
    ReviewId,
    SessionToken,
    StaffCallId,
    TableId,
    TableUsername,
)
from qrdine.domain.common.money import Money
from qrdine.domain.menu.entities import Menu, MenuItem, Restaurant
from qrdine.domain.order.entities import Order, OrderState
from qrdine.domain.review.entities import Review
from qrdine.domain.staff_call.entities import StaffCall, StaffCallStatus
from qrdine.domain.table.entities import Table, TableSession

RESTAURANT = RestaurantId("bistro")
START = datetime(2026, 10, 1, 18, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeRestaurantRepository:
    def __init__(self) -> None:
        self.restaurants: dict[str, Restaurant] = {}

    def get(self, restaurant_id: RestaurantId) -> Restaurant | None:
        return self.restaurants.get(restaurant_id)


class FakeMenuRepository:
    def __init__(self) -> None:
        self.menus: dict[str, Menu] = {}
        self.calls = 0

    def get_menu_by_restaurant_id(self, restaurant_id: RestaurantId) -> Menu | None:
        self.calls += 1
        return self.menus.get(restaurant_id)


class FakeTableSessionRepository:
    def __init__(self) -> None:
        self.sessions: dict[str, TableSession] = {}

    def store(self, session: TableSession) -> None:
        if session.is_open and any(
            existing.is_open
            and existing.restaurant_id == session.restaurant_id
            and existing.table == session.table
            and existing.session_pk != session.session_pk
            for existing in self.sessions.values()
        ):
            raise OpenSessionExistsError(f"table {session.table} already has an open session")
        self.sessions[session.session_pk] = session

    def close(self, closed: TableSession) -> None:
        current = self.sessions.get(closed.session_pk)
        if current is not None and current.is_open:
            self.sessions[closed.session_pk] = closed

    def get_open(
        self,
        restaurant_id: RestaurantId,
        table: TableUsername,
        session_id: SessionToken,
    ) -> TableSession | None:
        for session in self.sessions.values():
            if (
                session.restaurant_id == restaurant_id
                and session.table == table
                and session.session_id == session_id
                and session.is_open
            ):
                return session
        return None

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[TableSession]:
        sessions = [s for s in self.sessions.values() if s.restaurant_id == restaurant_id]
        return sorted(sessions, key=lambda s: s.updated_at, reverse=True)

    def count_open_for_table(self, restaurant_id: RestaurantId, table: TableUsername) -> int:
        return sum(
            1
            for s in self.sessions.values()
            if s.restaurant_id == restaurant_id and s.table == table and s.is_open
        )


class FakeTableRepository:
    """In-memory tables that share session storage like the SQL repository does."""

    def __init__(self, sessions: FakeTableSessionRepository) -> None:
        self.tables: dict[str, Table] = {}
        self.sessions = sessions
        self.before_claim = None
        self.before_deactivate = None

    def put(self, table: Table) -> Table:
        self.tables[table.table_id] = table
        return table

    def get(self, restaurant_id: RestaurantId, table_id: TableId) -> Table | None:
        table = self.tables.get(table_id)
        if table is None or table.restaurant_id != restaurant_id:
            return None
        return table

    def get_by_username(
        self,
        restaurant_id: RestaurantId,
        username: TableUsername,
    ) -> Table | None:
        for table in self.tables.values():
            if table.restaurant_id == restaurant_id and table.username == username:
                return table
        return None

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Table]:
        return [t for t in self.tables.values() if t.restaurant_id == restaurant_id]

    def add(self, table: Table) -> None:
        if self.get_by_username(table.restaurant_id, table.username) is not None:
            raise DuplicateTableUsernameError(f"table username {table.username} already exists")
        self.tables[table.table_id] = table

    def delete(self, restaurant_id: RestaurantId, table_id: TableId) -> bool:
        table = self.get(restaurant_id, table_id)
        if table is None or table.is_occupied:
            return False
        del self.tables[table_id]
        return True

    def activate(self, restaurant_id: RestaurantId, table_id: TableId) -> Table | None:
        table = self.get(restaurant_id, table_id)
        if table is None:
            return None
        return self.put(table.activate())

    def claim(self, table: Table, session: TableSession) -> bool:
        if self.before_claim is not None:
            # lets a test simulate another device winning the race
            self.before_claim()
        current = self.tables[table.table_id]
        if not current.is_active or current.active_session_id is not None:
            return False
        self.sessions.store(session)
        self.put(replace(current, active_session_id=session.session_id))
        return True

    def deactivate(
        self,
        table: Table,
        expected_session_id: SessionToken | None,
        closed_session: TableSession | None,
    ) -> bool:
        if self.before_deactivate is not None:
            # lets a test land a claim between the read and the lock
            hook, self.before_deactivate = self.before_deactivate, None
            hook()
        current = self.tables[table.table_id]
        if current.active_session_id != expected_session_id:
            return False
        self.put(current.deactivate())
        if closed_session is not None:
            self.sessions.close(closed_session)
        return True


class FakeOrderRepository:
    def __init__(self) -> None:
        self.orders: dict[str, Order] = {}
        self.conflict_on_update: Order | None = None

    def add(self, order: Order) -> None:
        self.orders[order.order_id] = order

    def get(self, order_id: OrderId) -> Order | None:
        return self.orders.get(order_id)

    def update_with_version(self, order: Order, expected_version: int) -> Order:
        if self.conflict_on_update is not None:
            # someone else wrote first
            self.orders[order.order_id] = self.conflict_on_update
            self.conflict_on_update = None
        current = self.orders[order.order_id]
        if current.version != expected_version:
            raise OptimisticConcurrencyError(f"order {order.order_id} version conflict")
        updated = replace(order, version=expected_version + 1)
        self.orders[order.order_id] = updated
        return updated

    def count_active_for_session(
        self,
        restaurant_id: RestaurantId,
        session_id: SessionToken,
    ) -> int:
        return sum(
            1
            for o in self.orders.values()
            if o.restaurant_id == restaurant_id
            and o.session_id == session_id
            and o.state == OrderState.ACTIVE
        )

    def list_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        state: OrderState | None = None,
    ) -> list[Order]:
        return [
            o
            for o in self.orders.values()
            if o.restaurant_id == restaurant_id and (state is None or o.state == state)
        ]


class FakeStaffCallRepository:
    def __init__(self) -> None:
        self.calls: dict[str, StaffCall] = {}

    def add(self, call: StaffCall) -> None:
        self.calls[call.call_id] = call

    def get(self, call_id: StaffCallId) -> StaffCall | None:
        return self.calls.get(call_id)

    def mark_resolved(self, call_id: StaffCallId, now: datetime) -> bool:
        call = self.calls.get(call_id)
        if call is None or not call.is_active:
            return False
        self.calls[call_id] = replace(call, status=StaffCallStatus.RESOLVED, updated_at=now)
        return True

    def count_active_for_session(
        self,
        restaurant_id: RestaurantId,
        session_id: SessionToken,
    ) -> int:
        return sum(
            1
            for c in self.calls.values()
            if c.restaurant_id == restaurant_id and c.session_id == session_id and c.is_active
        )

    def list_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        status: StaffCallStatus | None = None,
    ) -> list[StaffCall]:
        return [
            c
            for c in self.calls.values()
            if c.restaurant_id == restaurant_id and (status is None or c.status == status)
        ]


class FakeReviewRepository:
    def __init__(self) -> None:
        self.reviews: dict[str, Review] = {}

    def add(self, review: Review) -> None:
        self.reviews[review.review_id] = review

    def get(self, review_id: ReviewId) -> Review | None:
        return self.reviews.get(review_id)

    def delete(self, review_id: ReviewId) -> bool:
        return self.reviews.pop(review_id, None) is not None

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Review]:
        return [r for r in self.reviews.values() if r.restaurant_id == restaurant_id]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_repo() -> FakeTableSessionRepository:
    return FakeTableSessionRepository()


@pytest.fixture
def table_repo(session_repo: FakeTableSessionRepository) -> FakeTableRepository:
    return FakeTableRepository(session_repo)


@pytest.fixture
def order_repo() -> FakeOrderRepository:
    return FakeOrderRepository()


@pytest.fixture
def staff_call_repo() -> FakeStaffCallRepository:
    return FakeStaffCallRepository()


@pytest.fixture
def review_repo() -> FakeReviewRepository:
    return FakeReviewRepository()


@pytest.fixture
def restaurant_repo() -> FakeRestaurantRepository:
    repository = FakeRestaurantRepository()
    repository.restaurants[RESTAURANT] = Restaurant(restaurant_id=RESTAURANT, name="Bistro")
    return repository


@pytest.fixture
def menu_repo() -> FakeMenuRepository:
    repository = FakeMenuRepository()
    repository.menus[RESTAURANT] = Menu(
        restaurant_id=RESTAURANT,
        items=[
            MenuItem(
                item_id=MenuItemId("itm_burger"),
                name="Burger",
                description=None,
                price_money=Money(amount_cents=1000, currency="EUR"),
                is_available=True,
                category="Mains",
            ),
            MenuItem(
                item_id=MenuItemId("itm_fries"),
                name="Fries",
                description="Hand cut",
                price_money=Money(amount_cents=500, currency="EUR"),
                is_available=True,
                category="Sides",
            ),
            MenuItem(
                item_id=MenuItemId("itm_soup"),
                name="Soup of the day",
                description=None,
                price_money=Money(amount_cents=700, currency="EUR"),
                is_available=False,
                category="Starters",
            ),
        ],
    )
    return repository


@pytest.fixture
def make_table(table_repo: FakeTableRepository):
    def _make(
        username: str = "T1",
        *,
        is_active: bool = True,
        occupant: str | None = None,
        restaurant_id: RestaurantId = RESTAURANT,
    ) -> Table:
        return table_repo.put(
            Table(
                table_id=TableId(f"tbl_{username.lower()}"),
                restaurant_id=restaurant_id,
                username=TableUsername(username),
                name=f"Table {username}",
                is_active=is_active,
                active_session_id=SessionToken(occupant) if occupant else None,
                created_at=START,
            )
        )

    return _make


@pytest.fixture
def admin() -> Principal:
    return Principal(role=Role.ADMIN, restaurant_username=RESTAURANT, subject_id="adm_1")


@pytest.fixture
def customer() -> Principal:
    return Principal(role=Role.CUSTOMER, restaurant_username=None, subject_id="cus_1")
