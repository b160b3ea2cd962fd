from __future__ import annotations

from datetime import datetime
from typing import Protocol

from qrdine.domain.common.ids import (
    OrderId,
    RestaurantId,
    ReviewId,
    SessionToken,
    StaffCallId,
    TableId,
    TableUsername,
)
from qrdine.domain.menu.entities import Menu, Restaurant
from qrdine.domain.order.entities import Order, OrderState
from qrdine.domain.review.entities import Review
from qrdine.domain.staff_call.entities import StaffCall, StaffCallStatus
from qrdine.domain.table.entities import Table, TableSession


class RestaurantRepository(Protocol):
    def get(self, restaurant_id: RestaurantId) -> Restaurant | None: ...


class MenuRepository(Protocol):
    def get_menu_by_restaurant_id(self, restaurant_id: RestaurantId) -> Menu | None: ...


class TableRepository(Protocol):
    def get(self, restaurant_id: RestaurantId, table_id: TableId) -> Table | None: ...

    def get_by_username(
        self,
        restaurant_id: RestaurantId,
        username: TableUsername,
    ) -> Table | None: ...

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Table]: ...

    def add(self, table: Table) -> None: ...

    def delete(self, restaurant_id: RestaurantId, table_id: TableId) -> bool: ...

    def activate(self, restaurant_id: RestaurantId, table_id: TableId) -> Table | None: ...

    def claim(self, table: Table, session: TableSession) -> bool:
        """Bind ``session.session_id`` to an unoccupied active table.

        Must behave as one atomic compare-and-swap on ``active_session_id`` (only set
        while it is currently null) and store ``session`` in the same transaction.
        Returns False when the guard did not match.
        """
        ...

    def deactivate(
        self,
        table: Table,
        expected_session_id: SessionToken | None,
        closed_session: TableSession | None,
    ) -> bool:
        """Lock the table and close ``closed_session`` in one transaction.

        Guarded on the occupant: returns False when ``active_session_id`` no
        longer equals ``expected_session_id``.
        """
        ...


class TableSessionRepository(Protocol):
    def get_open(
        self,
        restaurant_id: RestaurantId,
        table: TableUsername,
        session_id: SessionToken,
    ) -> TableSession | None: ...

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[TableSession]: ...


class OrderRepository(Protocol):
    def add(self, order: Order) -> None: ...

    def get(self, order_id: OrderId) -> Order | None: ...

    def update_with_version(self, order: Order, expected_version: int) -> Order: ...

    def count_active_for_session(
        self,
        restaurant_id: RestaurantId,
        session_id: SessionToken,
    ) -> int: ...

    def list_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        state: OrderState | None = None,
    ) -> list[Order]: ...


class StaffCallRepository(Protocol):
    def add(self, call: StaffCall) -> None: ...

    def get(self, call_id: StaffCallId) -> StaffCall | None: ...

    def mark_resolved(self, call_id: StaffCallId, now: datetime) -> bool: ...

    def count_active_for_session(
        self,
        restaurant_id: RestaurantId,
        session_id: SessionToken,
    ) -> int: ...

    def list_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        status: StaffCallStatus | None = None,
    ) -> list[StaffCall]: ...


class ReviewRepository(Protocol):
    def add(self, review: Review) -> None: ...

    def get(self, review_id: ReviewId) -> Review | None: ...

    def delete(self, review_id: ReviewId) -> bool: ...

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Review]: ...


class OptimisticConcurrencyError(Exception):
    pass


class OpenSessionExistsError(Exception):
    pass


class DuplicateTableUsernameError(Exception):
    pass
