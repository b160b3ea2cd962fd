from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime

from qrdine.domain.common.ids import (
    RestaurantId,
    SessionToken,
    TableId,
    TableSessionId,
    TableUsername,
)


@dataclass(frozen=True)
class Table:
    table_id: TableId
    restaurant_id: RestaurantId
    username: TableUsername
    name: str
    is_active: bool
    active_session_id: SessionToken | None
    created_at: datetime

    def __post_init__(self) -> None:
        if not self.username.strip():
            raise ValueError("username must be non-empty")
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if self.active_session_id is not None and not self.is_active:
            raise ValueError("active_session_id may only be set on an active table")

    @property
    def is_occupied(self) -> bool:
        return self.active_session_id is not None

    def is_held_by(self, session_id: SessionToken) -> bool:
        return self.active_session_id is not None and self.active_session_id == session_id

    def ensure_active(self) -> None:
        if not self.is_active:
            raise TableLockedError(f"table {self.username} is locked by staff")

    def activate(self) -> Table:
        return replace(self, is_active=True)

    def deactivate(self) -> Table:
        return replace(self, is_active=False, active_session_id=None)


@dataclass(frozen=True)
class TableSession:
    """One customer occupancy window at a table.

    ``end_time`` of ``None`` means the session is still open; the duration is only
    known once the session is closed.
    """

    session_pk: TableSessionId
    restaurant_id: RestaurantId
    table: TableUsername
    table_name: str
    session_id: SessionToken
    start_time: datetime
    end_time: datetime | None
    duration_minutes: int | None
    updated_at: datetime

    def __post_init__(self) -> None:
        if self.end_time is None and self.duration_minutes is not None:
            raise ValueError("duration_minutes requires end_time")
        if self.end_time is not None and self.end_time < self.start_time:
            raise ValueError("end_time must not precede start_time")

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    def close(self, now: datetime) -> TableSession:
        if not self.is_open:
            raise SessionAlreadyClosedError(f"session {self.session_id} is already closed")
        end_time = max(now, self.start_time)
        return replace(
            self,
            end_time=end_time,
            duration_minutes=session_duration_minutes(self.start_time, end_time),
            updated_at=now,
        )


def open_session(
    session_pk: TableSessionId,
    table: Table,
    session_id: SessionToken,
    now: datetime,
) -> TableSession:
    return TableSession(
        session_pk=session_pk,
        restaurant_id=table.restaurant_id,
        table=table.username,
        table_name=table.name,
        session_id=session_id,
        start_time=now,
        end_time=None,
        duration_minutes=None,
        updated_at=now,
    )


def session_duration_minutes(start_time: datetime, end_time: datetime) -> int:
    elapsed_ms = (end_time - start_time).total_seconds() * 1000
    # half-up, so 90 seconds is two minutes
    return int(math.floor(elapsed_ms / 60000 + 0.5))


class TableLockedError(Exception):
    pass


class SessionAlreadyClosedError(Exception):
    pass
