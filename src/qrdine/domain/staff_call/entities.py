from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from qrdine.domain.common.ids import RestaurantId, SessionToken, StaffCallId, TableUsername

DEFAULT_REASON = "General assistance"


class StaffCallStatus(str, Enum):
    ACTIVE = "active"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class StaffCall:
    call_id: StaffCallId
    restaurant_id: RestaurantId
    table: TableUsername
    table_name: str
    session_id: SessionToken | None
    customer_id: str | None
    reason: str
    status: StaffCallStatus
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        if not self.reason.strip():
            raise ValueError("reason must be non-empty")

    @property
    def is_active(self) -> bool:
        return self.status == StaffCallStatus.ACTIVE

    def resolve(self, now: datetime) -> StaffCall:
        if not self.is_active:
            raise StaffCallTransitionError(f"staff call {self.call_id} is already resolved")
        return replace(self, status=StaffCallStatus.RESOLVED, updated_at=now)


def normalize_reason(reason: str | None) -> str:
    if reason is None or not reason.strip():
        return DEFAULT_REASON
    return reason.strip()


class StaffCallTransitionError(Exception):
    pass
