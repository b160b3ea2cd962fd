from __future__ import annotations

import logging
from uuid import uuid4

from qrdine.application.dto.responses import ClaimTableResponse
from qrdine.application.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from qrdine.application.metrics.table_lifecycle import record_claim
from qrdine.application.ports.repositories import OpenSessionExistsError, TableRepository
from qrdine.domain.common.clock import Clock, utcnow
from qrdine.domain.common.ids import RestaurantId, SessionToken, TableSessionId, TableUsername
from qrdine.domain.table.entities import Table, open_session
from qrdine.domain.table.entities import TableLockedError as TableDeactivatedError

logger = logging.getLogger(__name__)

CLAIMED = "claimed"
ALREADY_CLAIMED = "alreadyClaimed"


class MissingSessionTokenError(ValidationError):
    pass


class TableNotFoundError(NotFoundError):
    pass


class TableLockedError(ForbiddenError):
    pass


class TableInUseError(ConflictError):
    pass


class ClaimTable:
    """Bind a customer's device session to a table.

    The binding itself is a single compare-and-swap in the repository, so two
    devices racing for the same free table cannot both win.
    """

    def __init__(self, table_repository: TableRepository, clock: Clock = utcnow) -> None:
        self._table_repository = table_repository
        self._clock = clock

    def execute(
        self,
        restaurant_id: RestaurantId,
        table: TableUsername,
        session_id: SessionToken | None,
    ) -> ClaimTableResponse:
        if session_id is None or not session_id.strip():
            raise MissingSessionTokenError("session id is required")

        current = self._table_repository.get_by_username(restaurant_id, table)
        if current is None:
            raise TableNotFoundError(
                f"table not found for restaurant_id={restaurant_id}, table={table}"
            )

        outcome = self._decide(current, session_id)
        if outcome is not None:
            return outcome

        session = open_session(
            session_pk=TableSessionId(f"tss_{uuid4().hex[:12]}"),
            table=current,
            session_id=session_id,
            now=self._clock(),
        )
        try:
            claimed = self._table_repository.claim(current, session)
        except OpenSessionExistsError as exc:
            self._reject(current, "open_session_exists")
            raise TableInUseError("Table is already in use by another person.") from exc

        if claimed:
            record_claim(str(restaurant_id), CLAIMED)
            logger.info(
                "table_claimed",
                extra={
                    "restaurant_id": str(restaurant_id),
                    "table": str(table),
                    "session_id": str(session_id),
                },
            )
            return _claim_response(CLAIMED, current, session_id)

        # lost the race; whoever won decides what we report
        latest = self._table_repository.get_by_username(restaurant_id, table)
        if latest is None:
            raise TableNotFoundError(
                f"table not found for restaurant_id={restaurant_id}, table={table}"
            )
        outcome = self._decide(latest, session_id)
        if outcome is not None:
            return outcome
        self._reject(latest, "claim_race_lost")
        raise TableInUseError("Table is already in use by another person.")

    def _decide(self, table: Table, session_id: SessionToken) -> ClaimTableResponse | None:
        try:
            table.ensure_active()
        except TableDeactivatedError as exc:
            self._reject(table, "locked")
            raise TableLockedError("Table is locked by staff") from exc
        if table.is_held_by(session_id):
            record_claim(str(table.restaurant_id), ALREADY_CLAIMED)
            return _claim_response(ALREADY_CLAIMED, table, session_id)
        if table.is_occupied:
            self._reject(table, "in_use")
            raise TableInUseError("Table is already in use by another person.")
        return None

    def _reject(self, table: Table, reason: str) -> None:
        record_claim(str(table.restaurant_id), reason)
        logger.info(
            "table_claim_rejected",
            extra={
                "restaurant_id": str(table.restaurant_id),
                "table": str(table.username),
                "reason": reason,
            },
        )


def _claim_response(status: str, table: Table, session_id: SessionToken) -> ClaimTableResponse:
    message = "Table claimed" if status == CLAIMED else "Table already claimed by this session"
    return ClaimTableResponse(
        status=status,
        message=message,
        table=str(table.username),
        sessionId=str(session_id),
    )
