from __future__ import annotations

import concurrent.futures
import threading

from qrdine.application.use_cases.claim_table import CLAIMED, ClaimTable, TableInUseError
from qrdine.application.use_cases.table_access import ReleaseTable
from qrdine.domain.common.ids import RestaurantId, SessionToken, TableId, TableUsername
from qrdine.infrastructure.db.repositories.table_repo import SqlAlchemyTableRepository
from qrdine.infrastructure.db.repositories.table_session_repo import (
    SqlAlchemyTableSessionRepository,
)

RESTAURANT = RestaurantId("bistro")
T1 = TableUsername("T1")


def _open_sessions(engine) -> int:
    stored = SqlAlchemyTableSessionRepository(engine).list_for_restaurant(RESTAURANT)
    return sum(1 for session in stored if session.table == T1 and session.is_open)


def test_two_devices_racing_for_one_table_yield_one_winner(engine) -> None:
    use_case = ClaimTable(SqlAlchemyTableRepository(engine))
    barrier = threading.Barrier(2)

    def _claim(session_id: str) -> str:
        barrier.wait()
        try:
            return use_case.execute(RESTAURANT, T1, SessionToken(session_id)).status
        except TableInUseError:
            return "IN_USE"

    with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
        results = list(executor.map(_claim, ["S1", "S2"]))

    assert sorted(results) == sorted([CLAIMED, "IN_USE"])

    winner = "S1" if results[0] == CLAIMED else "S2"
    table = SqlAlchemyTableRepository(engine).get_by_username(RESTAURANT, T1)
    assert table is not None
    assert table.active_session_id == winner
    assert _open_sessions(engine) == 1


def test_many_claims_from_one_device_open_a_single_session(engine) -> None:
    use_case = ClaimTable(SqlAlchemyTableRepository(engine))

    def _claim(_: int) -> str:
        return use_case.execute(RESTAURANT, T1, SessionToken("S1")).status

    with concurrent.futures.ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(_claim, range(4)))

    assert results.count(CLAIMED) == 1
    assert _open_sessions(engine) == 1


class _ClaimDuringRelease(SqlAlchemyTableRepository):
    """Lets another device claim the table right before the first lock attempt."""

    def __init__(self, engine) -> None:
        super().__init__(engine)
        self._claim = ClaimTable(SqlAlchemyTableRepository(engine))
        self.claimed = False

    def deactivate(self, table, expected_session_id, closed_session) -> bool:
        if not self.claimed:
            self.claimed = True
            self._claim.execute(RESTAURANT, T1, SessionToken("S_NEW"))
        return super().deactivate(table, expected_session_id, closed_session)


def test_release_racing_a_claim_leaves_no_open_session(engine) -> None:
    tables = _ClaimDuringRelease(engine)
    sessions = SqlAlchemyTableSessionRepository(engine)

    response = ReleaseTable(tables, sessions).execute(RESTAURANT, T1)

    assert tables.claimed
    assert response.closedSession.sessionId == "S_NEW"
    assert _open_sessions(engine) == 0
    released = tables.get_by_username(RESTAURANT, T1)
    assert released.is_active is False
    assert released.active_session_id is None

    tables.activate(RESTAURANT, TableId("tbl_t1"))
    fresh = ClaimTable(SqlAlchemyTableRepository(engine)).execute(
        RESTAURANT, T1, SessionToken("S9")
    )
    assert fresh.status == CLAIMED
    assert _open_sessions(engine) == 1
