from __future__ import annotations

import pytest

from qrdine.application.use_cases.claim_table import (
    ALREADY_CLAIMED,
    CLAIMED,
    ClaimTable,
    MissingSessionTokenError,
    TableInUseError,
    TableLockedError,
    TableNotFoundError,
)
from qrdine.domain.common.ids import RestaurantId, SessionToken, TableUsername

RESTAURANT = RestaurantId("bistro")
T1 = TableUsername("T1")


def test_claim_free_active_table_opens_session(table_repo, session_repo, make_table, clock) -> None:
    make_table("T1")

    response = ClaimTable(table_repo, clock).execute(RESTAURANT, T1, SessionToken("S1"))

    assert response.status == CLAIMED
    assert response.sessionId == "S1"
    assert table_repo.get_by_username(RESTAURANT, T1).active_session_id == "S1"
    session = session_repo.get_open(RESTAURANT, T1, SessionToken("S1"))
    assert session is not None
    assert session.start_time == clock()
    assert session.table == "T1"


def test_reclaim_by_same_session_is_idempotent(table_repo, session_repo, make_table, clock) -> None:
    make_table("T1")
    use_case = ClaimTable(table_repo, clock)
    use_case.execute(RESTAURANT, T1, SessionToken("S1"))

    response = use_case.execute(RESTAURANT, T1, SessionToken("S1"))

    assert response.status == ALREADY_CLAIMED
    assert session_repo.count_open_for_table(RESTAURANT, T1) == 1


def test_claim_by_other_session_is_rejected(table_repo, make_table, clock) -> None:
    make_table("T1", occupant="S1")

    with pytest.raises(TableInUseError):
        ClaimTable(table_repo, clock).execute(RESTAURANT, T1, SessionToken("S2"))

    assert table_repo.get_by_username(RESTAURANT, T1).active_session_id == "S1"


def test_claim_locked_table_is_forbidden(table_repo, make_table, clock) -> None:
    make_table("T1", is_active=False)

    with pytest.raises(TableLockedError):
        ClaimTable(table_repo, clock).execute(RESTAURANT, T1, SessionToken("S1"))


def test_claim_unknown_table(table_repo, clock) -> None:
    with pytest.raises(TableNotFoundError):
        ClaimTable(table_repo, clock).execute(RESTAURANT, T1, SessionToken("S1"))


def test_claim_of_table_in_other_restaurant_is_not_found(table_repo, make_table, clock) -> None:
    make_table("T1", restaurant_id=RestaurantId("other"))

    with pytest.raises(TableNotFoundError):
        ClaimTable(table_repo, clock).execute(RESTAURANT, T1, SessionToken("S1"))


@pytest.mark.parametrize("session_id", [None, "", "   "])
def test_claim_requires_session_token(table_repo, make_table, clock, session_id) -> None:
    make_table("T1")

    with pytest.raises(MissingSessionTokenError):
        ClaimTable(table_repo, clock).execute(RESTAURANT, T1, session_id)


def test_lost_race_reports_table_in_use(table_repo, session_repo, make_table, clock) -> None:
    table = make_table("T1")
    use_case = ClaimTable(table_repo, clock)

    def other_device_wins() -> None:
        table_repo.before_claim = None
        use_case.execute(RESTAURANT, T1, SessionToken("S2"))

    table_repo.before_claim = other_device_wins

    with pytest.raises(TableInUseError):
        use_case.execute(RESTAURANT, table.username, SessionToken("S1"))

    assert table_repo.get_by_username(RESTAURANT, T1).active_session_id == "S2"
    assert session_repo.count_open_for_table(RESTAURANT, T1) == 1


def test_lost_race_to_same_session_reports_already_claimed(table_repo, make_table, clock) -> None:
    make_table("T1")
    use_case = ClaimTable(table_repo, clock)

    def same_device_other_tab() -> None:
        table_repo.before_claim = None
        use_case.execute(RESTAURANT, T1, SessionToken("S1"))

    table_repo.before_claim = same_device_other_tab

    response = use_case.execute(RESTAURANT, T1, SessionToken("S1"))

    assert response.status == ALREADY_CLAIMED
