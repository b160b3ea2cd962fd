from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy.orm import Session

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from qrdine.api.main import create_app
from qrdine.infrastructure.db.models import order as order_models  # noqa: F401
from qrdine.infrastructure.db.models import review as review_models  # noqa: F401
from qrdine.infrastructure.db.models import staff_call as staff_call_models  # noqa: F401
from qrdine.infrastructure.db.models.menu import Base, MenuItemModel, RestaurantModel
from qrdine.infrastructure.db.models.table import TableModel
from qrdine.infrastructure.db.session import build_engine

RESTAURANT_ID = "bistro"
SEEDED_AT = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)

ADMIN_HEADERS = {
    "X-Auth-Role": "admin",
    "X-Auth-Restaurant": RESTAURANT_ID,
    "X-Auth-Subject": "adm_1",
}


class MemoryCache:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.values[key] = value


def _seed(engine: Engine) -> None:
    with Session(engine) as session:
        session.add(RestaurantModel(id=RESTAURANT_ID, name="Bistro", created_at=SEEDED_AT))
        session.add(
            RestaurantModel(
                id="strict",
                name="Members Only",
                require_customer_login=True,
                created_at=SEEDED_AT,
            )
        )
        session.add_all(
            [
                MenuItemModel(
                    id="itm_burger",
                    restaurant_id=RESTAURANT_ID,
                    name="Burger",
                    category="Mains",
                    price_cents=1000,
                    currency="EUR",
                    is_available=True,
                    position=0,
                ),
                MenuItemModel(
                    id="itm_fries",
                    restaurant_id=RESTAURANT_ID,
                    name="Fries",
                    category="Sides",
                    price_cents=500,
                    currency="EUR",
                    is_available=True,
                    position=1,
                ),
                MenuItemModel(
                    id="itm_soup",
                    restaurant_id=RESTAURANT_ID,
                    name="Soup",
                    category="Starters",
                    price_cents=700,
                    currency="EUR",
                    is_available=False,
                    position=2,
                ),
            ]
        )
        session.add_all(
            [
                TableModel(
                    id="tbl_t1",
                    restaurant_id=RESTAURANT_ID,
                    username="T1",
                    name="Window",
                    is_active=True,
                    created_at=SEEDED_AT,
                    updated_at=SEEDED_AT,
                ),
                TableModel(
                    id="tbl_t2",
                    restaurant_id=RESTAURANT_ID,
                    username="T2",
                    name="Patio",
                    is_active=False,
                    created_at=SEEDED_AT,
                    updated_at=SEEDED_AT,
                ),
            ]
        )
        session.commit()


@pytest.fixture
def engine(tmp_path: Path) -> Iterator[Engine]:
    db_engine = build_engine(f"sqlite:///{tmp_path / 'qrdine.db'}", connect_timeout=15)
    Base.metadata.create_all(db_engine)
    _seed(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def client(engine: Engine) -> Iterator[TestClient]:
    with TestClient(create_app(engine=engine, cache=MemoryCache())) as test_client:
        yield test_client


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return dict(ADMIN_HEADERS)
