from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.pool import NullPool

from tableside.database import build_engine, build_session_factory, create_schema
from tableside.models.menu_item import MenuItem
from tableside.services.order_service import OrderPlacementEngine

# menu_id -> price used throughout the tests
MENU = {
    1: ("Masala Dosa", Decimal("100.00"), True),
    2: ("Filter Coffee", Decimal("50.00"), True),
    3: ("Seasonal Special", Decimal("75.00"), False),
}


class FailingPaymentEngine(OrderPlacementEngine):
    """Fails after the Order and its items are flushed, before the Payment exists."""

    async def _create_payment(self, db, order, payment_mode):
        raise RuntimeError("simulated failure before payment insert")


async def prepare_database(engine) -> None:
    await create_schema(engine)
    session_factory = build_session_factory(engine)
    async with session_factory() as db:
        db.add_all(
            [
                MenuItem(id=menu_id, name=name, price=price, is_available=available)
                for menu_id, (name, price, available) in MENU.items()
            ]
        )
        await db.commit()


async def count_rows(session_factory, model) -> int:
    async with session_factory() as db:
        result = await db.execute(select(func.count()).select_from(model))
        return result.scalar_one()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'tableside.db'}"


@pytest.fixture
async def session_factory(database_url):
    engine = build_engine(database_url, poolclass=NullPool)
    await prepare_database(engine)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def placement_engine(session_factory):
    return OrderPlacementEngine(session_factory)
