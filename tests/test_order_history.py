from decimal import Decimal

import pytest

from tableside.models.order import Order, OrderStatus
from tableside.models.payment import PaymentStatus
from tableside.services import cart_service, order_service

pytestmark = pytest.mark.anyio


async def _place(session_factory, engine, table_id, menu_id, quantity, payment_mode="cash"):
    async with session_factory() as db:
        await cart_service.add_line(db, table_id, menu_id, quantity)
    return await engine.place_order(table_id, payment_mode)


class TestListOrders:
    async def test_newest_first_with_payment(self, session_factory, placement_engine):
        first = await _place(session_factory, placement_engine, 1, 1, 1, "cash")
        second = await _place(session_factory, placement_engine, 1, 2, 2, "upi")

        async with session_factory() as db:
            orders = await order_service.list_orders(db, 1)

        assert [o.order_id for o in orders] == [second.order_id, first.order_id]
        assert orders[0].total_amount == Decimal("100")
        assert orders[0].payment_method == "upi"
        assert orders[0].payment_status == PaymentStatus.PENDING
        assert orders[1].payment_method == "cash"

    async def test_only_the_requested_table(self, session_factory, placement_engine):
        await _place(session_factory, placement_engine, 1, 1, 1)
        await _place(session_factory, placement_engine, 2, 2, 1)

        async with session_factory() as db:
            orders = await order_service.list_orders(db, 2)

        assert [o.table_id for o in orders] == [2]

    async def test_no_orders(self, db):
        assert await order_service.list_orders(db, 5) == []

    async def test_order_without_payment_is_still_listed(self, db):
        db.add(Order(table_id=4, total_amount=Decimal("10.00"), status=OrderStatus.PENDING))
        await db.commit()

        orders = await order_service.list_orders(db, 4)

        assert len(orders) == 1
        assert orders[0].payment_method is None
        assert orders[0].payment_status is None


class TestGetOrder:
    async def test_returns_items_and_payment(self, session_factory, placement_engine):
        async with session_factory() as db:
            await cart_service.add_line(db, 1, 1, 2)
            await cart_service.add_line(db, 1, 2, 1)
        result = await placement_engine.place_order(1, "card")

        async with session_factory() as db:
            detail = await order_service.get_order(db, result.order_id)

        assert detail.order_id == result.order_id
        assert detail.table_id == 1
        assert detail.total_amount == Decimal("250")
        assert sorted((i.item_name, i.quantity) for i in detail.items) == [
            ("Filter Coffee", 1),
            ("Masala Dosa", 2),
        ]
        assert detail.payment.amount == Decimal("250")
        assert detail.payment.payment_method == "card"

    async def test_unknown_order(self, db):
        assert await order_service.get_order(db, 12345) is None
