import logging
import time
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from tableside.exceptions import EmptyCart, PlacementFailed
from tableside.metrics import ORDER_PLACEMENTS, PLACEMENT_DURATION
from tableside.models.order import Order, OrderItem, OrderStatus
from tableside.models.payment import Payment, PaymentStatus
from tableside.schemas.cart import CartLineResponse
from tableside.schemas.order import (
    OrderDetailResponse,
    OrderItemResponse,
    OrderSummaryResponse,
    PaymentResponse,
)
from tableside.services.cart_service import clear_lines, list_lines
from tableside.services.locks import TableLockRegistry

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------


@dataclass
class PlacementResult:
    order_id: int
    total_amount: Decimal


def cart_total(lines: list[CartLineResponse]) -> Decimal:
    total = sum((line.price * line.quantity for line in lines), Decimal("0.00"))
    return total.quantize(_CENTS, rounding=ROUND_HALF_UP)


class OrderPlacementEngine:
    """
    Turns a table's cart into an Order, its OrderItems and one Payment, then
    clears the cart. All writes share one transaction: either every row is
    committed or nothing changes and the cart stays as it was.

    Placements for the same table are serialised by the lock registry and,
    on PostgreSQL, by a FOR UPDATE lock on the cart rows. A placement that
    waited behind a successful one finds the cart empty.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        locks: TableLockRegistry | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._locks = locks if locks is not None else TableLockRegistry()

    async def place_order(
        self,
        table_id: int,
        payment_mode: str,
        request_id: str = "unknown",
    ) -> PlacementResult:
        if not payment_mode or not payment_mode.strip():
            raise ValueError("payment_mode must be a non-empty label")

        start = time.perf_counter()
        try:
            async with self._locks.hold(table_id):
                result = await self._place(table_id, payment_mode, request_id)
        except EmptyCart:
            ORDER_PLACEMENTS.labels("empty_cart").inc()
            raise
        except PlacementFailed:
            ORDER_PLACEMENTS.labels("failed").inc()
            raise
        finally:
            PLACEMENT_DURATION.observe(time.perf_counter() - start)

        ORDER_PLACEMENTS.labels("placed").inc()
        return result

    async def _place(self, table_id: int, payment_mode: str, request_id: str) -> PlacementResult:
        async with self._session_factory() as db:
            try:
                # begin() commits on exit and rolls back if anything inside raises
                async with db.begin():
                    cart = await list_lines(db, table_id, for_update=True)
                    # Items withdrawn from the menu are neither charged nor cleared
                    lines = [line for line in cart if line.is_available]
                    if not lines:
                        raise EmptyCart(table_id)

                    total = cart_total(lines)
                    order = await self._create_order(db, table_id, total)
                    await self._create_order_items(db, order, lines)
                    await self._create_payment(db, order, payment_mode)
                    # Only the lines that were read and locked; later additions stay
                    await clear_lines(db, table_id, [line.menu_id for line in lines])
            except EmptyCart:
                logger.info(
                    "Rejected order placement, cart is empty",
                    extra={"table_id": table_id, "request_id": request_id},
                )
                raise
            except Exception as exc:
                logger.exception(
                    "Order placement rolled back",
                    extra={"table_id": table_id, "request_id": request_id, "error": str(exc)},
                )
                raise PlacementFailed(table_id, exc) from exc

        logger.info(
            "Order placed",
            extra={
                "order_id": order.id,
                "table_id": table_id,
                "request_id": request_id,
                "amount": str(total),
                "item_count": len(lines),
                "skipped_unavailable": len(cart) - len(lines),
                "payment_mode": payment_mode,
            },
        )
        return PlacementResult(order_id=order.id, total_amount=total)

    async def _create_order(self, db: AsyncSession, table_id: int, total: Decimal) -> Order:
        order = Order(table_id=table_id, total_amount=total, status=OrderStatus.PENDING)
        db.add(order)
        await db.flush()  # obtain order.id before inserting items
        return order

    async def _create_order_items(
        self, db: AsyncSession, order: Order, lines: list[CartLineResponse]
    ) -> None:
        db.add_all(
            [
                OrderItem(
                    order_id=order.id,
                    menu_item_id=line.menu_id,
                    quantity=line.quantity,
                    unit_price=line.price,
                    subtotal=line.price * line.quantity,
                )
                for line in lines
            ]
        )
        await db.flush()

    async def _create_payment(self, db: AsyncSession, order: Order, payment_mode: str) -> None:
        db.add(
            Payment(
                order_id=order.id,
                amount=order.total_amount,
                payment_method=payment_mode,
                payment_status=PaymentStatus.PENDING,
            )
        )
        await db.flush()


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


async def list_orders(db: AsyncSession, table_id: int) -> list[OrderSummaryResponse]:
    """Orders for a table with their payment, most recent first."""
    result = await db.execute(
        select(Order, Payment)
        .outerjoin(Payment, Payment.order_id == Order.id)
        .where(Order.table_id == table_id)
        .order_by(Order.order_time.desc(), Order.id.desc())
    )
    return [
        OrderSummaryResponse(
            order_id=order.id,
            table_id=order.table_id,
            total_amount=order.total_amount,
            order_time=order.order_time,
            status=order.status,
            payment_method=payment.payment_method if payment else None,
            payment_status=payment.payment_status if payment else None,
        )
        for order, payment in result.all()
    ]


def _build_detail(order: Order) -> OrderDetailResponse:
    items = [
        OrderItemResponse(
            menu_id=item.menu_item_id,
            item_name=item.menu_item.name if item.menu_item else "Unknown",
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.subtotal,
        )
        for item in order.items
    ]

    payment = None
    if order.payment is not None:
        payment = PaymentResponse(
            amount=order.payment.amount,
            payment_method=order.payment.payment_method,
            payment_status=order.payment.payment_status,
            created_at=order.payment.created_at,
        )

    return OrderDetailResponse(
        order_id=order.id,
        table_id=order.table_id,
        total_amount=order.total_amount,
        order_time=order.order_time,
        status=order.status,
        items=items,
        payment=payment,
    )


async def get_order(db: AsyncSession, order_id: int) -> OrderDetailResponse | None:
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(
            selectinload(Order.items).selectinload(OrderItem.menu_item),
            selectinload(Order.payment),
        )
    )
    order = result.scalars().first()
    if order is None:
        return None
    return _build_detail(order)
