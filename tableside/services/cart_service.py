import logging
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import and_, delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.exceptions import NotFound
from tableside.models.cart import CartLine
from tableside.models.menu_item import MenuItem
from tableside.schemas.cart import CartLineResponse
from tableside.services.menu_service import get_menu_item

logger = logging.getLogger(__name__)

# Dialects with INSERT … ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _line_key(table_id: int, menu_id: int):
    return and_(CartLine.table_id == table_id, CartLine.menu_item_id == menu_id)


def _missing_line(table_id: int, menu_id: int) -> NotFound:
    return NotFound(f"Menu item {menu_id} is not in the cart for table {table_id}")


def _upsert_line(dialect_name: str, table_id: int, menu_id: int, quantity: int):
    try:
        insert = _UPSERT_INSERTS[dialect_name]
    except KeyError:
        raise RuntimeError(f"Cart upsert is not supported on {dialect_name}") from None

    stmt = insert(CartLine).values(
        table_id=table_id,
        menu_item_id=menu_id,
        quantity=quantity,
        added_at=datetime.utcnow(),
    )
    return stmt.on_conflict_do_update(
        index_elements=["table_id", "menu_item_id"],
        set_={
            "quantity": CartLine.quantity + stmt.excluded.quantity,
            "added_at": stmt.excluded.added_at,
        },
    )


async def list_lines(
    db: AsyncSession, table_id: int, for_update: bool = False
) -> list[CartLineResponse]:
    """Cart lines for a table joined with current menu name and price, oldest first.

    Reads plain columns rather than ORM instances so the result always reflects
    the database, even when this session saw the rows earlier. With
    ``for_update`` the cart rows are locked until the caller's transaction ends
    (ignored by backends without row locks, e.g. SQLite).
    """
    stmt = (
        select(
            CartLine.menu_item_id,
            CartLine.quantity,
            CartLine.added_at,
            MenuItem.name,
            MenuItem.price,
            MenuItem.is_available,
        )
        .join(MenuItem, CartLine.menu_item_id == MenuItem.id)
        .where(CartLine.table_id == table_id)
        .order_by(CartLine.added_at, CartLine.menu_item_id)
    )
    if for_update:
        stmt = stmt.with_for_update(of=CartLine)
    result = await db.execute(stmt)
    return [
        CartLineResponse(
            menu_id=row.menu_item_id,
            item_name=row.name,
            price=row.price,
            quantity=row.quantity,
            line_total=row.price * row.quantity,
            added_at=row.added_at,
            is_available=row.is_available,
        )
        for row in result.all()
    ]


async def add_line(
    db: AsyncSession, table_id: int, menu_id: int, quantity: int = 1
) -> list[CartLineResponse]:
    if quantity < 1:
        raise ValueError("Quantity to add must be at least 1")

    menu_item = await get_menu_item(db, menu_id)
    if not menu_item.is_available:
        raise NotFound(f"Menu item {menu_id} is not available")

    # Single statement, so concurrent adds for the same line accumulate
    await db.execute(_upsert_line(db.get_bind().dialect.name, table_id, menu_id, quantity))
    await db.commit()

    logger.info(
        "Added item to cart",
        extra={"table_id": table_id, "menu_id": menu_id, "quantity": quantity},
    )
    return await list_lines(db, table_id)


async def update_quantity(
    db: AsyncSession, table_id: int, menu_id: int, quantity: int
) -> list[CartLineResponse]:
    if quantity < 1:
        stmt = delete(CartLine).where(_line_key(table_id, menu_id))
    else:
        stmt = (
            update(CartLine)
            .where(_line_key(table_id, menu_id))
            .values(quantity=quantity, added_at=datetime.utcnow())
        )
    result = await db.execute(stmt.execution_options(synchronize_session=False))
    if result.rowcount == 0:
        await db.rollback()
        raise _missing_line(table_id, menu_id)
    await db.commit()

    logger.info(
        "Updated cart quantity",
        extra={"table_id": table_id, "menu_id": menu_id, "quantity": max(quantity, 0)},
    )
    return await list_lines(db, table_id)


async def remove_line(db: AsyncSession, table_id: int, menu_id: int) -> list[CartLineResponse]:
    result = await db.execute(
        delete(CartLine)
        .where(_line_key(table_id, menu_id))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise _missing_line(table_id, menu_id)
    await db.commit()

    logger.info("Removed item from cart", extra={"table_id": table_id, "menu_id": menu_id})
    return await list_lines(db, table_id)


async def clear_lines(
    db: AsyncSession, table_id: int, menu_ids: Iterable[int] | None = None
) -> int:
    """Delete a table's lines in one statement. Does not commit.

    With ``menu_ids`` only those lines go; anything added after the caller's
    snapshot stays in the cart.
    """
    stmt = delete(CartLine).where(CartLine.table_id == table_id)
    if menu_ids is not None:
        stmt = stmt.where(CartLine.menu_item_id.in_(list(menu_ids)))
    result = await db.execute(stmt.execution_options(synchronize_session=False))
    return result.rowcount
