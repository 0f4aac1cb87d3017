import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tableside.exceptions import NotFound
from tableside.models.menu_item import MenuItem

logger = logging.getLogger(__name__)

_MENU_SEED = [
    {"name": "Masala Dosa", "description": "Crisp rice crepe with spiced potato", "price": Decimal("120.00")},
    {"name": "Idli Sambar", "description": "Steamed rice cakes with lentil stew", "price": Decimal("80.00")},
    {"name": "Paneer Butter Masala", "description": "Cottage cheese in tomato gravy", "price": Decimal("220.00")},
    {"name": "Veg Biryani", "description": "Basmati rice with mixed vegetables", "price": Decimal("180.00")},
    {"name": "Butter Naan", "description": None, "price": Decimal("40.00")},
    {"name": "Gulab Jamun", "description": "Two pieces in sugar syrup", "price": Decimal("60.00")},
    {"name": "Masala Chai", "description": None, "price": Decimal("30.00")},
    {"name": "Fresh Lime Soda", "description": "Sweet or salted", "price": Decimal("50.00")},
]


async def seed_menu_items(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """Populate menu_items if the table is empty. Called once on startup."""
    async with session_factory() as db:
        result = await db.execute(select(MenuItem).limit(1))
        if result.scalars().first() is not None:
            return
        for item_data in _MENU_SEED:
            db.add(MenuItem(**item_data))
        await db.commit()
        logger.info("Seeded %d menu items", len(_MENU_SEED))


async def list_menu(db: AsyncSession) -> list[MenuItem]:
    result = await db.execute(
        select(MenuItem).where(MenuItem.is_available.is_(True)).order_by(MenuItem.name)
    )
    return list(result.scalars().all())


async def get_menu_item(db: AsyncSession, menu_id: int) -> MenuItem:
    menu_item = await db.get(MenuItem, menu_id)
    if menu_item is None:
        raise NotFound(f"Menu item {menu_id} not found")
    return menu_item
