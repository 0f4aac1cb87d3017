from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.database import get_db
from tableside.schemas.menu_item import MenuItemResponse
from tableside.services import menu_service

router = APIRouter()


@router.get("/menu", response_model=list[MenuItemResponse])
async def list_menu(db: AsyncSession = Depends(get_db)) -> list[MenuItemResponse]:
    items = await menu_service.list_menu(db)
    return [MenuItemResponse.model_validate(item) for item in items]
