import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.database import get_db
from tableside.dependencies import check_table, request_id
from tableside.exceptions import NotFound
from tableside.schemas.cart import CartLineCreate, CartLineResponse, CartLineUpdate, CartResponse
from tableside.services import cart_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/add", response_model=CartResponse)
async def add_to_cart(
    body: CartLineCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> CartResponse:
    logger.info(
        "Received add_to_cart request",
        extra={"request_id": request_id(request), "table_id": body.table_id, "menu_id": body.menu_id},
    )
    try:
        check_table(body.table_id)
        cart = await cart_service.add_line(db, body.table_id, body.menu_id, body.quantity)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return CartResponse(message="Item added to cart successfully", cart=cart)


@router.put("/update", response_model=CartResponse)
async def update_cart(
    body: CartLineUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> CartResponse:
    logger.info(
        "Received update_cart request",
        extra={
            "request_id": request_id(request),
            "table_id": body.table_id,
            "menu_id": body.menu_id,
            "quantity": body.quantity,
        },
    )
    try:
        check_table(body.table_id)
        cart = await cart_service.update_quantity(db, body.table_id, body.menu_id, body.quantity)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return CartResponse(message="Cart updated successfully", cart=cart)


@router.delete("/remove/{table_id}/{menu_id}", response_model=CartResponse)
async def remove_from_cart(
    table_id: int,
    menu_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> CartResponse:
    logger.info(
        "Received remove_from_cart request",
        extra={"request_id": request_id(request), "table_id": table_id, "menu_id": menu_id},
    )
    try:
        check_table(table_id)
        cart = await cart_service.remove_line(db, table_id, menu_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return CartResponse(message="Item removed from cart", cart=cart)


@router.get("/{table_id}", response_model=list[CartLineResponse])
async def get_cart(table_id: int, db: AsyncSession = Depends(get_db)) -> list[CartLineResponse]:
    try:
        check_table(table_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return await cart_service.list_lines(db, table_id)
