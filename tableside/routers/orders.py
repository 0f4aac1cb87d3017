import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.database import get_db
from tableside.dependencies import check_table, get_placement_engine, request_id
from tableside.exceptions import EmptyCart, NotFound, PlacementFailed
from tableside.schemas.order import (
    OrderDetailResponse,
    OrderSummaryResponse,
    PlaceOrderRequest,
    PlaceOrderResponse,
)
from tableside.services import order_service
from tableside.services.order_service import OrderPlacementEngine

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/order/place", response_model=PlaceOrderResponse, status_code=status.HTTP_201_CREATED)
async def place_order(
    body: PlaceOrderRequest,
    request: Request,
    engine: OrderPlacementEngine = Depends(get_placement_engine),
) -> PlaceOrderResponse:
    rid = request_id(request)
    logger.info(
        "Received place_order request",
        extra={"request_id": rid, "table_id": body.table_id, "payment_mode": body.payment_mode},
    )
    try:
        check_table(body.table_id)
        result = await engine.place_order(body.table_id, body.payment_mode, rid)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except EmptyCart as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except PlacementFailed:
        # Cause already logged by the engine; keep the response generic
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to place order"
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return PlaceOrderResponse(
        message="Order placed successfully",
        order_id=result.order_id,
        total_amount=result.total_amount,
    )


@router.get("/orders/{table_id}", response_model=list[OrderSummaryResponse])
async def list_orders(
    table_id: int, db: AsyncSession = Depends(get_db)
) -> list[OrderSummaryResponse]:
    try:
        check_table(table_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return await order_service.list_orders(db, table_id)


@router.get("/order/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    order_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> OrderDetailResponse:
    logger.info(
        "Received get_order request",
        extra={"request_id": request_id(request), "order_id": order_id},
    )
    order = await order_service.get_order(db, order_id)
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order
