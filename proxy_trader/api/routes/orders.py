from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..api import error_response, get_trader_service
from ...config import logger
from ...models import OrderRequest
from ...services.trader_service import TraderService

router = APIRouter()


@router.post("/api/orders")
async def place_order(
    order: OrderRequest,
    trader_service: TraderService = Depends(get_trader_service)
):
    try:
        logger.info(f"Received order request: {order.model_dump()}")
        record = await trader_service.submit_order(order)
        return JSONResponse(content={"success": True, "order": record.model_dump(mode="json")})
    except Exception as e:
        return error_response(e)


@router.get("/api/orders")
async def get_open_orders(trader_service: TraderService = Depends(get_trader_service)):
    try:
        orders = await trader_service.list_open_orders()
        return JSONResponse(content=[
            {**order.model_dump(mode="json"), "price_cents": order.price_cents, "total_value": order.total_value}
            for order in orders
        ])
    except Exception as e:
        return error_response(e)


@router.delete("/api/orders/{order_id}")
async def cancel_order(
    order_id: str,
    trader_service: TraderService = Depends(get_trader_service)
):
    try:
        await trader_service.cancel_order(order_id)
        return JSONResponse(content={"success": True, "order_id": order_id})
    except Exception as e:
        return error_response(e)
