from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..api import error_response, get_trader_service
from ...services.trader_service import TraderService

router = APIRouter()


@router.get("/api/positions")
async def get_positions(
    hide_dust: bool = True,
    trader_service: TraderService = Depends(get_trader_service)
):
    try:
        positions = await trader_service.get_positions(hide_dust=hide_dust)
        return JSONResponse(content=[
            {
                **position.model_dump(mode="json"),
                "pending_reconciliation": trader_service.is_asset_pending_reconciliation(position.asset),
            }
            for position in positions
        ])
    except Exception as e:
        return error_response(e)


@router.post("/api/positions/{asset}/sell")
async def sell_position(
    asset: str,
    trader_service: TraderService = Depends(get_trader_service)
):
    try:
        record = await trader_service.sell_position(asset)
        return JSONResponse(content={
            "success": True,
            "order": record.model_dump(mode="json"),
            "pending_reconciliation": trader_service.is_asset_pending_reconciliation(asset),
        })
    except Exception as e:
        return error_response(e)


@router.get("/api/positions/{asset}/pending")
async def get_pending(
    asset: str,
    trader_service: TraderService = Depends(get_trader_service)
):
    return {"asset": asset, "pending": trader_service.is_asset_pending_reconciliation(asset)}
