from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..api import error_response, get_trader_service
from ...services.trader_service import TraderService

router = APIRouter()


@router.get("/api/markets")
async def get_high_volume_markets(
    limit: int = 10,
    trader_service: TraderService = Depends(get_trader_service)
):
    try:
        markets = await trader_service.get_high_volume_markets(limit)
        return JSONResponse(content=[market.model_dump(mode="json") for market in markets])
    except Exception as e:
        return error_response(e)


@router.get("/api/markets/by-token/{token_id}")
async def get_market_by_token(
    token_id: str,
    trader_service: TraderService = Depends(get_trader_service)
):
    try:
        market = await trader_service.get_market_by_token(token_id)
        return JSONResponse(content={
            **market.model_dump(mode="json"),
            "outcome": market.outcome_for_token(token_id),
        })
    except Exception as e:
        return error_response(e)
