from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..api import error_response, get_trader_service, session_payload
from ...services.trader_service import TraderService

router = APIRouter()


@router.get("/api/status")
async def get_status(trader_service: TraderService = Depends(get_trader_service)):
    return {
        "status": "healthy",
        "session": session_payload(trader_service),
        "pending_reconciliation": sorted(trader_service.reconciler.pending_assets),
    }


@router.get("/api/balance")
async def get_balance(trader_service: TraderService = Depends(get_trader_service)):
    try:
        balance = trader_service.get_usdc_balance()
        return JSONResponse(content={
            "funding_address": trader_service.funding_address,
            "usdc_balance": float(balance),
            "formatted_usdc_balance": f"{balance:.2f}",
        })
    except Exception as e:
        return error_response(e)
