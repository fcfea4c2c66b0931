from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..api import error_response, get_trader_service
from ...models import ConnectWalletRequest, WalletInfo
from ...services.trader_service import TraderService

router = APIRouter()


@router.post("/api/wallet")
async def connect_wallet(
    request: ConnectWalletRequest,
    trader_service: TraderService = Depends(get_trader_service)
):
    try:
        trader_service.connect_wallet(request.private_key)
        info = WalletInfo(
            eoa_address=trader_service.eoa_address,
            funding_address=trader_service.funding_address
        )
        return JSONResponse(content=info.model_dump())
    except Exception as e:
        return error_response(e)


@router.delete("/api/wallet")
async def disconnect_wallet(trader_service: TraderService = Depends(get_trader_service)):
    trader_service.disconnect_wallet()
    return {"success": True}


@router.get("/api/proxy-wallet/{eoa_address}")
async def derive_proxy_wallet(
    eoa_address: str,
    trader_service: TraderService = Depends(get_trader_service)
):
    try:
        funding_address = trader_service.derive_funding_address(eoa_address)
        return WalletInfo(eoa_address=eoa_address, funding_address=funding_address).model_dump()
    except Exception as e:
        return error_response(e)
