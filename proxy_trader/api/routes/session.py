from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..api import error_response, get_trader_service, session_payload
from ...services.trader_service import TraderService

router = APIRouter()


@router.get("/api/session")
async def get_session(trader_service: TraderService = Depends(get_trader_service)):
    return session_payload(trader_service)


@router.post("/api/session")
async def create_session(trader_service: TraderService = Depends(get_trader_service)):
    try:
        await trader_service.create_session()
        return JSONResponse(content={"success": True, **session_payload(trader_service)})
    except Exception as e:
        return error_response(e)


@router.delete("/api/session")
async def clear_session(trader_service: TraderService = Depends(get_trader_service)):
    trader_service.clear_session()
    return {"success": True, **session_payload(trader_service)}
