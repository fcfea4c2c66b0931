from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..config import logger
from ..exceptions import InvalidAddress, InvalidOrder, SessionError, SubmissionError
from ..models import SessionState, SessionStatus
from ..services.trader_service import TraderService


def get_trader_service(request: Request) -> TraderService:
    return request.app.state.trader_service


def error_response(e: Exception) -> JSONResponse:
    if isinstance(e, (InvalidAddress, InvalidOrder, ValueError)):
        status_code, error_type = 400, "validation_error"
    elif isinstance(e, SessionError):
        # 502 when the handshake itself failed, 409 when there is simply no session
        status_code = 502 if e.__cause__ is not None else 409
        error_type = "session_error"
    elif isinstance(e, SubmissionError):
        status_code, error_type = 502, "submission_error"
    else:
        logger.error(f"Unhandled error: {str(e)}", exc_info=True)
        status_code, error_type = 500, "internal_error"

    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": str(e), "type": error_type}
    )


def session_payload(trader_service: TraderService) -> dict:
    manager = trader_service.session_manager
    return SessionStatus(
        state=manager.state.value,
        eoa_address=trader_service.eoa_address,
        funding_address=trader_service.funding_address,
        error=str(manager.error) if manager.state == SessionState.ERROR else None,
    ).model_dump()


def build_router() -> APIRouter:
    from .routes.status import router as status_router
    from .routes.wallet import router as wallet_router
    from .routes.session import router as session_router
    from .routes.orders import router as orders_router
    from .routes.positions import router as positions_router
    from .routes.markets import router as markets_router

    router = APIRouter()
    router.include_router(status_router)
    router.include_router(wallet_router)
    router.include_router(session_router)
    router.include_router(orders_router)
    router.include_router(positions_router)
    router.include_router(markets_router)
    return router
