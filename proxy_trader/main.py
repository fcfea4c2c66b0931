from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.api import build_router
from .config import PRIVATE_KEY, logger
from .services.trader_service import TraderService


def create_app(trader_service: Optional[TraderService] = None) -> FastAPI:
    app = FastAPI(title="Proxy Trader")
    app.state.trader_service = trader_service or TraderService()

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        if PRIVATE_KEY and app.state.trader_service.wallet is None:
            try:
                app.state.trader_service.connect_wallet(PRIVATE_KEY)
            except Exception as e:
                logger.error(f"Failed to connect configured wallet: {str(e)}")
                raise

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.trader_service.shutdown()

    app.include_router(build_router())
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("proxy_trader.main:app", host="0.0.0.0", port=8000, reload=True)
