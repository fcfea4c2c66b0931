# proxy_trader/services/trader_service.py
from decimal import Decimal
from typing import List, Optional

from ..config import logger
from ..exceptions import InvalidOrder, SessionError, SubmissionError
from ..models import (
    MarketMetadata, OrderRecord, OrderRequest, Position, SessionState, Side
)
from .clob_service import TradingSession, TradingSessionManager
from .market_service import MarketService
from .order_service import OrderExecutionEngine
from .position_reconciliation_service import PositionReconciliationService
from .position_service import PositionService
from .proxy_wallet_service import ProxyWalletService
from .wallet_service import Wallet, WalletService
from .web3_service import Web3Service


class TraderService:
    """
    Everything the UI layer calls: wallet connection, funding address, CLOB
    session, orders, positions and their reconciliation after a sell.
    """

    def __init__(
        self,
        session_manager: Optional[TradingSessionManager] = None,
        position_service: Optional[PositionService] = None,
        market_service: Optional[MarketService] = None,
        web3_service: Optional[Web3Service] = None,
        proxy_wallet_service: Optional[ProxyWalletService] = None,
        reconciler: Optional[PositionReconciliationService] = None
    ):
        self.session_manager = session_manager or TradingSessionManager()
        self.order_engine = OrderExecutionEngine(self.session_manager)
        self.position_service = position_service or PositionService()
        self.market_service = market_service or MarketService()
        self.proxy_wallet_service = proxy_wallet_service or ProxyWalletService()
        self._web3_service = web3_service
        self.reconciler = reconciler or PositionReconciliationService(
            self._read_positions, on_refresh=self._store_positions
        )

        self.wallet: Optional[Wallet] = None
        self.eoa_address: Optional[str] = None
        self.funding_address: Optional[str] = None
        self.positions: List[Position] = []

    @property
    def web3_service(self) -> Web3Service:
        if self._web3_service is None:
            self._web3_service = Web3Service()
        return self._web3_service

    # Identity

    def derive_funding_address(self, eoa_address: str) -> str:
        return self.proxy_wallet_service.derive(eoa_address)

    def connect_wallet(self, private_key: str) -> Wallet:
        wallet = WalletService.from_private_key(private_key)
        if self.wallet is not None and self.wallet.address != wallet.address:
            self.disconnect_wallet()

        funding_address = self.derive_funding_address(wallet.address)
        self.wallet = wallet
        self.eoa_address = wallet.address
        self.funding_address = funding_address
        logger.info(f"Connected EOA {self.eoa_address} with proxy wallet {self.funding_address}")
        return wallet

    def disconnect_wallet(self) -> None:
        self.session_manager.signer_lost()
        self.reconciler.cancel_all()
        self.wallet = None
        self.eoa_address = None
        self.funding_address = None
        self.positions = []

    # Session

    def session_state(self) -> SessionState:
        return self.session_manager.session_state()

    async def create_session(self) -> TradingSession:
        return await self.session_manager.create_session(
            self.wallet, self.eoa_address, self.funding_address
        )

    def clear_session(self) -> None:
        self.session_manager.clear_session()

    # Orders

    async def submit_order(self, order: OrderRequest) -> OrderRecord:
        order = await self._with_reference_price(order)
        return await self.order_engine.submit(order)

    async def _with_reference_price(self, order: OrderRequest) -> OrderRequest:
        """Market buys are sized in collateral; price them off the outcome price when no hint is given."""
        if (
            not order.is_market_order
            or order.side != Side.BUY
            or order.reference_price is not None
            or not order.size > 0
            or self.session_manager.state != SessionState.ACTIVE
        ):
            return order

        try:
            market = await self.market_service.get_market_by_token(order.token_id)
        except ValueError as e:
            logger.error(f"Could not price market buy for token {order.token_id}: {str(e)}")
            raise SubmissionError(str(e)) from e
        price = market.price_for_token(order.token_id)
        if price is None or not 0 < price < 1:
            return order
        return order.model_copy(update={"reference_price": price})

    async def cancel_order(self, order_id: str) -> None:
        await self.order_engine.cancel(order_id)

    async def list_open_orders(self) -> List[OrderRecord]:
        return await self.order_engine.list_open_orders(self.funding_address)

    # Positions

    def _require_funding_address(self) -> str:
        if not self.funding_address:
            raise SessionError("Wallet not connected")
        return self.funding_address

    async def _read_positions(self) -> List[Position]:
        return await self.position_service.list_positions(self._require_funding_address())

    def _store_positions(self, positions: List[Position]) -> None:
        self.positions = positions

    async def refresh_positions(self) -> List[Position]:
        positions = await self._read_positions()
        self._store_positions(positions)
        self.reconciler.observe(positions)
        return positions

    async def get_positions(self, hide_dust: bool = True) -> List[Position]:
        positions = await self.refresh_positions()
        return PositionService.active_positions(positions, hide_dust=hide_dust)

    def is_asset_pending_reconciliation(self, asset: str) -> bool:
        return self.reconciler.is_pending(asset)

    async def sell_position(self, asset: str) -> OrderRecord:
        """Market-sell the whole position in ``asset`` and reconcile until it shows."""
        position = next((p for p in self.positions if p.asset == asset), None)
        if position is None:
            positions = await self.refresh_positions()
            position = next((p for p in positions if p.asset == asset), None)
        if position is None:
            raise InvalidOrder(f"Position with token ID {asset} not found")
        if position.redeemable:
            raise InvalidOrder("Position is redeemable and cannot be sold")
        if self.reconciler.is_pending(asset):
            raise InvalidOrder(f"A previous trade on {asset} is still settling")

        reference_price = position.current_price
        record = await self.submit_order(OrderRequest(
            token_id=position.asset,
            side=Side.SELL,
            size=position.size,
            is_market_order=True,
            reference_price=reference_price if 0 < reference_price < 1 else None,
            neg_risk=position.negative_risk
        ))
        self.reconciler.track(position.asset, position.size)
        return record

    # Markets and balances

    async def get_market_by_token(self, token_id: str) -> MarketMetadata:
        return await self.market_service.get_market_by_token(token_id)

    async def get_high_volume_markets(self, limit: int = 10) -> List[MarketMetadata]:
        return await self.market_service.get_high_volume_markets(limit)

    def get_usdc_balance(self) -> Decimal:
        return self.web3_service.usdc_balance(self._require_funding_address())

    async def shutdown(self) -> None:
        self.reconciler.cancel_all()
