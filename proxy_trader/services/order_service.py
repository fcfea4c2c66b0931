# proxy_trader/services/order_service.py
import asyncio
import math
from typing import Any, Dict, List, Optional

from py_clob_client.clob_types import (
    OrderArgs,
    OrderType,
    MarketOrderArgs,
    OpenOrderParams,
    PartialCreateOrderOptions
)
from py_clob_client.order_builder.constants import BUY, SELL

from ..config import logger
from ..exceptions import InvalidOrder, SubmissionError
from ..models import OrderRecord, OrderRequest, Side
from .clob_service import TradingSessionManager

MIN_PRICE_CENTS = 1
MAX_PRICE_CENTS = 99


def _limit_price(order: OrderRequest) -> float:
    if order.limit_price_cents is not None:
        cents = order.limit_price_cents
    elif order.limit_price is not None:
        if not math.isfinite(order.limit_price):
            raise InvalidOrder("Limit price must be a finite number")
        scaled = order.limit_price * 100
        cents = round(scaled)
        if not math.isclose(scaled, cents, rel_tol=0, abs_tol=1e-6):
            raise InvalidOrder(f"Limit price {order.limit_price} is not a whole number of cents")
    else:
        raise InvalidOrder("Limit price is required")

    if cents < MIN_PRICE_CENTS or cents > MAX_PRICE_CENTS:
        raise InvalidOrder("Price must be between 1 and 99 (0.01 to 0.99)")
    return cents / 100


def validate_order(order: OrderRequest) -> Optional[float]:
    """
    Validate ``order`` locally and return the execution price it will carry.

    Limit orders return their whole-cent limit price. Market orders return the
    reference price hint, or None when no hint was given.
    """
    if not order.token_id:
        raise InvalidOrder("Token ID is required")
    if not math.isfinite(order.size) or order.size <= 0:
        raise InvalidOrder("Size must be greater than 0")

    if not order.is_market_order:
        return _limit_price(order)

    price = order.reference_price
    if price is not None and (not math.isfinite(price) or price <= 0 or price >= 1):
        raise InvalidOrder(f"Reference price must be between 0 and 1, got {price}")
    return price


class OrderExecutionEngine:
    """
    Submits and cancels orders through the active CLOB session.

    Stateless per call: concurrent submissions are independent and nothing is
    retried, so an order is posted at most once.
    """

    def __init__(self, session_manager: TradingSessionManager):
        self.session_manager = session_manager

    async def submit(self, order: OrderRequest) -> OrderRecord:
        price = validate_order(order)
        session = self.session_manager.require_active()
        if order.is_market_order and order.side == Side.BUY and price is None:
            # Market buys are sized in collateral, which needs a price
            raise InvalidOrder("Market buy orders require a reference price")

        logger.info(
            f"Submitting {'market' if order.is_market_order else 'limit'} {order.side.value} order: "
            f"token={order.token_id} size={order.size} price={price} neg_risk={order.neg_risk}"
        )
        try:
            response = await asyncio.to_thread(self._create_and_post, session.client, order, price)
        except Exception as e:
            logger.error(f"Order submission failed: {str(e)}")
            raise SubmissionError(str(e)) from e

        if not response:
            raise SubmissionError("Empty response from CLOB")
        if response.get("errorMsg"):
            logger.error(f"Order rejected by CLOB: {response['errorMsg']}")
            raise SubmissionError(f"Order placement failed: {response['errorMsg']}")
        order_id = response.get("orderID")
        if not order_id:
            raise SubmissionError("No order ID returned from CLOB")

        record = OrderRecord(
            id=order_id,
            asset_id=order.token_id,
            side=order.side,
            price=price or 0.0,
            original_size=order.size,
            status=response.get("status"),
            order_type=OrderType.FOK if order.is_market_order else OrderType.GTC,
            neg_risk=order.neg_risk,
            transaction_hashes=response.get("transactionsHashes") or []
        )
        logger.info(f"Order {record.id} accepted with status {record.status}")
        return record

    @staticmethod
    def _create_and_post(client: Any, order: OrderRequest, price: Optional[float]) -> Dict:
        side = BUY if order.side == Side.BUY else SELL
        # neg_risk selects the settlement exchange the order is signed for
        options = PartialCreateOrderOptions(neg_risk=order.neg_risk)

        if order.is_market_order:
            amount = order.size * price if order.side == Side.BUY else order.size
            order_args = MarketOrderArgs(
                token_id=order.token_id,
                amount=amount,
                side=side,
                price=price or 0
            )
            signed_order = client.create_market_order(order_args, options)
            return client.post_order(signed_order, OrderType.FOK)

        order_args = OrderArgs(
            token_id=order.token_id,
            price=price,
            size=order.size,
            side=side
        )
        signed_order = client.create_order(order_args, options)
        return client.post_order(signed_order, OrderType.GTC)

    async def cancel(self, order_id: str) -> None:
        """
        Cancel ``order_id``. A "not canceled" answer (already filled or
        cancelled) is raised as ``SubmissionError`` for the caller to interpret.
        """
        if not order_id:
            raise InvalidOrder("Order ID is required")
        session = self.session_manager.require_active()

        logger.info(f"Cancelling order {order_id}")
        try:
            response = await asyncio.to_thread(session.client.cancel, order_id)
        except Exception as e:
            logger.error(f"Failed to cancel order {order_id}: {str(e)}")
            raise SubmissionError(str(e)) from e

        not_canceled = (response or {}).get("not_canceled") or {}
        if order_id in not_canceled:
            reason = not_canceled[order_id]
            logger.warning(f"Order {order_id} was not cancelled: {reason}")
            raise SubmissionError(f"Order {order_id} not cancelled: {reason}")

    async def list_open_orders(self, account: Optional[str] = None) -> List[OrderRecord]:
        session = self.session_manager.require_active()
        account = account or session.funding_address

        try:
            orders = await asyncio.to_thread(session.client.get_orders, OpenOrderParams())
        except Exception as e:
            logger.error(f"Failed to fetch open orders: {str(e)}")
            raise SubmissionError(str(e)) from e

        records = []
        for order in orders or []:
            maker = order.get("maker_address")
            if maker and maker.lower() != account.lower():
                continue
            records.append(OrderRecord(**order))
        return records
