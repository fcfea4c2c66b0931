import asyncio

import pytest
import pytest_asyncio
from py_clob_client.clob_types import OrderType

from proxy_trader.exceptions import InvalidOrder, SessionError, SubmissionError
from proxy_trader.models import OrderRequest, SessionState, Side
from proxy_trader.services.order_service import OrderExecutionEngine, validate_order

from .conftest import TEST_EOA, TEST_PROXY


@pytest.fixture
def engine(session_manager):
    return OrderExecutionEngine(session_manager)


@pytest_asyncio.fixture
async def active_engine(engine, session_manager, wallet):
    await session_manager.create_session(wallet, TEST_EOA, TEST_PROXY)
    return engine


def limit_order(**kwargs) -> OrderRequest:
    data = {"token_id": "token-x", "side": Side.BUY, "size": 10, "limit_price_cents": 55}
    data.update(kwargs)
    return OrderRequest(**data)


def market_order(**kwargs) -> OrderRequest:
    data = {"token_id": "token-x", "side": Side.BUY, "size": 10, "is_market_order": True, "reference_price": 0.5}
    data.update(kwargs)
    return OrderRequest(**data)


@pytest.mark.asyncio
@pytest.mark.parametrize("size", [0, -1, float("nan")])
async def test_non_positive_size_is_rejected_before_any_call(active_engine, fake_clob, size):
    calls_before = fake_clob.network_calls

    with pytest.raises(InvalidOrder):
        await active_engine.submit(limit_order(size=size))

    assert fake_clob.network_calls == calls_before
    assert fake_clob.created == []


@pytest.mark.asyncio
async def test_zero_size_is_invalid_even_without_session(engine, fake_clob):
    with pytest.raises(InvalidOrder):
        await engine.submit(limit_order(size=0))
    assert fake_clob.clients == []


@pytest.mark.parametrize("kwargs", [
    {"limit_price_cents": None, "limit_price": 1.5},
    {"limit_price_cents": None, "limit_price": 0.0},
    {"limit_price_cents": None, "limit_price": 1.0},
    {"limit_price_cents": None, "limit_price": 0.555},
    {"limit_price_cents": None, "limit_price": None},
    {"limit_price_cents": 0},
    {"limit_price_cents": 100},
])
def test_out_of_range_limit_price_is_invalid(kwargs):
    with pytest.raises(InvalidOrder):
        validate_order(limit_order(**kwargs))


@pytest.mark.parametrize("kwargs,expected", [
    ({"limit_price_cents": 1}, 0.01),
    ({"limit_price_cents": 99}, 0.99),
    ({"limit_price_cents": None, "limit_price": 0.55}, 0.55),
    ({"limit_price_cents": None, "limit_price": 0.07}, 0.07),
])
def test_whole_cent_limit_prices_are_valid(kwargs, expected):
    assert validate_order(limit_order(**kwargs)) == expected


@pytest.mark.asyncio
async def test_limit_order_forwards_exact_price(active_engine, fake_clob):
    record = await active_engine.submit(limit_order(limit_price_cents=55))

    kind, order_args, options = fake_clob.created[0]
    assert kind == "limit"
    assert order_args.price == 0.55
    assert order_args.size == 10
    assert order_args.side == "BUY"
    assert order_args.token_id == "token-x"
    assert fake_clob.posted[0][1] == OrderType.GTC

    assert record.id == "0xorder1"
    assert record.price == 0.55
    assert record.price_cents == 55
    assert record.original_size == 10
    assert record.side == Side.BUY
    assert record.status == "live"


@pytest.mark.asyncio
@pytest.mark.parametrize("neg_risk", [True, False])
async def test_neg_risk_is_forwarded_unchanged(active_engine, fake_clob, neg_risk):
    await active_engine.submit(limit_order(neg_risk=neg_risk))
    await active_engine.submit(market_order(neg_risk=neg_risk))

    assert [options.neg_risk for _, _, options in fake_clob.created] == [neg_risk, neg_risk]


@pytest.mark.asyncio
async def test_market_buy_is_sized_in_collateral_and_fill_or_kill(active_engine, fake_clob):
    record = await active_engine.submit(market_order(side=Side.BUY, size=10, reference_price=0.5))

    kind, order_args, _ = fake_clob.created[0]
    assert kind == "market"
    assert order_args.amount == pytest.approx(5.0)
    assert order_args.price == 0.5
    assert order_args.side == "BUY"
    assert fake_clob.posted[0][1] == OrderType.FOK
    assert record.order_type == OrderType.FOK


@pytest.mark.asyncio
async def test_market_sell_is_sized_in_shares(active_engine, fake_clob):
    await active_engine.submit(market_order(side=Side.SELL, size=7.5, reference_price=None))

    _, order_args, _ = fake_clob.created[0]
    assert order_args.amount == 7.5
    assert order_args.side == "SELL"
    assert order_args.price == 0


@pytest.mark.asyncio
async def test_market_buy_needs_reference_price(active_engine, fake_clob):
    with pytest.raises(InvalidOrder):
        await active_engine.submit(market_order(reference_price=None))
    assert fake_clob.created == []
    assert fake_clob.posted == []


@pytest.mark.asyncio
async def test_market_buy_without_price_after_clear_is_a_session_error(active_engine, session_manager, fake_clob):
    session_manager.clear_session()

    with pytest.raises(SessionError):
        await active_engine.submit(market_order(reference_price=None))
    assert fake_clob.created == []


@pytest.mark.parametrize("price", [0, 1, 1.2, -0.1])
def test_market_reference_price_must_be_a_probability(price):
    with pytest.raises(InvalidOrder):
        validate_order(market_order(reference_price=price))


@pytest.mark.asyncio
async def test_submit_after_clear_is_a_session_error(active_engine, session_manager, fake_clob):
    session_manager.clear_session()
    assert session_manager.session_state() == SessionState.DISCONNECTED

    with pytest.raises(SessionError):
        await active_engine.submit(limit_order())
    assert fake_clob.created == []
    assert fake_clob.posted == []


@pytest.mark.asyncio
async def test_transport_failure_is_surfaced_without_retry(active_engine, session_manager, fake_clob):
    fake_clob.post_error = ConnectionError("connection reset")

    with pytest.raises(SubmissionError, match="connection reset"):
        await active_engine.submit(limit_order())

    assert len(fake_clob.posted) == 1
    # order errors do not invalidate the session
    assert session_manager.session_state() == SessionState.ACTIVE


@pytest.mark.asyncio
async def test_rejected_order_is_a_submission_error(active_engine, fake_clob):
    fake_clob.post_response = {"success": False, "errorMsg": "not enough balance / allowance", "orderID": ""}

    with pytest.raises(SubmissionError, match="not enough balance"):
        await active_engine.submit(limit_order())


@pytest.mark.asyncio
async def test_missing_order_id_is_a_submission_error(active_engine, fake_clob):
    fake_clob.post_response = {"success": True, "errorMsg": ""}

    with pytest.raises(SubmissionError):
        await active_engine.submit(limit_order())


@pytest.mark.asyncio
async def test_concurrent_submissions_are_independent(active_engine, fake_clob):
    records = await asyncio.gather(
        active_engine.submit(limit_order(token_id="a", limit_price_cents=10)),
        active_engine.submit(limit_order(token_id="b", limit_price_cents=20)),
    )

    assert {r.asset_id for r in records} == {"a", "b"}
    assert sorted(args.price for _, args, _ in fake_clob.created) == [0.1, 0.2]


@pytest.mark.asyncio
async def test_cancel_order(active_engine, fake_clob):
    await active_engine.cancel("0xorder1")
    assert fake_clob.cancelled == ["0xorder1"]


@pytest.mark.asyncio
async def test_cancel_already_terminal_order_is_surfaced(active_engine, fake_clob):
    fake_clob.cancel_response = {"canceled": [], "not_canceled": {"0xorder1": "order already canceled"}}

    with pytest.raises(SubmissionError, match="already canceled"):
        await active_engine.cancel("0xorder1")


@pytest.mark.asyncio
async def test_cancel_transport_failure(active_engine, fake_clob):
    fake_clob.cancel_error = TimeoutError("timed out")

    with pytest.raises(SubmissionError, match="timed out"):
        await active_engine.cancel("0xorder1")


@pytest.mark.asyncio
async def test_cancel_requires_active_session(engine, fake_clob):
    with pytest.raises(SessionError):
        await engine.cancel("0xorder1")
    assert fake_clob.cancelled == []


@pytest.mark.asyncio
async def test_list_open_orders_for_funding_address(active_engine, fake_clob):
    fake_clob.open_orders = [
        {
            "id": "0xaaa", "status": "LIVE", "maker_address": TEST_PROXY.lower(),
            "asset_id": "token-x", "side": "BUY", "original_size": "20", "size_matched": "5",
            "price": "0.42", "order_type": "GTC", "created_at": 1700000000,
        },
        {
            "id": "0xbbb", "status": "LIVE", "maker_address": "0x0000000000000000000000000000000000000001",
            "asset_id": "token-y", "side": "SELL", "original_size": "1", "size_matched": "0",
            "price": "0.9", "order_type": "GTC", "created_at": 1700000001,
        },
    ]

    orders = await active_engine.list_open_orders()

    assert [o.id for o in orders] == ["0xaaa"]
    order = orders[0]
    assert order.price == 0.42
    assert order.price_cents == 42
    assert order.size_matched == 5
    assert order.total_value == pytest.approx(8.4)


@pytest.mark.asyncio
async def test_list_open_orders_requires_session(engine):
    with pytest.raises(SessionError):
        await engine.list_open_orders(TEST_PROXY)
