"""Shared fakes: an in-process CLOB client and a scripted position reader."""
import threading
from typing import List, Optional

import pytest
from py_clob_client.clob_types import ApiCreds

from proxy_trader.models import Position
from proxy_trader.services.clob_service import TradingSessionManager
from proxy_trader.services.wallet_service import WalletService

# Hardhat/anvil account #0, public test key
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_EOA = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
TEST_PROXY = "0x365f0CA36Ae1f641E02fE3B7743673da42A13A70"


class FakeClobClient:
    def __init__(self, clob, host, chain_id, key, creds=None, signature_type=None, funder=None):
        self.clob = clob
        self.host = host
        self.chain_id = chain_id
        self.key = key
        self.creds = creds
        self.signature_type = signature_type
        self.funder = funder

    def create_or_derive_api_creds(self):
        self.clob.calls.append("create_or_derive_api_creds")
        if self.clob.creds_gate is not None:
            self.clob.creds_gate.wait(timeout=5)
        if self.clob.creds_error is not None:
            raise self.clob.creds_error
        return self.clob.creds

    def create_order(self, order_args, options):
        self.clob.created.append(("limit", order_args, options))
        return {"signed": order_args}

    def create_market_order(self, order_args, options):
        self.clob.created.append(("market", order_args, options))
        return {"signed": order_args}

    def post_order(self, signed_order, order_type):
        self.clob.posted.append((signed_order, order_type))
        if self.clob.post_error is not None:
            raise self.clob.post_error
        return self.clob.post_response

    def cancel(self, order_id):
        self.clob.cancelled.append(order_id)
        if self.clob.cancel_error is not None:
            raise self.clob.cancel_error
        return self.clob.cancel_response or {"canceled": [order_id], "not_canceled": {}}

    def get_orders(self, params):
        self.clob.calls.append("get_orders")
        return self.clob.open_orders


class FakeClob:
    def __init__(self):
        self.clients: List[FakeClobClient] = []
        self.calls: List[str] = []
        self.created = []
        self.posted = []
        self.cancelled: List[str] = []
        self.creds = ApiCreds(api_key="key", api_secret="secret", api_passphrase="passphrase")
        self.creds_error: Optional[Exception] = None
        self.creds_gate: Optional[threading.Event] = None
        self.post_error: Optional[Exception] = None
        self.post_response = {"success": True, "errorMsg": "", "orderID": "0xorder1", "status": "live"}
        self.cancel_error: Optional[Exception] = None
        self.cancel_response = None
        self.open_orders = []

    def factory(self, host, chain_id, key, **kwargs):
        client = FakeClobClient(self, host, chain_id, key, **kwargs)
        self.clients.append(client)
        return client

    @property
    def network_calls(self) -> int:
        return len(self.calls) + len(self.posted) + len(self.cancelled)


class ScriptedPositions:
    """Returns the scripted position lists in order, repeating the last one."""

    def __init__(self, *snapshots: List[Position]):
        self.snapshots = list(snapshots)
        self.calls = 0
        self.errors: List[Exception] = []

    async def __call__(self) -> List[Position]:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        index = min(self.calls - 1, len(self.snapshots) - 1)
        return self.snapshots[index]


def make_position(asset: str = "token-x", size: float = 10.0, **kwargs) -> Position:
    data = {
        "asset": asset,
        "size": size,
        "avgPrice": 0.4,
        "curPrice": 0.5,
        "currentValue": size * 0.5,
    }
    data.update(kwargs)
    return Position.model_validate(data)


@pytest.fixture
def fake_clob():
    return FakeClob()


@pytest.fixture
def wallet():
    return WalletService.from_private_key(TEST_PRIVATE_KEY)


@pytest.fixture
def session_manager(fake_clob):
    return TradingSessionManager(client_factory=fake_clob.factory)
