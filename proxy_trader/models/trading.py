# proxy_trader/models/trading.py
import json
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class SessionState(str, Enum):
    DISCONNECTED = "disconnected"
    INITIALIZING = "initializing"
    ACTIVE = "active"
    ERROR = "error"


class OrderRequest(BaseModel):
    """
    An order as constructed by the caller.

    Limit orders carry either ``limit_price`` (dollars) or ``limit_price_cents``;
    market orders may carry ``reference_price`` as the execution price hint.
    Range checks happen in the order engine so that a bad request surfaces as
    ``InvalidOrder`` rather than a pydantic error.
    """
    model_config = ConfigDict(frozen=True)

    token_id: str
    side: Side
    size: float
    is_market_order: bool = False
    limit_price: Optional[float] = None
    limit_price_cents: Optional[int] = None
    reference_price: Optional[float] = None
    neg_risk: bool = False


class OrderRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    asset_id: str
    side: Side
    price: float
    original_size: float
    size_matched: float = 0.0
    status: Optional[str] = None
    order_type: Optional[str] = None
    neg_risk: bool = False
    created_at: Optional[int] = None
    transaction_hashes: List[str] = Field(default_factory=list, alias="transactionsHashes")

    @property
    def price_cents(self) -> int:
        return round(self.price * 100)

    @property
    def total_value(self) -> float:
        return self.original_size * self.price


class Position(BaseModel):
    """A holding of the funding address as reported by the positions API."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    asset: str
    size: float
    avg_price: float = Field(0.0, alias="avgPrice")
    current_price: float = Field(0.0, alias="curPrice")
    current_value: float = Field(0.0, alias="currentValue")
    cash_pnl: float = Field(0.0, alias="cashPnl")
    percent_pnl: float = Field(0.0, alias="percentPnl")
    redeemable: bool = False
    negative_risk: bool = Field(False, alias="negativeRisk")
    condition_id: Optional[str] = Field(None, alias="conditionId")
    outcome: Optional[str] = None
    outcome_index: Optional[int] = Field(None, alias="outcomeIndex")
    title: Optional[str] = None
    icon: Optional[str] = None


def _parse_json_list(value: Any) -> List[Any]:
    # Gamma encodes these arrays as JSON strings
    if value is None or value == "":
        return []
    if isinstance(value, str):
        value = json.loads(value)
    return list(value)


class MarketMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    question: str
    condition_id: Optional[str] = None
    outcomes: List[str] = Field(default_factory=list)
    prices: List[float] = Field(default_factory=list)
    token_ids: List[str] = Field(default_factory=list)
    neg_risk: bool = False
    closed: bool = False
    volume_24hr: float = 0.0
    liquidity: float = 0.0
    icon: Optional[str] = None

    @classmethod
    def from_gamma(cls, market: dict) -> "MarketMetadata":
        return cls(
            id=int(market["id"]),
            question=market["question"],
            condition_id=market.get("conditionId"),
            outcomes=[str(o) for o in _parse_json_list(market.get("outcomes"))],
            prices=[float(p) for p in _parse_json_list(market.get("outcomePrices"))],
            token_ids=[str(t) for t in _parse_json_list(market.get("clobTokenIds"))],
            neg_risk=bool(market.get("negRisk") or False),
            closed=bool(market.get("closed") or False),
            volume_24hr=float(market.get("volume24hr") or market.get("volume") or 0),
            liquidity=float(market.get("liquidity") or 0),
            icon=market.get("icon"),
        )

    def outcome_for_token(self, token_id: str) -> Optional[str]:
        try:
            return self.outcomes[self.token_ids.index(token_id)]
        except (ValueError, IndexError):
            return None

    def price_for_token(self, token_id: str) -> Optional[float]:
        try:
            return self.prices[self.token_ids.index(token_id)]
        except (ValueError, IndexError):
            return None
