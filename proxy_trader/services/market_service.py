# proxy_trader/services/market_service.py
from typing import List, Optional

import httpx

from ..config import GAMMA_MARKETS_ENDPOINT, logger
from ..models import MarketMetadata


class MarketService:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 10.0):
        self._transport = transport
        self._timeout = timeout

    async def _get_markets(self, params: dict) -> list:
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            res = await client.get(GAMMA_MARKETS_ENDPOINT, params=params)
            res.raise_for_status()
            return res.json()

    async def get_market_by_token(self, token_id: str) -> MarketMetadata:
        try:
            data = await self._get_markets({"clob_token_ids": token_id})
        except httpx.HTTPError as e:
            logger.error(f"Market lookup failed for token {token_id}: {str(e)}")
            raise ValueError(f"Could not fetch market data for token {token_id}") from e

        if not data:
            raise ValueError(f"Could not fetch market data for token {token_id}")
        return MarketMetadata.from_gamma(data[0])

    async def get_high_volume_markets(self, limit: int = 10) -> List[MarketMetadata]:
        """Active, open markets by 24h volume, highest first."""
        params = {
            "limit": limit,
            "active": "true",
            "closed": "false",
            "order": "volume24hr",
            "ascending": "false",
        }
        data = await self._get_markets(params)
        markets = []
        for market in data:
            try:
                markets.append(MarketMetadata.from_gamma(market))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed market {market.get('id')}: {str(e)}")
        return markets
