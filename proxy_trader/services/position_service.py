# proxy_trader/services/position_service.py
from typing import Iterable, List, Optional

import httpx

from ..config import (
    DATA_API_POSITIONS_ENDPOINT, MIN_POSITION_SIZE,
    DUST_VALUE_THRESHOLD, logger
)
from ..models import Position


class PositionService:
    """Reads the funding address's positions from the data API."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 10.0):
        self._transport = transport
        self._timeout = timeout

    async def list_positions(self, account: str) -> List[Position]:
        params = {"user": account, "sizeThreshold": 0}
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            res = await client.get(DATA_API_POSITIONS_ENDPOINT, params=params)
            if res.status_code != 200:
                logger.error(f"Positions request failed with status {res.status_code}")
                raise ValueError(f"Failed to fetch positions: HTTP {res.status_code}")
            data = res.json()

        return [Position.model_validate(raw) for raw in data or []]

    @staticmethod
    def active_positions(positions: Iterable[Position], hide_dust: bool = True) -> List[Position]:
        filtered = [p for p in positions if p.size >= MIN_POSITION_SIZE]
        if hide_dust:
            filtered = [p for p in filtered if p.current_value >= DUST_VALUE_THRESHOLD]
        return filtered
