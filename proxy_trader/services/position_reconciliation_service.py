# proxy_trader/services/position_reconciliation_service.py
import asyncio
from typing import Awaitable, Callable, Dict, FrozenSet, Iterable, List, Optional

from ..config import RECONCILE_INTERVAL_SECONDS, RECONCILE_TIMEOUT_SECONDS, logger
from ..models import Position

PositionReader = Callable[[], Awaitable[List[Position]]]


class PositionReconciliationService:
    """
    Waits for a trade to show up in the position list.

    After a trade on ``asset`` the position list is re-read every ``interval``
    seconds until the asset's size drops below the size it had before the
    trade (or the position disappears), or until ``timeout`` elapses. A
    timeout is logged and otherwise ignored; the next regular refresh picks
    the position up.

    Settlement is inferred from the size delta alone, so an unrelated
    decrease also counts as settled.

    At most one poller runs per asset. Callers use ``is_pending`` to keep the
    asset's controls disabled, and ``cancel``/``cancel_all`` when the owning
    view goes away.
    """

    def __init__(
        self,
        read_positions: PositionReader,
        interval: float = RECONCILE_INTERVAL_SECONDS,
        timeout: float = RECONCILE_TIMEOUT_SECONDS,
        on_refresh: Optional[Callable[[List[Position]], None]] = None
    ):
        self._read_positions = read_positions
        self.interval = interval
        self.timeout = timeout
        self._on_refresh = on_refresh
        self._pending: Dict[str, float] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    def is_pending(self, asset: str) -> bool:
        return asset in self._pending

    @property
    def pending_assets(self) -> FrozenSet[str]:
        return frozenset(self._pending)

    @staticmethod
    def is_settled(positions: Iterable[Position], asset: str, size_before: float) -> bool:
        position = next((p for p in positions if p.asset == asset), None)
        return position is None or position.size < size_before

    def track(self, asset: str, size_before: float) -> asyncio.Task:
        """Start reconciling ``asset``; replaces any poller already running for it."""
        self.cancel(asset)

        self._pending[asset] = size_before
        task = asyncio.get_running_loop().create_task(
            self._reconcile(asset, size_before), name=f"reconcile-{asset}"
        )
        self._tasks[asset] = task
        logger.info(f"Reconciling position {asset} (size before trade: {size_before})")
        return task

    def observe(self, positions: List[Position]) -> FrozenSet[str]:
        """
        Feed a position list read elsewhere; settles every pending asset it
        shows as changed. Returns the assets that settled.
        """
        settled = frozenset(
            asset for asset, size_before in self._pending.items()
            if self.is_settled(positions, asset, size_before)
        )
        for asset in settled:
            logger.info(f"Position {asset} settled")
            self.cancel(asset)
        return settled

    def cancel(self, asset: str) -> None:
        """Stop reconciling ``asset``. Safe to call any number of times."""
        self._pending.pop(asset, None)
        task = self._tasks.pop(asset, None)
        if task is not None and not task.done():
            task.cancel()

    def cancel_all(self) -> None:
        for asset in list(self._tasks) + list(self._pending):
            self.cancel(asset)

    async def _reconcile(self, asset: str, size_before: float) -> bool:
        try:
            await asyncio.wait_for(self._poll(asset, size_before), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.info(f"Reconciliation of {asset} timed out after {self.timeout}s")
            return False
        else:
            logger.info(f"Position {asset} settled")
            return True
        finally:
            if self._tasks.get(asset) is asyncio.current_task():
                self._tasks.pop(asset, None)
                self._pending.pop(asset, None)

    async def _poll(self, asset: str, size_before: float) -> None:
        while True:
            try:
                positions = await self._read_positions()
            except Exception as e:
                logger.warning(f"Position refresh failed while reconciling {asset}: {str(e)}")
            else:
                if self._on_refresh is not None:
                    self._on_refresh(positions)
                if self.is_settled(positions, asset, size_before):
                    return
            await asyncio.sleep(self.interval)
