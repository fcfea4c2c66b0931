from .trading import (
    Side,
    SessionState,
    OrderRequest,
    OrderRecord,
    Position,
    MarketMetadata,
)
from .api import ConnectWalletRequest, WalletInfo, SessionStatus

__all__ = [
    # Domain Models
    'Side',
    'SessionState',
    'OrderRequest',
    'OrderRecord',
    'Position',
    'MarketMetadata',

    # API Models
    'ConnectWalletRequest',
    'WalletInfo',
    'SessionStatus',
]
