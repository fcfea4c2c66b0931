# proxy_trader/exceptions.py


class TradingError(Exception):
    """Base class for every error raised by the trading core."""


class InvalidAddress(TradingError, ValueError):
    """Malformed EOA address or private key. No partial result is produced."""


class InvalidOrder(TradingError, ValueError):
    """An order failed local validation and was never sent."""


class SessionError(TradingError):
    """No active session, or the L1/L2 handshake failed."""


class SubmissionError(TradingError):
    """The CLOB rejected, or the transport failed during, a submit or cancel."""
