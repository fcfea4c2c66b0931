# proxy_trader/services/clob_service.py
import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Optional

from py_clob_client.client import ClobClient
from py_clob_client.clob_types import ApiCreds

from ..config import CLOB_HOST, CHAIN_ID, PROXY_SIGNATURE_TYPE, logger
from ..exceptions import SessionError
from ..models import SessionState
from .wallet_service import Wallet


@dataclass(frozen=True)
class TradingSession:
    client: Any
    eoa_address: str
    funding_address: str
    credentials: ApiCreds
    signature_type: int = PROXY_SIGNATURE_TYPE

    def __repr__(self) -> str:
        return (
            f"TradingSession(eoa_address={self.eoa_address}, "
            f"funding_address={self.funding_address}, signature_type={self.signature_type})"
        )


def default_client_factory(host: str, chain_id: int, key: str, **kwargs) -> ClobClient:
    return ClobClient(host, chain_id=chain_id, key=key, **kwargs)


class TradingSessionManager:
    """
    Owns the CLOB authentication lifecycle for one wallet.

    L1: the private key signs the CLOB auth message, which the exchange turns
    into API credentials (key, secret, passphrase). L2: those credentials sign
    every later request. The L2 client is bound to the proxy wallet as funder
    with the proxied-EOA signature type, so orders are attributed to the proxy.

    States: DISCONNECTED -> INITIALIZING -> ACTIVE, INITIALIZING -> ERROR,
    and any state -> DISCONNECTED on ``clear_session``.
    """

    def __init__(
        self,
        host: str = CLOB_HOST,
        chain_id: int = CHAIN_ID,
        client_factory: Optional[Callable[..., Any]] = None
    ):
        self.host = host
        self.chain_id = chain_id
        self._client_factory = client_factory or default_client_factory
        self._state = SessionState.DISCONNECTED
        self._session: Optional[TradingSession] = None
        self._error: Optional[Exception] = None
        self._generation = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Optional[TradingSession]:
        return self._session

    @property
    def error(self) -> Optional[Exception]:
        return self._error

    @property
    def has_session(self) -> bool:
        return self._session is not None

    def session_state(self) -> SessionState:
        return self._state

    async def create_session(
        self,
        wallet: Optional[Wallet],
        eoa_address: Optional[str],
        funding_address: Optional[str]
    ) -> TradingSession:
        if wallet is None or not eoa_address or not funding_address:
            raise SessionError("Wallet not connected or proxy address missing")
        if wallet.address.lower() != eoa_address.lower():
            raise SessionError("Wallet does not control the given EOA address")

        self._generation += 1
        generation = self._generation
        self._state = SessionState.INITIALIZING
        self._session = None
        self._error = None

        logger.info(f"Initializing CLOB session for {eoa_address} (funder {funding_address})")
        try:
            session = await asyncio.to_thread(
                self._establish, wallet, eoa_address, funding_address
            )
        except Exception as e:
            logger.error(f"Failed to initialize CLOB session: {str(e)}")
            if generation == self._generation:
                self._state = SessionState.ERROR
                self._error = e
            raise SessionError(f"Failed to initialize CLOB session: {str(e)}") from e

        # A clear, disconnect or newer attempt while we were suspended wins
        if generation != self._generation:
            raise SessionError("Session was cleared while initializing")

        self._session = session
        self._state = SessionState.ACTIVE
        logger.info("CLOB session initialized successfully")
        return session

    def _establish(self, wallet: Wallet, eoa_address: str, funding_address: str) -> TradingSession:
        l1_client = self._client_factory(self.host, self.chain_id, wallet.private_key)
        credentials = l1_client.create_or_derive_api_creds()
        if credentials is None:
            raise ValueError("CLOB returned no API credentials")

        client = self._client_factory(
            self.host,
            self.chain_id,
            wallet.private_key,
            creds=credentials,
            signature_type=PROXY_SIGNATURE_TYPE,
            funder=funding_address
        )
        return TradingSession(
            client=client,
            eoa_address=eoa_address,
            funding_address=funding_address,
            credentials=credentials,
            signature_type=PROXY_SIGNATURE_TYPE
        )

    def clear_session(self) -> None:
        """Drop credentials and session unconditionally. Idempotent."""
        if self._session is not None or self._state != SessionState.DISCONNECTED:
            logger.info("Clearing CLOB session")
        self._generation += 1
        self._session = None
        self._error = None
        self._state = SessionState.DISCONNECTED

    def signer_lost(self) -> None:
        """The wallet behind the session went away; the session goes with it."""
        logger.info("Signer disconnected, discarding CLOB session")
        self.clear_session()

    def require_active(self) -> TradingSession:
        if self._state != SessionState.ACTIVE or self._session is None:
            raise SessionError(f"No active CLOB session (state: {self._state.value})")
        return self._session
