# proxy_trader/services/wallet_service.py
from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3

from ..config import logger
from ..exceptions import InvalidAddress


class Wallet:
    """Key-holding collaborator. Keeps the private key out of every log line."""

    def __init__(self, private_key: str):
        self._private_key = private_key
        self._account = Account.from_key(private_key)

    def __repr__(self) -> str:
        return f"Wallet(address={self.address})"

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def private_key(self) -> str:
        return self._private_key

    def sign_message(self, message: str) -> str:
        """
        EIP-191 personal-sign ``message`` and return the 0x-prefixed signature.

        The CLOB handshake does not go through here: ``ClobClient`` takes the
        raw key and signs its own L1 challenge. This is for callers that need
        an ownership proof from the connected EOA outside the CLOB.
        """
        signed = Account.sign_message(encode_defunct(text=message), private_key=self._private_key)
        return Web3.to_hex(signed.signature)


class WalletService:
    @staticmethod
    def from_private_key(private_key: str) -> Wallet:
        if not private_key or not private_key.startswith("0x"):
            raise InvalidAddress("Invalid private key: expected a 0x-prefixed hex string")
        try:
            wallet = Wallet(private_key)
        except Exception as e:
            logger.error(f"Could not load wallet from private key: {type(e).__name__}")
            raise InvalidAddress("Invalid private key") from e

        logger.info(f"Wallet loaded for EOA {wallet.address}")
        return wallet
