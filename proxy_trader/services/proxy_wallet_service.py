# proxy_trader/services/proxy_wallet_service.py
from functools import lru_cache

from web3 import Web3

from ..config import (
    PROXY_FACTORY_ADDRESS, PROXY_IMPLEMENTATION_ADDRESS,
    PROXY_BYTECODE_TEMPLATE, logger
)
from ..exceptions import InvalidAddress


@lru_cache(maxsize=None)
def _proxy_init_code_hash(factory: str, implementation: str) -> bytes:
    bytecode = PROXY_BYTECODE_TEMPLATE.replace(
        "%s", factory[2:].lower(), 1
    ).replace(
        "%s", implementation[2:].lower(), 1
    )
    return bytes(Web3.keccak(hexstr=bytecode))


def _is_valid_address(value) -> bool:
    if not isinstance(value, str) or not Web3.is_address(value):
        return False
    body = value[2:] if value[:2] in ("0x", "0X") else value
    # Mixed case must be a valid EIP-55 checksum
    if body != body.lower() and body != body.upper():
        return Web3.is_checksum_address(value)
    return True


class ProxyWalletService:
    """
    Derives the proxy (funding) wallet that the proxy factory deploys for an EOA.

    The address is the CREATE2 address
    ``keccak256(0xff ++ factory ++ keccak256(eoa) ++ keccak256(init_code))[12:]``.
    Nothing is checked against the chain, so the result is only as correct as
    the factory, implementation and bytecode constants in the config.
    """

    def __init__(
        self,
        factory_address: str = PROXY_FACTORY_ADDRESS,
        implementation_address: str = PROXY_IMPLEMENTATION_ADDRESS
    ):
        self.factory_address = Web3.to_checksum_address(factory_address)
        self.implementation_address = Web3.to_checksum_address(implementation_address)

    def derive(self, eoa_address: str) -> str:
        if not _is_valid_address(eoa_address):
            raise InvalidAddress(f"Invalid EOA address: {eoa_address!r}")

        salt = bytes(Web3.keccak(hexstr=eoa_address))
        init_code_hash = _proxy_init_code_hash(
            self.factory_address, self.implementation_address
        )
        digest = Web3.keccak(
            b"\xff"
            + Web3.to_bytes(hexstr=self.factory_address)
            + salt
            + init_code_hash
        )

        # Last 20 bytes = address
        proxy_address = Web3.to_checksum_address(bytes(digest)[-20:])
        logger.debug(f"Derived proxy wallet {proxy_address} for {eoa_address}")
        return proxy_address


def derive_funding_address(eoa_address: str) -> str:
    return ProxyWalletService().derive(eoa_address)
