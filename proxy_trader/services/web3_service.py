# proxy_trader/services/web3_service.py
from decimal import Decimal
from typing import Optional

from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from ..config import POLYGON_RPC, USDC_ADDRESS, USDC_DECIMALS, ERC20_ABI, logger


class Web3Service:
    def __init__(self, w3: Optional[Web3] = None):
        if w3 is None:
            w3 = Web3(Web3.HTTPProvider(POLYGON_RPC))
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        self.w3 = w3

        self.usdc = self.w3.eth.contract(
            address=Web3.to_checksum_address(USDC_ADDRESS),
            abi=ERC20_ABI
        )

    def balance_of(self, token: str, account: str) -> int:
        """Raw ERC-20 balance of ``account`` in the token's base units."""
        try:
            if Web3.to_checksum_address(token) == self.usdc.address:
                contract = self.usdc
            else:
                contract = self.w3.eth.contract(address=Web3.to_checksum_address(token), abi=ERC20_ABI)
            return int(contract.functions.balanceOf(Web3.to_checksum_address(account)).call())
        except Exception as e:
            logger.error(f"balanceOf({token}, {account}) failed: {str(e)}")
            raise

    def usdc_balance(self, account: str) -> Decimal:
        raw_balance = self.balance_of(USDC_ADDRESS, account)
        return Decimal(raw_balance) / Decimal(10 ** USDC_DECIMALS)
