# proxy_trader/models/api.py
from typing import Optional

from pydantic import BaseModel, Field


class ConnectWalletRequest(BaseModel):
    private_key: str = Field(..., description="0x-prefixed hex private key of the EOA")


class WalletInfo(BaseModel):
    eoa_address: str
    funding_address: str


class SessionStatus(BaseModel):
    state: str
    eoa_address: Optional[str] = None
    funding_address: Optional[str] = None
    error: Optional[str] = None
