# proxy_trader/config.py
import os
from dotenv import load_dotenv
import logging
load_dotenv()

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger("proxy_trader")

# Optional: when set the server connects this wallet at startup
PRIVATE_KEY = os.getenv("POLYGON_WALLET_PRIVATE_KEY")

CHAIN_ID = int(os.getenv("CHAIN_ID", "137"))
CLOB_HOST = os.getenv("CLOB_HOST", "https://clob.polymarket.com")
POLYGON_RPC = os.getenv("POLYGON_RPC", "https://polygon-rpc.com")
GAMMA_URL = os.getenv("GAMMA_URL", "https://gamma-api.polymarket.com")
GAMMA_MARKETS_ENDPOINT = f"{GAMMA_URL}/markets"
DATA_API_URL = os.getenv("DATA_API_URL", "https://data-api.polymarket.com")
DATA_API_POSITIONS_ENDPOINT = f"{DATA_API_URL}/positions"

RECONCILE_INTERVAL_SECONDS = float(os.getenv("RECONCILE_INTERVAL_SECONDS", "2"))
RECONCILE_TIMEOUT_SECONDS = float(os.getenv("RECONCILE_TIMEOUT_SECONDS", "30"))

# CLOB signature type for orders signed by the EOA on behalf of its proxy wallet
PROXY_SIGNATURE_TYPE = 1

# Proxy wallet factory (must match the deployed contracts byte for byte)
PROXY_FACTORY_ADDRESS = "0xaB45c5A4B0c941a2F231C04C3f49182e1A254052"
PROXY_IMPLEMENTATION_ADDRESS = "0x44e999d5c2F66Ef0861317f9A4805AC2e90aEB4f"
PROXY_BYTECODE_TEMPLATE = (
    "0x3d3d606380380380913d393d73%s5af4602a57600080fd5b602d8060366000396000f3"
    "363d3d373d3d3d363d73%s5af43d82803e903d91602b57fd5bf352e831dd"
    "00000000000000000000000000000000000000000000000000000000000000200"
    "000000000000000000000000000000000000000000000000000000000000000"
)

# Contract addresses
USDC_ADDRESS = "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174"
USDC_DECIMALS = 6

# Contract ABIs
ERC20_ABI = [
    {"inputs": [{"name": "account", "type": "address"}], "name": "balanceOf", "outputs": [{"name": "", "type": "uint256"}], "stateMutability": "view", "type": "function"}
]

# Positions below these thresholds are dust
MIN_POSITION_SIZE = 0.01
DUST_VALUE_THRESHOLD = 0.01
