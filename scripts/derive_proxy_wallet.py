# scripts/derive_proxy_wallet.py
"""Print the proxy (funding) wallet for an EOA address or private key."""
import argparse
import logging
import sys

from proxy_trader.exceptions import InvalidAddress
from proxy_trader.services.proxy_wallet_service import derive_funding_address
from proxy_trader.services.wallet_service import WalletService

logger = logging.getLogger('derive_proxy_wallet')


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--address", help="EOA address")
    group.add_argument("--private-key", help="0x-prefixed private key of the EOA")
    args = parser.parse_args(argv)

    try:
        eoa_address = args.address or WalletService.from_private_key(args.private_key).address
        print(f"EOA:          {eoa_address}")
        print(f"Proxy wallet: {derive_funding_address(eoa_address)}")
    except InvalidAddress as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
