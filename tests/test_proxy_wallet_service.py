import pytest
from web3 import Web3

from proxy_trader.exceptions import InvalidAddress
from proxy_trader.services.proxy_wallet_service import (
    ProxyWalletService, _is_valid_address, _proxy_init_code_hash, derive_funding_address
)
from proxy_trader.config import PROXY_FACTORY_ADDRESS, PROXY_IMPLEMENTATION_ADDRESS

from .conftest import TEST_EOA, TEST_PROXY


def test_init_code_hash_matches_deployed_proxy_bytecode():
    digest = _proxy_init_code_hash(PROXY_FACTORY_ADDRESS, PROXY_IMPLEMENTATION_ADDRESS)
    assert digest.hex() == "d21df8dc65880a8606f09fe0ce3df9b8869287ab0b058be05aa9e8af6330a00b"


@pytest.mark.parametrize("eoa,expected", [
    (TEST_EOA, TEST_PROXY),
    ("0x70997970C51812dc3A010C7d01b50e0d17dc79C8", "0xd9d24e482c11F586cd9A1a53dC3eEc6dE3883862"),
])
def test_derive_matches_golden_value(eoa, expected):
    assert derive_funding_address(eoa) == expected


def test_derive_is_deterministic():
    service = ProxyWalletService()
    assert service.derive(TEST_EOA) == service.derive(TEST_EOA)


def test_derive_accepts_lowercase_input():
    assert derive_funding_address(TEST_EOA.lower()) == TEST_PROXY


def test_derived_address_is_checksummed():
    proxy = derive_funding_address(TEST_EOA)
    assert Web3.is_checksum_address(proxy)
    assert len(Web3.to_bytes(hexstr=proxy)) == 20


@pytest.mark.parametrize("bad", [
    "",
    "0x1234",
    "not-an-address",
    "0xF39fd6e51aad88F6F4ce6aB8827279cffFb92266",  # bad checksum
    "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb9226600",
    None,
])
def test_malformed_eoa_raises_invalid_address(bad):
    with pytest.raises(InvalidAddress):
        derive_funding_address(bad)


def test_invalid_address_is_a_value_error():
    with pytest.raises(ValueError):
        derive_funding_address("0xnope")


def test_single_case_input_skips_checksum():
    upper = "0x" + TEST_EOA[2:].upper()
    assert _is_valid_address(upper)
    assert derive_funding_address(upper) == TEST_PROXY


def test_mixed_case_input_must_carry_a_valid_checksum():
    bad_checksum = "0x" + TEST_EOA[2].swapcase() + TEST_EOA[3:]
    assert bad_checksum.lower() == TEST_EOA.lower()
    assert not _is_valid_address(bad_checksum)
    with pytest.raises(InvalidAddress):
        ProxyWalletService().derive(bad_checksum)
