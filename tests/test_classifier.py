"""Tests for address classification and validation."""

import pytest

from wallet_portfolio_tracker.core import classifier
from wallet_portfolio_tracker.core.models import NetworkFamily, NetworkKind

EVM_ADDRESSES = [
    "0x" + "a" * 40,
    "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045",
    "0x0000000000000000000000000000000000000000",
    "0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF",
]

SOLANA_ADDRESSES = [
    "So11111111111111111111111111111111111111112",
    "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM",
    "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    "1" * 32,
    "z" * 44,
]

INVALID_ADDRESSES = [
    "",
    "abc",
    "not-an-address",
    "0x" + "a" * 39,
    "0x" + "a" * 41,
    "0x" + "g" * 40,
    "1" * 31,
    "1" * 45,
    "0" * 40,
    "O" * 32,
    "I" * 32,
    "l" * 32,
    " 0x" + "a" * 40,
    "0x" + "a" * 40 + "\n",
]


@pytest.mark.parametrize("address", EVM_ADDRESSES)
def test_classify_evm(address):
    """0x-prefixed 40 hex character strings are EVM addresses."""
    assert classifier.classify(address) == NetworkFamily.EVM
    assert classifier.validate(address, NetworkFamily.EVM) is True
    assert classifier.validate(address, NetworkFamily.SOLANA) is False


@pytest.mark.parametrize("address", SOLANA_ADDRESSES)
def test_classify_solana(address):
    """32-44 character base58 strings are Solana addresses."""
    assert classifier.classify(address) == NetworkFamily.SOLANA
    assert classifier.validate(address, NetworkFamily.SOLANA) is True
    assert classifier.validate(address, NetworkFamily.EVM) is False


@pytest.mark.parametrize("address", INVALID_ADDRESSES)
def test_classify_invalid(address):
    """Strings matching neither format are unclassifiable and never validate."""
    assert classifier.classify(address) is None
    for family in NetworkFamily:
        assert classifier.validate(address, family) is False


def test_rejects_abc_for_both_families():
    """A short garbage string is rejected by both family validators."""
    assert not classifier.is_evm_address("abc")
    assert not classifier.is_solana_address("abc")


def test_classify_non_string():
    """Non-string input is unclassifiable rather than an error."""
    assert classifier.classify(None) is None  # type: ignore[arg-type]
    assert classifier.classify(12345) is None  # type: ignore[arg-type]


@pytest.mark.parametrize("address", EVM_ADDRESSES)
def test_evm_addresses_never_match_base58(address):
    """Every EVM address contains '0', which is outside the base58 alphabet."""
    assert "0" in address
    assert not classifier.is_solana_address(address)


@pytest.mark.parametrize(
    ("network", "address", "expected"),
    [
        (NetworkKind.POLYGON, "0x" + "a" * 40, True),
        (NetworkKind.BSC, "0x" + "a" * 40, True),
        (NetworkKind.SOLANA, "0x" + "a" * 40, False),
        (NetworkKind.SOLANA, "So11111111111111111111111111111111111111112", True),
        (NetworkKind.ARBITRUM, "So11111111111111111111111111111111111111112", False),
    ],
)
def test_validate_against_network_kind(network, address, expected):
    """A network is validated through its family."""
    assert classifier.validate(address, network) is expected


def test_default_network():
    """Detected families map to their default network."""
    assert classifier.default_network(NetworkFamily.EVM) == NetworkKind.ETHEREUM
    assert classifier.default_network(NetworkFamily.SOLANA) == NetworkKind.SOLANA


def test_network_kind_family():
    """Only Solana belongs to the Solana family."""
    for kind in NetworkKind:
        expected = NetworkFamily.SOLANA if kind == NetworkKind.SOLANA else NetworkFamily.EVM
        assert kind.family == expected


def test_classify_is_deterministic():
    """Repeated classification yields the same answer."""
    address = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
    assert {classifier.classify(address) for _ in range(5)} == {NetworkFamily.EVM}
