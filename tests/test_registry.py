"""Tests for the wallet registry."""

import pytest

from wallet_portfolio_tracker.core.models import NetworkKind
from wallet_portfolio_tracker.core.registry import WalletRegistry
from wallet_portfolio_tracker.errors import (
    DuplicateAddressError,
    ErrorCode,
    WalletNotFoundError,
    WalletValidationError,
)

EVM_ADDRESS = "0x" + "a" * 40
SOLANA_ADDRESS = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


@pytest.fixture
def registry():
    return WalletRegistry()


def test_add_wallet(registry):
    """Adding a wallet detects its network and stores it."""
    wallet = registry.add(EVM_ADDRESS, "  Main  ")

    assert wallet.address == EVM_ADDRESS
    assert wallet.alias == "Main"
    assert wallet.network == NetworkKind.ETHEREUM
    assert wallet.id in registry
    assert len(registry) == 1


def test_add_solana_wallet_defaults_to_solana(registry):
    """Solana addresses default to the Solana network."""
    wallet = registry.add(SOLANA_ADDRESS, "Phantom")
    assert wallet.network == NetworkKind.SOLANA


def test_add_with_explicit_evm_network(registry):
    """The EVM sub-network is the user's choice."""
    wallet = registry.add(EVM_ADDRESS, "Polygon wallet", NetworkKind.POLYGON)
    assert wallet.network == NetworkKind.POLYGON


def test_duplicate_address_rejected(registry):
    """Registering the same address twice raises DuplicateAddressError."""
    registry.add(EVM_ADDRESS, "First")

    with pytest.raises(DuplicateAddressError) as exc_info:
        registry.add(EVM_ADDRESS, "Second")

    assert exc_info.value.address == EVM_ADDRESS
    assert exc_info.value.errors[0].code == ErrorCode.DUPLICATE_ADDRESS
    assert len(registry) == 1


def test_duplicate_check_is_case_sensitive(registry):
    """Differently-cased spellings of an EVM address are distinct wallets."""
    registry.add(EVM_ADDRESS, "Lower")
    wallet = registry.add(EVM_ADDRESS.replace("a", "A"), "Upper")
    assert len(registry) == 2
    assert wallet.address == "0x" + "A" * 40


def test_duplicate_on_other_network_rejected(registry):
    """An address is unique across networks, not per network."""
    registry.add(EVM_ADDRESS, "Ethereum", NetworkKind.ETHEREUM)
    with pytest.raises(DuplicateAddressError):
        registry.add(EVM_ADDRESS, "Base", NetworkKind.BASE)


def test_invalid_address_rejected(registry):
    """Unclassifiable addresses are rejected with a field error."""
    with pytest.raises(WalletValidationError) as exc_info:
        registry.add("abc", "Broken")

    assert [e.code for e in exc_info.value.errors] == [ErrorCode.INVALID_ADDRESS_FORMAT]
    assert not isinstance(exc_info.value, DuplicateAddressError)


def test_network_mismatch_rejected(registry):
    """An EVM address cannot be registered on Solana."""
    with pytest.raises(WalletValidationError) as exc_info:
        registry.add(EVM_ADDRESS, "Wrong", NetworkKind.SOLANA)
    assert exc_info.value.errors[0].code == ErrorCode.NETWORK_MISMATCH


def test_check_submission_returns_typed_results(registry):
    """Form checks report every problem without raising."""
    errors = registry.check_submission("abc", "x" * 51)

    assert {(e.field, e.code) for e in errors} == {
        ("address", ErrorCode.INVALID_ADDRESS_FORMAT),
        ("alias", ErrorCode.ALIAS_TOO_LONG),
    }


def test_check_submission_requires_alias(registry):
    """Blank aliases are rejected."""
    errors = registry.check_submission(EVM_ADDRESS, "   ")
    assert [e.code for e in errors] == [ErrorCode.ALIAS_REQUIRED]


def test_alias_length_limit(registry):
    """Aliases of exactly 50 characters are accepted."""
    assert registry.check_submission(EVM_ADDRESS, "x" * 50) == []
    assert registry.check_submission(EVM_ADDRESS, "x" * 51)[0].code == ErrorCode.ALIAS_TOO_LONG


def test_check_submission_valid(registry):
    """A valid submission has no errors and changes nothing."""
    assert registry.check_submission(SOLANA_ADDRESS, "Phantom", NetworkKind.SOLANA) == []
    assert len(registry) == 0


def test_update_alias(registry):
    """Aliases are mutable."""
    wallet = registry.add(EVM_ADDRESS, "Old")
    updated = registry.update(wallet.id, alias="New")

    assert updated.alias == "New"
    assert updated.id == wallet.id
    assert updated.created_at == wallet.created_at
    assert registry.get(wallet.id).alias == "New"


def test_update_address_switches_network_family(registry):
    """Editing to an address of another family picks that family's default network."""
    wallet = registry.add(EVM_ADDRESS, "Main", NetworkKind.POLYGON)
    updated = registry.update(wallet.id, address=SOLANA_ADDRESS)

    assert updated.address == SOLANA_ADDRESS
    assert updated.network == NetworkKind.SOLANA


def test_update_keeps_own_address(registry):
    """Editing a wallet does not collide with its own address."""
    wallet = registry.add(EVM_ADDRESS, "Main")
    updated = registry.update(wallet.id, address=EVM_ADDRESS, network=NetworkKind.BASE)
    assert updated.network == NetworkKind.BASE


def test_update_to_taken_address_rejected(registry):
    """Editing an address onto another wallet's address is a duplicate."""
    registry.add(EVM_ADDRESS, "First")
    second = registry.add(SOLANA_ADDRESS, "Second")

    with pytest.raises(DuplicateAddressError):
        registry.update(second.id, address=EVM_ADDRESS)
    assert registry.get(second.id).address == SOLANA_ADDRESS


def test_remove(registry):
    """Removed wallets are gone."""
    wallet = registry.add(EVM_ADDRESS, "Main")
    registry.remove(wallet.id)

    assert len(registry) == 0
    with pytest.raises(WalletNotFoundError):
        registry.get(wallet.id)
    # The address may be registered again after removal
    registry.add(EVM_ADDRESS, "Main again")


def test_resolve(registry):
    """Wallets can be looked up by id, address or alias."""
    wallet = registry.add(EVM_ADDRESS, "Main")

    assert registry.resolve(wallet.id) == wallet
    assert registry.resolve(EVM_ADDRESS) == wallet
    assert registry.resolve("Main") == wallet
    with pytest.raises(WalletNotFoundError):
        registry.resolve("missing")


def test_list_preserves_registration_order(registry):
    """Wallets are listed in the order they were added."""
    first = registry.add(EVM_ADDRESS, "First")
    second = registry.add(SOLANA_ADDRESS, "Second")
    assert registry.list_wallets() == [first, second]
    assert list(registry) == [first, second]


def test_initial_wallets_must_be_unique():
    """Loading a collection with duplicate addresses fails."""
    source = WalletRegistry()
    wallet = source.add(EVM_ADDRESS, "Main")
    copy = wallet.model_copy(update={"id": "other"})

    with pytest.raises(DuplicateAddressError):
        WalletRegistry([wallet, copy])
