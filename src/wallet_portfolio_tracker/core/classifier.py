"""Address classification and validation by network family."""

import re

from wallet_portfolio_tracker.core.models import NetworkFamily, NetworkKind

EVM_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

# Base58 alphabet without 0, O, I and l.
SOLANA_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")

DEFAULT_NETWORKS = {
    NetworkFamily.EVM: NetworkKind.ETHEREUM,
    NetworkFamily.SOLANA: NetworkKind.SOLANA,
}


def is_evm_address(address: str) -> bool:
    """Return True if ``address`` is a 0x-prefixed 40 hex character string."""
    return EVM_ADDRESS_RE.fullmatch(address) is not None


def is_solana_address(address: str) -> bool:
    """Return True if ``address`` is a 32-44 character base58 string."""
    return SOLANA_ADDRESS_RE.fullmatch(address) is not None


def classify(address: str) -> NetworkFamily | None:
    """
    Determine which address family a string belongs to.

    The EVM format is shared by every EVM network, so the result is a family,
    never a specific EVM network.

    Parameters
    ----------
    address : str
        Raw address string

    Returns
    -------
    NetworkFamily | None
        The matching family, or None if the string matches no family or
        (which the two alphabets rule out) both

    """
    if not isinstance(address, str):
        return None

    evm = is_evm_address(address)
    solana = is_solana_address(address)
    if evm and solana:
        return None
    if evm:
        return NetworkFamily.EVM
    if solana:
        return NetworkFamily.SOLANA
    return None


def validate(address: str, claimed: NetworkFamily | NetworkKind) -> bool:
    """
    Check an address against a claimed family or network.

    Parameters
    ----------
    address : str
        Raw address string
    claimed : NetworkFamily | NetworkKind
        Claimed family; a network is reduced to its family

    Returns
    -------
    bool
        True iff ``classify(address)`` equals the claimed family

    """
    family = claimed.family if isinstance(claimed, NetworkKind) else claimed
    return classify(address) == family


def default_network(family: NetworkFamily) -> NetworkKind:
    """Network pre-selected when an address of ``family`` is detected."""
    return DEFAULT_NETWORKS[family]
