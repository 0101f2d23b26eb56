"""Network configuration loader."""

from functools import cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

from wallet_portfolio_tracker.core.models import NetworkFamily, NetworkKind


class NetworkConfig(BaseModel):
    """
    Static metadata of a supported network.

    Attributes
    ----------
    name : NetworkKind
        Network identifier
    display_name : str
        Human-readable name
    family : NetworkFamily
        Address family
    chain_id : int | None
        EVM chain id, None for Solana
    moralis_chain : str | None
        Chain identifier used by the Moralis API
    native_symbol : str
        Symbol of the native asset
    native_decimals : int
        Decimals of the native asset
    coingecko_id : str
        CoinGecko coin id of the native asset
    coingecko_platform : str
        CoinGecko asset platform used for token price lookups

    """

    name: NetworkKind
    display_name: str
    family: NetworkFamily
    chain_id: int | None = None
    moralis_chain: str | None = None
    native_symbol: str
    native_decimals: int
    coingecko_id: str
    coingecko_platform: str


@cache
def load_networks() -> dict[str, Any]:
    """
    Load network metadata from networks.yaml.

    Returns
    -------
    dict[str, Any]
        Raw configuration keyed by network name

    """
    path = Path(__file__).parent / "networks.yaml"
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f)["networks"]


def get_network_config(network: NetworkKind | str) -> NetworkConfig:
    """
    Get configuration for a specific network.

    Parameters
    ----------
    network : NetworkKind | str
        Network name (e.g., 'ethereum', 'solana')

    Returns
    -------
    NetworkConfig
        Network metadata

    Raises
    ------
    KeyError
        If the network is not configured

    """
    name = NetworkKind(network).value
    return NetworkConfig(name=name, **load_networks()[name])


def get_all_supported_networks() -> list[str]:
    """
    Get list of all supported network names.

    Returns
    -------
    list[str]
        Network names in configuration order

    """
    return list(load_networks().keys())


def get_display_name(network: NetworkKind | str) -> str:
    """Human-readable network name, falling back to the raw value."""
    try:
        return get_network_config(network).display_name
    except (KeyError, ValueError):
        return str(network)
