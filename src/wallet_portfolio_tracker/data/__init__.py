"""Network metadata loading."""

from wallet_portfolio_tracker.data.loader import (
    NetworkConfig,
    get_all_supported_networks,
    get_display_name,
    get_network_config,
    load_networks,
)

__all__ = [
    "NetworkConfig",
    "get_all_supported_networks",
    "get_display_name",
    "get_network_config",
    "load_networks",
]
