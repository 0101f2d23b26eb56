"""Local persistence of wallets and preferences."""

from wallet_portfolio_tracker.storage.store import StoreEntry, WalletStore

__all__ = [
    "StoreEntry",
    "WalletStore",
]
