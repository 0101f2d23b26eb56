"""Third-party balance and price providers."""

from wallet_portfolio_tracker.providers.base import BalanceProvider, PriceProvider, PriceQuote
from wallet_portfolio_tracker.providers.coingecko import CoinGeckoPricing
from wallet_portfolio_tracker.providers.helius import HeliusSolanaClient
from wallet_portfolio_tracker.providers.moralis import MoralisClient

__all__ = [
    "BalanceProvider",
    "CoinGeckoPricing",
    "HeliusSolanaClient",
    "MoralisClient",
    "PriceProvider",
    "PriceQuote",
]
