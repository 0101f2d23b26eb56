"""Core functionality including models, classifier, aggregator, registry, and state."""

from wallet_portfolio_tracker.core.aggregator import DistributionSlice, PortfolioAggregator
from wallet_portfolio_tracker.core.classifier import classify, default_network, validate
from wallet_portfolio_tracker.core.models import (
    AppState,
    NativeBalanceRaw,
    NetworkFamily,
    NetworkKind,
    NormalizedHolding,
    TokenBalanceRaw,
    UserPreferences,
    WalletPortfolio,
    WalletRecord,
)
from wallet_portfolio_tracker.core.registry import WalletRegistry
from wallet_portfolio_tracker.core.state import reduce

__all__ = [
    "AppState",
    "DistributionSlice",
    "NativeBalanceRaw",
    "NetworkFamily",
    "NetworkKind",
    "NormalizedHolding",
    "PortfolioAggregator",
    "TokenBalanceRaw",
    "UserPreferences",
    "WalletPortfolio",
    "WalletRecord",
    "WalletRegistry",
    "classify",
    "default_network",
    "reduce",
    "validate",
]
