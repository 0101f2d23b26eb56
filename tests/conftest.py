"""Pytest configuration for wallet-portfolio-tracker tests."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from wallet_portfolio_tracker.core.aggregator import PortfolioAggregator
from wallet_portfolio_tracker.core.models import NativeBalanceRaw, TokenBalanceRaw

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def aggregator():
    """Aggregator with a fixed clock."""
    return PortfolioAggregator(clock=lambda: FIXED_NOW)


@pytest.fixture
def eth_native():
    """One ETH at $3000."""
    return NativeBalanceRaw(
        raw_balance="1000000000000000000",
        decimals=18,
        usd_price=Decimal("3000"),
        usd_price_24h_change_percent=Decimal("2.5"),
    )


@pytest.fixture
def usdc_token():
    """Half a USDC."""
    return TokenBalanceRaw(
        contract_address="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        symbol="USDC",
        name="USD Coin",
        decimals=6,
        raw_balance="500000",
        usd_price=Decimal("1.0"),
    )


@pytest.fixture
def link_token():
    """Ten LINK at $15."""
    return TokenBalanceRaw(
        contract_address="0x514910771AF9Ca656af840dff83E8264EcF986CA",
        symbol="LINK",
        name="ChainLink Token",
        decimals=18,
        raw_balance="10000000000000000000",
        usd_price=Decimal("15"),
        usd_price_24h_change_percent=Decimal("-1.2"),
    )


@pytest.fixture
def unpriced_token():
    """Token with no known price."""
    return TokenBalanceRaw(
        contract_address="0x0000000000000000000000000000000000000bad",
        symbol="MEME",
        name="Meme",
        decimals=9,
        raw_balance="42000000000",
    )


@pytest.fixture
def store_home(tmp_path, monkeypatch):
    """Point the CLI store at a temporary directory."""
    monkeypatch.setenv("PORTFOLIO_TRACKER_HOME", str(tmp_path))
    for key in ("MORALIS_API_KEY", "COINGECKO_API_KEY", "HELIUS_API_KEY"):
        monkeypatch.delenv(key, raising=False)
    return tmp_path
