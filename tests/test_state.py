"""Tests for application state transitions."""

from decimal import Decimal

import pytest

from wallet_portfolio_tracker.core.models import AppState, NetworkKind, UserPreferences, WalletPortfolio, WalletRecord
from wallet_portfolio_tracker.core.state import (
    AddWallet,
    DeleteWallet,
    SetLoading,
    SetPortfolio,
    SetPortfolioError,
    SetPortfolioLoading,
    SetPreferences,
    SetWallets,
    UpdateWallet,
    reduce,
)


@pytest.fixture
def wallet():
    return WalletRecord(address="0x" + "a" * 40, alias="Main", network=NetworkKind.ETHEREUM)


@pytest.fixture
def state(wallet, aggregator, eth_native):
    portfolio = aggregator.build_wallet_portfolio(eth_native, [], wallet.id, "ETH")
    return AppState(user_id="user-1", wallets=[wallet], portfolios={wallet.id: portfolio})


def test_set_loading():
    """The global loading flag is toggled."""
    state = reduce(AppState(), SetLoading(loading=True))
    assert state.loading is True
    assert reduce(state, SetLoading(loading=False)).loading is False


def test_set_wallets(wallet):
    """Wallets are replaced wholesale."""
    state = reduce(AppState(), SetWallets(wallets=[wallet]))
    assert state.wallets == [wallet]


def test_add_wallet_appends(state):
    """New wallets go to the end of the collection."""
    other = WalletRecord(address="0x" + "b" * 40, alias="Second", network=NetworkKind.BASE)
    new_state = reduce(state, AddWallet(wallet=other))
    assert [w.alias for w in new_state.wallets] == ["Main", "Second"]


def test_update_wallet(state, wallet):
    """Only the targeted wallet changes."""
    new_state = reduce(state, UpdateWallet(wallet_id=wallet.id, updates={"alias": "Cold storage"}))
    assert new_state.wallets[0].alias == "Cold storage"
    assert new_state.wallets[0].address == wallet.address


def test_update_unknown_wallet_is_noop(state):
    """Updating a missing wallet changes nothing."""
    new_state = reduce(state, UpdateWallet(wallet_id="missing", updates={"alias": "x"}))
    assert new_state.wallets == state.wallets


def test_delete_wallet_drops_portfolio(state, wallet):
    """Deleting a wallet removes its portfolio too."""
    new_state = reduce(state, DeleteWallet(wallet_id=wallet.id))
    assert new_state.wallets == []
    assert wallet.id not in new_state.portfolios


def test_set_preferences():
    """Preferences are replaced."""
    preferences = UserPreferences(theme="dark", currency="JPY")
    assert reduce(AppState(), SetPreferences(preferences=preferences)).preferences == preferences


def test_set_portfolio(wallet):
    """A portfolio is stored under its wallet id."""
    portfolio = WalletPortfolio(wallet_id=wallet.id, total_usd_value=Decimal("12"))
    state = reduce(AppState(wallets=[wallet]), SetPortfolio(wallet_id=wallet.id, portfolio=portfolio))
    assert state.portfolios[wallet.id].total_usd_value == 12


def test_set_portfolio_loading_creates_placeholder():
    """Marking a wallet without portfolio as loading creates an empty one."""
    state = reduce(AppState(), SetPortfolioLoading(wallet_id="w1", loading=True))
    assert state.portfolios["w1"].loading is True
    assert state.portfolios["w1"].total_usd_value == 0
    assert not state.portfolios["w1"].is_ready


def test_set_portfolio_error_keeps_previous_values(state, wallet):
    """A failed refresh keeps the last known total and holdings."""
    loading = reduce(state, SetPortfolioLoading(wallet_id=wallet.id, loading=True))
    failed = reduce(loading, SetPortfolioError(wallet_id=wallet.id, error="Moralis API error: 500"))

    portfolio = failed.portfolios[wallet.id]
    assert portfolio.error == "Moralis API error: 500"
    assert portfolio.loading is False
    assert portfolio.total_usd_value == 3000
    assert portfolio.native_holding.symbol == "ETH"
    assert not portfolio.is_ready


def test_reduce_does_not_mutate_input(state, wallet):
    """The previous state is left untouched."""
    before = state.model_dump()

    reduce(state, DeleteWallet(wallet_id=wallet.id))
    reduce(state, SetPortfolioError(wallet_id=wallet.id, error="boom"))
    reduce(state, UpdateWallet(wallet_id=wallet.id, updates={"alias": "Renamed"}))

    assert state.model_dump() == before


def test_unknown_action_returns_state(state):
    """Unrecognized actions leave the state as is."""
    assert reduce(state, object()) is state  # type: ignore[arg-type]
