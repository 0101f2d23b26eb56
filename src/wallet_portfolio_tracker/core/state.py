"""Application state transitions as a pure reducer."""

from pydantic import BaseModel

from wallet_portfolio_tracker.core.models import AppState, UserPreferences, WalletPortfolio, WalletRecord


class SetLoading(BaseModel):
    """Toggle the global refresh indicator."""

    loading: bool


class SetWallets(BaseModel):
    """Replace the wallet collection, e.g. after loading from storage."""

    wallets: list[WalletRecord]


class AddWallet(BaseModel):
    """Append a registered wallet."""

    wallet: WalletRecord


class UpdateWallet(BaseModel):
    """Apply field updates to one wallet."""

    wallet_id: str
    updates: dict


class DeleteWallet(BaseModel):
    """Remove a wallet together with its portfolio."""

    wallet_id: str


class SetPreferences(BaseModel):
    """Replace user preferences."""

    preferences: UserPreferences


class SetPortfolio(BaseModel):
    """Replace a wallet's portfolio wholesale."""

    wallet_id: str
    portfolio: WalletPortfolio


class SetPortfolioLoading(BaseModel):
    """Toggle the loading flag of one portfolio."""

    wallet_id: str
    loading: bool


class SetPortfolioError(BaseModel):
    """Attach an error to one portfolio, keeping its last known values."""

    wallet_id: str
    error: str


Action = (
    SetLoading
    | SetWallets
    | AddWallet
    | UpdateWallet
    | DeleteWallet
    | SetPreferences
    | SetPortfolio
    | SetPortfolioLoading
    | SetPortfolioError
)


def _portfolio_for(state: AppState, wallet_id: str) -> WalletPortfolio:
    return state.portfolios.get(wallet_id) or WalletPortfolio(wallet_id=wallet_id)


def reduce(state: AppState, action: Action) -> AppState:
    """
    Compute the state that follows ``action``.

    The input state is never mutated; unchanged parts are shared with the
    returned state.

    Parameters
    ----------
    state : AppState
        Current state
    action : Action
        Transition to apply

    Returns
    -------
    AppState
        New state

    """
    if isinstance(action, SetLoading):
        return state.model_copy(update={"loading": action.loading})

    if isinstance(action, SetWallets):
        return state.model_copy(update={"wallets": list(action.wallets)})

    if isinstance(action, AddWallet):
        return state.model_copy(update={"wallets": [*state.wallets, action.wallet]})

    if isinstance(action, UpdateWallet):
        wallets = [
            wallet.model_copy(update=action.updates) if wallet.id == action.wallet_id else wallet
            for wallet in state.wallets
        ]
        return state.model_copy(update={"wallets": wallets})

    if isinstance(action, DeleteWallet):
        wallets = [wallet for wallet in state.wallets if wallet.id != action.wallet_id]
        portfolios = {key: value for key, value in state.portfolios.items() if key != action.wallet_id}
        return state.model_copy(update={"wallets": wallets, "portfolios": portfolios})

    if isinstance(action, SetPreferences):
        return state.model_copy(update={"preferences": action.preferences})

    if isinstance(action, SetPortfolio):
        return state.model_copy(update={"portfolios": {**state.portfolios, action.wallet_id: action.portfolio}})

    if isinstance(action, SetPortfolioLoading):
        portfolio = _portfolio_for(state, action.wallet_id).model_copy(update={"loading": action.loading})
        return state.model_copy(update={"portfolios": {**state.portfolios, action.wallet_id: portfolio}})

    if isinstance(action, SetPortfolioError):
        portfolio = _portfolio_for(state, action.wallet_id).model_copy(
            update={"error": action.error, "loading": False}
        )
        return state.model_copy(update={"portfolios": {**state.portfolios, action.wallet_id: portfolio}})

    return state
