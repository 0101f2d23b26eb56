"""Portfolio tracker orchestrating balance and price fetching per wallet."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any

from rich.markup import escape

from wallet_portfolio_tracker.core.aggregator import PortfolioAggregator
from wallet_portfolio_tracker.core.models import (
    AppState,
    NativeBalanceRaw,
    NetworkFamily,
    TokenBalanceRaw,
    WalletPortfolio,
    WalletRecord,
)
from wallet_portfolio_tracker.core.state import (
    SetLoading,
    SetPortfolio,
    SetPortfolioError,
    SetPortfolioLoading,
    reduce,
)
from wallet_portfolio_tracker.data import get_network_config
from wallet_portfolio_tracker.errors import MalformedBalanceRecord, ProviderUnavailable
from wallet_portfolio_tracker.providers.base import BalanceProvider, PriceProvider

logger = logging.getLogger(__name__)


class PortfolioTracker:
    """
    Runs the fetch cycle that turns wallets into portfolios.

    Workflow per wallet:
    1. Look up network metadata
    2. Fetch native and token balances from the family's balance provider
    3. Fill in USD prices from the price provider
    4. Build the portfolio with the aggregator

    A failing wallet gets its ``error`` set and keeps its previous values;
    other wallets are unaffected. Nothing is retried.

    Parameters
    ----------
    balance_providers : dict[NetworkFamily, BalanceProvider]
        Balance provider per address family
    pricing : PriceProvider
        USD price provider
    aggregator : PortfolioAggregator | None
        Aggregator instance (a default one is created if None)
    max_workers : int
        Upper bound of wallets fetched concurrently

    """

    def __init__(
        self,
        balance_providers: dict[NetworkFamily, BalanceProvider],
        pricing: PriceProvider,
        aggregator: PortfolioAggregator | None = None,
        max_workers: int = 4,
    ) -> None:
        self.balance_providers = balance_providers
        self.pricing = pricing
        self.aggregator = aggregator or PortfolioAggregator()
        self.max_workers = max_workers

    def load_portfolio(self, wallet: WalletRecord) -> WalletPortfolio:
        """
        Fetch and build the portfolio of one wallet.

        Parameters
        ----------
        wallet : WalletRecord
            Wallet to fetch

        Returns
        -------
        WalletPortfolio
            Freshly built portfolio

        Raises
        ------
        ProviderUnavailable
            If balances cannot be fetched
        MalformedBalanceRecord
            If the provider returned unusable records

        """
        config = get_network_config(wallet.network)
        provider = self.balance_providers.get(config.family)
        if provider is None:
            msg = f"No balance provider configured for {config.display_name}"
            raise ProviderUnavailable(msg)

        logger.debug("Fetching portfolio for %s on %s", wallet.address, wallet.network)

        native, tokens = provider.get_balances(wallet.address, config.moralis_chain)
        native = native.model_copy(update={"decimals": config.native_decimals})

        native = self._price_native(native, config.coingecko_id)
        tokens = self._price_tokens(tokens, config.coingecko_platform)

        portfolio = self.aggregator.build_wallet_portfolio(native, tokens, wallet.id, config.native_symbol)
        logger.debug(
            "Portfolio for %s: total=%s tokens=%d",
            wallet.address,
            portfolio.total_usd_value,
            len(portfolio.token_holdings),
        )
        return portfolio

    def fetch_wallet_portfolio(self, state: AppState, wallet_id: str) -> AppState:
        """
        Refresh one wallet's portfolio.

        Parameters
        ----------
        state : AppState
            Current state
        wallet_id : str
            Wallet to refresh; unknown ids leave the state unchanged

        Returns
        -------
        AppState
            State with the new portfolio, or with the wallet's error set

        """
        wallet = next((w for w in state.wallets if w.id == wallet_id), None)
        if wallet is None:
            return state

        state = reduce(state, SetPortfolioLoading(wallet_id=wallet_id, loading=True))
        try:
            portfolio = self.load_portfolio(wallet)
        except (ProviderUnavailable, MalformedBalanceRecord) as e:
            logger.warning("Error fetching portfolio for %s: %s", wallet.address, e)
            return reduce(state, SetPortfolioError(wallet_id=wallet_id, error=str(e)))
        return reduce(state, SetPortfolio(wallet_id=wallet_id, portfolio=portfolio))

    def fetch_all_portfolios(
        self,
        state: AppState,
        progress: Any | None = None,
        task_id: Any | None = None,
    ) -> AppState:
        """
        Refresh every wallet's portfolio concurrently.

        Parameters
        ----------
        state : AppState
            Current state
        progress : Any | None
            Rich progress bar instance (optional)
        task_id : Any | None
            Task ID for progress updates (optional)

        Returns
        -------
        AppState
            State with each wallet's portfolio or error updated

        """
        if not state.wallets:
            return state

        state = reduce(state, SetLoading(loading=True))
        for wallet in state.wallets:
            state = reduce(state, SetPortfolioLoading(wallet_id=wallet.id, loading=True))

        with ThreadPoolExecutor(max_workers=min(len(state.wallets), self.max_workers)) as executor:
            future_to_wallet = {executor.submit(self.load_portfolio, wallet): wallet for wallet in state.wallets}

            for i, future in enumerate(as_completed(future_to_wallet)):
                wallet = future_to_wallet[future]

                if progress is not None and task_id is not None:
                    progress.update(
                        task_id,
                        description=f"Fetched {escape(wallet.alias)}",
                        completed=i + 1,
                    )

                try:
                    portfolio = future.result()
                except (ProviderUnavailable, MalformedBalanceRecord) as e:
                    logger.warning("Error fetching portfolio for %s: %s", wallet.address, e)
                    state = reduce(state, SetPortfolioError(wallet_id=wallet.id, error=str(e)))
                    continue
                state = reduce(state, SetPortfolio(wallet_id=wallet.id, portfolio=portfolio))

        return reduce(state, SetLoading(loading=False))

    def _price_native(self, native: NativeBalanceRaw, coin_id: str) -> NativeBalanceRaw:
        if native.usd_price is not None:
            return native
        try:
            quote = self.pricing.get_native_price(coin_id)
        except ProviderUnavailable as e:
            logger.warning("Native price for %s unavailable: %s", coin_id, e)
            return native
        if quote is None:
            return native
        return native.model_copy(
            update={
                "usd_price": quote.usd_price,
                "usd_price_24h_change_percent": quote.usd_price_24h_change_percent,
            }
        )

    def _price_tokens(self, tokens: list[TokenBalanceRaw], platform: str) -> list[TokenBalanceRaw]:
        unpriced = [token.contract_address for token in tokens if token.usd_price is None]
        if not unpriced:
            return tokens
        try:
            prices = self.pricing.get_token_prices(platform, unpriced)
        except ProviderUnavailable as e:
            logger.warning("Token prices on %s unavailable: %s", platform, e)
            return tokens

        priced = []
        for token in tokens:
            quote = prices.get(token.contract_address.lower())
            if token.usd_price is None and quote is not None:
                token = token.model_copy(
                    update={
                        "usd_price": quote.usd_price,
                        "usd_price_24h_change_percent": quote.usd_price_24h_change_percent,
                    }
                )
            priced.append(token)
        return priced
