"""Portfolio aggregator converting raw provider records into normalized holdings."""

import re
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from decimal import Context, Decimal, getcontext

from pydantic import BaseModel

from wallet_portfolio_tracker.core.models import (
    NativeBalanceRaw,
    NormalizedHolding,
    TokenBalanceRaw,
    WalletPortfolio,
)
from wallet_portfolio_tracker.errors import MalformedBalanceRecord

_RAW_BALANCE_RE = re.compile(r"^[0-9]+$")

ZERO = Decimal("0")

# ERC-20 decimals is a uint8
MAX_DECIMALS = 255


class DistributionSlice(BaseModel):
    """
    One slice of the holdings distribution chart.

    Attributes
    ----------
    symbol : str
        Asset symbol
    usd_value : Decimal
        USD value of the slice
    percent : Decimal
        Share of the total value of all holdings, in percent

    """

    symbol: str
    usd_value: Decimal
    percent: Decimal


class PortfolioAggregator:
    """
    Rolls raw balance records up into wallet and collection level views.

    USD values are computed with ``Decimal``. Balances are scaled exactly;
    products and sums follow the default decimal context (28 significant
    digits), which is far beyond what a display dashboard needs.

    Parameters
    ----------
    clock : Callable[[], datetime] | None
        Source of the ``last_updated`` timestamp (defaults to UTC now)

    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self.clock = clock or (lambda: datetime.now(UTC))

    def normalize(
        self,
        raw: NativeBalanceRaw | TokenBalanceRaw,
        implied_symbol: str | None = None,
    ) -> NormalizedHolding:
        """
        Convert one raw balance record into a normalized holding.

        Parameters
        ----------
        raw : NativeBalanceRaw | TokenBalanceRaw
            Record from a balance provider
        implied_symbol : str | None
            Symbol to use for native records, which carry none

        Returns
        -------
        NormalizedHolding
            Holding with human balance and USD value

        Raises
        ------
        MalformedBalanceRecord
            If the raw balance is not a non-negative integer string, decimals
            falls outside 0..255, the price is negative or the value cannot
            be computed

        """
        raw_balance = raw.raw_balance.strip() if isinstance(raw.raw_balance, str) else ""
        if not _RAW_BALANCE_RE.match(raw_balance):
            msg = f"Malformed raw balance {raw.raw_balance!r}"
            raise MalformedBalanceRecord(msg)
        if not 0 <= raw.decimals <= MAX_DECIMALS:
            msg = f"Decimals {raw.decimals} outside 0..{MAX_DECIMALS}"
            raise MalformedBalanceRecord(msg)
        if raw.usd_price is not None and raw.usd_price < 0:
            msg = f"Negative USD price {raw.usd_price}"
            raise MalformedBalanceRecord(msg)

        usd_price = raw.usd_price if raw.usd_price is not None else ZERO
        try:
            # Context as wide as the input keeps the scaled balance exact
            scale_context = Context(prec=max(len(raw_balance), getcontext().prec))
            human_balance = Decimal(raw_balance).scaleb(-raw.decimals, context=scale_context)
            usd_value = human_balance * usd_price
        except ArithmeticError as e:
            msg = f"Cannot value balance {raw.raw_balance!r} with {raw.decimals} decimals"
            raise MalformedBalanceRecord(msg) from e

        change = raw.usd_price_24h_change_percent if raw.usd_price_24h_change_percent is not None else ZERO

        if isinstance(raw, TokenBalanceRaw):
            symbol = raw.symbol
            name = raw.name
            contract_address = raw.contract_address
        else:
            symbol = implied_symbol or ""
            name = ""
            contract_address = None

        return NormalizedHolding(
            symbol=symbol,
            name=name,
            contract_address=contract_address,
            human_balance=human_balance,
            usd_value=usd_value,
            usd_price=usd_price,
            change_24h_percent=change,
            logo_url=raw.logo_url,
        )

    def build_wallet_portfolio(
        self,
        native: NativeBalanceRaw,
        tokens: list[TokenBalanceRaw],
        wallet_id: str,
        native_symbol: str | None = None,
    ) -> WalletPortfolio:
        """
        Build a complete portfolio for one wallet.

        Parameters
        ----------
        native : NativeBalanceRaw
            Native asset balance
        tokens : list[TokenBalanceRaw]
            Token balances in provider order
        wallet_id : str
            Owning wallet
        native_symbol : str | None
            Symbol of the network's native asset

        Returns
        -------
        WalletPortfolio
            Fresh portfolio, tokens sorted descending by USD value

        Raises
        ------
        MalformedBalanceRecord
            If any record cannot be normalized

        """
        native_holding = self.normalize(native, native_symbol)
        # sorted() is stable, so equal values keep provider order
        token_holdings = sorted(
            (self.normalize(token) for token in tokens),
            key=lambda holding: holding.usd_value,
            reverse=True,
        )
        total = native_holding.usd_value + sum((h.usd_value for h in token_holdings), ZERO)

        return WalletPortfolio(
            wallet_id=wallet_id,
            native_holding=native_holding,
            token_holdings=token_holdings,
            total_usd_value=total,
            last_updated=self.clock(),
            loading=False,
            error=None,
        )

    def merge_across_wallets(self, portfolios: Iterable[WalletPortfolio]) -> list[NormalizedHolding]:
        """
        Merge holdings of several wallets into one list keyed by symbol.

        Holdings sharing a symbol are merged into one row even when they come
        from different contracts or networks. Portfolios that are loading or
        carry an error are left out.

        Parameters
        ----------
        portfolios : Iterable[WalletPortfolio]
            Portfolios to merge

        Returns
        -------
        list[NormalizedHolding]
            One row per symbol, descending by summed USD value. Price, name,
            24h change and logo come from the first holding seen.

        """
        merged: dict[str, NormalizedHolding] = {}

        for portfolio in portfolios:
            if portfolio.loading or portfolio.error:
                continue
            for holding in portfolio.holdings:
                existing = merged.get(holding.symbol)
                if existing is None:
                    merged[holding.symbol] = holding.model_copy(update={"contract_address": None})
                else:
                    merged[holding.symbol] = existing.model_copy(
                        update={
                            "human_balance": existing.human_balance + holding.human_balance,
                            "usd_value": existing.usd_value + holding.usd_value,
                        }
                    )

        return sorted(merged.values(), key=lambda holding: holding.usd_value, reverse=True)

    def total_value(self, portfolios: Iterable[WalletPortfolio]) -> Decimal:
        """Sum of ``total_usd_value`` across portfolios, stale values included."""
        return sum((portfolio.total_usd_value for portfolio in portfolios), ZERO)

    def distribution(self, holdings: list[NormalizedHolding], top_n: int = 8) -> list[DistributionSlice]:
        """
        Compute chart slices for the largest holdings.

        Parameters
        ----------
        holdings : list[NormalizedHolding]
            Holdings sorted descending by USD value
        top_n : int
            Number of slices to return

        Returns
        -------
        list[DistributionSlice]
            Slices with their share of the value of all holdings

        """
        total = sum((holding.usd_value for holding in holdings), ZERO)
        slices = []
        for holding in holdings[:top_n]:
            percent = holding.usd_value / total * 100 if total > 0 else ZERO
            slices.append(DistributionSlice(symbol=holding.symbol, usd_value=holding.usd_value, percent=percent))
        return slices
