"""Data models for wallets, raw provider records, holdings, and portfolios."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field


class NetworkFamily(StrEnum):
    """Address format family."""

    EVM = "evm"
    SOLANA = "solana"


class NetworkKind(StrEnum):
    """Supported networks."""

    ETHEREUM = "ethereum"
    POLYGON = "polygon"
    ARBITRUM = "arbitrum"
    BASE = "base"
    OPTIMISM = "optimism"
    BSC = "bsc"
    AVALANCHE = "avalanche"
    SOLANA = "solana"

    @property
    def family(self) -> NetworkFamily:
        """Address family shared by this network."""
        if self is NetworkKind.SOLANA:
            return NetworkFamily.SOLANA
        return NetworkFamily.EVM


def _new_wallet_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(UTC)


class WalletRecord(BaseModel):
    """
    A registered wallet.

    Attributes
    ----------
    id : str
        Unique wallet identifier
    address : str
        Wallet address as entered by the user
    alias : str
        Display name (at most 50 characters)
    network : NetworkKind
        Network chosen for this wallet
    created_at : datetime
        Registration time

    """

    id: str = Field(default_factory=_new_wallet_id)
    address: str
    alias: str = Field(max_length=50)
    network: NetworkKind
    created_at: datetime = Field(default_factory=_utcnow)


class NativeBalanceRaw(BaseModel):
    """
    Native asset balance as returned by a balance provider.

    Attributes
    ----------
    raw_balance : str
        Integer balance in the smallest unit (wei, lamports)
    decimals : int
        Number of decimal places of the native asset
    usd_price : Decimal | None
        USD price when known
    usd_price_24h_change_percent : Decimal | None
        24h price change in percent when known
    logo_url : str | None
        Asset logo

    """

    raw_balance: str
    decimals: int
    usd_price: Decimal | None = None
    usd_price_24h_change_percent: Decimal | None = None
    logo_url: str | None = None


class TokenBalanceRaw(NativeBalanceRaw):
    """Contract-issued token balance as returned by a balance provider."""

    contract_address: str
    symbol: str
    name: str = ""


class NormalizedHolding(BaseModel):
    """
    A single asset position with human-readable balance and USD value.

    Attributes
    ----------
    symbol : str
        Asset symbol
    name : str
        Asset name
    contract_address : str | None
        Token contract, None for native assets and merged rows
    human_balance : Decimal
        Balance divided by 10**decimals
    usd_value : Decimal
        human_balance * usd_price, zero without a price
    usd_price : Decimal
        USD price, zero when unknown
    change_24h_percent : Decimal
        24h price change in percent, zero when unknown
    logo_url : str | None
        Asset logo

    """

    symbol: str
    name: str = ""
    contract_address: str | None = None
    human_balance: Decimal
    usd_value: Decimal
    usd_price: Decimal = Decimal("0")
    change_24h_percent: Decimal = Decimal("0")
    logo_url: str | None = None


class WalletPortfolio(BaseModel):
    """
    Normalized holdings of one wallet.

    Attributes
    ----------
    wallet_id : str
        Owning wallet
    native_holding : NormalizedHolding | None
        Native asset holding, None until the first successful fetch
    token_holdings : list[NormalizedHolding]
        Token holdings, descending by usd_value
    total_usd_value : Decimal
        Native plus token USD value
    last_updated : datetime | None
        Time of the last successful fetch
    loading : bool
        Whether a fetch is in flight
    error : str | None
        Message of the last failed fetch

    """

    wallet_id: str
    native_holding: NormalizedHolding | None = None
    token_holdings: list[NormalizedHolding] = Field(default_factory=list)
    total_usd_value: Decimal = Decimal("0")
    last_updated: datetime | None = None
    loading: bool = False
    error: str | None = None

    @property
    def holdings(self) -> list[NormalizedHolding]:
        """Native holding followed by token holdings."""
        if self.native_holding is None:
            return list(self.token_holdings)
        return [self.native_holding, *self.token_holdings]

    @property
    def is_ready(self) -> bool:
        """True when the portfolio holds usable data."""
        return not self.loading and self.error is None and self.last_updated is not None


class UserPreferences(BaseModel):
    """Display preferences stored per user."""

    theme: Literal["light", "dark"] = "light"
    currency: Literal["USD", "JPY"] = "USD"


class AppState(BaseModel):
    """
    Complete application state.

    Attributes
    ----------
    user_id : str
        Opaque per-user identifier
    preferences : UserPreferences
        Display preferences
    wallets : list[WalletRecord]
        Registered wallets in registration order
    portfolios : dict[str, WalletPortfolio]
        Portfolios keyed by wallet id
    loading : bool
        Whether a refresh of all wallets is in flight

    """

    user_id: str = ""
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    wallets: list[WalletRecord] = Field(default_factory=list)
    portfolios: dict[str, WalletPortfolio] = Field(default_factory=dict)
    loading: bool = False
