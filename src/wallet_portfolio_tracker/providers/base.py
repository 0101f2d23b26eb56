"""Interfaces shared by balance and price providers."""

from decimal import Decimal
from typing import Any, Protocol

from pydantic import BaseModel, ValidationError

from wallet_portfolio_tracker.core.models import NativeBalanceRaw, NetworkFamily, TokenBalanceRaw
from wallet_portfolio_tracker.errors import MalformedBalanceRecord


class PriceQuote(BaseModel):
    """
    USD price of one asset.

    Attributes
    ----------
    usd_price : Decimal
        Current USD price
    usd_price_24h_change_percent : Decimal | None
        24h change in percent

    """

    usd_price: Decimal
    usd_price_24h_change_percent: Decimal | None = None


class BalanceProvider(Protocol):
    """
    Interface that all balance providers must implement.

    Attributes
    ----------
    name : str
        Provider identifier
    family : NetworkFamily
        Address family the provider serves

    Methods
    -------
    get_native_balance(address, chain)
        Fetch the native asset balance
    get_token_balances(address, chain)
        Fetch all token balances
    get_balances(address, chain)
        Fetch both in one cycle

    """

    name: str
    family: NetworkFamily

    def get_native_balance(self, address: str, chain: str | None) -> NativeBalanceRaw:
        """
        Fetch the native asset balance of an address.

        Parameters
        ----------
        address : str
            Wallet address
        chain : str | None
            Provider-specific chain identifier

        Returns
        -------
        NativeBalanceRaw
            Raw native balance without price

        """
        ...

    def get_token_balances(self, address: str, chain: str | None) -> list[TokenBalanceRaw]:
        """
        Fetch token balances of an address.

        Parameters
        ----------
        address : str
            Wallet address
        chain : str | None
            Provider-specific chain identifier

        Returns
        -------
        list[TokenBalanceRaw]
            Raw token balances in provider order

        """
        ...

    def get_balances(self, address: str, chain: str | None) -> tuple[NativeBalanceRaw, list[TokenBalanceRaw]]:
        """
        Fetch native and token balances for one refresh cycle.

        Providers serving both from one response make a single request.

        Returns
        -------
        tuple[NativeBalanceRaw, list[TokenBalanceRaw]]
            Native balance and token balances

        """
        ...

    def close(self) -> None:
        """Release network resources."""
        ...


class PriceProvider(Protocol):
    """Interface for USD price lookups."""

    def get_native_price(self, coin_id: str) -> PriceQuote | None:
        """Price of a native asset by canonical coin id, None if unknown."""
        ...

    def get_token_prices(self, platform: str, addresses: list[str]) -> dict[str, PriceQuote]:
        """Prices keyed by lowercased contract address; unknown tokens are absent."""
        ...

    def close(self) -> None:
        """Release network resources."""
        ...


def parse_record(model: type[NativeBalanceRaw], data: dict[str, Any]) -> Any:
    """
    Build a raw balance model, turning validation failures into MalformedBalanceRecord.

    Parameters
    ----------
    model : type[NativeBalanceRaw]
        NativeBalanceRaw or TokenBalanceRaw
    data : dict[str, Any]
        Field values

    Returns
    -------
    NativeBalanceRaw | TokenBalanceRaw
        Validated record

    Raises
    ------
    MalformedBalanceRecord
        If the provider data does not fit the model

    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        msg = f"Malformed {model.__name__} from provider: {e.error_count()} invalid field(s)"
        raise MalformedBalanceRecord(msg) from e


def to_decimal(value: Any) -> Decimal | None:
    """Convert a JSON number to Decimal, None for missing or unparseable values."""
    if value is None:
        return None
    try:
        result = Decimal(str(value))
    except ArithmeticError:
        return None
    return result if result.is_finite() else None
