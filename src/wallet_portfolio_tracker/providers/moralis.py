"""Moralis API client for EVM native and ERC-20 balances."""

import logging
from typing import Any

import httpx

from wallet_portfolio_tracker.core.models import NativeBalanceRaw, NetworkFamily, TokenBalanceRaw
from wallet_portfolio_tracker.errors import ProviderUnavailable
from wallet_portfolio_tracker.providers.base import parse_record, to_decimal

logger = logging.getLogger(__name__)


class MoralisClient:
    """
    Client for the Moralis EVM API.

    Parameters
    ----------
    api_key : str | None
        Moralis API key; requests fail with ProviderUnavailable without one
    base_url : str
        API base URL
    timeout : float
        Request timeout in seconds
    transport : httpx.BaseTransport | None
        Custom transport (used by tests)

    """

    BASE_URL = "https://deep-index.moralis.io/api/v2.2"

    name = "moralis"
    family = NetworkFamily.EVM

    def __init__(
        self,
        api_key: str | None,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(
            timeout=timeout,
            headers={"X-API-Key": api_key or "", "Accept": "application/json"},
            transport=transport,
        )

    def get_native_balance(self, address: str, chain: str | None = "eth") -> NativeBalanceRaw:
        """
        Fetch the native balance (in wei) of an address.

        Parameters
        ----------
        address : str
            Wallet address
        chain : str | None
            Moralis chain identifier (e.g., 'eth', 'polygon')

        Returns
        -------
        NativeBalanceRaw
            Native balance with 18 decimals and no price

        Raises
        ------
        ProviderUnavailable
            If the request fails or the API key is missing

        """
        data = self._get(f"/{address}/balance", {"chain": chain or "eth"})
        if not isinstance(data, dict):
            msg = "Unexpected response from Moralis balance API"
            raise ProviderUnavailable(msg)
        return parse_record(NativeBalanceRaw, {"raw_balance": data.get("balance"), "decimals": 18})

    def get_token_balances(self, address: str, chain: str | None = "eth") -> list[TokenBalanceRaw]:
        """
        Fetch ERC-20 balances of an address, spam tokens excluded.

        Parameters
        ----------
        address : str
            Wallet address
        chain : str | None
            Moralis chain identifier

        Returns
        -------
        list[TokenBalanceRaw]
            Token balances in provider order

        Raises
        ------
        ProviderUnavailable
            If the request fails or the API key is missing
        MalformedBalanceRecord
            If a token record has invalid fields

        """
        data = self._get(f"/{address}/erc20", {"chain": chain or "eth", "exclude_spam": "true"})
        items = data if isinstance(data, list) else data.get("result") or []
        if not isinstance(items, list):
            msg = "Unexpected response from Moralis ERC-20 API"
            raise ProviderUnavailable(msg)

        tokens = []
        for item in items:
            if not isinstance(item, dict) or item.get("possible_spam"):
                continue
            tokens.append(
                parse_record(
                    TokenBalanceRaw,
                    {
                        "contract_address": item.get("token_address"),
                        "symbol": item.get("symbol") or "UNKNOWN",
                        "name": item.get("name") or "",
                        "decimals": item.get("decimals"),
                        "raw_balance": item.get("balance"),
                        "usd_price": to_decimal(item.get("usd_price")),
                        "usd_price_24h_change_percent": to_decimal(item.get("usd_price_24hr_percent_change")),
                        "logo_url": item.get("logo") or item.get("thumbnail"),
                    },
                )
            )

        logger.debug("Moralis returned %d tokens for %s on %s", len(tokens), address, chain)
        return tokens

    def get_balances(self, address: str, chain: str | None = "eth") -> tuple[NativeBalanceRaw, list[TokenBalanceRaw]]:
        """Fetch native and ERC-20 balances; Moralis serves them from two endpoints."""
        return self.get_native_balance(address, chain), self.get_token_balances(address, chain)

    def _get(self, path: str, params: dict[str, str]) -> Any:
        if not self.api_key:
            msg = "Moralis API key not configured. Set MORALIS_API_KEY."
            raise ProviderUnavailable(msg)

        try:
            response = self.client.get(f"{self.base_url}{path}", params=params)
            response.raise_for_status()
            data = response.json()

        except httpx.TimeoutException as e:
            msg = f"Moralis request timeout: {e}"
            raise ProviderUnavailable(msg) from e
        except httpx.HTTPStatusError as e:
            msg = f"Moralis API error: {e.response.status_code}"
            raise ProviderUnavailable(msg) from e
        except httpx.HTTPError as e:
            msg = f"Moralis request failed: {e}"
            raise ProviderUnavailable(msg) from e
        except ValueError as e:
            msg = f"Moralis returned invalid JSON: {e}"
            raise ProviderUnavailable(msg) from e

        if not isinstance(data, dict | list):
            msg = f"Unexpected response from Moralis: {type(data).__name__}"
            raise ProviderUnavailable(msg)
        return data

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "MoralisClient":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: object | None,
    ) -> None:
        """Context manager exit."""
        self.close()
