"""Helius-backed Solana balance provider."""

import logging
from typing import Any

import httpx

from wallet_portfolio_tracker.core.models import NativeBalanceRaw, NetworkFamily, TokenBalanceRaw
from wallet_portfolio_tracker.errors import ProviderUnavailable
from wallet_portfolio_tracker.providers.base import parse_record

logger = logging.getLogger(__name__)

LAMPORTS_DECIMALS = 9

# Wrapped SOL mint; the native balance already covers it.
WRAPPED_SOL_MINT = "So11111111111111111111111111111111111111112"


class HeliusSolanaClient:
    """
    Fetch Solana balances via the Helius balances API.

    Parameters
    ----------
    api_key : str | None
        Helius API key; requests fail with ProviderUnavailable without one
    base_url : str
        API base URL
    timeout : float
        Request timeout in seconds
    transport : httpx.BaseTransport | None
        Custom transport (used by tests)

    """

    BASE_URL = "https://api.helius.xyz"

    name = "helius"
    family = NetworkFamily.SOLANA

    def __init__(
        self,
        api_key: str | None,
        base_url: str = BASE_URL,
        timeout: float = 20.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(timeout=timeout, headers={"accept": "application/json"}, transport=transport)

    def get_native_balance(self, address: str, chain: str | None = None) -> NativeBalanceRaw:
        """
        Fetch the SOL balance (in lamports) of an address.

        Raises
        ------
        ProviderUnavailable
            If the request fails or the API key is missing

        """
        return self._parse_native(self._fetch_balances(address))

    def get_token_balances(self, address: str, chain: str | None = None) -> list[TokenBalanceRaw]:
        """
        Fetch SPL token balances of an address.

        Tokens without a symbol are labelled with the first characters of
        their mint address.

        Raises
        ------
        ProviderUnavailable
            If the request fails or the API key is missing
        MalformedBalanceRecord
            If a token record has invalid fields

        """
        return self._parse_tokens(self._fetch_balances(address), address)

    def get_balances(self, address: str, chain: str | None = None) -> tuple[NativeBalanceRaw, list[TokenBalanceRaw]]:
        """
        Fetch SOL and SPL balances from a single balances response.

        Both figures come from the same snapshot, one request per call.

        Returns
        -------
        tuple[NativeBalanceRaw, list[TokenBalanceRaw]]
            Native balance and token balances

        """
        data = self._fetch_balances(address)
        return self._parse_native(data), self._parse_tokens(data, address)

    def _parse_native(self, data: dict[str, Any]) -> NativeBalanceRaw:
        native = data.get("nativeBalance") or 0
        if isinstance(native, dict):
            native = native.get("lamports") or native.get("balance") or 0

        return parse_record(NativeBalanceRaw, {"raw_balance": str(native), "decimals": LAMPORTS_DECIMALS})

    def _parse_tokens(self, data: dict[str, Any], address: str) -> list[TokenBalanceRaw]:
        items = data.get("tokens") or []
        if not isinstance(items, list):
            msg = "Unexpected token list from Helius balances API"
            raise ProviderUnavailable(msg)

        tokens = []
        for item in items:
            if not isinstance(item, dict):
                continue

            mint = item.get("mint") or item.get("address")
            if not isinstance(mint, str) or mint in ("", WRAPPED_SOL_MINT):
                continue

            amount = item.get("amount")
            if amount is None:
                amount = item.get("amountRaw") or item.get("balance")

            tokens.append(
                parse_record(
                    TokenBalanceRaw,
                    {
                        "contract_address": mint,
                        "symbol": item.get("symbol") or mint[:6],
                        "name": item.get("name") or "",
                        "decimals": item.get("decimals") or 0,
                        "raw_balance": str(amount) if amount is not None else None,
                        "logo_url": item.get("logo"),
                    },
                )
            )

        logger.debug("Helius returned %d tokens for %s", len(tokens), address)
        return tokens

    def _fetch_balances(self, address: str) -> dict[str, Any]:
        if not self.api_key:
            msg = "Helius API key not configured. Set HELIUS_API_KEY."
            raise ProviderUnavailable(msg)

        url = f"{self.base_url}/v0/addresses/{address}/balances"
        try:
            response = self.client.get(url, params={"api-key": self.api_key})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            msg = f"Helius API error: {e.response.status_code}"
            raise ProviderUnavailable(msg) from e
        except httpx.HTTPError as e:
            msg = f"Helius request failed: {e}"
            raise ProviderUnavailable(msg) from e
        except ValueError as e:
            msg = f"Helius returned invalid JSON: {e}"
            raise ProviderUnavailable(msg) from e

        if not isinstance(payload, dict):
            msg = "Unexpected response from Helius balances API"
            raise ProviderUnavailable(msg)
        return payload

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "HeliusSolanaClient":
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
