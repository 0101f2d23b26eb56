"""CoinGecko pricing service for native and token USD prices."""

import logging
from typing import Any

import httpx

from wallet_portfolio_tracker.errors import ProviderUnavailable
from wallet_portfolio_tracker.providers.base import PriceQuote, to_decimal

logger = logging.getLogger(__name__)


class CoinGeckoPricing:
    """
    Fetches USD prices and 24h changes from the CoinGecko API.

    Parameters
    ----------
    api_key : str | None
        Demo API key, sent as ``x-cg-demo-api-key`` when present
    base_url : str
        CoinGecko API base URL
    timeout : float
        Request timeout in seconds
    transport : httpx.BaseTransport | None
        Custom transport (used by tests)

    """

    BASE_URL = "https://api.coingecko.com/api/v3"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if api_key:
            headers["x-cg-demo-api-key"] = api_key
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(timeout=timeout, headers=headers, transport=transport)

    def get_native_price(self, coin_id: str) -> PriceQuote | None:
        """
        Fetch the USD price of a native asset.

        Parameters
        ----------
        coin_id : str
            CoinGecko coin id (e.g., 'ethereum', 'solana')

        Returns
        -------
        PriceQuote | None
            Price and 24h change, None if CoinGecko has no price

        Raises
        ------
        ProviderUnavailable
            If the request fails

        Examples
        --------
        >>> pricing = CoinGeckoPricing()
        >>> quote = pricing.get_native_price("ethereum")

        """
        data = self._get(
            "/simple/price",
            {"ids": coin_id, "vs_currencies": "usd", "include_24hr_change": "true"},
        )
        return self._parse_quote(data.get(coin_id))

    def get_token_prices(self, platform: str, addresses: list[str]) -> dict[str, PriceQuote]:
        """
        Fetch USD prices for several tokens on one platform.

        Parameters
        ----------
        platform : str
            CoinGecko asset platform (e.g., 'ethereum', 'polygon-pos')
        addresses : list[str]
            Token contract addresses

        Returns
        -------
        dict[str, PriceQuote]
            Quotes keyed by lowercased contract address; tokens without a
            price are absent

        Raises
        ------
        ProviderUnavailable
            If the request fails

        """
        if not addresses:
            return {}

        data = self._get(
            f"/simple/token_price/{platform}",
            {
                "contract_addresses": ",".join(addresses),
                "vs_currencies": "usd",
                "include_24hr_change": "true",
            },
        )

        prices = {}
        for address, price_info in data.items():
            quote = self._parse_quote(price_info)
            if quote is not None:
                prices[address.lower()] = quote

        logger.debug("CoinGecko priced %d of %d tokens on %s", len(prices), len(addresses), platform)
        return prices

    def _parse_quote(self, price_info: Any) -> PriceQuote | None:
        """
        Convert a CoinGecko price entry into a quote.

        Parameters
        ----------
        price_info : Any
            Entry of the form ``{"usd": ..., "usd_24h_change": ...}``

        Returns
        -------
        PriceQuote | None
            Quote, or None if the entry carries no usable price

        """
        if not isinstance(price_info, dict):
            return None
        usd = to_decimal(price_info.get("usd"))
        if usd is None or usd < 0:
            return None
        return PriceQuote(
            usd_price=usd,
            usd_price_24h_change_percent=to_decimal(price_info.get("usd_24h_change")),
        )

    def _get(self, path: str, params: dict[str, str]) -> dict:
        try:
            response = self.client.get(f"{self.base_url}{path}", params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            msg = f"CoinGecko API error: {e.response.status_code}"
            raise ProviderUnavailable(msg) from e
        except httpx.HTTPError as e:
            msg = f"CoinGecko request failed: {e}"
            raise ProviderUnavailable(msg) from e
        except ValueError as e:
            msg = f"CoinGecko returned invalid JSON: {e}"
            raise ProviderUnavailable(msg) from e

        return data if isinstance(data, dict) else {}

    def close(self) -> None:
        """Close HTTP client."""
        self.client.close()

    def __enter__(self) -> "CoinGeckoPricing":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
