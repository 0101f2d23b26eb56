"""Runtime settings read from environment variables."""

import os
from pathlib import Path

from pydantic import BaseModel, Field


def _default_home() -> Path:
    return Path.home() / ".wallet-portfolio-tracker"


class Settings(BaseModel):
    """
    Provider credentials and local paths.

    Attributes
    ----------
    moralis_api_key : str | None
        Moralis API key, required for EVM balances
    coingecko_api_key : str | None
        CoinGecko demo API key, optional
    helius_api_key : str | None
        Helius API key, required for Solana balances
    home : Path
        Directory holding the local wallet store
    timeout : float
        HTTP timeout in seconds for provider requests

    """

    moralis_api_key: str | None = None
    coingecko_api_key: str | None = None
    helius_api_key: str | None = None
    home: Path = Field(default_factory=_default_home)
    timeout: float = 30.0

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Parameters
        ----------
        environ : dict[str, str] | None
            Mapping to read instead of ``os.environ``

        Returns
        -------
        Settings
            Settings with unset variables left at their defaults

        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {
            "moralis_api_key": env.get("MORALIS_API_KEY") or None,
            "coingecko_api_key": env.get("COINGECKO_API_KEY") or None,
            "helius_api_key": env.get("HELIUS_API_KEY") or None,
        }
        if env.get("PORTFOLIO_TRACKER_HOME"):
            values["home"] = Path(env["PORTFOLIO_TRACKER_HOME"]).expanduser()
        if env.get("PORTFOLIO_TRACKER_TIMEOUT"):
            values["timeout"] = float(env["PORTFOLIO_TRACKER_TIMEOUT"])
        return cls(**values)

    @property
    def store_path(self) -> Path:
        """Location of the JSON wallet store."""
        return self.home / "store.json"
