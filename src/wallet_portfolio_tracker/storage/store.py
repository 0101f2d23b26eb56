"""JSON file store for wallets and preferences with per-key expiry."""

import json
import logging
import time
import uuid
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from wallet_portfolio_tracker.core.models import UserPreferences, WalletRecord

logger = logging.getLogger(__name__)

USER_ID_KEY = "crypto_portfolio_user_id"
WALLETS_KEY = "crypto_portfolio_wallets"
SETTINGS_KEY = "crypto_portfolio_settings"

DEFAULT_TTL = 365 * 24 * 60 * 60


class StoreEntry:
    """
    Stored value with an expiry time.

    Parameters
    ----------
    value : Any
        JSON-serializable value
    ttl : int
        Time-to-live in seconds
    created_at : float | None
        Creation timestamp. Uses current time if None.

    """

    def __init__(self, value: Any, ttl: int = DEFAULT_TTL, created_at: float | None = None) -> None:
        self.value = value
        self.ttl = ttl
        self.created_at = created_at or time.time()

    def is_expired(self, now: float | None = None) -> bool:
        """
        Check if the entry has expired.

        Returns
        -------
        bool
            True if expired, False otherwise

        """
        return ((now or time.time()) - self.created_at) > self.ttl

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "ttl": self.ttl, "created_at": self.created_at}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoreEntry":
        return cls(data["value"], ttl=data.get("ttl", DEFAULT_TTL), created_at=data.get("created_at"))


class WalletStore:
    """
    Persists the wallet collection and user preferences in a JSON file.

    Every key expires one year after it was last written, mirroring browser
    cookie storage.

    Parameters
    ----------
    path : Path
        JSON file location; parent directories are created on first write
    ttl : int
        Expiry in seconds applied to every write

    """

    def __init__(self, path: Path, ttl: int = DEFAULT_TTL) -> None:
        self.path = Path(path)
        self.ttl = ttl

    def get_user_id(self) -> str:
        """Return the stored user id, creating one on first use."""
        user_id = self._get(USER_ID_KEY)
        if not user_id:
            user_id = str(uuid.uuid4())
            self._set(USER_ID_KEY, user_id)
        return user_id

    def get_wallets(self) -> list[WalletRecord]:
        """
        Load stored wallets.

        Records that no longer validate are skipped with a warning.

        Returns
        -------
        list[WalletRecord]
            Wallets in stored order, empty if none are stored

        """
        wallets = []
        for item in self._get(WALLETS_KEY) or []:
            try:
                wallets.append(WalletRecord.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping invalid stored wallet %r: %s", item, e)
        return wallets

    def save_wallets(self, wallets: list[WalletRecord]) -> None:
        """Replace the stored wallet collection."""
        self._set(WALLETS_KEY, [wallet.model_dump(mode="json") for wallet in wallets])

    def get_preferences(self) -> UserPreferences:
        """Load stored preferences, defaults if none are stored or they are invalid."""
        data = self._get(SETTINGS_KEY)
        if not data:
            return UserPreferences()
        try:
            return UserPreferences.model_validate(data)
        except ValidationError as e:
            logger.warning("Ignoring invalid stored preferences: %s", e)
            return UserPreferences()

    def save_preferences(self, preferences: UserPreferences) -> None:
        """Replace stored preferences."""
        self._set(SETTINGS_KEY, preferences.model_dump(mode="json"))

    def clear_all(self) -> None:
        """Delete user id, wallets and preferences."""
        entries = self._read()
        for key in (USER_ID_KEY, WALLETS_KEY, SETTINGS_KEY):
            entries.pop(key, None)
        self._write(entries)

    def _get(self, key: str) -> Any | None:
        entries = self._read()
        entry = entries.get(key)
        if entry is None:
            return None
        if entry.is_expired():
            del entries[key]
            self._write(entries)
            return None
        return entry.value

    def _set(self, key: str, value: Any) -> None:
        entries = self._read()
        entries[key] = StoreEntry(value, self.ttl)
        self._write(entries)

    def _read(self) -> dict[str, StoreEntry]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Store file %s is corrupt, starting empty: %s", self.path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Store file %s does not hold an object, starting empty", self.path)
            return {}

        entries = {}
        for key, data in raw.items():
            if (
                not isinstance(data, dict)
                or "value" not in data
                or not isinstance(data.get("ttl", DEFAULT_TTL), int | float)
                or not isinstance(data.get("created_at", 0), int | float | None)
            ):
                logger.warning("Skipping malformed store entry %r", key)
                continue
            entries[key] = StoreEntry.from_dict(data)
        return entries

    def _write(self, entries: dict[str, StoreEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({key: entry.to_dict() for key, entry in entries.items()}, f, indent=2)
        tmp_path.replace(self.path)
