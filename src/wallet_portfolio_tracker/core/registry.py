"""Wallet registry enforcing one registration per address."""

from collections.abc import Iterator

from wallet_portfolio_tracker.core import classifier
from wallet_portfolio_tracker.core.models import NetworkKind, WalletRecord
from wallet_portfolio_tracker.errors import (
    DuplicateAddressError,
    ErrorCode,
    FieldError,
    WalletNotFoundError,
    WalletValidationError,
)

MAX_ALIAS_LENGTH = 50


class WalletRegistry:
    """
    Ordered collection of registered wallets.

    No two wallets in the registry share an address. Addresses are compared
    as exact strings, so differently-cased spellings of the same EVM address
    count as different wallets.

    Parameters
    ----------
    wallets : list[WalletRecord] | None
        Initial wallets, e.g. loaded from storage

    """

    def __init__(self, wallets: list[WalletRecord] | None = None) -> None:
        self._wallets: dict[str, WalletRecord] = {}
        for wallet in wallets or []:
            if self.find_by_address(wallet.address) is not None:
                raise DuplicateAddressError(wallet.address)
            self._wallets[wallet.id] = wallet

    def check_submission(
        self,
        address: str,
        alias: str,
        network: NetworkKind | None = None,
        exclude_id: str | None = None,
    ) -> list[FieldError]:
        """
        Validate a wallet form submission without changing the registry.

        Parameters
        ----------
        address : str
            Submitted address
        alias : str
            Submitted display name
        network : NetworkKind | None
            Claimed network; None means "use the detected family"
        exclude_id : str | None
            Wallet being edited, ignored by the duplicate check

        Returns
        -------
        list[FieldError]
            All problems found, empty if the submission is valid

        """
        errors: list[FieldError] = []
        address = address.strip()
        family = classifier.classify(address)

        if family is None:
            errors.append(
                FieldError(
                    field="address",
                    code=ErrorCode.INVALID_ADDRESS_FORMAT,
                    message=f"{address!r} is not a valid EVM or Solana address",
                )
            )
        elif network is not None and not classifier.validate(address, network):
            errors.append(
                FieldError(
                    field="address",
                    code=ErrorCode.NETWORK_MISMATCH,
                    message=f"Address format is not valid for the {network.value} network",
                )
            )
        else:
            existing = self.find_by_address(address)
            if existing is not None and existing.id != exclude_id:
                errors.append(
                    FieldError(
                        field="address",
                        code=ErrorCode.DUPLICATE_ADDRESS,
                        message=f"Wallet address {address} is already registered",
                    )
                )

        alias = alias.strip()
        if not alias:
            errors.append(FieldError(field="alias", code=ErrorCode.ALIAS_REQUIRED, message="Wallet name is required"))
        elif len(alias) > MAX_ALIAS_LENGTH:
            errors.append(
                FieldError(
                    field="alias",
                    code=ErrorCode.ALIAS_TOO_LONG,
                    message=f"Wallet name must be at most {MAX_ALIAS_LENGTH} characters",
                )
            )

        return errors

    def add(self, address: str, alias: str, network: NetworkKind | None = None) -> WalletRecord:
        """
        Register a new wallet.

        Parameters
        ----------
        address : str
            Wallet address
        alias : str
            Display name
        network : NetworkKind | None
            Network; defaults to the detected family's default network

        Returns
        -------
        WalletRecord
            The registered wallet

        Raises
        ------
        DuplicateAddressError
            If the address is already registered
        WalletValidationError
            If any other field check fails

        """
        self._raise_for(self.check_submission(address, alias, network), address.strip())

        address = address.strip()
        if network is None:
            network = classifier.default_network(classifier.classify(address))

        wallet = WalletRecord(address=address, alias=alias.strip(), network=network)
        self._wallets[wallet.id] = wallet
        return wallet

    def update(
        self,
        wallet_id: str,
        *,
        alias: str | None = None,
        address: str | None = None,
        network: NetworkKind | None = None,
    ) -> WalletRecord:
        """
        Edit an existing wallet; omitted fields are kept.

        Raises
        ------
        WalletNotFoundError
            If the wallet does not exist
        WalletValidationError
            If the edited wallet fails validation

        """
        current = self.get(wallet_id)
        new_address = current.address if address is None else address.strip()
        new_alias = current.alias if alias is None else alias
        new_network = network
        if new_network is None:
            if classifier.validate(new_address, current.network):
                new_network = current.network
            else:
                family = classifier.classify(new_address)
                new_network = classifier.default_network(family) if family else current.network

        self._raise_for(
            self.check_submission(new_address, new_alias, new_network, exclude_id=wallet_id),
            new_address,
        )

        updated = current.model_copy(
            update={"address": new_address, "alias": new_alias.strip(), "network": new_network}
        )
        self._wallets[wallet_id] = updated
        return updated

    def remove(self, wallet_id: str) -> WalletRecord:
        """Delete a wallet and return it."""
        wallet = self.get(wallet_id)
        del self._wallets[wallet_id]
        return wallet

    def get(self, wallet_id: str) -> WalletRecord:
        """
        Get a wallet by id.

        Raises
        ------
        WalletNotFoundError
            If the wallet does not exist

        """
        wallet = self._wallets.get(wallet_id)
        if wallet is None:
            msg = f"Wallet {wallet_id} not found"
            raise WalletNotFoundError(msg)
        return wallet

    def find_by_address(self, address: str) -> WalletRecord | None:
        """Return the wallet registered under ``address``, if any."""
        for wallet in self._wallets.values():
            if wallet.address == address:
                return wallet
        return None

    def resolve(self, key: str) -> WalletRecord:
        """
        Look up a wallet by id, address or alias.

        Raises
        ------
        WalletNotFoundError
            If nothing matches

        """
        if key in self._wallets:
            return self._wallets[key]
        wallet = self.find_by_address(key)
        if wallet is not None:
            return wallet
        for wallet in self._wallets.values():
            if wallet.alias == key:
                return wallet
        msg = f"Wallet {key} not found"
        raise WalletNotFoundError(msg)

    def list_wallets(self) -> list[WalletRecord]:
        """All wallets in registration order."""
        return list(self._wallets.values())

    def __iter__(self) -> Iterator[WalletRecord]:
        return iter(self.list_wallets())

    def __len__(self) -> int:
        return len(self._wallets)

    def __contains__(self, wallet_id: object) -> bool:
        return wallet_id in self._wallets

    @staticmethod
    def _raise_for(errors: list[FieldError], address: str) -> None:
        if not errors:
            return
        if any(error.code == ErrorCode.DUPLICATE_ADDRESS for error in errors):
            raise DuplicateAddressError(address, errors)
        raise WalletValidationError(errors)
