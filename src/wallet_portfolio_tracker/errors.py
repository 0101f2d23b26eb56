"""Exception hierarchy and field-level error codes."""

from enum import StrEnum

from pydantic import BaseModel


class ErrorCode(StrEnum):
    """Field-level validation error codes returned to the form layer."""

    INVALID_ADDRESS_FORMAT = "invalid_address_format"
    NETWORK_MISMATCH = "network_mismatch"
    DUPLICATE_ADDRESS = "duplicate_address"
    ALIAS_REQUIRED = "alias_required"
    ALIAS_TOO_LONG = "alias_too_long"


class FieldError(BaseModel):
    """
    A single validation problem attached to one input field.

    Attributes
    ----------
    field : str
        Name of the offending field ('address', 'alias', 'network')
    code : ErrorCode
        Machine-readable error code
    message : str
        Human-readable message suitable for display

    """

    field: str
    code: ErrorCode
    message: str


class PortfolioTrackerError(Exception):
    """Base class for all wallet portfolio tracker errors."""


class WalletValidationError(PortfolioTrackerError):
    """Raised when a wallet submission fails one or more field checks."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = errors
        super().__init__("; ".join(error.message for error in errors))


class DuplicateAddressError(WalletValidationError):
    """Raised when an address is already registered in the collection."""

    def __init__(self, address: str, errors: list[FieldError] | None = None) -> None:
        self.address = address
        super().__init__(
            errors
            or [
                FieldError(
                    field="address",
                    code=ErrorCode.DUPLICATE_ADDRESS,
                    message=f"Wallet address {address} is already registered",
                )
            ]
        )


class WalletNotFoundError(PortfolioTrackerError):
    """Raised when a wallet id does not exist in the collection."""


class MalformedBalanceRecord(PortfolioTrackerError):
    """Raised when a provider record has unparseable numeric fields."""


class ProviderUnavailable(PortfolioTrackerError):
    """Raised when an upstream balance or price provider fails."""
