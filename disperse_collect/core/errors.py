"""
Domain error taxonomy for distribution operations.

A single exception type carries the variant in ``kind``; the API layer maps
client-class kinds to HTTP 400 and infra-class kinds to HTTP 500.
"""

from enum import Enum
from typing import Any, Optional

from disperse_collect.integrations.contracts.interfaces import (
    ChainTransportError,
    ContractNotFoundError,
)


class DcErrorKind(str, Enum):
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    INVALID_FRACTIONAL_AMOUNT = "INVALID_FRACTIONAL_AMOUNT"
    TOKEN_NOT_FOUND = "TOKEN_NOT_FOUND"
    SIGNER_NOT_FOUND = "SIGNER_NOT_FOUND"
    TRANSPORT = "TRANSPORT"
    UNEXPECTED = "UNEXPECTED"


CLIENT_ERROR_KINDS = frozenset(
    {
        DcErrorKind.INSUFFICIENT_FUNDS,
        DcErrorKind.INVALID_FRACTIONAL_AMOUNT,
        DcErrorKind.TOKEN_NOT_FOUND,
        DcErrorKind.SIGNER_NOT_FOUND,
    }
)


class DcError(Exception):
    def __init__(
        self,
        kind: DcErrorKind,
        message: str,
        *,
        address: Optional[str] = None,
        required: Optional[int] = None,
        available: Optional[int] = None,
        spec: Any = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.address = address
        self.required = required
        self.available = available
        self.spec = spec
        self.cause = cause

    @property
    def is_client_error(self) -> bool:
        return self.kind in CLIENT_ERROR_KINDS

    @classmethod
    def insufficient_funds(cls, *, required: int, available: int, address: str) -> "DcError":
        return cls(
            DcErrorKind.INSUFFICIENT_FUNDS,
            f"insufficient funds for address {address}, required: {required}, "
            f"available: {available}, check balance or allowance",
            address=address,
            required=required,
            available=available,
        )

    @classmethod
    def invalid_fractional_amount(cls, spec: Any) -> "DcError":
        return cls(
            DcErrorKind.INVALID_FRACTIONAL_AMOUNT,
            f"fraction {spec} results in invalid or zero amount for corresponding balance",
            spec=spec,
        )

    @classmethod
    def token_not_found(cls, address: str) -> "DcError":
        return cls(DcErrorKind.TOKEN_NOT_FOUND, f"erc20 not found at address: {address}", address=address)

    @classmethod
    def signer_not_found(cls, address: str) -> "DcError":
        return cls(DcErrorKind.SIGNER_NOT_FOUND, f"no signer found for {address}", address=address)

    @classmethod
    def transport(cls, cause: BaseException) -> "DcError":
        return cls(DcErrorKind.TRANSPORT, f"error communicating with node: {cause}", cause=cause)

    @classmethod
    def unexpected(cls, cause: BaseException) -> "DcError":
        return cls(DcErrorKind.UNEXPECTED, f"unexpected error: {cause}", cause=cause)

    @classmethod
    def from_chain_error(cls, exc: BaseException) -> "DcError":
        if isinstance(exc, DcError):
            return exc
        if isinstance(exc, ChainTransportError):
            return cls.transport(exc)
        return cls.unexpected(exc)

    @classmethod
    def from_erc20_error(cls, exc: BaseException, token: str) -> "DcError":
        """Like from_chain_error, but a missing contract/function means a bad token address."""
        if isinstance(exc, ContractNotFoundError):
            return cls.token_not_found(token)
        return cls.from_chain_error(exc)
